"""Popularity (like-count) bonus."""

from __future__ import annotations

from typing import Mapping

PopularityMap = Mapping[str, int]


def like_count(popularity: PopularityMap | None, drink_id: str) -> int:
    if not popularity:
        return 0
    try:
        return max(0, int(popularity.get(drink_id, 0) or 0))
    except (TypeError, ValueError):
        return 0


def popularity_points(likes: int, cap: int) -> int:
    """One point per two likes, capped."""
    return min(cap, max(0, likes) // 2)


def popularity_reason(likes: int) -> str | None:
    if likes >= 20:
        return f"Crowd favorite ({likes} likes)"
    if likes >= 10:
        return f"Popular pick ({likes} likes)"
    if likes >= 5:
        return "Liked by other guests"
    return None
