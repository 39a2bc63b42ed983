# src/drinkjoy/recommender/supplementary.py
"""
Supplementary ("more options") generator.

A simpler second-pass scorer used to fill a result page after the primary list
has been shown. Scores are clamped into a band below the primary engine's range
(15..65 by default) so a supplementary pick never looks like a "perfect match".

Allergy safety is never relaxed: the all-categories variant opens the category
filter but keeps the allergy filter.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from drinkjoy.config.settings import Settings, get_settings
from drinkjoy.core.rng import RandomSource, default_source, uniform
from drinkjoy.core.time import local_now
from drinkjoy.domain.models import ANY_CATEGORY, Drink, Preferences, ScoredCandidate
from drinkjoy.features.happy_hour import is_happy_hour_active
from drinkjoy.features.popularity import PopularityMap, like_count, popularity_points
from drinkjoy.features.preference_match import matches_flavor
from drinkjoy.scoring.composite import clamp, round_half_up
from drinkjoy.scoring.engine import exclusion_reason


def _supplementary_score(
    drink: Drink,
    preferences: Preferences,
    *,
    likes: int,
    happy_hour_active: bool,
    rng: RandomSource,
    settings: Settings,
) -> ScoredCandidate:
    cfg = settings.supplementary
    score: float = cfg.base
    reasons: list[str] = []

    if matches_flavor(drink, preferences.flavor):
        score += cfg.flavor
        reasons.append(f"Matches your {preferences.flavor} preference")
    category = preferences.category
    if category and category != ANY_CATEGORY and drink.category == category:
        score += cfg.category
        reasons.append(f"Another {category} you might like")
    if preferences.strength and drink.strength == preferences.strength:
        score += cfg.strength
        reasons.append(f"{preferences.strength.capitalize()} strength")
    if drink.featured:
        score += cfg.featured
        reasons.append("Featured drink")
    if happy_hour_active:
        score += cfg.happy_hour
        reasons.append("Happy Hour special!")
    pop = popularity_points(likes, cfg.popularity_cap)
    if pop > 0:
        score += pop
        reasons.append("Popular with other guests")

    score += uniform(rng, -cfg.jitter, cfg.jitter)
    final = round_half_up(clamp(score, cfg.min_score, cfg.max_score))
    return ScoredCandidate(drink=drink, score=final, reasons=reasons[: cfg.max_reasons])


def get_additional_drinks(
    catalog: Sequence[Drink],
    preferences: Preferences,
    exclude_ids: Iterable[str],
    limit: int | None = None,
    *,
    popularity: PopularityMap | None = None,
    now: datetime | None = None,
    rng: RandomSource | None = None,
    settings: Settings | None = None,
) -> list[ScoredCandidate]:
    """More drinks like the current preferences, skipping `exclude_ids`."""
    settings = settings or get_settings()
    rng = default_source(rng)
    now = local_now(settings.app.timezone, now)
    limit = limit if limit is not None else settings.supplementary.default_limit
    excluded = set(exclude_ids)

    out: list[ScoredCandidate] = []
    for drink in catalog:
        if drink.id in excluded:
            continue
        if exclusion_reason(drink, preferences, settings) is not None:
            continue
        out.append(
            _supplementary_score(
                drink,
                preferences,
                likes=like_count(popularity, drink.id),
                happy_hour_active=is_happy_hour_active(drink, now, settings),
                rng=rng,
                settings=settings,
            )
        )

    out.sort(key=lambda c: c.score, reverse=True)
    return out[: max(0, int(limit))]


def get_additional_drinks_from_all_categories(
    catalog: Sequence[Drink],
    preferences: Preferences,
    exclude_ids: Iterable[str],
    limit: int | None = None,
    **kwargs,
) -> list[ScoredCandidate]:
    """Same as `get_additional_drinks`, with the category filter opened to "any"."""
    opened = preferences.model_copy(update={"category": ANY_CATEGORY})
    return get_additional_drinks(catalog, opened, exclude_ids, limit, **kwargs)
