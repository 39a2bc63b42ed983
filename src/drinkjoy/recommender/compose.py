# src/drinkjoy/recommender/compose.py
"""
Result set composer.

Runs the wizard engine over the whole catalog and orders the survivors:

1) bucket by score range (width 10 by default)
2) shuffle each bucket so near-equal drinks do not always surface in the same order
3) inside a bucket with an active happy-hour drink, happy-hour drinks go first
4) buckets are concatenated high to low
5) a final stable sort keeps every score >= 90 ahead of every score < 90
6) truncate to the requested limit

Steps 1-5 are `rank_candidates`, exposed separately so they can be tested on
hand-built candidates.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence

from drinkjoy.config.settings import Settings, get_settings
from drinkjoy.core.rng import RandomSource, default_source, shuffled
from drinkjoy.core.time import local_now
from drinkjoy.domain.models import Drink, Preferences, ScoredCandidate, WeatherReading
from drinkjoy.features.happy_hour import is_happy_hour_active
from drinkjoy.features.popularity import PopularityMap
from drinkjoy.scoring.composite import bucket_of
from drinkjoy.scoring.strategy import WizardScoringStrategy

logger = logging.getLogger(__name__)


def rank_candidates(
    candidates: Iterable[ScoredCandidate],
    *,
    now: datetime | None = None,
    rng: RandomSource | None = None,
    settings: Settings | None = None,
) -> list[ScoredCandidate]:
    settings = settings or get_settings()
    rng = default_source(rng)
    cfg = settings.matching

    buckets: dict[int, list[ScoredCandidate]] = {}
    for c in candidates:
        buckets.setdefault(bucket_of(c.score, cfg.bucket_width), []).append(c)

    ordered: list[ScoredCandidate] = []
    for key in sorted(buckets, reverse=True):
        bucket = shuffled(buckets[key], rng)
        if any(is_happy_hour_active(c.drink, now, settings) for c in bucket):
            bucket.sort(key=lambda c: not c.drink.happy_hour)
        ordered.extend(bucket)

    threshold = cfg.priority_threshold
    ordered.sort(key=lambda c: c.score < threshold)
    return ordered


def compose_recommendations(
    catalog: Sequence[Drink],
    preferences: Preferences,
    weather: WeatherReading | None = None,
    limit: int | None = None,
    *,
    popularity: PopularityMap | None = None,
    now: datetime | None = None,
    rng: RandomSource | None = None,
    settings: Settings | None = None,
) -> list[ScoredCandidate]:
    """Score, rank and truncate the catalog for one set of wizard preferences."""
    settings = settings or get_settings()
    rng = default_source(rng)
    # Pin "now" once so every drink sees the same happy-hour state.
    now = local_now(settings.app.timezone, now)
    limit = limit if limit is not None else settings.matching.default_limit

    strategy = WizardScoringStrategy(
        weather=weather if preferences.use_weather else None,
        popularity=popularity,
        now=now,
        rng=rng,
        settings=settings,
    )
    candidates = [c for c in (strategy.score(d, preferences) for d in catalog) if c is not None]
    ranked = rank_candidates(candidates, now=now, rng=rng, settings=settings)
    logger.debug("Composed %s/%s candidates (limit=%s)", len(candidates), len(catalog), limit)
    return ranked[: max(0, int(limit))]
