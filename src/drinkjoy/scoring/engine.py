# src/drinkjoy/scoring/engine.py
"""
Wizard scoring engine.

`score_drink` turns one (drink, preferences) pair into a `ScoredCandidate`, or
`None` when the drink is excluded. Exclusion is the common case on a typical
query, so it is a plain `None` rather than an exception.

Pipeline:
1) exclusions: allergy-unsafe, then the category filter
2) additive rule table (`drinkjoy.scoring.rules`)
3) non-positive totals are dropped
4) randomized perturbation through an injected `RandomSource`
5) clamp to [0, 100] and round half-up
"""

from __future__ import annotations

import logging
from datetime import datetime

from drinkjoy.config.settings import PerturbationSettings, Settings, get_settings
from drinkjoy.core.rng import RandomSource, chance, default_source, uniform
from drinkjoy.domain.models import Drink, Preferences, ScoredCandidate, WeatherReading
from drinkjoy.features.allergy import is_allergy_safe
from drinkjoy.features.happy_hour import is_happy_hour_active
from drinkjoy.features.popularity import PopularityMap, like_count
from drinkjoy.scoring.composite import clamp, round_half_up
from drinkjoy.scoring.rules import MatchContext, ScoringRule, build_wizard_rules, category_matches, evaluate_rules

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100


def exclusion_reason(drink: Drink, preferences: Preferences, settings: Settings) -> str | None:
    """Return why a drink is excluded ("allergy" / "category"), or None when it is eligible."""
    if not is_allergy_safe(drink, preferences.allergies, unknown_policy=settings.allergies.unknown_policy):
        return "allergy"
    if not category_matches(drink, preferences.category):
        return "category"
    return None


def perturb(base: int, rng: RandomSource, cfg: PerturbationSettings) -> int:
    """Apply jitter, the occasional boost and the "perfect match" roll to a base score."""
    score = base + uniform(rng, -cfg.jitter, cfg.jitter)
    if chance(rng, cfg.boost_probability):
        score += uniform(rng, 0, cfg.boost_max)
    if base >= cfg.perfect_threshold and chance(rng, cfg.perfect_probability):
        score = MAX_SCORE
    return round_half_up(clamp(score, MIN_SCORE, MAX_SCORE))


def score_drink(
    drink: Drink,
    preferences: Preferences,
    weather: WeatherReading | None = None,
    popularity: PopularityMap | None = None,
    *,
    now: datetime | None = None,
    rng: RandomSource | None = None,
    settings: Settings | None = None,
    rules: tuple[ScoringRule, ...] | None = None,
) -> ScoredCandidate | None:
    """Score one drink against the wizard preferences.

    Returns None when the drink is excluded (allergy, category filter or a
    non-positive additive total). `rules` may be passed in by callers that score a
    whole catalog so the table is only built once.
    """
    settings = settings or get_settings()

    excluded = exclusion_reason(drink, preferences, settings)
    if excluded is not None:
        logger.debug("Excluded drink=%s reason=%s", drink.id, excluded)
        return None

    ctx = MatchContext(
        drink=drink,
        preferences=preferences,
        settings=settings,
        weather=weather,
        likes=like_count(popularity, drink.id),
        happy_hour_active=is_happy_hour_active(drink, now, settings),
    )
    hits = evaluate_rules(ctx, rules if rules is not None else build_wizard_rules(settings))
    base = sum(h.points for h in hits)
    if base <= 0:
        logger.debug("Dropped drink=%s (no positive contributions)", drink.id)
        return None

    score = perturb(base, default_source(rng), settings.matching.perturbation)
    reasons = [h.reason for h in hits if h.reason]
    logger.debug(
        "Scored drink=%s base=%s final=%s dims=%s",
        drink.id,
        base,
        score,
        ",".join(h.dimension for h in hits),
    )
    return ScoredCandidate(drink=drink, score=score, reasons=reasons)
