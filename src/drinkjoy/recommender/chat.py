# src/drinkjoy/recommender/chat.py
"""
Chat-side quality tiers.

`classify_for_chat` scores the whole catalog with the chat scorer and partitions
allergy-compatible drinks into three disjoint tiers by absolute score:
perfect (>= 60), good ([30, 60)), other ([10, 30)), each capped at 5.

`assemble_chat_matches` flattens the tiers into the list a chat reply shows
(perfect, then good, then other, capped at 12). When that list is very short and
the guest asked for beer while avoiding gluten, it adds gluten-free cocktails and
non-alcoholic drinks tagged as "alternative".
"""

from __future__ import annotations

import logging
from typing import Sequence

from drinkjoy.config.settings import Settings, get_settings
from drinkjoy.domain.models import ChatMatch, ChatMatches, ChatPreferences, Drink, MatchQuality
from drinkjoy.features.allergy import GLUTEN_TERMS, is_allergy_safe, normalize_allergies
from drinkjoy.scoring.chat import ChatScore, score_for_chat

logger = logging.getLogger(__name__)

ALTERNATIVE_CATEGORIES: tuple[str, ...] = ("non-alcoholic", "cocktail")


def _to_match(item: ChatScore, quality: MatchQuality) -> ChatMatch:
    return ChatMatch(
        drink=item.drink,
        score=item.score,
        match_reasons=list(item.match_reasons),
        match_quality=quality,
    )


def classify_for_chat(
    preferences: ChatPreferences,
    catalog: Sequence[Drink],
    *,
    settings: Settings | None = None,
) -> ChatMatches:
    settings = settings or get_settings()
    cfg = settings.chat

    scored = [score_for_chat(d, preferences, settings) for d in catalog]
    scored.sort(key=lambda s: s.score, reverse=True)
    compatible = [s for s in scored if s.allergy_compatible]

    perfect = [s for s in compatible if s.score >= cfg.perfect_threshold]
    good = [s for s in compatible if cfg.good_threshold <= s.score < cfg.perfect_threshold]
    other = [s for s in compatible if cfg.other_threshold <= s.score < cfg.good_threshold]

    matches = ChatMatches(
        perfect_matches=[_to_match(s, "perfect") for s in perfect[: cfg.tier_limit]],
        good_matches=[_to_match(s, "good") for s in good[: cfg.tier_limit]],
        other_matches=[_to_match(s, "other") for s in other[: cfg.tier_limit]],
    )
    logger.debug(
        "Chat tiers perfect=%s good=%s other=%s",
        len(matches.perfect_matches),
        len(matches.good_matches),
        len(matches.other_matches),
    )
    return matches


def _wants_gluten_free_beer(preferences: ChatPreferences) -> bool:
    return preferences.category == "beer" and "gluten" in normalize_allergies(preferences.allergies)


def gluten_free_alternatives(
    preferences: ChatPreferences,
    catalog: Sequence[Drink],
    *,
    settings: Settings | None = None,
) -> list[Drink]:
    """Cocktails / non-alcoholic drinks with no gluten ingredient that also pass the allergy filter."""
    settings = settings or get_settings()
    out: list[Drink] = []
    for drink in catalog:
        if drink.category not in ALTERNATIVE_CATEGORIES:
            continue
        if any(term in ing.lower() for ing in drink.ingredients for term in GLUTEN_TERMS):
            continue
        if not is_allergy_safe(drink, preferences.allergies, unknown_policy=settings.allergies.unknown_policy):
            continue
        out.append(drink)
        if len(out) >= settings.chat.alternative_limit:
            break
    return out


def assemble_chat_matches(
    preferences: ChatPreferences,
    catalog: Sequence[Drink],
    *,
    settings: Settings | None = None,
    matches: ChatMatches | None = None,
) -> list[ChatMatch]:
    """Flatten chat tiers into one display list, with the gluten-free beer fallback."""
    settings = settings or get_settings()
    cfg = settings.chat
    matches = matches if matches is not None else classify_for_chat(preferences, catalog, settings=settings)

    out: list[ChatMatch] = [*matches.perfect_matches, *matches.good_matches, *matches.other_matches][: cfg.max_total]

    if len(out) < cfg.fallback_min_matches and _wants_gluten_free_beer(preferences):
        seen = {m.drink.id for m in out}
        alternatives = [
            d for d in gluten_free_alternatives(preferences, catalog, settings=settings) if d.id not in seen
        ]
        logger.info("Few chat matches (%s); adding %s gluten-free alternatives", len(out), len(alternatives))
        for drink in alternatives:
            if len(out) >= cfg.max_total:
                break
            out.append(
                ChatMatch(
                    drink=drink,
                    score=cfg.alternative_score,
                    match_reasons=["gluten-free-alternative"],
                    match_quality="alternative",
                )
            )
    return out
