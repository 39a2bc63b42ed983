# src/drinkjoy/scoring/chat.py
"""
Chat-side drink scorer.

A coarser scorer than the wizard engine, tuned for conversational answers: the
chat layer wants a handful of drinks per quality tier rather than a fine-grained
ranking. Its weights and thresholds live in `settings.chat` and are intentionally
independent from `settings.matching`.

Unlike the wizard engine this scorer never returns None: an allergy conflict is
a large penalty plus `allergy_compatible=False`, and the tiering step in
`drinkjoy.recommender.chat` drops incompatible drinks.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from drinkjoy.config.settings import Settings
from drinkjoy.domain.models import ANY_CATEGORY, FEATURED_CATEGORY, ChatPreferences, Drink
from drinkjoy.features.allergy import allergy_matches, normalize_allergies

CHAT_FLAVOR_TAGS: dict[str, frozenset[str]] = {
    "sweet": frozenset({"sweet", "fruity"}),
    "sour": frozenset({"sour", "tart", "citrus"}),
    "bitter": frozenset({"bitter"}),
    "smoky": frozenset({"smoky"}),
    "smokey": frozenset({"smoky"}),
    "crisp": frozenset({"crisp", "fresh", "clean", "refreshing"}),
    "smooth": frozenset({"smooth", "mellow"}),
}

# Chat occasions map onto a single drink occasion tag; unmapped occasions never match.
CHAT_OCCASION_TAG: dict[str, str] = {
    "casual": "casual",
    "celebration": "celebration",
    "party": "celebration",
    "business": "business",
    "romantic": "romantic",
    "sports": "sports",
    "exploring": "casual",
    "newly21": "casual",
    "birthday": "celebration",
}

DAIRY_DRINK_NAMES: tuple[str, ...] = ("white russian", "mudslide", "brandy alexander", "grasshopper")


@dataclass(frozen=True)
class ChatScore:
    drink: Drink
    score: int
    match_reasons: list[str] = field(default_factory=list)
    allergy_compatible: bool = True


def chat_allergy_hit(drink: Drink, label: str) -> bool | None:
    """Chat-side allergy check: the shared lexicon plus a couple of coarse extras.

    Gluten also flags the whole beer category and dairy also flags a few cream
    cocktails by name. Returns None for labels outside the lexicon.
    """
    if label == "gluten" and drink.category == "beer":
        return True
    if label == "dairy":
        name = drink.name.lower()
        if any(n in name for n in DAIRY_DRINK_NAMES):
            return True
    return allergy_matches(drink, label)


def _category_points(drink: Drink, category: str | None, settings: Settings) -> tuple[int, str | None]:
    cfg = settings.chat
    if not category or category in (ANY_CATEGORY, FEATURED_CATEGORY):
        return cfg.no_category_bonus, None
    if drink.category == category:
        return cfg.category_match, "category"
    if category == "non-alcoholic":
        return -cfg.non_alcoholic_mismatch_penalty, None
    if drink.category == "non-alcoholic":
        return -cfg.alcoholic_mismatch_penalty, None
    return -cfg.category_mismatch_penalty, None


def score_for_chat(drink: Drink, preferences: ChatPreferences, settings: Settings) -> ChatScore:
    cfg = settings.chat
    score, reason = _category_points(drink, preferences.category, settings)
    reasons: list[str] = [reason] if reason else []

    flavor = preferences.flavor
    if flavor and flavor != ANY_CATEGORY:
        tags = CHAT_FLAVOR_TAGS.get(flavor, frozenset({flavor}))
        if tags.intersection(drink.flavor_profile):
            score += cfg.flavor
            reasons.append("flavor")

    if preferences.strength and drink.strength == preferences.strength:
        score += cfg.strength
        reasons.append("strength")

    occasion = preferences.occasion
    if occasion and occasion != ANY_CATEGORY:
        tag = CHAT_OCCASION_TAG.get(occasion)
        if tag and tag in drink.occasions:
            score += cfg.occasion
            reasons.append("occasion")

    compatible = True
    allergies = normalize_allergies(preferences.allergies)
    for label in allergies:
        hit = chat_allergy_hit(drink, label)
        if hit is None:
            # Unknown label: only counts against the drink under the fail-safe policy.
            if settings.allergies.unknown_policy == "exclude":
                score -= cfg.allergy_penalty
                compatible = False
            continue
        if hit:
            score -= cfg.allergy_penalty
            compatible = False
        else:
            score += cfg.allergy_free_bonus
            reasons.append(f"{label}-free")
    if compatible and allergies:
        score += cfg.allergy_compatible_bonus

    return ChatScore(drink=drink, score=score, match_reasons=reasons, allergy_compatible=compatible)
