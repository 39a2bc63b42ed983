# src/drinkjoy/features/allergy.py
"""
Allergy / restriction safety filter.

A drink is unsafe when any declared allergy matches any of its ingredients
(case-insensitive substring match against a fixed lexicon). Spirit restrictions
("no gin", "no whiskey") also match against the drink's own name, because a
"Gin Fizz" is still gin even if the catalog lists "London dry" as the ingredient.

This is a hard exclusion: every output path in the recommender checks it before
any additive scoring happens.

Policy note:
- "none" is a no-op.
- Labels missing from the lexicon are handled by `unknown_policy`:
  "allow" keeps the drink (fail open), "exclude" drops it (fail safe).
"""

from __future__ import annotations

import logging
from typing import Iterable, Literal

from drinkjoy.domain.models import NO_ALLERGY, Drink

logger = logging.getLogger(__name__)

UnknownAllergyPolicy = Literal["allow", "exclude"]

GLUTEN_TERMS: tuple[str, ...] = ("beer", "wheat", "barley", "rye", "malt")

# Ingredient lexicon per allergy category.
INGREDIENT_LEXICON: dict[str, tuple[str, ...]] = {
    "gluten": GLUTEN_TERMS,
    "dairy": ("milk", "cream", "butter", "cheese", "yogurt", "whey", "casein", "lactose"),
    "nuts": (
        "peanut",
        "hazelnut",
        "walnut",
        "cashew",
        "macadamia",
        "almond",
        "pecan",
        "pistachio",
        "orgeat",
        "amaretto",
        "frangelico",
        "nocino",
    ),
    "eggs": ("egg",),
    "soy": ("soy",),
}

# Spirit restrictions: matched against ingredients and the drink name.
SPIRIT_LEXICON: dict[str, tuple[str, ...]] = {
    "gin": ("gin",),
    "vodka": ("vodka",),
    "whiskey": ("whiskey", "whisky", "bourbon", "scotch", "rye whiskey"),
    "bourbon": ("whiskey", "whisky", "bourbon", "scotch", "rye whiskey"),
    "scotch": ("scotch", "whisky"),
    "rum": ("rum",),
    "tequila": ("tequila", "mezcal"),
}

KNOWN_ALLERGIES: frozenset[str] = frozenset({NO_ALLERGY, *INGREDIENT_LEXICON, *SPIRIT_LEXICON})

_warned_unknown: set[str] = set()


def normalize_allergies(allergies: Iterable[str] | None) -> list[str]:
    """Lower-case, strip and de-duplicate; drops the "none" sentinel."""
    out: dict[str, None] = {}
    for a in allergies or []:
        label = str(a or "").strip().lower()
        if label and label != NO_ALLERGY:
            out.setdefault(label, None)
    return list(out)


def _contains_any(haystacks: Iterable[str], needles: tuple[str, ...]) -> bool:
    lowered = [h.lower() for h in haystacks if h]
    return any(n in h for h in lowered for n in needles)


def allergy_matches(drink: Drink, allergy: str) -> bool | None:
    """Return True/False for a known allergy label, None if the label is not in the lexicon."""
    label = allergy.strip().lower()
    if label == NO_ALLERGY:
        return False
    if label in INGREDIENT_LEXICON:
        return _contains_any(drink.ingredients, INGREDIENT_LEXICON[label])
    if label in SPIRIT_LEXICON:
        return _contains_any([*drink.ingredients, drink.name], SPIRIT_LEXICON[label])
    return None


def _note_unknown(label: str) -> None:
    if label not in _warned_unknown:
        _warned_unknown.add(label)
        logger.warning("Allergy label %r is not in the lexicon; applying unknown-label policy", label)


def matched_allergens(
    drink: Drink, allergies: Iterable[str] | None, *, unknown_policy: UnknownAllergyPolicy = "allow"
) -> list[str]:
    """List the declared allergies this drink trips (unknown labels count only under "exclude")."""
    hits: list[str] = []
    for label in normalize_allergies(allergies):
        result = allergy_matches(drink, label)
        if result is None:
            _note_unknown(label)
            if unknown_policy == "exclude":
                hits.append(label)
        elif result:
            hits.append(label)
    return hits


def is_allergy_safe(
    drink: Drink, allergies: Iterable[str] | None, *, unknown_policy: UnknownAllergyPolicy = "allow"
) -> bool:
    """True when none of the declared allergies match the drink."""
    return not matched_allergens(drink, allergies, unknown_policy=unknown_policy)
