# src/drinkjoy/features/preference_match.py
"""
Preference predicates (drink-level).

Each function answers one yes/no question about a drink relative to a single
preference dimension: does its flavour profile fit "crisp", is its ABV in the
"medium" band, is it a classic, does it suit a "sports" occasion.

The wizard rule table (`drinkjoy.scoring.rules`) and the supplementary generator
both compose these predicates; the point values live in settings.
"""

from __future__ import annotations

from drinkjoy.config.settings import StrengthBands
from drinkjoy.domain.models import Drink

# Preferred flavour -> drink flavour tags that satisfy it.
FLAVOR_SYNONYMS: dict[str, frozenset[str]] = {
    "crisp": frozenset({"crisp", "clean", "refreshing", "bright"}),
    "smokey": frozenset({"smoky", "smokey", "peaty", "charred"}),
    "smoky": frozenset({"smoky", "smokey", "peaty", "charred"}),
    "sweet": frozenset({"sweet", "fruity", "dessert"}),
    "bitter": frozenset({"bitter", "herbal", "hoppy"}),
    "sour": frozenset({"sour", "tart", "citrus"}),
    "smooth": frozenset({"smooth", "creamy", "mellow", "mild"}),
}

# Preferred occasion -> drink occasion tags that satisfy it.
OCCASION_TAGS: dict[str, frozenset[str]] = {
    "casual": frozenset({"casual"}),
    "party": frozenset({"party", "celebration"}),
    "celebration": frozenset({"celebration", "party"}),
    "romantic": frozenset({"romantic"}),
    "relaxing": frozenset({"relaxing", "casual"}),
    "sports": frozenset({"sports"}),
    "exploring": frozenset({"exploring", "casual"}),
    "business": frozenset({"business"}),
    "newly21": frozenset({"casual"}),
    "birthday": frozenset({"celebration", "party"}),
}

OCCASION_REASONS: dict[str, str] = {
    "casual": "Perfect for relaxing",
    "party": "Great for parties",
    "celebration": "Made for celebrating",
    "romantic": "Sets the mood",
    "relaxing": "Helps you unwind",
    "sports": "Great for game day",
    "exploring": "Perfect for discovery",
    "business": "Polished enough for business",
    "newly21": "Easy-going first pour",
    "birthday": "Great for a celebration",
}

CATEGORY_REASONS: dict[str, str] = {
    "beer": "Your preferred beer style",
    "wine": "Your preferred wine selection",
    "cocktail": "Your preferred cocktail choice",
    "spirit": "Your preferred spirit selection",
    "non-alcoholic": "Your preferred non-alcoholic option",
    "featured": "One of our featured drinks",
}

ADVENTURE_REASONS: dict[str, str] = {
    "classic": "A timeless classic",
    "bold": "Bold and adventurous",
    "fruity": "Fruity and fun",
    "simple": "Simple and clean",
}

WHISKEY_NAMES: tuple[str, ...] = ("whiskey", "whisky", "bourbon", "scotch")
WARMING_FLAVORS: frozenset[str] = frozenset({"spicy", "warming", "smoky", "smokey"})
WARMING_NAMES: tuple[str, ...] = ("toddy", "hot ", "mulled", "irish coffee")


def flavor_synonyms(flavor: str) -> frozenset[str]:
    """Synonym set for a preferred flavour; unknown flavours match only themselves."""
    return FLAVOR_SYNONYMS.get(flavor, frozenset({flavor}))


def matches_flavor(drink: Drink, flavor: str | None) -> bool:
    if not flavor:
        return False
    return bool(flavor_synonyms(flavor).intersection(drink.flavor_profile))


def strength_band(abv: float, bands: StrengthBands) -> str:
    """ABV band: light <= light_max, medium <= medium_max, strong above."""
    if abv <= bands.light_max_abv:
        return "light"
    if abv <= bands.medium_max_abv:
        return "medium"
    return "strong"


def matches_strength_band(drink: Drink, strength: str | None, bands: StrengthBands) -> bool:
    if not strength:
        return False
    return strength_band(drink.abv, bands) == strength


def matches_occasion_tag(drink: Drink, occasion: str | None) -> bool:
    if not occasion:
        return False
    tags = OCCASION_TAGS.get(occasion, frozenset({occasion}))
    return bool(tags.intersection(drink.occasions))


def matches_milestone(drink: Drink, occasion: str | None) -> bool:
    """Dedicated flags for the "newly 21" and "birthday" occasions."""
    if occasion == "newly21":
        return drink.fun_for_twenty_one
    if occasion == "birthday":
        return drink.good_for_bday
    return False


def matches_adventure(drink: Drink, adventure: str | None, *, classics: list[str], bands: StrengthBands) -> bool:
    if adventure == "classic":
        names = {c.strip().lower() for c in classics}
        return drink.name.strip().lower() in names
    if adventure == "bold":
        return "bitter" in drink.flavor_profile or strength_band(drink.abv, bands) == "strong"
    if adventure == "fruity":
        return "sweet" in drink.flavor_profile or "fruity" in drink.flavor_profile
    if adventure == "simple":
        return len(drink.ingredients) <= 3 or drink.category in ("beer", "wine")
    return False


def _ideal_temp(drink: Drink) -> float | None:
    wm = drink.weather_match
    return wm.ideal_temp if wm is not None else None


def matches_temperature(drink: Drink, temperature: str | None) -> bool:
    """Serving-temperature preference against the drink's ideal temperature.

    Drinks without an ideal temperature only match through the category/name
    clauses (beer is always "cold", a toddy is always "warm").
    """
    ideal = _ideal_temp(drink)
    name = drink.name.lower()
    if temperature == "cold":
        return drink.category == "beer" or (ideal is not None and ideal <= 10)
    if temperature == "cool":
        return ideal is not None and ideal <= 20
    if temperature == "room":
        return ideal is not None and 15 <= ideal <= 25
    if temperature == "warm":
        return "toddy" in name or (ideal is not None and ideal >= 20)
    return False


def is_whiskey(drink: Drink) -> bool:
    name = drink.name.lower()
    return any(w in name for w in WHISKEY_NAMES)


def is_warming(drink: Drink) -> bool:
    name = f"{drink.name.lower()} "
    return bool(WARMING_FLAVORS.intersection(drink.flavor_profile)) or any(w in name for w in WARMING_NAMES)


def matches_compound(drink: Drink, flavor: str | None, occasion: str | None, bands: StrengthBands) -> bool:
    """Hand-picked (flavour, occasion) pairings that deserve an extra nudge."""
    if not flavor or not occasion:
        return False
    light = strength_band(drink.abv, bands) == "light"
    if flavor == "sweet" and occasion == "party":
        return drink.category == "cocktail" and "sweet" in drink.flavor_profile
    if flavor == "crisp" and occasion == "romantic":
        return drink.category == "wine" or (drink.category == "spirit" and (light or drink.strength == "light"))
    if flavor in ("smokey", "smoky") and occasion == "business":
        return is_whiskey(drink)
    if flavor == "sour" and occasion == "sports":
        return drink.category == "beer" or (light and "sour" in drink.flavor_profile)
    return False


COMPOUND_REASONS: dict[tuple[str, str], str] = {
    ("sweet", "party"): "Sweet cocktail made for a party",
    ("crisp", "romantic"): "Crisp and elegant for date night",
    ("smokey", "business"): "A serious pour for a business toast",
    ("smoky", "business"): "A serious pour for a business toast",
    ("sour", "sports"): "Tart refresher for game day",
}
