from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from drinkjoy.catalog.loader import load_drinks
from drinkjoy.config.overrides import apply_settings_overrides
from drinkjoy.config.settings import get_settings
from drinkjoy.core.rng import PythonRandomSource
from drinkjoy.domain.models import Drink, Preferences, ScoredCandidate
from drinkjoy.features.allergy import is_allergy_safe
from drinkjoy.recommender.compose import compose_recommendations, rank_candidates

NY = ZoneInfo("America/New_York")
CATALOG = Path(__file__).resolve().parents[1] / "data" / "catalogs" / "drinks.json"
HAPPY = datetime(2026, 1, 5, 16, 0, tzinfo=NY)
NOON = datetime(2026, 1, 5, 12, 0, tzinfo=NY)


def _candidate(drink_id: str, score: int, *, happy_hour: bool = False) -> ScoredCandidate:
    drink = Drink(id=drink_id, name=drink_id, category="cocktail", happy_hour=happy_hour)
    return ScoredCandidate(drink=drink, score=score)


def _ids(items):
    return [c.drink.id for c in items]


def test_buckets_are_ordered_high_to_low():
    cands = [_candidate("a", 41), _candidate("b", 77), _candidate("c", 58), _candidate("d", 73)]
    ranked = rank_candidates(cands, now=NOON, rng=PythonRandomSource(1))

    assert set(_ids(ranked[:2])) == {"b", "d"}
    assert _ids(ranked[2:]) == ["c", "a"]


def test_scores_at_or_above_ninety_always_lead():
    cands = [_candidate("low", 85), _candidate("top", 95), _candidate("mid", 70), _candidate("edge", 90)]
    for seed in range(5):
        ranked = rank_candidates(cands, now=NOON, rng=PythonRandomSource(seed))
        assert set(_ids(ranked[:2])) == {"top", "edge"}
        assert _ids(ranked[2:]) == ["low", "mid"]


def test_happy_hour_drinks_lead_their_bucket_during_the_window():
    cands = [
        _candidate("plain-1", 88),
        _candidate("hh-1", 82, happy_hour=True),
        _candidate("plain-2", 85),
        _candidate("hh-2", 80, happy_hour=True),
        _candidate("lower", 65, happy_hour=True),
    ]
    for seed in range(5):
        ranked = rank_candidates(cands, now=HAPPY, rng=PythonRandomSource(seed))
        # Within bucket 8 the happy-hour specials come first, even with lower scores.
        assert set(_ids(ranked[:2])) == {"hh-1", "hh-2"}
        assert set(_ids(ranked[2:4])) == {"plain-1", "plain-2"}
        # Front-loading never crosses buckets.
        assert _ids(ranked[4:]) == ["lower"]


def test_happy_hour_front_load_is_off_outside_the_window():
    cands = [_candidate(f"plain-{i}", 80 + i) for i in range(6)] + [_candidate("hh", 80, happy_hour=True)]
    positions = set()
    for seed in range(20):
        ranked = rank_candidates(cands, now=NOON, rng=PythonRandomSource(seed))
        positions.add(_ids(ranked).index("hh"))
    assert positions != {0}


def test_same_seed_gives_same_order():
    catalog = load_drinks(CATALOG)
    prefs = Preferences(flavor="sweet", occasion="celebration")

    first = compose_recommendations(catalog, prefs, now=HAPPY, rng=PythonRandomSource(42), popularity={})
    second = compose_recommendations(catalog, prefs, now=HAPPY, rng=PythonRandomSource(42), popularity={})

    assert _ids(first) == _ids(second)
    assert [c.score for c in first] == [c.score for c in second]


def test_category_filter_and_limit():
    catalog = load_drinks(CATALOG)

    beers = compose_recommendations(
        catalog, Preferences(category="beer"), now=NOON, rng=PythonRandomSource(3), popularity={"beer-ipa": 9}
    )
    assert beers
    assert all(c.drink.category == "beer" for c in beers)

    featured = compose_recommendations(catalog, Preferences(category="featured"), now=NOON, rng=PythonRandomSource(3))
    assert featured
    assert all(c.drink.featured for c in featured)

    limited = compose_recommendations(
        catalog, Preferences(category="any", flavor="sweet"), limit=2, now=HAPPY, rng=PythonRandomSource(3)
    )
    assert len(limited) <= 2


def test_results_never_contain_allergy_conflicts():
    catalog = load_drinks(CATALOG)
    prefs = Preferences(flavor="crisp", allergies=["gluten", "dairy"])

    results = compose_recommendations(catalog, prefs, now=HAPPY, rng=PythonRandomSource(7), limit=50)

    assert results
    assert all(is_allergy_safe(c.drink, prefs.allergies) for c in results)
    assert all(0 <= c.score <= 100 for c in results)


def test_default_limit_comes_from_settings():
    catalog = load_drinks(CATALOG)
    results = compose_recommendations(catalog, Preferences(category="any"), now=HAPPY, rng=PythonRandomSource(5))
    assert len(results) <= get_settings().matching.default_limit


def test_light_non_alcoholic_request_returns_only_the_mocktail():
    catalog = [
        Drink(id="virgin-mojito", name="Virgin Mojito", category="non-alcoholic", abv=0, ingredients=["mint", "lime"]),
        Drink(id="gin-fizz", name="Gin Fizz", category="cocktail", abv=18, ingredients=["gin", "lemon", "soda"]),
    ]
    prefs = Preferences(category="non-alcoholic", strength="light", allergies=[])

    results = compose_recommendations(catalog, prefs, now=NOON, rng=PythonRandomSource(1))
    assert _ids(results) == ["virgin-mojito"]


def test_gluten_allergy_drops_the_beer_even_when_it_would_lead():
    catalog = [
        Drink(
            id="lager",
            name="Lager",
            category="beer",
            abv=5,
            flavor_profile=["crisp"],
            occasions=["casual"],
            ingredients=["barley malt", "hops"],
        ),
        Drink(id="rose", name="Rosé", category="wine", abv=12, occasions=["casual"], ingredients=["grapes"]),
    ]
    settings = apply_settings_overrides(get_settings(), {"matching": {"perturbation": {"jitter": 0, "boost_probability": 0}}})

    unrestricted = compose_recommendations(
        catalog, Preferences(flavor="crisp", occasion="casual"), now=NOON, rng=PythonRandomSource(2), settings=settings
    )
    assert _ids(unrestricted) == ["lager", "rose"]

    restricted = compose_recommendations(
        catalog,
        Preferences(flavor="crisp", occasion="casual", allergies=["gluten"]),
        now=NOON,
        rng=PythonRandomSource(2),
        settings=settings,
    )
    assert _ids(restricted) == ["rose"]


def test_happy_hour_drink_leads_a_tie_at_fifty():
    # Plain: flavour 25 + occasion 15 + temperature 10. Special: flavour 25 + happy hour 25.
    plain = Drink(
        id="plain",
        name="Plain",
        category="cocktail",
        flavor_profile=["sweet"],
        occasions=["romantic"],
        weather_match={"ideal_temp": 8},
    )
    special = Drink(id="special", name="Special", category="cocktail", flavor_profile=["sweet"], happy_hour=True)
    prefs = Preferences(flavor="sweet", occasion="romantic", temperature="cold")
    settings = apply_settings_overrides(get_settings(), {"matching": {"perturbation": {"jitter": 0, "boost_probability": 0}}})

    for seed in range(10):
        results = compose_recommendations(
            [plain, special], prefs, now=HAPPY, rng=PythonRandomSource(seed), settings=settings
        )
        assert [(c.drink.id, c.score) for c in results] == [("special", 50), ("plain", 50)]
