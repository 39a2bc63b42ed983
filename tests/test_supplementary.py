from datetime import datetime
from zoneinfo import ZoneInfo

from drinkjoy.core.rng import PythonRandomSource
from drinkjoy.domain.models import Drink, Preferences
from drinkjoy.recommender.supplementary import get_additional_drinks, get_additional_drinks_from_all_categories

NOON = datetime(2026, 1, 5, 12, 0, tzinfo=ZoneInfo("America/New_York"))


class FixedRandom:
    def __init__(self, value: float):
        self.value = value

    def next(self) -> float:
        return self.value


def _drink(drink_id: str, **kw) -> Drink:
    data = {"id": drink_id, "name": drink_id, "category": kw.pop("category", "cocktail")}
    data.update(kw)
    return Drink(**data)


CATALOG = [
    _drink("sweet-medium", flavor_profile=["sweet"], strength="medium", featured=True),
    _drink("plain"),
    _drink("lager", category="beer", ingredients=["barley malt"], strength="light"),
    _drink("cider", category="beer", ingredients=["apples"], flavor_profile=["sweet"]),
    _drink("cola", category="non-alcoholic", flavor_profile=["sweet"], happy_hour=True),
]


def test_excluding_everything_returns_nothing():
    out = get_additional_drinks(CATALOG, Preferences(), [d.id for d in CATALOG], now=NOON)
    assert out == []


def test_scores_stay_in_the_supplementary_band():
    prefs = Preferences(flavor="sweet", strength="medium", category="cocktail")
    for seed in range(10):
        out = get_additional_drinks(
            CATALOG, prefs, [], now=NOON, rng=PythonRandomSource(seed), popularity={"sweet-medium": 40}
        )
        assert out
        assert all(15 <= c.score <= 65 for c in out)


def test_additive_score_and_reason_cap():
    prefs = Preferences(flavor="sweet", strength="medium", category="cocktail")
    out = get_additional_drinks(CATALOG, prefs, ["plain"], now=NOON, rng=FixedRandom(0.5))

    top = out[0]
    assert top.drink.id == "sweet-medium"
    # 15 base + 10 flavour + 5 category + 8 strength + 5 featured.
    assert top.score == 43
    assert top.reasons == ["Matches your sweet preference", "Another cocktail you might like", "Medium strength"]


def test_low_scores_are_clamped_to_the_floor():
    out = get_additional_drinks([_drink("plain")], Preferences(), [], now=NOON, rng=FixedRandom(0.0))
    assert [c.score for c in out] == [15]
    assert out[0].reasons == []


def test_category_filter_applies_but_all_categories_variant_opens_it():
    prefs = Preferences(category="beer", allergies=["gluten"])

    same = get_additional_drinks(CATALOG, prefs, [], now=NOON, rng=FixedRandom(0.5))
    assert [c.drink.id for c in same] == ["cider"]

    opened = get_additional_drinks_from_all_categories(CATALOG, prefs, [], now=NOON, rng=FixedRandom(0.5))
    ids = {c.drink.id for c in opened}
    assert "lager" not in ids
    assert {"cider", "plain", "cola", "sweet-medium"} <= ids
    # The caller's preferences are not mutated.
    assert prefs.category == "beer"


def test_results_sorted_and_truncated():
    out = get_additional_drinks(
        CATALOG, Preferences(flavor="sweet"), [], 2, now=NOON, rng=FixedRandom(0.5)
    )
    assert len(out) == 2
    assert out[0].score >= out[1].score
