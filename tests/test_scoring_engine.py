from datetime import datetime
from zoneinfo import ZoneInfo

from drinkjoy.config.settings import get_settings
from drinkjoy.domain.models import Drink, Preferences, WeatherMatch, WeatherReading
from drinkjoy.scoring.composite import bucket_of, round_half_up
from drinkjoy.scoring.engine import exclusion_reason, perturb, score_drink
from drinkjoy.scoring.rules import build_wizard_rules

NY = ZoneInfo("America/New_York")


class FixedRandom:
    def __init__(self, value: float):
        self.value = value

    def next(self) -> float:
        return self.value


class SequenceRandom:
    def __init__(self, values: list[float]):
        self.values = list(values)
        self.i = 0

    def next(self) -> float:
        v = self.values[self.i % len(self.values)]
        self.i += 1
        return v


# 0.5 means: zero jitter, no boost, no "perfect" roll. Score == additive base.
NEUTRAL = FixedRandom(0.5)


def _drink(drink_id: str = "d1", **kw) -> Drink:
    data = {"id": drink_id, "name": kw.pop("name", "Test Drink"), "category": kw.pop("category", "cocktail")}
    data.update(kw)
    return Drink(**data)


def test_crisp_medium_casual_scores_sixty():
    drink = _drink(flavor_profile=["crisp", "citrus"], abv=18, occasions=["casual"])
    prefs = Preferences(flavor="crisp", strength="medium", occasion="casual")

    out = score_drink(drink, prefs, rng=NEUTRAL, settings=get_settings())

    assert out is not None
    assert out.score == 60
    assert out.reasons == ["Matches your crisp preference", "Medium strength", "Perfect for relaxing"]


def test_featured_request_adds_category_and_featured_points():
    drink = _drink(featured=True)
    out = score_drink(drink, Preferences(category="featured"), rng=NEUTRAL)
    assert out is not None
    assert out.score == 35
    assert "Staff featured pick" in out.reasons


def test_milestone_replaces_regular_occasion_points():
    drink = _drink(fun_for_twenty_one=True, occasions=["casual"])
    out = score_drink(drink, Preferences(occasion="newly21"), rng=NEUTRAL)
    assert out is not None
    assert out.score == 25
    assert out.reasons == ["A fun first legal drink"]


def test_weather_range_condition_and_sunny_synergy():
    drink = _drink(weather_match=WeatherMatch(ideal_temp=26, temp_min=15, temp_max=30, conditions=["Clear"]))
    weather = WeatherReading(temp_c=22, condition="Clear")

    out = score_drink(drink, Preferences(use_weather=True), weather, rng=NEUTRAL)

    assert out is not None
    assert out.score == 18
    assert out.reasons == ["Great for 22°C", "Made for clear weather", "Sunny-day refresher"]


def test_weather_ignored_unless_requested():
    drink = _drink(flavor_profile=["sweet"], weather_match=WeatherMatch(temp_min=0, temp_max=40, conditions=["clear"]))
    weather = WeatherReading(temp_c=22, condition="clear")

    out = score_drink(drink, Preferences(flavor="sweet", use_weather=False), weather, rng=NEUTRAL)
    assert out is not None
    assert out.score == 25


def test_drink_without_weather_match_gets_no_weather_points():
    drink = _drink(flavor_profile=["sweet"])
    weather = WeatherReading(temp_c=22, condition="clear")
    out = score_drink(drink, Preferences(flavor="sweet", use_weather=True), weather, rng=NEUTRAL)
    assert out is not None
    assert out.score == 25


def test_popularity_bonus_is_capped():
    drink = _drink("popular", flavor_profile=["sweet"])
    out = score_drink(drink, Preferences(flavor="sweet"), popularity={"popular": 24}, rng=NEUTRAL)
    assert out is not None
    assert out.score == 35
    assert "Crowd favorite (24 likes)" in out.reasons


def test_happy_hour_alone_is_enough_to_score():
    drink = _drink(happy_hour=True)
    at = datetime(2026, 1, 5, 16, 0, tzinfo=NY)

    out = score_drink(drink, Preferences(), now=at, rng=NEUTRAL)
    assert out is not None
    assert out.score == 25
    assert out.reasons == ["Happy Hour special!"]

    casual = score_drink(drink, Preferences(occasion="casual"), now=at, rng=NEUTRAL)
    assert casual is not None
    assert casual.score == 30


def test_no_positive_contribution_drops_the_drink():
    drink = _drink(flavor_profile=["bitter"])
    at = datetime(2026, 1, 5, 12, 0, tzinfo=NY)
    assert score_drink(drink, Preferences(flavor="sweet"), now=at, rng=NEUTRAL) is None


def test_exclusions_run_before_scoring():
    settings = get_settings()
    beer = _drink("ipa", category="beer", ingredients=["malt"], flavor_profile=["crisp"])

    assert exclusion_reason(beer, Preferences(allergies=["gluten"]), settings) == "allergy"
    assert exclusion_reason(beer, Preferences(category="wine"), settings) == "category"
    assert exclusion_reason(beer, Preferences(category="any"), settings) is None
    assert score_drink(beer, Preferences(flavor="crisp", allergies=["gluten"]), rng=NEUTRAL) is None
    assert score_drink(beer, Preferences(flavor="crisp", category="featured"), rng=NEUTRAL) is None


def test_perturbation_paths():
    cfg = get_settings().matching.perturbation

    # Every roll succeeds: -3 jitter, +0 boost, then the perfect-match roll wins.
    assert perturb(85, FixedRandom(0.0), cfg) == 100
    # Below the perfect threshold the roll is never taken.
    assert perturb(50, FixedRandom(0.0), cfg) == 47
    # 50 + 2.94, no boost.
    assert perturb(50, FixedRandom(0.99), cfg) == 53
    # zero jitter, boost roll wins, half of boost_max.
    assert perturb(50, SequenceRandom([0.5, 0.05, 0.5]), cfg) == 55


def test_perturbation_clamps_to_score_range():
    cfg = get_settings().matching.perturbation
    assert perturb(1, FixedRandom(0.0), cfg) == 0
    assert perturb(200, FixedRandom(0.99), cfg) == 100


def test_rounding_and_buckets():
    assert round_half_up(52.5) == 53
    assert round_half_up(52.49) == 52
    assert bucket_of(87, 10) == 8
    assert bucket_of(90, 10) == 9
    assert bucket_of(5, 0) == 5


def test_rule_table_reflects_configured_points():
    settings = get_settings()
    rules = build_wizard_rules(settings)
    by_dim = {r.dimension: r.points for r in rules if not callable(r.points)}

    assert [r.dimension for r in rules][:7] == [
        "flavor",
        "category",
        "strength",
        "adventure",
        "compound",
        "occasion_milestone",
        "occasion",
    ]
    assert by_dim["flavor"] == 25
    assert by_dim["occasion_milestone"] == 25
    assert by_dim["happy_hour"] == settings.happy_hour.bonus
    assert by_dim["weather_humid_light"] == 2
    assert callable(next(r for r in rules if r.dimension == "popularity").points)


NOON = datetime(2026, 1, 5, 12, 0, tzinfo=NY)


def test_casual_bonus_follows_the_drink_flag_outside_the_window():
    out = score_drink(_drink(happy_hour=True), Preferences(occasion="casual"), now=NOON, rng=NEUTRAL)
    assert out is not None
    assert out.score == 5
    assert out.reasons == ["Perfect for happy hour"]

    assert score_drink(_drink(), Preferences(occasion="casual"), now=NOON, rng=NEUTRAL) is None


def _base(drink: Drink, prefs: Preferences, weather: WeatherReading | None = None) -> int:
    out = score_drink(drink, prefs, weather, now=NOON, rng=NEUTRAL)
    return 0 if out is None else out.score


def test_adventure_classic_matches_by_name():
    assert _base(_drink(name="Old Fashioned"), Preferences(adventure="classic")) == 15
    assert _base(_drink(name="old fashioned "), Preferences(adventure="classic")) == 15
    assert _base(_drink(name="Espresso Tonic"), Preferences(adventure="classic")) == 0


def test_adventure_bold_wants_bitter_or_strong():
    assert _base(_drink(flavor_profile=["bitter"], abv=10), Preferences(adventure="bold")) == 15
    assert _base(_drink(flavor_profile=["sweet"], abv=30), Preferences(adventure="bold")) == 15
    assert _base(_drink(flavor_profile=["sweet"], abv=10), Preferences(adventure="bold")) == 0


def test_adventure_fruity_wants_sweet_or_fruity():
    assert _base(_drink(flavor_profile=["fruity"]), Preferences(adventure="fruity")) == 15
    assert _base(_drink(flavor_profile=["sweet"]), Preferences(adventure="fruity")) == 15
    assert _base(_drink(flavor_profile=["crisp"]), Preferences(adventure="fruity")) == 0


def test_adventure_simple_wants_few_ingredients_or_beer_and_wine():
    four = ["gin", "lemon", "sugar", "soda"]
    assert _base(_drink(ingredients=four[:3]), Preferences(adventure="simple")) == 15
    assert _base(_drink(ingredients=four), Preferences(adventure="simple")) == 0
    assert _base(_drink(category="beer", ingredients=[*four, "hops"]), Preferences(adventure="simple")) == 15
    assert _base(_drink(category="wine", ingredients=[*four, "grapes"]), Preferences(adventure="simple")) == 15


def test_compound_sweet_party_needs_a_sweet_cocktail():
    prefs = Preferences(flavor="sweet", occasion="party")

    out = score_drink(_drink(flavor_profile=["sweet"]), prefs, now=NOON, rng=NEUTRAL)
    assert out is not None
    assert out.score == 35
    assert "Sweet cocktail made for a party" in out.reasons

    assert _base(_drink(category="wine", flavor_profile=["sweet"]), prefs) == 25


def test_compound_crisp_romantic_wants_wine_or_a_light_spirit():
    prefs = Preferences(flavor="crisp", occasion="romantic")
    assert _base(_drink(category="wine"), prefs) == 10
    assert _base(_drink(category="spirit", abv=10), prefs) == 10
    assert _base(_drink(category="spirit", abv=40, strength="light"), prefs) == 10
    assert _base(_drink(category="spirit", abv=40, strength="strong"), prefs) == 0
    assert _base(_drink(category="cocktail", abv=10), prefs) == 0


def test_compound_smokey_business_wants_whiskey():
    prefs = Preferences(flavor="smokey", occasion="business")

    out = score_drink(_drink(name="Islay Scotch", category="spirit", abv=43), prefs, now=NOON, rng=NEUTRAL)
    assert out is not None
    assert out.score == 10
    assert out.reasons == ["A serious pour for a business toast"]

    assert _base(_drink(name="Mezcal Neat", category="spirit", abv=43), prefs) == 0


def test_compound_sour_sports_wants_beer_or_a_light_sour():
    prefs = Preferences(flavor="sour", occasion="sports")
    assert _base(_drink(category="beer", abv=5), prefs) == 10
    assert _base(_drink(flavor_profile=["sour"], abv=8), prefs) == 35
    # Sour but not light: flavour only.
    assert _base(_drink(flavor_profile=["sour"], abv=20), prefs) == 25


def test_temperature_cold():
    prefs = Preferences(temperature="cold")
    assert _base(_drink(category="beer"), prefs) == 10
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=8)), prefs) == 10
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=15)), prefs) == 0
    assert _base(_drink(), prefs) == 0


def test_temperature_cool():
    prefs = Preferences(temperature="cool")
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=18)), prefs) == 10
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=22)), prefs) == 0


def test_temperature_room():
    prefs = Preferences(temperature="room")
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=15)), prefs) == 10
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=25)), prefs) == 10
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=12)), prefs) == 0
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=27)), prefs) == 0


def test_temperature_warm():
    prefs = Preferences(temperature="warm")
    assert _base(_drink(name="Hot Toddy"), prefs) == 10
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=20)), prefs) == 10
    assert _base(_drink(weather_match=WeatherMatch(ideal_temp=12)), prefs) == 0


def test_rainy_day_favours_spirits():
    prefs = Preferences(use_weather=True)
    rain = WeatherReading(temp_c=12, condition="rain")

    out = score_drink(_drink(category="spirit", abv=40), prefs, rain, now=NOON, rng=NEUTRAL)
    assert out is not None
    assert out.score == 3
    assert out.reasons == ["A cozy sipper for a rainy day"]

    assert _base(_drink(category="cocktail", abv=40), prefs, rain) == 0
    assert _base(_drink(category="spirit", abv=40), prefs, WeatherReading(temp_c=12, condition="clouds")) == 0


def test_snow_or_cold_favours_warming_drinks():
    prefs = Preferences(use_weather=True)
    toddy = _drink(name="Hot Toddy", abv=14)
    spicy = _drink(flavor_profile=["spicy"], abv=14)

    assert _base(toddy, prefs, WeatherReading(temp_c=1, condition="snow")) == 3
    assert _base(spicy, prefs, WeatherReading(temp_c=2, condition="clear")) == 3
    assert _base(spicy, prefs, WeatherReading(temp_c=10, condition="clear")) == 0
    assert _base(_drink(flavor_profile=["crisp"], abv=14), prefs, WeatherReading(temp_c=1, condition="snow")) == 0


def test_humid_day_favours_light_drinks():
    prefs = Preferences(use_weather=True)
    humid = WeatherReading(temp_c=28, condition="clouds", description="Hot and humid")

    assert _base(_drink(category="beer", abv=5), prefs, humid) == 2
    assert _base(_drink(category="beer", abv=14), prefs, humid) == 0
    assert _base(_drink(category="beer", abv=5), prefs, WeatherReading(temp_c=28, condition="clouds")) == 0
