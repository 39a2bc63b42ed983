# src/drinkjoy/scoring/rules.py
"""
Wizard scoring rule table.

Every additive contribution of the wizard scorer is one `ScoringRule` record:
`dimension`, `predicate`, `points` and a `reason` template. The table is built
from `settings.matching.points`, so changing a weight in YAML changes exactly one
row, and tests can assert against the table directly.

Rules are independent: each one either adds its points and (optionally) a reason
string, or adds nothing. Exclusions (allergy, category filter) are not rules;
they run first in `drinkjoy.scoring.engine`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

from drinkjoy.config.settings import Settings
from drinkjoy.domain.models import ANY_CATEGORY, FEATURED_CATEGORY, Drink, Preferences, WeatherReading
from drinkjoy.features import preference_match as pm
from drinkjoy.features import weather as wx
from drinkjoy.features.popularity import popularity_points, popularity_reason


@dataclass(frozen=True)
class MatchContext:
    """Everything a rule may look at for one (drink, preferences) pair."""

    drink: Drink
    preferences: Preferences
    settings: Settings
    weather: WeatherReading | None = None
    likes: int = 0
    happy_hour_active: bool = False

    @property
    def weather_enabled(self) -> bool:
        return bool(self.preferences.use_weather) and self.weather is not None


Predicate = Callable[[MatchContext], bool]
Points = int | Callable[[MatchContext], int]
Reason = str | Callable[[MatchContext], "str | None"] | None


@dataclass(frozen=True)
class RuleHit:
    dimension: str
    points: int
    reason: str | None


@dataclass(frozen=True)
class ScoringRule:
    dimension: str
    predicate: Predicate
    points: Points
    reason: Reason = None

    def evaluate(self, ctx: MatchContext) -> RuleHit | None:
        if not self.predicate(ctx):
            return None
        points = self.points(ctx) if callable(self.points) else int(self.points)
        if points <= 0:
            return None
        reason = self.reason(ctx) if callable(self.reason) else self.reason
        return RuleHit(self.dimension, points, reason)


def category_matches(drink: Drink, category: str | None) -> bool:
    """Category filter: `None`/"any" pass everything, "featured" needs the flag."""
    if not category or category == ANY_CATEGORY:
        return True
    if category == FEATURED_CATEGORY:
        return drink.featured
    return drink.category == category


def _category_requested(ctx: MatchContext) -> bool:
    category = ctx.preferences.category
    return bool(category) and category != ANY_CATEGORY and category_matches(ctx.drink, category)


def _category_reason(ctx: MatchContext) -> str:
    return pm.CATEGORY_REASONS.get(ctx.preferences.category or "", "Matches your preferred category")


def _strength_reason(ctx: MatchContext) -> str:
    return f"{(ctx.preferences.strength or '').capitalize()} strength"


def _compound_reason(ctx: MatchContext) -> str | None:
    key = (ctx.preferences.flavor or "", ctx.preferences.occasion or "")
    return pm.COMPOUND_REASONS.get(key, "A natural pairing for your plans")


def _milestone_reason(ctx: MatchContext) -> str:
    if ctx.preferences.occasion == "newly21":
        return "A fun first legal drink"
    return "Birthday-worthy pick"


TEMPERATURE_REASONS: dict[str, str] = {
    "cold": "Served ice cold",
    "cool": "Nicely chilled",
    "room": "Best at room temperature",
    "warm": "A warming choice",
}


def build_wizard_rules(settings: Settings) -> tuple[ScoringRule, ...]:
    """Build the wizard rule table from configured point values."""
    m = settings.matching
    pts = m.points
    bands = m.strength_bands

    return (
        ScoringRule(
            "flavor",
            lambda c: pm.matches_flavor(c.drink, c.preferences.flavor),
            pts.flavor,
            lambda c: f"Matches your {c.preferences.flavor} preference",
        ),
        ScoringRule("category", _category_requested, pts.category, _category_reason),
        ScoringRule(
            "strength",
            lambda c: pm.matches_strength_band(c.drink, c.preferences.strength, bands),
            pts.strength,
            _strength_reason,
        ),
        ScoringRule(
            "adventure",
            lambda c: pm.matches_adventure(c.drink, c.preferences.adventure, classics=m.classics, bands=bands),
            pts.adventure,
            lambda c: pm.ADVENTURE_REASONS.get(c.preferences.adventure or ""),
        ),
        ScoringRule(
            "compound",
            lambda c: pm.matches_compound(c.drink, c.preferences.flavor, c.preferences.occasion, bands),
            pts.compound,
            _compound_reason,
        ),
        ScoringRule(
            "occasion_milestone",
            lambda c: pm.matches_milestone(c.drink, c.preferences.occasion),
            pts.occasion_milestone,
            _milestone_reason,
        ),
        # The regular occasion rule only fires when the milestone rule did not.
        ScoringRule(
            "occasion",
            lambda c: not pm.matches_milestone(c.drink, c.preferences.occasion)
            and pm.matches_occasion_tag(c.drink, c.preferences.occasion),
            pts.occasion,
            lambda c: pm.OCCASION_REASONS.get(c.preferences.occasion or ""),
        ),
        ScoringRule(
            "temperature",
            lambda c: pm.matches_temperature(c.drink, c.preferences.temperature),
            pts.temperature,
            lambda c: TEMPERATURE_REASONS.get(c.preferences.temperature or ""),
        ),
        ScoringRule(
            "weather_range",
            lambda c: c.weather_enabled and wx.in_temperature_range(c.drink, c.weather),
            pts.weather_range,
            lambda c: f"Great for {wx.temperature_label(c.weather)}" if c.weather else None,
        ),
        ScoringRule(
            "weather_condition",
            lambda c: c.weather_enabled and wx.matches_condition(c.drink, c.weather),
            pts.weather_condition,
            lambda c: f"Made for {c.weather.condition} weather" if c.weather else None,
        ),
        ScoringRule(
            "weather_rain_spirit",
            lambda c: c.weather_enabled and wx.rainy_day_spirit(c.drink, c.weather),
            pts.weather_synergy,
            "A cozy sipper for a rainy day",
        ),
        ScoringRule(
            "weather_clear_warm",
            lambda c: c.weather_enabled and wx.sunny_day_cooler(c.drink, c.weather, m),
            pts.weather_synergy,
            "Sunny-day refresher",
        ),
        ScoringRule(
            "weather_cold_warming",
            lambda c: c.weather_enabled and wx.cold_day_warmer(c.drink, c.weather, m),
            pts.weather_synergy,
            "Warms you up on a cold day",
        ),
        ScoringRule(
            "weather_humid_light",
            lambda c: c.weather_enabled and wx.humid_day_light(c.drink, c.weather, m),
            pts.weather_humidity,
            "Light enough for a humid day",
        ),
        ScoringRule(
            "happy_hour",
            lambda c: c.happy_hour_active,
            settings.happy_hour.bonus,
            "Happy Hour special!",
        ),
        ScoringRule(
            "casual_happy_hour",
            lambda c: c.preferences.occasion == "casual" and c.drink.happy_hour,
            pts.casual_happy_hour,
            "Perfect for happy hour",
        ),
        ScoringRule(
            "featured",
            lambda c: c.preferences.category == FEATURED_CATEGORY and c.drink.featured,
            pts.featured,
            "Staff featured pick",
        ),
        ScoringRule(
            "popularity",
            lambda c: c.likes > 0,
            lambda c: popularity_points(c.likes, pts.popularity_cap),
            lambda c: popularity_reason(c.likes),
        ),
    )


def evaluate_rules(ctx: MatchContext, rules: tuple[ScoringRule, ...]) -> list[RuleHit]:
    """Evaluate every rule; return the hits in table order."""
    hits: list[RuleHit] = []
    for rule in rules:
        hit = rule.evaluate(ctx)
        if hit is not None:
            hits.append(hit)
    return hits


def points_by_dimension(hits: list[RuleHit]) -> Mapping[str, int]:
    out: dict[str, int] = {}
    for h in hits:
        out[h.dimension] = out.get(h.dimension, 0) + h.points
    return out
