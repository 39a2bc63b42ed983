"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- catalog entities (`Drink`, `WeatherMatch`)
- caller inputs (`Preferences`, `ChatPreferences`, `MatchRequest`)
- external signals (`WeatherReading`)
- explainable scoring output (`ScoredCandidate`, `ChatMatch`, `RecommendationResult`)

Catalog records are validated strictly (closed category set, non-negative ABV)
because they are authored data. Preferences are validated leniently: every field
is optional and an unknown value simply matches nothing.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DrinkCategory = Literal["cocktail", "beer", "wine", "spirit", "non-alcoholic"]
MatchQuality = Literal["perfect", "good", "other", "alternative"]

ANY_CATEGORY = "any"
FEATURED_CATEGORY = "featured"
NO_ALLERGY = "none"


def _normalize_tags(values: list[str]) -> list[str]:
    """Lower-case, strip and de-duplicate tags while keeping authoring order."""
    seen: dict[str, None] = {}
    for v in values or []:
        if not isinstance(v, str):
            continue
        t = v.strip().lower()
        if t:
            seen.setdefault(t, None)
    return list(seen)


def _normalize_choice(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


class WeatherMatch(BaseModel):
    """Temperatures (Celsius) and weather conditions a drink pairs well with."""

    ideal_temp: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    conditions: list[str] = Field(default_factory=list)

    @field_validator("conditions")
    @classmethod
    def _normalize_conditions(cls, conditions: list[str]) -> list[str]:
        return _normalize_tags(conditions)

    def accepts_temperature(self, temp_c: float) -> bool:
        if self.temp_min is None or self.temp_max is None:
            return False
        return self.temp_min <= temp_c <= self.temp_max


class Drink(BaseModel):
    """A read-only catalog entry."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    category: DrinkCategory
    strength: str = ""
    abv: float = Field(0.0, ge=0)
    flavor_profile: list[str] = Field(default_factory=list, alias="flavorProfile")
    ingredients: list[str] = Field(default_factory=list)
    occasions: list[str] = Field(default_factory=list)
    weather_match: WeatherMatch | None = Field(default=None, alias="weatherMatch")

    featured: bool = False
    happy_hour: bool = False
    fun_for_twenty_one: bool = Field(False, alias="funForTwentyOne")
    good_for_bday: bool = Field(False, alias="goodForBDay")
    happy_hour_price: str | None = None
    happy_hour_times: str | None = None

    description: str | None = None
    preparation: str | None = None
    image_url: str | None = None
    glass_type: str | None = None

    @field_validator("flavor_profile", "occasions")
    @classmethod
    def _normalize_tag_lists(cls, tags: list[str]) -> list[str]:
        return _normalize_tags(tags)

    @field_validator("strength")
    @classmethod
    def _normalize_strength(cls, strength: str) -> str:
        return (strength or "").strip().lower()


class Preferences(BaseModel):
    """One matching request's preferences. Absent fields mean "do not score on this"."""

    model_config = ConfigDict(populate_by_name=True)

    category: str | None = None
    flavor: str | None = None
    strength: str | None = None
    occasion: str | None = None
    temperature: str | None = None
    adventure: str | None = None
    allergies: list[str] = Field(default_factory=list)
    use_weather: bool = Field(False, alias="useWeather")

    @field_validator("category", "flavor", "strength", "occasion", "temperature", "adventure", mode="before")
    @classmethod
    def _normalize_choices(cls, value: Any) -> str | None:
        return _normalize_choice(value)

    @field_validator("allergies", mode="before")
    @classmethod
    def _normalize_allergies(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return _normalize_tags(list(value))


class ChatPreferences(BaseModel):
    """The simplified preference object extracted from a conversational turn."""

    model_config = ConfigDict(populate_by_name=True)

    category: str | None = None
    flavor: str | None = None
    strength: str | None = None
    occasion: str | None = None
    allergies: list[str] = Field(default_factory=list)
    custom_requests: list[str] = Field(default_factory=list, alias="customRequests")

    @field_validator("category", "flavor", "strength", "occasion", mode="before")
    @classmethod
    def _normalize_choices(cls, value: Any) -> str | None:
        return _normalize_choice(value)

    @field_validator("allergies", mode="before")
    @classmethod
    def _normalize_allergies(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return _normalize_tags(list(value))


class WeatherReading(BaseModel):
    """Current weather at the venue (Celsius)."""

    temp_c: float
    condition: str = ""
    description: str | None = None
    humidity: float | None = Field(default=None, ge=0, le=100)
    location_name: str | None = None

    @field_validator("condition", mode="before")
    @classmethod
    def _normalize_condition(cls, value: Any) -> str:
        return _normalize_choice(value) or ""


class ScoredCandidate(BaseModel):
    """One ranked output item: a drink, its score and why it scored that way."""

    drink: Drink
    score: int
    reasons: list[str] = Field(default_factory=list)


class ChatMatch(BaseModel):
    """A chat-side match, tagged with its quality tier."""

    drink: Drink
    score: int
    match_reasons: list[str] = Field(default_factory=list)
    match_quality: MatchQuality


class ChatMatches(BaseModel):
    """Chat-side tiers; each list is already sorted by score and capped."""

    perfect_matches: list[ChatMatch] = Field(default_factory=list)
    good_matches: list[ChatMatch] = Field(default_factory=list)
    other_matches: list[ChatMatch] = Field(default_factory=list)

    def total(self) -> int:
        return len(self.perfect_matches) + len(self.good_matches) + len(self.other_matches)


class MatchRequest(BaseModel):
    """End-user request payload for a recommendation run."""

    preferences: Preferences = Field(default_factory=Preferences)
    max_results: int | None = Field(default=None, ge=1, le=50)
    exclude_ids: list[str] = Field(default_factory=list)

    city: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lon: float | None = Field(default=None, ge=-180, le=180)

    settings_overrides: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _validate_coordinates(self) -> "MatchRequest":
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must be provided together")
        return self

    def has_location(self) -> bool:
        return bool(self.city) or (self.lat is not None and self.lon is not None)


class RecommendationResult(BaseModel):
    """Ranked recommendations plus the original query."""

    generated_at: datetime
    query: MatchRequest
    results: list[ScoredCandidate]
    meta: dict[str, Any] = Field(default_factory=dict)
