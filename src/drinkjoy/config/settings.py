"""
Application settings (Pydantic).

Packaged defaults (`drinkjoy/config/defaults.yaml`) are the base layer. On top of
them, in order:
- a venue YAML file named by `DRINKJOY_CONFIG_PATH` (deep-merged, so it only
  needs the keys it changes),
- a handful of environment variables (`ENV_OVERRIDES`), including the weather
  API key, which should never be committed to YAML.

Every scoring weight, probability and threshold lives here rather than in the
matching code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, model_validator

from drinkjoy.core.env import load_dotenv_if_present

# Environment variable -> dotted settings path.
ENV_OVERRIDES: dict[str, str] = {
    "DRINKJOY_WEATHER_API_KEY": "ingestion.weather.api_key",
    "DRINKJOY_TIMEZONE": "app.timezone",
    "DRINKJOY_LOG_LEVEL": "app.log_level",
    "DRINKJOY_CACHE_DIR": "cache.dir",
    "DRINKJOY_CATALOG_PATH": "catalog.path",
}


def _yaml_mapping(text: str, source: str) -> dict[str, Any]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{source}: YAML root must be a mapping")
    return data


def _packaged_yaml(filename: str) -> dict[str, Any]:
    text = resources.files("drinkjoy.config").joinpath(filename).read_text(encoding="utf-8")
    return _yaml_mapping(text, filename)


def deep_merge(base: Mapping[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """New dict with `top` merged into `base` key by key; neither input is modified."""
    out = dict(base)
    for key, value in top.items():
        below = out.get(key)
        out[key] = deep_merge(below, value) if isinstance(value, Mapping) and isinstance(below, Mapping) else value
    return out


class AppSettings(BaseModel):
    name: str = "Drinkjoy"
    timezone: str = "America/New_York"
    http_timeout_seconds: float = 10
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/drinkjoy"
    default_ttl_seconds: int = 60 * 30


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/drinks.json"
    popularity_path: str | None = "data/popularity/likes.json"


class WeatherIngestionSettings(BaseModel):
    base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    units: Literal["metric"] = "metric"
    cache_ttl_seconds: int = 60 * 30
    # Oldest reading served when the API is down; older than this we score without weather.
    max_stale_seconds: int = 6 * 60 * 60
    api_key: str | None = None


class IngestionSettings(BaseModel):
    weather: WeatherIngestionSettings = Field(default_factory=WeatherIngestionSettings)


class AllergySettings(BaseModel):
    # "allow" keeps drinks when an allergy label is not in the lexicon; "exclude" drops them.
    unknown_policy: Literal["allow", "exclude"] = "allow"


class HappyHourSettings(BaseModel):
    enabled: bool = True
    start_hour: int = Field(15, ge=0, le=23)
    end_hour: int = Field(18, ge=0, le=24)
    bonus: int = Field(25, ge=0)


class WizardPoints(BaseModel):
    """Point values for the wizard rule table (see `drinkjoy.scoring.rules`)."""

    flavor: int = 25
    category: int = 20
    strength: int = 20
    adventure: int = 15
    compound: int = 10
    occasion: int = 15
    occasion_milestone: int = 25
    temperature: int = 10
    weather_range: int = 10
    weather_condition: int = 5
    weather_synergy: int = 3
    weather_humidity: int = 2
    casual_happy_hour: int = 5
    featured: int = 15
    popularity_cap: int = 10


class StrengthBands(BaseModel):
    light_max_abv: float = 12
    medium_max_abv: float = 25

    @model_validator(mode="after")
    def _validate_order(self) -> "StrengthBands":
        if self.medium_max_abv < self.light_max_abv:
            raise ValueError("strength_bands.medium_max_abv must be >= light_max_abv")
        return self


class PerturbationSettings(BaseModel):
    jitter: float = Field(3, ge=0)
    boost_probability: float = Field(0.10, ge=0, le=1)
    boost_max: float = Field(10, ge=0)
    perfect_threshold: int = 80
    perfect_probability: float = Field(0.15, ge=0, le=1)


class MatchingSettings(BaseModel):
    points: WizardPoints = Field(default_factory=WizardPoints)
    strength_bands: StrengthBands = Field(default_factory=StrengthBands)
    perturbation: PerturbationSettings = Field(default_factory=PerturbationSettings)
    cold_weather_c: float = 5
    warm_ideal_temp_c: float = 25
    bucket_width: int = Field(10, ge=1)
    priority_threshold: int = 90
    default_limit: int = Field(10, ge=1)
    classics: list[str] = Field(
        default_factory=lambda: ["Old Fashioned", "Martini", "Manhattan", "Whiskey Sour", "Margarita"]
    )


class SupplementarySettings(BaseModel):
    base: int = 15
    flavor: int = 10
    category: int = 5
    strength: int = 8
    featured: int = 5
    happy_hour: int = 10
    popularity_cap: int = 5
    jitter: float = Field(3, ge=0)
    min_score: int = 15
    max_score: int = 65
    max_reasons: int = Field(3, ge=1)
    default_limit: int = Field(10, ge=1)


class ChatSettings(BaseModel):
    category_match: int = 30
    non_alcoholic_mismatch_penalty: int = 30
    alcoholic_mismatch_penalty: int = 20
    category_mismatch_penalty: int = 10
    no_category_bonus: int = 10
    flavor: int = 25
    strength: int = 20
    occasion: int = 15
    allergy_penalty: int = 50
    allergy_free_bonus: int = 5
    allergy_compatible_bonus: int = 5
    perfect_threshold: int = 60
    good_threshold: int = 30
    other_threshold: int = 10
    tier_limit: int = Field(5, ge=1)
    max_total: int = Field(12, ge=1)
    fallback_min_matches: int = 3
    alternative_score: int = 25
    alternative_limit: int = 4


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    allergies: AllergySettings = Field(default_factory=AllergySettings)
    happy_hour: HappyHourSettings = Field(default_factory=HappyHourSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    supplementary: SupplementarySettings = Field(default_factory=SupplementarySettings)
    chat: ChatSettings = Field(default_factory=ChatSettings)


def _env_layer() -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for var, dotted in ENV_OVERRIDES.items():
        value = os.getenv(var)
        if not value:
            continue
        *parents, leaf = dotted.split(".")
        node = layer
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
    return layer


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Build settings from defaults, an optional venue YAML file and the environment."""
    load_dotenv_if_present()
    raw = _packaged_yaml("defaults.yaml")
    config_path = config_path or os.getenv("DRINKJOY_CONFIG_PATH")
    if config_path:
        path = Path(config_path).expanduser()
        raw = deep_merge(raw, _yaml_mapping(path.read_text(encoding="utf-8"), str(path)))
    return Settings.model_validate(deep_merge(raw, _env_layer()))


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings (cached); per-request changes go through `apply_settings_overrides`."""
    return load_settings()


@lru_cache
def get_logging_config() -> dict[str, Any]:
    return _packaged_yaml("logging.yaml")
