"""
Weather ingestion client (OpenWeather current conditions).

This module fetches the current weather for a city or coordinate and normalizes it
into the small `WeatherReading` the matcher consumes:
- temperature in Celsius (metric units)
- a coarse condition label ("clear", "rain", "snow", ...)
- a free-text description and humidity for secondary cues

The feature layer (`drinkjoy.features.weather`) turns the reading into pairings.
"""

from __future__ import annotations

import logging
from typing import Any

from drinkjoy.config.settings import Settings
from drinkjoy.core.cache import FileCache
from drinkjoy.core.http import get_json_object
from drinkjoy.domain.models import WeatherReading

logger = logging.getLogger(__name__)


class WeatherUnavailableError(RuntimeError):
    """Raised when weather cannot be looked up at all (e.g. no API key configured)."""


def parse_current_weather(payload: dict[str, Any]) -> WeatherReading:
    """Normalize an OpenWeather `data/2.5/weather` response."""
    main = payload.get("main") or {}
    weather = payload.get("weather") or []
    first = weather[0] if isinstance(weather, list) and weather and isinstance(weather[0], dict) else {}

    temp = main.get("temp")
    if temp is None:
        raise ValueError("weather response has no main.temp")

    humidity = main.get("humidity")
    return WeatherReading(
        temp_c=float(temp),
        condition=str(first.get("main") or ""),
        description=first.get("description"),
        humidity=float(humidity) if humidity is not None else None,
        location_name=payload.get("name"),
    )


class WeatherClient:
    """Fetches and caches OpenWeather data, then normalizes into `WeatherReading`."""

    def __init__(self, settings: Settings, cache: FileCache):
        self._settings = settings
        self._cache = cache

    def _location_params(self, city: str | None, lat: float | None, lon: float | None) -> tuple[dict[str, Any], str]:
        if city and city.strip():
            return {"q": city.strip()}, f"city:{city.strip().lower()}"
        if lat is not None and lon is not None:
            return {"lat": lat, "lon": lon}, f"coord:{lat:.3f}:{lon:.3f}"
        raise ValueError("Either city or coordinates (lat, lon) must be provided")

    def _fetch_openweather(self, params: dict[str, Any]) -> dict[str, Any]:
        """Call OpenWeather and return the raw JSON response as a dict."""
        cfg = self._settings.ingestion.weather
        query = {**params, "appid": cfg.api_key, "units": cfg.units}
        return get_json_object(
            cfg.base_url,
            params=query,
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )

    def get_current(self, *, city: str | None = None, lat: float | None = None, lon: float | None = None) -> WeatherReading:
        """Return a cached current-weather reading for a city or coordinate.

        Raises:
            WeatherUnavailableError: No API key is configured.
            ValueError: No location was given, or the response is unusable.
            httpx.HTTPError: Upstream failure with no cached value to fall back to.
        """
        cfg = self._settings.ingestion.weather
        if not cfg.api_key:
            raise WeatherUnavailableError("Weather API key is not configured")

        params, cache_key = self._location_params(city, lat, lon)
        cache_key = f"openweather:{cfg.units}:{cache_key}"

        def builder() -> dict[str, Any]:
            logger.info("Fetching weather for %s", cache_key)
            return self._fetch_openweather(params)

        payload = self._cache.get_or_set(
            "weather",
            cache_key,
            builder,
            ttl_seconds=int(cfg.cache_ttl_seconds),
            stale_if_error=True,
            max_stale_seconds=int(cfg.max_stale_seconds),
        )
        if not isinstance(payload, dict):
            raise ValueError("weather response is not a JSON object")
        return parse_current_weather(payload)
