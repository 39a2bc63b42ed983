from __future__ import annotations

# This module is the "orchestrator" for the recommendation pipeline.
# It wires together:
# - domain input (MatchRequest)
# - catalog + popularity loaders
# - ingestion (weather client)
# - the composer / supplementary generator (scoring + ranking)
#
# Design goal:
# - Keep each layer focused (ingestion fetches; features and scoring do the matching; this file orchestrates).
# - Fail open when external data is missing (weather/popularity only add bonuses).

import logging
import time
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from drinkjoy.catalog.loader import load_drinks, load_popularity
from drinkjoy.config.overrides import apply_settings_overrides
from drinkjoy.config.settings import Settings, get_settings
from drinkjoy.core.cache import FileCache
from drinkjoy.core.env import resolve_project_path
from drinkjoy.core.rng import RandomSource, default_source
from drinkjoy.core.time import local_now
from drinkjoy.domain.models import Drink, MatchRequest, RecommendationResult, ScoredCandidate, WeatherReading
from drinkjoy.features.happy_hour import happy_hour_time_range, is_happy_hour
from drinkjoy.ingestion.weather_client import WeatherClient, WeatherUnavailableError
from drinkjoy.recommender.compose import compose_recommendations
from drinkjoy.recommender.supplementary import get_additional_drinks, get_additional_drinks_from_all_categories

logger = logging.getLogger(__name__)


def build_cache(settings: Settings) -> FileCache:
    cache_dir = resolve_project_path(settings.cache.dir)
    return FileCache(
        cache_dir,
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )


class _RunContext:
    """Resolved inputs shared by `recommend` and `recommend_more`."""

    def __init__(self) -> None:
        self.warnings: list[dict[str, Any]] = []
        self.timings_ms: dict[str, int] = {}
        self.weather: WeatherReading | None = None
        self.weather_source = "disabled"
        self.popularity: dict[str, int] = {}
        self.catalog: list[Drink] = []


def _load_popularity_fail_open(settings: Settings, ctx: _RunContext) -> dict[str, int]:
    path = settings.catalog.popularity_path
    if not path:
        return {}
    try:
        return load_popularity(path)
    except (OSError, ValueError) as exc:
        logger.warning("Popularity data unavailable (%s); continuing without it", exc)
        ctx.warnings.append(
            {
                "code": "POPULARITY_UNAVAILABLE",
                "message": "Like counts could not be loaded; popularity bonuses were skipped.",
                "detail": {"error": str(exc)},
            }
        )
        return {}


def _fetch_weather_fail_open(request: MatchRequest, client: WeatherClient, ctx: _RunContext) -> WeatherReading | None:
    if not request.preferences.use_weather:
        ctx.weather_source = "disabled"
        return None
    if not request.has_location():
        ctx.weather_source = "no_location"
        ctx.warnings.append(
            {
                "code": "WEATHER_NO_LOCATION",
                "message": "Weather matching was requested but no city or coordinates were given.",
                "detail": {},
            }
        )
        return None
    try:
        reading = client.get_current(city=request.city, lat=request.lat, lon=request.lon)
    except (WeatherUnavailableError, ValueError, httpx.HTTPError) as exc:
        logger.warning("Weather unavailable (%s); scoring without weather", exc)
        ctx.weather_source = "unavailable"
        ctx.warnings.append(
            {
                "code": "WEATHER_UNAVAILABLE",
                "message": "Weather could not be fetched; weather bonuses were skipped.",
                "detail": {"error": str(exc)},
            }
        )
        return None
    ctx.weather_source = "openweather"
    return reading


def _prepare(
    request: MatchRequest,
    *,
    settings: Settings,
    catalog: list[Drink] | None,
    popularity: dict[str, int] | None,
    weather_client: WeatherClient | None,
    fetch_weather: bool = True,
) -> _RunContext:
    ctx = _RunContext()
    t0 = time.monotonic()

    # ---- Load catalog (unless tests inject a small in-memory list) ----
    ctx.catalog = catalog if catalog is not None else load_drinks(settings.catalog.path)
    ctx.timings_ms["load_catalog"] = int((time.monotonic() - t0) * 1000)

    # ---- Popularity is optional: a missing/broken file only drops the bonus ----
    ctx.popularity = popularity if popularity is not None else _load_popularity_fail_open(settings, ctx)

    # ---- Weather: fetched once per request, and only when the guest asked for it ----
    t_weather = time.monotonic()
    if fetch_weather and weather_client is None and request.preferences.use_weather:
        weather_client = WeatherClient(settings, build_cache(settings))
    if fetch_weather and weather_client is not None:
        ctx.weather = _fetch_weather_fail_open(request, weather_client, ctx)
    ctx.timings_ms["weather"] = int((time.monotonic() - t_weather) * 1000)
    return ctx


def _result(
    request: MatchRequest,
    results: list[ScoredCandidate],
    ctx: _RunContext,
    *,
    settings: Settings,
    now: datetime,
    mode: str,
) -> RecommendationResult:
    meta = {
        "mode": mode,
        "data_sources": {
            "catalog": {"drinks": len(ctx.catalog)},
            "popularity": {"entries": len(ctx.popularity)},
            "weather": {
                "source": ctx.weather_source,
                "reading": ctx.weather.model_dump() if ctx.weather else None,
            },
        },
        "happy_hour": {
            "active": is_happy_hour(now, settings),
            "window": happy_hour_time_range(settings.happy_hour),
        },
        "settings_snapshot": {
            "timezone": str(settings.app.timezone),
            "overrides_enabled": bool(request.settings_overrides),
            "settings_overrides": request.settings_overrides or None,
            "allergy_unknown_policy": settings.allergies.unknown_policy,
        },
        "warnings": ctx.warnings,
        "timings_ms": ctx.timings_ms,
    }
    return RecommendationResult(
        generated_at=datetime.now(ZoneInfo(settings.app.timezone)),
        query=request,
        results=results,
        meta=meta,
    )


def recommend(
    request: MatchRequest,
    *,
    settings: Settings | None = None,
    catalog: list[Drink] | None = None,
    popularity: dict[str, int] | None = None,
    weather_client: WeatherClient | None = None,
    now: datetime | None = None,
    rng: RandomSource | None = None,
) -> RecommendationResult:
    """Primary wizard recommendations for one request."""
    # Resolve settings for THIS run; per-request overrides never leak into the cached defaults.
    settings = apply_settings_overrides(settings or get_settings(), request.settings_overrides)
    now = local_now(settings.app.timezone, now)
    rng = default_source(rng)

    ctx = _prepare(request, settings=settings, catalog=catalog, popularity=popularity, weather_client=weather_client)

    t_score = time.monotonic()
    excluded = set(request.exclude_ids)
    drinks = [d for d in ctx.catalog if d.id not in excluded]
    results = compose_recommendations(
        drinks,
        request.preferences,
        ctx.weather,
        request.max_results or settings.matching.default_limit,
        popularity=ctx.popularity,
        now=now,
        rng=rng,
        settings=settings,
    )
    ctx.timings_ms["score_and_rank"] = int((time.monotonic() - t_score) * 1000)
    logger.info("Recommended %s drinks (catalog=%s)", len(results), len(ctx.catalog))
    return _result(request, results, ctx, settings=settings, now=now, mode="primary")


def recommend_more(
    request: MatchRequest,
    *,
    all_categories: bool = False,
    settings: Settings | None = None,
    catalog: list[Drink] | None = None,
    popularity: dict[str, int] | None = None,
    now: datetime | None = None,
    rng: RandomSource | None = None,
) -> RecommendationResult:
    """Supplementary "more options" for drinks not yet shown (`request.exclude_ids`)."""
    settings = apply_settings_overrides(settings or get_settings(), request.settings_overrides)
    now = local_now(settings.app.timezone, now)
    rng = default_source(rng)

    # The supplementary scorer has no weather dimension, so no weather client is needed.
    ctx = _prepare(
        request,
        settings=settings,
        catalog=catalog,
        popularity=popularity,
        weather_client=None,
        fetch_weather=False,
    )
    if request.preferences.use_weather:
        ctx.weather_source = "not_used"

    t_score = time.monotonic()
    generate = get_additional_drinks_from_all_categories if all_categories else get_additional_drinks
    results = generate(
        ctx.catalog,
        request.preferences,
        request.exclude_ids,
        request.max_results or settings.supplementary.default_limit,
        popularity=ctx.popularity,
        now=now,
        rng=rng,
        settings=settings,
    )
    ctx.timings_ms["score_and_rank"] = int((time.monotonic() - t_score) * 1000)
    return _result(
        request,
        results,
        ctx,
        settings=settings,
        now=now,
        mode="more_all_categories" if all_categories else "more",
    )
