# src/drinkjoy/features/weather.py
"""
Weather feature (drink-level).

Converts a `WeatherReading` into yes/no weather pairings for a drink:
- the current temperature sits inside the drink's acceptable range,
- the current condition is one the drink lists,
- a few condition/category synergies (rainy-day spirits, sunny-day coolers,
  snow-day warmers, humid-day light drinks).

Missing data never raises: no reading or no `weather_match` is simply "no match".
"""

from __future__ import annotations

from drinkjoy.config.settings import MatchingSettings
from drinkjoy.domain.models import Drink, WeatherReading
from drinkjoy.features.preference_match import is_warming, strength_band


def _condition(weather: WeatherReading) -> str:
    return (weather.condition or "").lower()


def in_temperature_range(drink: Drink, weather: WeatherReading | None) -> bool:
    if weather is None or drink.weather_match is None:
        return False
    return drink.weather_match.accepts_temperature(float(weather.temp_c))


def matches_condition(drink: Drink, weather: WeatherReading | None) -> bool:
    if weather is None or drink.weather_match is None:
        return False
    condition = _condition(weather)
    return bool(condition) and condition in drink.weather_match.conditions


def rainy_day_spirit(drink: Drink, weather: WeatherReading | None) -> bool:
    return weather is not None and "rain" in _condition(weather) and drink.category == "spirit"


def sunny_day_cooler(drink: Drink, weather: WeatherReading | None, cfg: MatchingSettings) -> bool:
    if weather is None or drink.weather_match is None or drink.weather_match.ideal_temp is None:
        return False
    return _condition(weather) == "clear" and drink.weather_match.ideal_temp >= cfg.warm_ideal_temp_c


def cold_day_warmer(drink: Drink, weather: WeatherReading | None, cfg: MatchingSettings) -> bool:
    if weather is None:
        return False
    cold = "snow" in _condition(weather) or float(weather.temp_c) < cfg.cold_weather_c
    return cold and is_warming(drink)


def humid_day_light(drink: Drink, weather: WeatherReading | None, cfg: MatchingSettings) -> bool:
    if weather is None or not weather.description:
        return False
    if "humid" not in weather.description.lower():
        return False
    return strength_band(drink.abv, cfg.strength_bands) == "light"


def temperature_label(weather: WeatherReading) -> str:
    """Human-readable temperature for reason strings, e.g. "22°C"."""
    return f"{int(round(float(weather.temp_c)))}°C"
