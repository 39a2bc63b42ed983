# src/drinkjoy/features/happy_hour.py
"""
Happy-hour window and bonus.

The venue runs one happy-hour window (default 15:00-18:00 local time). A drink
flagged `happy_hour` earns a fixed bonus while the window is active, and the
composer also uses the same predicate to float those drinks to the front of
their score bucket.
"""

from __future__ import annotations

from datetime import datetime

from drinkjoy.config.settings import HappyHourSettings, Settings
from drinkjoy.core.time import local_now
from drinkjoy.domain.models import Drink


def _in_window(hour: int, start_hour: int, end_hour: int) -> bool:
    # [start, end) in local hours; end < start means the window wraps midnight.
    if start_hour == end_hour:
        return False
    if end_hour < start_hour:
        return hour >= start_hour or hour < end_hour
    return start_hour <= hour < end_hour


def is_happy_hour(now: datetime | None, settings: Settings) -> bool:
    """True when the venue's happy-hour window is active at `now` (default: current time)."""
    cfg = settings.happy_hour
    if not cfg.enabled:
        return False
    local = local_now(settings.app.timezone, now)
    return _in_window(local.hour, cfg.start_hour, cfg.end_hour)


def is_happy_hour_active(drink: Drink, now: datetime | None, settings: Settings) -> bool:
    """True when `drink` is a happy-hour special and the window is active."""
    return bool(drink.happy_hour) and is_happy_hour(now, settings)


def happy_hour_bonus(drink: Drink, now: datetime | None, settings: Settings) -> int:
    """Score bonus for an active happy-hour drink, else 0."""
    if not is_happy_hour_active(drink, now, settings):
        return 0
    return int(settings.happy_hour.bonus)


def _format_hour(hour: int) -> str:
    hour = hour % 24
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def happy_hour_time_range(cfg: HappyHourSettings) -> str:
    """Render the configured window, e.g. "3 PM - 6 PM"."""
    if not cfg.enabled:
        return ""
    return f"{_format_hour(cfg.start_hour)} - {_format_hour(cfg.end_hour)}"


def happy_hour_status(drink: Drink, now: datetime | None, settings: Settings) -> str:
    """Badge text for a drink card; empty for drinks that are not happy-hour specials."""
    if not drink.happy_hour:
        return ""
    time_range = drink.happy_hour_times or happy_hour_time_range(settings.happy_hour)
    if is_happy_hour(now, settings):
        return f"Happy Hour Active • {time_range}"
    return f"Happy Hour • {time_range}"
