"""
Venue-local time.

Happy hour is a wall-clock rule ("3 PM - 6 PM at the bar"), so every "now" the
matcher sees is an aware datetime in the venue timezone. Naive datetimes are
read as venue-local, never as UTC or the host's local time.
"""

from __future__ import annotations

import re
from datetime import datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

_CLOCK = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")


@lru_cache(maxsize=16)
def venue_zone(timezone: str) -> ZoneInfo:
    return ZoneInfo(timezone)


def local_now(timezone: str, now: datetime | None = None) -> datetime:
    """`now` (default: the current instant) expressed in the venue timezone."""
    zone = venue_zone(timezone)
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        return now.replace(tzinfo=zone)
    return now.astimezone(zone)


def parse_at(value: str, timezone: str, *, today: datetime | None = None) -> datetime:
    """Parse a CLI `--at` value into venue-local time.

    Accepts an ISO-8601 datetime (a trailing `Z` means UTC) or a bare `HH:MM`
    clock time, which is taken as that time today at the venue.
    """
    text = value.strip()
    clock = _CLOCK.match(text)
    if clock:
        base = local_now(timezone, today)
        return base.replace(hour=int(clock["hour"]), minute=int(clock["minute"]), second=0, microsecond=0)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return local_now(timezone, datetime.fromisoformat(text))
