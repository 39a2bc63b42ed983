"""
On-disk JSON cache for upstream lookups.

The only upstream the matcher talks to is the weather API. Many guests at one
venue ask for recommendations within minutes of each other, so one reading per
location and TTL window is plenty; a short upstream outage is bridged with the
last reading we stored ("stale-if-error"), up to `max_stale_seconds` old.

Entries live at `<base_dir>/<namespace>/<sha256(namespace:key)>.json` as
`{"stored_at": <unix>, "expires_at": <unix>, "value": <json>}`.
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    stored_at: float
    expires_at: float
    value: Any

    def age(self, now: float) -> float:
        return max(0.0, now - self.stored_at)

    def is_fresh(self, now: float, ttl_seconds: int | None = None) -> bool:
        if ttl_seconds is not None:
            return self.age(now) <= ttl_seconds
        return now <= self.expires_at


class FileCache:
    """Filesystem cache keyed by (namespace, key); a disabled cache stores nothing."""

    def __init__(self, base_dir: Path, enabled: bool = True, default_ttl_seconds: int = 1800):
        self.base_dir = Path(base_dir)
        self.enabled = enabled
        self.default_ttl_seconds = default_ttl_seconds

    def path_for(self, namespace: str, key: str) -> Path:
        digest = sha256(f"{namespace}:{key}".encode("utf-8")).hexdigest()
        return self.base_dir / namespace / f"{digest}.json"

    def read(self, namespace: str, key: str) -> CacheEntry | None:
        """Return the stored entry regardless of age, or None (disabled, missing or corrupt)."""
        if not self.enabled:
            return None
        path = self.path_for(namespace, key)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(
                stored_at=float(raw["stored_at"]),
                expires_at=float(raw["expires_at"]),
                value=raw["value"],
            )
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError):
            logger.debug("Unreadable cache entry treated as a miss: %s", path)
            return None

    def get(self, namespace: str, key: str, ttl_seconds: int | None = None) -> Any | None:
        """Fresh value or None. `ttl_seconds` re-judges freshness against the stored time."""
        entry = self.read(namespace, key)
        if entry is None or not entry.is_fresh(time.time(), ttl_seconds):
            return None
        return entry.value

    def get_stale(self, namespace: str, key: str, max_age_seconds: int | None = None) -> Any | None:
        """Value even if expired, unless it is older than `max_age_seconds`."""
        entry = self.read(namespace, key)
        if entry is None:
            return None
        if max_age_seconds is not None and entry.age(time.time()) > max_age_seconds:
            return None
        return entry.value

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        if not self.enabled:
            return
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        now = time.time()
        path = self.path_for(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        body = json.dumps({"stored_at": now, "expires_at": now + ttl, "value": value}, ensure_ascii=False)
        # Write then rename so a concurrent reader never sees half a file; the temp
        # name is unique per writer so two writers never share one.
        tmp = path.with_name(f"{path.name}.{os.getpid()}.{uuid.uuid4().hex}.tmp")
        tmp.write_text(body, encoding="utf-8")
        tmp.replace(path)

    def get_or_set(
        self,
        namespace: str,
        key: str,
        builder: Callable[[], Any],
        ttl_seconds: int | None = None,
        *,
        stale_if_error: bool = False,
        stale_predicate: Callable[[Exception], bool] | None = None,
        max_stale_seconds: int | None = None,
    ) -> Any:
        """Cached value, or `builder()` stored under the key.

        With `stale_if_error`, a failing builder falls back to the last stored value
        (no older than `max_stale_seconds`) when `stale_predicate` accepts the error.
        Without a usable fallback the builder's exception propagates.
        """
        cached = self.get(namespace, key, ttl_seconds=ttl_seconds)
        if cached is not None:
            return cached

        try:
            value = builder()
        except Exception as exc:
            if not stale_if_error or (stale_predicate is not None and not stale_predicate(exc)):
                raise
            stale = self.get_stale(namespace, key, max_age_seconds=max_stale_seconds)
            if stale is None:
                raise
            logger.warning("Upstream failed for %s/%s (%s); serving last stored value", namespace, key, exc)
            return stale

        self.set(namespace, key, value, ttl_seconds=ttl_seconds)
        return value
