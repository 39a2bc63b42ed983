"""
Per-request settings overrides.

A venue (or an experiment) can tune scoring knobs for one run by sending
`settings_overrides`, e.g. `{"happy_hour": {"end_hour": 19}}`. Only the scoring
sections are open. Secrets, file paths and the allergy policy are not: a request
must never be able to read another catalog, swap the weather key, or relax
allergy exclusion for itself.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from drinkjoy.config.settings import Settings, deep_merge

# True opens a whole subtree; a nested dict opens only the keys it lists.
OVERRIDABLE: dict[str, Any] = {
    "matching": True,
    "supplementary": True,
    "chat": True,
    "happy_hour": True,
    "ingestion": {"weather": {"cache_ttl_seconds": True}},
}


def _violations(overrides: Mapping[str, Any], allowed: Mapping[str, Any], prefix: str = "") -> Iterator[str]:
    for key, value in overrides.items():
        dotted = f"{prefix}{key}"
        rule = allowed.get(key)
        if rule is None:
            yield f"disallowed key: '{dotted}'"
        elif rule is not True:
            if isinstance(value, Mapping):
                yield from _violations(value, rule, prefix=f"{dotted}.")
            else:
                yield f"key '{dotted}' must be a mapping"


def apply_settings_overrides(settings: Settings, overrides: Mapping[str, Any] | None) -> Settings:
    """Settings for one run with `overrides` merged in; `settings` itself is never modified.

    Raises:
        ValueError: an override touches a closed key, or the merged values fail
            validation (pydantic's `ValidationError` is a `ValueError`).
    """
    if not overrides:
        return settings
    problems = list(_violations(overrides, OVERRIDABLE))
    if problems:
        raise ValueError("settings_overrides rejected: " + "; ".join(problems))
    return Settings.model_validate(deep_merge(settings.model_dump(mode="python"), overrides))
