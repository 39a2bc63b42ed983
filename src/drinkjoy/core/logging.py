"""
Logging configuration.

We use a YAML logging config (`src/drinkjoy/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `DRINKJOY_LOG_LEVEL`).
"""

from __future__ import annotations

import logging.config

from drinkjoy.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure the Python logging system from packaged YAML config + settings.

    `level` (e.g. from the `--log-level` CLI flag) wins over the configured level.
    """
    settings = get_settings()
    # Copy: `get_logging_config` is cached and dictConfig must not see our edits twice.
    config = dict(get_logging_config())
    config["handlers"] = {k: dict(v) for k, v in (config.get("handlers") or {}).items()}
    config["root"] = dict(config.get("root") or {})

    effective = (level or settings.app.log_level).upper()
    config["root"]["level"] = effective
    for handler in config["handlers"].values():
        if "level" in handler:
            handler["level"] = effective

    logging.config.dictConfig(config)
