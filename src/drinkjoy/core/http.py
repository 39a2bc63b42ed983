"""
Outbound HTTP.

A single JSON-object GET used by the weather client. Non-2xx responses raise
`httpx.HTTPStatusError`; what to do about it (fail open, serve a stale reading)
is the caller's decision. Query parameters that carry credentials are masked
before anything is logged.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "drinkjoy/0.1.0"
SECRET_PARAMS = frozenset({"appid", "api_key", "apikey", "key", "token"})


def redact_params(params: dict[str, Any] | None) -> dict[str, Any]:
    return {k: ("***" if k.lower() in SECRET_PARAMS else v) for k, v in (params or {}).items()}


def get_json_object(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    timeout_seconds: float = 10,
    client: httpx.Client | None = None,
) -> dict[str, Any]:
    """GET `url` and return the decoded JSON body, which must be an object.

    Raises:
        httpx.HTTPError: transport failure or non-2xx status.
        ValueError: the body is not JSON, or not a JSON object.
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    logger.debug("GET %s params=%s", url, redact_params(params))

    if client is None:
        with httpx.Client(timeout=timeout_seconds) as owned:
            resp = owned.get(url, params=params, headers=headers)
    else:
        resp = client.get(url, params=params, headers=headers, timeout=timeout_seconds)
    resp.raise_for_status()

    body = resp.json()
    if not isinstance(body, dict):
        raise ValueError(f"expected a JSON object from {url}, got {type(body).__name__}")
    return body
