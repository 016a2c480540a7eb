"""Deterministic cache and request keys."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

DEFAULT_STATUS = "all"


def sanitize_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop secrets and unset values so equal queries serialize equally."""
    clean: dict[str, Any] = {}
    for key, value in params.items():
        if key.lower() in {"apikey", "api_key"}:
            continue
        if value is None:
            continue
        clean[key] = value
    return clean


def request_key(function_name: str, params: dict[str, Any]) -> str:
    """Identity of one outbound call: function name plus sorted params."""
    serialized = json.dumps(sanitize_params(params), sort_keys=True, separators=(",", ":"))
    return f"{function_name}:{serialized}"


def _part(value: str) -> str:
    return quote(str(value), safe="")


def cache_key(kind: str, league: str, season: str, status: str | None = None) -> str:
    """Build ``<kind>:<league>:<season>:<status>`` with each part escaped."""
    return ":".join(
        [kind, _part(league), _part(season), _part(status or DEFAULT_STATUS)]
    )


def fixtures_key(league: str, season: str, status: str | None = None) -> str:
    return cache_key("fixtures", league, season, status)


def leagues_key(country: str | None = None, season: str | None = None) -> str:
    return cache_key("leagues", country or "all", season or "current")


def standings_key(league: str, season: str) -> str:
    return cache_key("standings", league, season)
