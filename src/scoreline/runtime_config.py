"""Runtime configuration loader (config-first, flag-overrides)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scoreline.leagues import DEFAULT_LEAGUE, DEFAULT_SEASON

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.toml"
DEFAULT_LOCAL_OVERRIDE_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.local.toml"

TRANSPORTS = ("direct", "functions")


@dataclass(frozen=True)
class RuntimeConfig:
    """Materialized runtime configuration."""

    config_path: Path
    transport: str
    api_base_url: str
    api_host: str
    api_timeout_s: float
    api_max_attempts: int
    api_key_files: tuple[str, ...]
    functions_url: str
    default_league: str
    default_season: str
    live_ttl_s: float
    default_ttl_s: float
    cleanup_interval_s: float
    live_poll_interval_s: float


_CURRENT_RUNTIME_CONFIG: RuntimeConfig | None = None


def set_current_runtime_config(config: RuntimeConfig | None) -> None:
    global _CURRENT_RUNTIME_CONFIG
    _CURRENT_RUNTIME_CONFIG = config


def current_runtime_config() -> RuntimeConfig:
    config = _CURRENT_RUNTIME_CONFIG
    if config is not None:
        return config
    loaded = load_runtime_config()
    set_current_runtime_config(loaded)
    return loaded


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in overlay.items():
        existing = out.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            out[key] = _deep_merge(existing, value)
        else:
            out[key] = value
    return out


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuntimeError(f"failed reading runtime config: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise RuntimeError(f"invalid runtime config TOML: {path}") from exc
    return payload


def _as_table(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RuntimeError(f"runtime config section [{key}] must be a table")
    return value


def _as_str(value: Any, *, default: str) -> str:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped:
            return stripped
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return default


def _as_int(value: Any, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_positive_float(value: Any, *, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else default
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        return parsed if parsed > 0 else default
    return default


def _as_csv_list(values: Any, *, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(values, list):
        cleaned = [str(value).strip() for value in values if str(value).strip()]
        return tuple(cleaned) if cleaned else default
    if isinstance(values, str):
        cleaned = [part.strip() for part in values.split(",") if part.strip()]
        return tuple(cleaned) if cleaned else default
    return default


def load_runtime_config(config_path: Path | None = None) -> RuntimeConfig:
    """Load runtime config from `config/runtime.toml` plus optional local override."""
    source = (config_path or DEFAULT_CONFIG_PATH).expanduser().resolve()
    if not source.exists():
        raise RuntimeError(f"runtime config file not found: {source}")

    payload = _read_toml(source)
    if source == DEFAULT_CONFIG_PATH and DEFAULT_LOCAL_OVERRIDE_PATH.exists():
        payload = _deep_merge(payload, _read_toml(DEFAULT_LOCAL_OVERRIDE_PATH))

    api = _as_table(payload, "api_football")
    functions = _as_table(payload, "functions")
    queries = _as_table(payload, "queries")
    cache = _as_table(payload, "cache")

    transport = _as_str(payload.get("transport"), default="direct").lower()
    if transport not in TRANSPORTS:
        raise RuntimeError(
            f"runtime config transport must be one of {', '.join(TRANSPORTS)}: {transport}"
        )

    return RuntimeConfig(
        config_path=source,
        transport=transport,
        api_base_url=_as_str(api.get("base_url"), default="https://v3.football.api-sports.io"),
        api_host=_as_str(api.get("host"), default="v3.football.api-sports.io"),
        api_timeout_s=_as_positive_float(api.get("timeout_s"), default=10.0),
        api_max_attempts=max(1, _as_int(api.get("max_attempts"), default=3)),
        api_key_files=_as_csv_list(
            api.get("key_files"),
            default=("FOOTBALL_API_KEY.ignore", "FOOTBALL_API_KEY"),
        ),
        functions_url=_as_str(functions.get("url"), default=""),
        default_league=_as_str(queries.get("default_league"), default=DEFAULT_LEAGUE),
        default_season=_as_str(queries.get("default_season"), default=DEFAULT_SEASON),
        live_ttl_s=_as_positive_float(cache.get("live_ttl_s"), default=30.0),
        default_ttl_s=_as_positive_float(cache.get("default_ttl_s"), default=300.0),
        cleanup_interval_s=_as_positive_float(cache.get("cleanup_interval_s"), default=600.0),
        live_poll_interval_s=_as_positive_float(queries.get("live_poll_interval_s"), default=30.0),
    )
