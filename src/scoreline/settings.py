"""Application settings for scoreline."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scoreline.leagues import DEFAULT_LEAGUE, DEFAULT_SEASON
from scoreline.runtime_config import current_runtime_config

KEY_ENV_NAMES = ("FOOTBALL_API_KEY", "SCORELINE_FOOTBALL_API_KEY")


class Settings(BaseSettings):
    """Runtime settings for the provider connection and query policy."""

    model_config = SettingsConfigDict(
        env_prefix="SCORELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    football_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(*KEY_ENV_NAMES),
    )
    transport: str = "direct"
    api_base_url: str = "https://v3.football.api-sports.io"
    api_host: str = "v3.football.api-sports.io"
    api_timeout_s: float = 10.0
    api_max_attempts: int = 3
    functions_url: str = ""
    functions_anon_key: str = ""
    default_league: str = DEFAULT_LEAGUE
    default_season: str = DEFAULT_SEASON
    live_ttl_s: float = 30.0
    default_ttl_s: float = 300.0
    cleanup_interval_s: float = 600.0
    live_poll_interval_s: float = 30.0

    @staticmethod
    def _parse_key_file(path: Path, *, allowed_names: set[str]) -> str:
        try:
            raw = path.read_text(encoding="utf-8").strip()
        except OSError:
            return ""
        if not raw:
            return ""
        first_line = raw.splitlines()[0].strip()
        if "=" in first_line:
            key_name, value = first_line.split("=", 1)
            if key_name.strip().upper() not in allowed_names:
                return ""
            return value.strip().strip('"').strip("'")
        return first_line.strip('"').strip("'")

    @classmethod
    def from_runtime(cls) -> "Settings":
        """Construct settings from runtime config + direct secret env/key-file fallback."""
        runtime = current_runtime_config()
        config_root = runtime.config_path.parent.resolve()

        resolved_key = ""
        for name in KEY_ENV_NAMES:
            resolved_key = os.environ.get(name, "").strip()
            if resolved_key:
                break
        if not resolved_key:
            for candidate in runtime.api_key_files:
                candidate_path = Path(candidate).expanduser()
                path = (
                    candidate_path
                    if candidate_path.is_absolute()
                    else (config_root / candidate_path).resolve()
                )
                if not path.is_file():
                    continue
                parsed = cls._parse_key_file(path, allowed_names=set(KEY_ENV_NAMES))
                if parsed:
                    resolved_key = parsed
                    break

        return cls(
            football_api_key=resolved_key,
            transport=runtime.transport,
            api_base_url=runtime.api_base_url,
            api_host=runtime.api_host,
            api_timeout_s=runtime.api_timeout_s,
            api_max_attempts=runtime.api_max_attempts,
            functions_url=runtime.functions_url
            or os.environ.get("SCORELINE_FUNCTIONS_URL", "").strip(),
            functions_anon_key=os.environ.get("SCORELINE_FUNCTIONS_ANON_KEY", "").strip(),
            default_league=runtime.default_league,
            default_season=runtime.default_season,
            live_ttl_s=runtime.live_ttl_s,
            default_ttl_s=runtime.default_ttl_s,
            cleanup_interval_s=runtime.cleanup_interval_s,
            live_poll_interval_s=runtime.live_poll_interval_s,
        )
