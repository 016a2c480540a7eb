"""Query façade exposed to view code.

Each query goes cache -> coordinator -> validator -> filter -> cache and ends in
a ``QueryResult``. Nothing raised below this layer crosses it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Generic, TypeVar

from scoreline.cache_store import TTLCache
from scoreline.coordinator import RequestCoordinator
from scoreline.errors import DataValidationError, FootballDataError, InvalidQueryError
from scoreline.filters import FIXTURE_STATUSES, apply_status_filter
from scoreline.keys import fixtures_key, leagues_key, standings_key
from scoreline.models import Fixture, League, Standing
from scoreline.remote import RemoteCaller
from scoreline.settings import Settings
from scoreline.time_utils import utc_now
from scoreline.validation import (
    ValidationReport,
    decode_fixture,
    decode_league,
    decode_standing,
    validate_batch,
    validate_league_id,
    validate_season,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

KINDS = ("fixtures", "leagues", "standings")


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Either ``data`` or ``error`` is meaningful, never both."""

    data: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _clean(value: str | int | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_records(report: ValidationReport[Any]) -> list[Any]:
    if report.all_invalid:
        raise DataValidationError()
    return report.records


def _first_standings_group(response: Any) -> Any:
    """Unwrap ``response[0].league.standings[0]`` from the grouped table format."""
    if not isinstance(response, list) or not response:
        return []
    first = response[0]
    league = first.get("league") if isinstance(first, dict) else None
    groups = league.get("standings") if isinstance(league, dict) else None
    if not isinstance(groups, list) or not groups:
        return []
    return groups[0]


class FootballQueryService:
    """Fixtures, live scores, leagues and standings with caching and de-duplication."""

    def __init__(
        self,
        caller: RemoteCaller,
        *,
        settings: Settings | None = None,
        cache: TTLCache | None = None,
        coordinator: RequestCoordinator | None = None,
        now: Callable[[], datetime] = utc_now,
        today: Callable[[], date] | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.cache = (
            cache if cache is not None else TTLCache(default_ttl_s=self.settings.default_ttl_s)
        )
        self.coordinator = coordinator if coordinator is not None else RequestCoordinator(caller)
        self._now = now
        self._today = today or (lambda: now().date())

    def _scope(self, league: str | int | None, season: str | int | None) -> tuple[str, str]:
        league_id = _clean(league) or self.settings.default_league
        if not validate_league_id(league_id):
            raise InvalidQueryError(f"Invalid league id: {league_id}")
        league_id = str(int(league_id))
        season_value = _clean(season) or self.settings.default_season
        self._check_season(season_value)
        return league_id, season_value

    def _check_season(self, season: str) -> None:
        if not validate_season(season, today=self._today()):
            raise InvalidQueryError(f"Invalid season: {season}")

    async def _query(
        self,
        key: str,
        load: Callable[[], Awaitable[list[Any]]],
        *,
        ttl_s: float,
        use_cache: bool = True,
    ) -> QueryResult[list[Any]]:
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("cache hit for %s", key)
                return QueryResult(data=list(cached))

        try:
            records = await load()
        except FootballDataError as exc:
            logger.warning("%s failed (%s): %s", key, exc.kind, exc.user_message)
            return QueryResult(error=exc.user_message)
        except Exception as exc:  # noqa: BLE001
            logger.exception("unexpected failure while loading %s", key)
            return QueryResult(error=str(exc) or FootballDataError.default_message)

        self.cache.set(key, tuple(records), ttl_s)
        return QueryResult(data=list(records))

    async def get_fixtures(
        self,
        *,
        league: str | int | None = None,
        season: str | int | None = None,
        status: str | None = None,
    ) -> QueryResult[list[Fixture]]:
        """Fixtures for one league season, optionally narrowed to live/upcoming/finished."""
        try:
            league_id, season_value = self._scope(league, season)
            status_value = _clean(status)
            if status_value is not None:
                status_value = status_value.lower()
                if status_value not in FIXTURE_STATUSES:
                    raise InvalidQueryError(f"Invalid fixture status: {status_value}")
        except InvalidQueryError as exc:
            return QueryResult(error=exc.user_message)

        params = {"league": league_id, "season": season_value, "status": status_value}

        async def load() -> list[Fixture]:
            payload = await self.coordinator.call("get-fixtures", params)
            report = validate_batch(payload.get("response"), decode_fixture, kind="fixture")
            fixtures = _require_records(report)
            return apply_status_filter(fixtures, status_value, now=self._now())

        is_live = status_value == "live"
        return await self._query(
            fixtures_key(league_id, season_value, status_value),
            load,
            ttl_s=self.settings.live_ttl_s if is_live else self.settings.default_ttl_s,
            use_cache=not is_live,
        )

    async def get_live_scores(
        self,
        *,
        league: str | int | None = None,
        season: str | int | None = None,
    ) -> QueryResult[list[Fixture]]:
        return await self.get_fixtures(league=league, season=season, status="live")

    async def get_leagues(
        self,
        *,
        country: str | None = None,
        season: str | int | None = None,
    ) -> QueryResult[list[League]]:
        country_name = _clean(country)
        season_value = _clean(season)
        if season_value is not None:
            try:
                self._check_season(season_value)
            except InvalidQueryError as exc:
                return QueryResult(error=exc.user_message)

        params = {"country": country_name, "season": season_value}

        async def load() -> list[League]:
            payload = await self.coordinator.call("get-leagues", params)
            report = validate_batch(payload.get("response"), decode_league, kind="league")
            return _require_records(report)

        return await self._query(
            leagues_key(country_name, season_value),
            load,
            ttl_s=self.settings.default_ttl_s,
        )

    async def get_standings(
        self,
        *,
        league: str | int | None = None,
        season: str | int | None = None,
    ) -> QueryResult[list[Standing]]:
        """Rows of the first table in the league's standings."""
        try:
            league_id, season_value = self._scope(league, season)
        except InvalidQueryError as exc:
            return QueryResult(error=exc.user_message)

        params = {"league": league_id, "season": season_value}

        async def load() -> list[Standing]:
            payload = await self.coordinator.call("get-standings", params)
            rows = _first_standings_group(payload.get("response"))
            report = validate_batch(rows, decode_standing, kind="standing")
            return _require_records(report)

        return await self._query(
            standings_key(league_id, season_value),
            load,
            ttl_s=self.settings.default_ttl_s,
        )

    def invalidate(self, kind: str | None = None) -> int:
        """Drop cached results for one kind, or everything when ``kind`` is None."""
        if kind is None:
            dropped = len(self.cache)
            self.cache.clear()
            return dropped
        if kind not in KINDS:
            raise ValueError(f"unknown query kind: {kind}")
        return self.cache.delete_prefix(f"{kind}:")

    def cleanup(self) -> int:
        removed = self.cache.cleanup()
        if removed:
            logger.debug("evicted %d expired cache entries", removed)
        return removed
