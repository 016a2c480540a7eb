"""Caller-owned repeating tasks.

The query service never starts timers. Callers that want live refresh or a
periodic cache sweep own a ``PeriodicTask`` and stop it when they are done.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from scoreline.models import Fixture
from scoreline.query_service import FootballQueryService, QueryResult

logger = logging.getLogger(__name__)

LIVE_POLL_INTERVAL_S = 30.0
CLEANUP_INTERVAL_S = 10 * 60.0

Sleep = Callable[[float], Awaitable[Any]]


class PeriodicTask:
    """Run an async callback every ``interval_s`` seconds until stopped.

    A failing run is logged and the schedule continues.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[Any]],
        interval_s: float,
        *,
        name: str = "periodic",
        run_immediately: bool = True,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.name = name
        self.interval_s = interval_s
        self.runs = 0
        self._callback = callback
        self._run_immediately = run_immediately
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def __aenter__(self) -> PeriodicTask:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def _loop(self) -> None:
        if not self._run_immediately:
            await self._sleep(self.interval_s)
        while True:
            try:
                await self._callback()
            except Exception:  # noqa: BLE001
                logger.exception("periodic task %s failed", self.name)
            self.runs += 1
            await self._sleep(self.interval_s)


ResultHandler = Callable[[QueryResult[list[Fixture]]], Any]


def live_score_poller(
    service: FootballQueryService,
    on_result: ResultHandler,
    *,
    league: str | int | None = None,
    season: str | int | None = None,
    interval_s: float = LIVE_POLL_INTERVAL_S,
    sleep: Sleep = asyncio.sleep,
) -> PeriodicTask:
    """Re-run the live-score query on a fixed period and hand each result over."""

    async def refresh() -> None:
        result = await service.get_live_scores(league=league, season=season)
        handled = on_result(result)
        if inspect.isawaitable(handled):
            await handled

    return PeriodicTask(refresh, interval_s, name="live-scores", sleep=sleep)


def cache_janitor(
    service: FootballQueryService,
    *,
    interval_s: float = CLEANUP_INTERVAL_S,
    sleep: Sleep = asyncio.sleep,
) -> PeriodicTask:
    """Sweep expired cache entries so memory stays bounded."""

    async def sweep() -> None:
        service.cleanup()

    return PeriodicTask(
        sweep,
        interval_s,
        name="cache-cleanup",
        run_immediately=False,
        sleep=sleep,
    )
