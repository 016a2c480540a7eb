import asyncio
import logging
from typing import Any

import pytest

from scoreline.cache_store import TTLCache
from scoreline.polling import PeriodicTask, cache_janitor, live_score_poller
from scoreline.query_service import FootballQueryService, QueryResult
from scoreline.remote import RemoteEnvelope
from scoreline.settings import Settings


class FakeSleep:
    def __init__(self, events: list[str] | None = None) -> None:
        self.delays: list[float] = []
        self.events = events if events is not None else []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.events.append("sleep")
        await asyncio.sleep(0)


class LiveCaller:
    def __init__(self) -> None:
        self.calls = 0

    async def call(self, function_name: str, params: dict[str, Any]) -> RemoteEnvelope:
        self.calls += 1
        row = {
            "fixture": {"id": self.calls, "date": "2024-01-01T12:00:00+00:00", "status": {"short": "1H"}},
            "teams": {"home": {"id": 1, "name": "Lazio"}, "away": {"id": 2, "name": "Roma"}},
            "league": {"id": 135, "name": "Serie A"},
            "goals": {"home": 0, "away": 0},
        }
        return RemoteEnvelope(data={"results": 1, "response": [row]})


async def _until(predicate) -> None:
    for _ in range(1000):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


def test_periodic_task_repeats_until_stopped() -> None:
    sleep = FakeSleep()
    calls: list[int] = []

    async def callback() -> None:
        calls.append(len(calls))

    async def scenario() -> PeriodicTask:
        task = PeriodicTask(callback, 5.0, name="tick", sleep=sleep)
        async with task:
            assert task.running
            await _until(lambda: task.runs >= 3)
        return task

    task = asyncio.run(scenario())

    assert not task.running
    assert len(calls) >= 3
    assert set(sleep.delays) == {5.0}


def test_periodic_task_keeps_running_after_a_failure(caplog: pytest.LogCaptureFixture) -> None:
    attempts = {"count": 0}

    async def flaky() -> None:
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise ValueError("first refresh failed")

    async def scenario() -> None:
        async with PeriodicTask(flaky, 1.0, name="flaky", sleep=FakeSleep()) as task:
            await _until(lambda: task.runs >= 2)

    with caplog.at_level(logging.ERROR, logger="scoreline.polling"):
        asyncio.run(scenario())

    assert attempts["count"] >= 2
    assert "periodic task flaky failed" in caplog.text


def test_periodic_task_can_wait_before_first_run() -> None:
    events: list[str] = []

    async def callback() -> None:
        events.append("run")

    async def scenario() -> None:
        task = PeriodicTask(callback, 2.0, run_immediately=False, sleep=FakeSleep(events))
        async with task:
            await _until(lambda: task.runs >= 1)

    asyncio.run(scenario())

    assert events[:2] == ["sleep", "run"]


def test_periodic_task_rejects_non_positive_interval() -> None:
    async def callback() -> None:
        return None

    with pytest.raises(ValueError):
        PeriodicTask(callback, 0)


def test_live_score_poller_hands_each_refresh_to_the_handler() -> None:
    caller = LiveCaller()
    service = FootballQueryService(caller, settings=Settings(_env_file=None))
    received: list[QueryResult[Any]] = []

    async def on_result(result: QueryResult[Any]) -> None:
        received.append(result)

    async def scenario() -> None:
        poller = live_score_poller(
            service, on_result, league="135", season="2023", interval_s=30, sleep=FakeSleep()
        )
        async with poller:
            await _until(lambda: len(received) >= 2)

    asyncio.run(scenario())

    assert caller.calls >= 2
    assert [result.data[0].fixture.id for result in received[:2]] == [1, 2]


def test_cache_janitor_sweeps_expired_entries() -> None:
    clock = {"now": 0.0}
    cache = TTLCache(clock=lambda: clock["now"])
    service = FootballQueryService(LiveCaller(), settings=Settings(_env_file=None), cache=cache)
    cache.set("fixtures:39:2023:all", (), 10)
    cache.set("standings:39:2023:all", (), 100)
    clock["now"] = 50.0
    sleep = FakeSleep()

    async def scenario() -> None:
        async with cache_janitor(service, interval_s=600, sleep=sleep) as janitor:
            await _until(lambda: janitor.runs >= 1)

    asyncio.run(scenario())

    assert sleep.delays[0] == 600
    assert len(cache) == 1
    assert cache.has("standings:39:2023:all")
