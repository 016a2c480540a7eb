"""Status filters applied to validated fixtures."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from scoreline.models import Fixture

LIVE_STATUSES = frozenset({"LIVE", "1H", "2H", "HT"})
FINISHED_STATUSES = frozenset({"FT", "AET", "PEN"})
NOT_STARTED_STATUS = "NS"

FIXTURE_STATUSES = ("live", "upcoming", "finished")
UPCOMING_LIMIT = 10
FINISHED_LIMIT = 10

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _chronological(fixtures: Iterable[Fixture]) -> list[Fixture]:
    return sorted(fixtures, key=lambda item: item.kickoff or _EPOCH)


def filter_live(fixtures: Iterable[Fixture]) -> list[Fixture]:
    return [item for item in fixtures if item.status_code in LIVE_STATUSES]


def filter_upcoming(
    fixtures: Iterable[Fixture],
    *,
    now: datetime,
    limit: int = UPCOMING_LIMIT,
) -> list[Fixture]:
    """Not-started fixtures kicking off after ``now``, soonest first."""
    future = [
        item
        for item in fixtures
        if item.status_code == NOT_STARTED_STATUS
        and item.kickoff is not None
        and item.kickoff > now
    ]
    return _chronological(future)[:limit]


def filter_finished(fixtures: Iterable[Fixture], *, limit: int = FINISHED_LIMIT) -> list[Fixture]:
    """The most recent completed fixtures, in chronological order."""
    finished = [item for item in fixtures if item.status_code in FINISHED_STATUSES]
    if limit <= 0:
        return []
    return _chronological(finished)[-limit:]


def apply_status_filter(
    fixtures: list[Fixture],
    status: str | None,
    *,
    now: datetime,
) -> list[Fixture]:
    if status is None:
        return fixtures
    if status == "live":
        return filter_live(fixtures)
    if status == "upcoming":
        return filter_upcoming(fixtures, now=now)
    if status == "finished":
        return filter_finished(fixtures)
    raise ValueError(f"unknown fixture status filter: {status}")
