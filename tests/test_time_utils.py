from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

from scoreline.time_utils import current_year, iso_z, parse_iso_z, utc_now


def test_utc_now_is_utc_without_microseconds() -> None:
    now = utc_now()

    assert now.tzinfo == UTC
    assert now.microsecond == 0


def test_iso_z_normalizes_naive_datetime() -> None:
    value = datetime(2024, 3, 2, 15, 0, 0)

    assert iso_z(value) == "2024-03-02T15:00:00Z"


def test_iso_z_normalizes_non_utc_datetime() -> None:
    madrid = datetime(2024, 3, 2, 21, 0, 0, tzinfo=timezone(timedelta(hours=1)))

    assert iso_z(madrid) == "2024-03-02T20:00:00Z"


def test_parse_iso_z_handles_provider_offsets() -> None:
    parsed_offset = parse_iso_z("2024-03-02T15:00:00+00:00")
    parsed_z = parse_iso_z("2024-03-02T15:00:00Z")
    parsed_naive = parse_iso_z("2024-03-02T15:00:00")

    expected = datetime(2024, 3, 2, 15, 0, 0, tzinfo=UTC)
    assert parsed_offset == expected
    assert parsed_z == expected
    assert parsed_naive == expected


def test_parse_iso_z_invalid_returns_none() -> None:
    assert parse_iso_z("not-a-date") is None
    assert parse_iso_z("   ") is None


def test_current_year_uses_given_day() -> None:
    assert current_year(date(2025, 12, 31)) == 2025
