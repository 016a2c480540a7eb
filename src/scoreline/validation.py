"""Boundary decoding of untrusted payloads and caller inputs."""

from __future__ import annotations

import base64
import html
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Generic, TypeVar
from urllib.parse import urlsplit

from pydantic import BaseModel, ValidationError

from scoreline.models import Fixture, League, Standing
from scoreline.time_utils import current_year

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

MIN_SEASON = 2000
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "svg", "webp")

_DIGITS_RE = re.compile(r"[0-9]+")
_SEASON_RE = re.compile(r"[0-9]{4}")
_IMAGE_PATH_RE = re.compile(r"\.(?:" + "|".join(IMAGE_EXTENSIONS) + r")$", re.IGNORECASE)


@dataclass(frozen=True)
class Valid(Generic[T]):
    """A payload entry that decoded into a typed record."""

    record: T


@dataclass(frozen=True)
class Invalid:
    """A payload entry that was rejected, with the first reason found."""

    reason: str


Decoder = Callable[[Any], "Valid[Any] | Invalid"]


@dataclass(frozen=True)
class ValidationReport(Generic[T]):
    """Outcome of decoding one batch."""

    records: list[T] = field(default_factory=list)
    received: int = 0
    dropped: int = 0

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def all_invalid(self) -> bool:
        return self.received > 0 and not self.records


def _describe(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid record"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location or 'record'}: {first.get('msg', 'invalid')}"


def _decode(model: type[M], raw: Any) -> Valid[M] | Invalid:
    if not isinstance(raw, dict):
        return Invalid(reason=f"expected object, got {type(raw).__name__}")
    try:
        return Valid(record=model.model_validate(raw))
    except ValidationError as exc:
        return Invalid(reason=_describe(exc))


def decode_fixture(raw: Any) -> Valid[Fixture] | Invalid:
    return _decode(Fixture, raw)


def decode_league(raw: Any) -> Valid[League] | Invalid:
    return _decode(League, raw)


def decode_standing(raw: Any) -> Valid[Standing] | Invalid:
    return _decode(Standing, raw)


def validate_batch(raw: Any, decoder: Decoder, *, kind: str = "record") -> ValidationReport[Any]:
    """Decode a list payload, keeping valid entries in their original order.

    Non-list input is treated as an empty batch: providers sometimes send an
    error object where a list was expected.
    """
    if not isinstance(raw, list):
        logger.warning("%s payload is not a list (%s); treating as empty", kind, type(raw).__name__)
        return ValidationReport()

    records: list[Any] = []
    dropped = 0
    for index, item in enumerate(raw):
        decoded = decoder(item)
        if isinstance(decoded, Valid):
            records.append(decoded.record)
            continue
        dropped += 1
        logger.debug("dropping %s #%d: %s", kind, index, decoded.reason)
    if dropped:
        logger.warning("dropped %d of %d %s records that failed validation", dropped, len(raw), kind)
    return ValidationReport(records=records, received=len(raw), dropped=dropped)


def validate_list(raw: Any, decoder: Decoder, *, kind: str = "record") -> list[Any]:
    return validate_batch(raw, decoder, kind=kind).records


def validate_fixtures(raw: Any) -> list[Fixture]:
    return validate_list(raw, decode_fixture, kind="fixture")


def validate_leagues(raw: Any) -> list[League]:
    return validate_list(raw, decode_league, kind="league")


def validate_standings(raw: Any) -> list[Standing]:
    return validate_list(raw, decode_standing, kind="standing")


def validate_league_id(value: str) -> bool:
    """League ids are ASCII digits only and strictly positive."""
    return bool(_DIGITS_RE.fullmatch(value)) and int(value) > 0


def validate_season(value: str, *, today: date | None = None) -> bool:
    """Seasons are four-digit years from 2000 up to next year."""
    if not _SEASON_RE.fullmatch(value):
        return False
    return MIN_SEASON <= int(value) <= current_year(today) + 1


def is_valid_image_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme.lower() not in {"http", "https"} or not parts.netloc:
        return False
    return bool(_IMAGE_PATH_RE.search(parts.path))


def fallback_team_logo(team_name: str | None = None) -> str:
    """Render the team's initial into a small SVG data URL."""
    stripped = (team_name or "").strip()
    letter = stripped[0].upper() if stripped else "T"
    svg = (
        '<svg width="32" height="32" viewBox="0 0 32 32" xmlns="http://www.w3.org/2000/svg">'
        '<circle cx="16" cy="16" r="16" fill="#f3f4f6"/>'
        '<text x="16" y="20" text-anchor="middle" font-family="Arial, sans-serif" '
        'font-size="14" font-weight="bold" fill="#6b7280">'
        f"{html.escape(letter)}"
        "</text></svg>"
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def resolve_team_logo(url: str | None, team_name: str | None = None) -> str:
    """Trust ``url`` only when it looks like an http(s) image, else use the fallback."""
    if url and is_valid_image_url(url):
        return url
    return fallback_team_logo(team_name)
