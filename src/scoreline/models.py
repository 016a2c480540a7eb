"""Typed records decoded from API-Football payloads.

Only the fields views cannot render without are required; everything else is
optional so that partial provider payloads still decode.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from scoreline.time_utils import parse_iso_z

Name = Annotated[StrictStr, Field(min_length=1)]


class Record(BaseModel):
    """Base for provider records: immutable, unknown keys ignored.

    An optional field that fails to decode falls back to its default, so only
    required fields can reject a record.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_unusable_optional(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            if field.is_required():
                raise
            return field.get_default(call_default_factory=True)


class FixtureStatus(Record):
    short: str | None = None
    long: str | None = None
    elapsed: int | None = None


class Venue(Record):
    name: str | None = None
    city: str | None = None


class FixtureInfo(Record):
    id: StrictInt
    date: StrictStr
    status: FixtureStatus = FixtureStatus()
    venue: Venue = Venue()


class TeamRef(Record):
    id: int | None = None
    name: Name
    logo: str | None = None


class FixtureTeams(Record):
    home: TeamRef
    away: TeamRef


class Goals(Record):
    home: int | None = None
    away: int | None = None


class Score(Record):
    halftime: Goals = Goals()
    fulltime: Goals = Goals()
    extratime: Goals = Goals()
    penalty: Goals = Goals()


class FixtureLeague(Record):
    id: int | None = None
    name: Name
    country: str | None = None
    logo: str | None = None
    season: int | None = None


class Fixture(Record):
    fixture: FixtureInfo
    teams: FixtureTeams
    league: FixtureLeague
    goals: Goals = Goals()
    score: Score = Score()

    @property
    def status_code(self) -> str:
        return self.fixture.status.short or ""

    @property
    def kickoff(self) -> datetime | None:
        return parse_iso_z(self.fixture.date)


class LeagueInfo(Record):
    id: StrictInt
    name: Name
    type: str | None = None
    logo: str | None = None


class Country(Record):
    name: Name
    code: str | None = None
    flag: str | None = None


class Season(Record):
    year: int | None = None
    start: str | None = None
    end: str | None = None
    current: bool | None = None


class League(Record):
    league: LeagueInfo
    country: Country
    seasons: list[Season] = []


class GoalTally(Record):
    scored: int | None = Field(default=None, alias="for")
    against: int | None = None


class RecordSplit(Record):
    """Win/draw/loss split for one context (all, home or away)."""

    played: int | None = None
    win: int | None = None
    draw: int | None = None
    lose: int | None = None
    goals: GoalTally = GoalTally()


class OverallSplit(RecordSplit):
    played: StrictInt


class StandingTeam(Record):
    id: int | None = None
    name: Name
    logo: str | None = None


class Standing(Record):
    rank: StrictInt
    team: StandingTeam
    points: StrictInt
    all: OverallSplit
    home: RecordSplit = RecordSplit()
    away: RecordSplit = RecordSplit()
    goals_diff: int | None = Field(default=None, alias="goalsDiff")
    group: str | None = None
    form: str | None = None
    status: str | None = None
    description: str | None = None
