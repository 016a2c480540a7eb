"""CLI entrypoint for scoreline."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from scoreline.filters import FIXTURE_STATUSES
from scoreline.leagues import POPULAR_LEAGUES, SEASONS, find_league
from scoreline.models import Fixture, League, Standing
from scoreline.polling import cache_janitor, live_score_poller
from scoreline.query_service import FootballQueryService, QueryResult
from scoreline.remote import build_remote_caller
from scoreline.runtime_config import load_runtime_config, set_current_runtime_config
from scoreline.settings import Settings
from scoreline.time_utils import iso_z, utc_now
from scoreline.validation import resolve_team_logo

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class CLIError(RuntimeError):
    """User-facing CLI error."""


def _load_settings(args: argparse.Namespace) -> Settings:
    config_path = Path(args.config) if args.config else None
    set_current_runtime_config(load_runtime_config(config_path))
    settings = Settings.from_runtime()
    if args.transport:
        settings = settings.model_copy(update={"transport": args.transport})
    return settings


def _fixture_payload(fixture: Fixture) -> dict[str, Any]:
    payload = fixture.model_dump(mode="json", by_alias=True)
    for side in ("home", "away"):
        team = getattr(fixture.teams, side)
        payload["teams"][side]["logo"] = resolve_team_logo(team.logo, team.name)
    return payload


def _standing_payload(standing: Standing) -> dict[str, Any]:
    payload = standing.model_dump(mode="json", by_alias=True)
    payload["team"]["logo"] = resolve_team_logo(standing.team.logo, standing.team.name)
    return payload


def _league_payload(league: League) -> dict[str, Any]:
    return league.model_dump(mode="json", by_alias=True)


def _score(value: int | None) -> str:
    return "-" if value is None else str(value)


def _fixture_line(fixture: Fixture) -> str:
    kickoff = fixture.kickoff
    when = iso_z(kickoff) if kickoff is not None else fixture.fixture.date
    home = fixture.teams.home.name
    away = fixture.teams.away.name
    goals = fixture.goals
    return (
        f"{when}  {fixture.status_code or '?':<4} "
        f"{home} {_score(goals.home)}-{_score(goals.away)} {away}"
    )


def _standing_line(standing: Standing) -> str:
    split = standing.all
    return (
        f"{standing.rank:>3}  {standing.team.name:<28} "
        f"P{split.played} W{_score(split.win)} D{_score(split.draw)} L{_score(split.lose)}  "
        f"{standing.points} pts"
    )


def _league_line(league: League) -> str:
    return f"{league.league.id:>5}  {league.league.name} ({league.country.name})"


def _emit(
    result: QueryResult[list[Any]],
    *,
    as_json: bool,
    to_payload: Callable[[Any], dict[str, Any]],
    to_line: Callable[[Any], str],
    empty: str,
) -> int:
    if result.error is not None:
        print(result.error, file=sys.stderr)
        return 1
    records = result.data or []
    if as_json:
        print(json.dumps([to_payload(item) for item in records], indent=2, ensure_ascii=False))
        return 0
    if not records:
        print(empty)
        return 0
    for item in records:
        print(to_line(item))
    return 0


async def _with_service(
    settings: Settings,
    run: Callable[[FootballQueryService], Awaitable[int]],
) -> int:
    async with build_remote_caller(settings) as caller:
        service = FootballQueryService(caller, settings=settings)
        return await run(service)


def _cmd_fixtures(args: argparse.Namespace) -> int:
    settings = _load_settings(args)

    async def run(service: FootballQueryService) -> int:
        result = await service.get_fixtures(
            league=args.league, season=args.season, status=args.status
        )
        return _emit(
            result,
            as_json=args.json,
            to_payload=_fixture_payload,
            to_line=_fixture_line,
            empty="no fixtures",
        )

    return asyncio.run(_with_service(settings, run))


def _cmd_live(args: argparse.Namespace) -> int:
    settings = _load_settings(args)

    async def run(service: FootballQueryService) -> int:
        result = await service.get_live_scores(league=args.league, season=args.season)
        return _emit(
            result,
            as_json=args.json,
            to_payload=_fixture_payload,
            to_line=_fixture_line,
            empty="no live matches",
        )

    return asyncio.run(_with_service(settings, run))


def _cmd_leagues(args: argparse.Namespace) -> int:
    if args.popular:
        if args.json:
            catalog = [
                {
                    "id": league.id,
                    "name": league.name,
                    "country": league.country,
                    "flag": league.flag,
                    "logo": league.logo,
                }
                for league in POPULAR_LEAGUES
            ]
            print(json.dumps(catalog, indent=2, ensure_ascii=False))
            return 0
        for league in POPULAR_LEAGUES:
            print(f"{league.id:>5}  {league.name} ({league.country})")
        print("seasons: " + ", ".join(season.label for season in SEASONS))
        return 0
    settings = _load_settings(args)

    async def run(service: FootballQueryService) -> int:
        result = await service.get_leagues(country=args.country, season=args.season)
        return _emit(
            result,
            as_json=args.json,
            to_payload=_league_payload,
            to_line=_league_line,
            empty="no leagues",
        )

    return asyncio.run(_with_service(settings, run))


def _cmd_standings(args: argparse.Namespace) -> int:
    settings = _load_settings(args)

    async def run(service: FootballQueryService) -> int:
        result = await service.get_standings(league=args.league, season=args.season)
        known = find_league(args.league.strip() or settings.default_league)
        if known is not None and result.ok and not args.json:
            print(f"{known.name} ({known.country})")
        return _emit(
            result,
            as_json=args.json,
            to_payload=_standing_payload,
            to_line=_standing_line,
            empty="no standings",
        )

    return asyncio.run(_with_service(settings, run))


def _cmd_watch(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    interval_s = args.interval or settings.live_poll_interval_s
    if interval_s <= 0:
        raise CLIError("--interval must be positive")
    if args.iterations < 0:
        raise CLIError("--iterations must be >= 0")

    async def run(service: FootballQueryService) -> int:
        done = asyncio.Event()
        seen = {"count": 0, "failures": 0}

        def on_result(result: QueryResult[list[Fixture]]) -> None:
            seen["count"] += 1
            print(f"-- {iso_z(utc_now())}")
            code = _emit(
                result,
                as_json=args.json,
                to_payload=_fixture_payload,
                to_line=_fixture_line,
                empty="no live matches",
            )
            if code:
                seen["failures"] += 1
            if args.iterations and seen["count"] >= args.iterations:
                done.set()

        poller = live_score_poller(
            service, on_result, league=args.league, season=args.season, interval_s=interval_s
        )
        janitor = cache_janitor(service, interval_s=settings.cleanup_interval_s)
        async with janitor, poller:
            await done.wait()
        return 1 if seen["failures"] == seen["count"] else 0

    try:
        return asyncio.run(_with_service(settings, run))
    except KeyboardInterrupt:
        return 0


def _add_scope_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--league", default="", help="League id (default from runtime config).")
    parser.add_argument("--season", default="", help="Season year (default from runtime config).")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scoreline")
    parser.add_argument(
        "--config",
        default="",
        help="Path to runtime config TOML (default: config/runtime.toml).",
    )
    parser.add_argument(
        "--transport",
        default="",
        choices=["", "direct", "functions"],
        help="Override the remote caller for this invocation.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging threshold (default: WARNING).",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text lines.")
    subparsers = parser.add_subparsers(dest="command")

    fixtures = subparsers.add_parser("fixtures", help="List fixtures for a league season")
    fixtures.set_defaults(func=_cmd_fixtures)
    _add_scope_args(fixtures)
    fixtures.add_argument("--status", default="", choices=["", *FIXTURE_STATUSES])

    live = subparsers.add_parser("live", help="List matches currently in play")
    live.set_defaults(func=_cmd_live)
    _add_scope_args(live)

    leagues = subparsers.add_parser("leagues", help="List competitions")
    leagues.set_defaults(func=_cmd_leagues)
    leagues.add_argument("--country", default="")
    leagues.add_argument("--season", default="")
    leagues.add_argument("--popular", action="store_true", help="Show the built-in catalog only.")

    standings = subparsers.add_parser("standings", help="Show the league table")
    standings.set_defaults(func=_cmd_standings)
    _add_scope_args(standings)

    watch = subparsers.add_parser("watch", help="Poll live scores on a fixed interval")
    watch.set_defaults(func=_cmd_watch)
    _add_scope_args(watch)
    watch.add_argument("--interval", type=float, default=0.0)
    watch.add_argument(
        "--iterations", type=int, default=0, help="Stop after N refreshes (0 = run until Ctrl-C)."
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        return int(func(args))
    except (CLIError, RuntimeError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
