"""Built-in catalog of the competitions the dashboard offers by default."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_LEAGUE = "39"
# Free plan: seasons 2021-2023 only.
DEFAULT_SEASON = "2023"


@dataclass(frozen=True)
class PopularLeague:
    id: str
    name: str
    country: str
    flag: str

    @property
    def logo(self) -> str:
        return f"https://media.api-sports.io/football/leagues/{self.id}.png"


@dataclass(frozen=True)
class SeasonChoice:
    value: str
    label: str


POPULAR_LEAGUES: tuple[PopularLeague, ...] = (
    PopularLeague(id="39", name="Premier League", country="England", flag="🏴󠁧󠁢󠁥󠁮󠁧󠁿"),
    PopularLeague(id="140", name="La Liga", country="Spain", flag="🇪🇸"),
    PopularLeague(id="78", name="Bundesliga", country="Germany", flag="🇩🇪"),
    PopularLeague(id="135", name="Serie A", country="Italy", flag="🇮🇹"),
    PopularLeague(id="61", name="Ligue 1", country="France", flag="🇫🇷"),
    PopularLeague(id="2", name="Champions League", country="Europe", flag="🇪🇺"),
    PopularLeague(id="3", name="Europa League", country="Europe", flag="🇪🇺"),
)

SEASONS: tuple[SeasonChoice, ...] = (
    SeasonChoice(value="2023", label="2023/24"),
    SeasonChoice(value="2022", label="2022/23"),
    SeasonChoice(value="2021", label="2021/22"),
)


def find_league(league_id: str) -> PopularLeague | None:
    for league in POPULAR_LEAGUES:
        if league.id == league_id:
            return league
    return None
