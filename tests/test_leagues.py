from scoreline.leagues import DEFAULT_LEAGUE, DEFAULT_SEASON, POPULAR_LEAGUES, SEASONS, find_league
from scoreline.validation import validate_league_id


def test_catalog_ids_are_valid_and_unique() -> None:
    ids = [league.id for league in POPULAR_LEAGUES]

    assert len(ids) == len(set(ids))
    assert all(validate_league_id(league_id) for league_id in ids)
    assert DEFAULT_LEAGUE in ids


def test_default_season_is_offered() -> None:
    assert DEFAULT_SEASON == SEASONS[0].value
    assert [season.label for season in SEASONS] == ["2023/24", "2022/23", "2021/22"]


def test_find_league() -> None:
    league = find_league("140")

    assert league is not None
    assert league.name == "La Liga"
    assert league.logo.endswith("/leagues/140.png")
    assert find_league("999") is None
