from scoreline.keys import (
    cache_key,
    fixtures_key,
    leagues_key,
    request_key,
    sanitize_params,
    standings_key,
)


def test_request_key_is_independent_of_param_order() -> None:
    first = request_key("get-fixtures", {"league": "39", "season": "2023"})
    second = request_key("get-fixtures", {"season": "2023", "league": "39"})

    assert first == second
    assert first == 'get-fixtures:{"league":"39","season":"2023"}'


def test_request_key_drops_unset_values_and_secrets() -> None:
    assert sanitize_params({"league": "39", "status": None, "apiKey": "secret"}) == {
        "league": "39"
    }
    assert request_key("get-fixtures", {"league": "39", "status": None}) == request_key(
        "get-fixtures", {"league": "39"}
    )


def test_request_key_distinguishes_functions_and_params() -> None:
    keys = {
        request_key("get-fixtures", {"league": "39", "season": "2023"}),
        request_key("get-standings", {"league": "39", "season": "2023"}),
        request_key("get-fixtures", {"league": "39", "season": "2022"}),
        request_key("get-fixtures", {"league": "39", "season": "2023", "status": "live"}),
    }
    assert len(keys) == 4


def test_cache_keys_are_human_readable() -> None:
    assert fixtures_key("39", "2023") == "fixtures:39:2023:all"
    assert fixtures_key("39", "2023", "live") == "fixtures:39:2023:live"
    assert standings_key("140", "2022") == "standings:140:2022:all"
    assert leagues_key() == "leagues:all:current:all"
    assert leagues_key("England", "2023") == "leagues:England:2023:all"


def test_cache_key_escapes_separators() -> None:
    assert cache_key("leagues", "a:b", "current") != cache_key("leagues", "a", "b:current")
    assert cache_key("leagues", "Bosnia & Herzegovina", "2023") == (
        "leagues:Bosnia%20%26%20Herzegovina:2023:all"
    )
