# tests/test_main.py

import builtins

import pytest

import main as main_module
from mcsrboard.api_client import RankedAPIClient, RankedAPIError
from tests.helpers import load_fixture


class FakeAPI(RankedAPIClient):
    """Serves fixture payloads in place of the network."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.paths = []

    def _get_json(self, path, params=None):
        self.paths.append((path, params))
        if path == "leaderboard":
            if params and params.get("country"):
                payload = load_fixture("leaderboard.json")
                users = [u for u in payload["data"]["users"] if (u.get("country") or "").lower() == "vn"]
                return {"status": "success", "data": {"users": users}}
            return {
                "status": "success",
                "data": {"users": [{"uuid": "ff66", "nickname": "ProVNx", "eloRate": 2000, "country": "de"}]},
            }
        if path.endswith("/matches"):
            return load_fixture("user_matches.json")
        if path.startswith("users/"):
            return load_fixture("user.json")
        if path.startswith("matches/"):
            return load_fixture("match_detail.json")
        raise RankedAPIError(f"unexpected path {path}")


@pytest.fixture
def fake_api(monkeypatch):
    created = []

    def factory(*args, **kwargs):
        api = FakeAPI(*args, **kwargs)
        created.append(api)
        return api

    monkeypatch.setattr(main_module, "RankedAPIClient", factory)
    monkeypatch.setattr("mcsrboard.collector.time.sleep", lambda *_: None)
    return created


def _feed(monkeypatch, *answers):
    replies = iter(answers)
    monkeypatch.setattr(builtins, "input", lambda prompt='': next(replies))


def test_load_board_merges_nickname_tagged_players():
    board = main_module._load_board(FakeAPI(), "vn", limit=100)

    assert [row.uuid for row in board] == ["ff66", "bb22", "cc33", "ee55"]


def test_parse_args_defaults():
    args = main_module.parse_args([])

    assert args.type == 2
    assert args.count == 20
    assert args.limit == 100
    assert args.verbose is False


def test_session_collect_and_drill_down(fake_api, monkeypatch, capsys):
    _feed(
        monkeypatch,
        "5",            # collect stats
        "2", "speedy",  # search
        "4", "1",       # player details for first visible row
        "1",            # open first recent match
        "",             # back
        "6",
    )

    main_module.main(["--country", "VN", "--base-url", "https://api.example.com"])
    out = capsys.readouterr().out

    assert fake_api[0].base_url == "https://api.example.com"
    assert "FOUND 4 PLAYERS" in out
    assert "Collected 4/4 players" in out
    assert "Match stats ready for 4/4 players" in out
    assert "FOUND 1 PLAYERS matching 'speedy'" in out
    assert "PLAYER DETAILS: vnSpeedy" in out
    assert "MATCH 1904511" in out
    assert "Goodbye!" in out


def test_leaderboard_failure_is_reported(fake_api, monkeypatch, capsys):
    def broken(self, *args, **kwargs):
        raise RankedAPIError("service down")

    monkeypatch.setattr(FakeAPI, "get_leaderboard", broken)
    _feed(monkeypatch, "4", "6")

    main_module.main([])
    out = capsys.readouterr().out

    assert "Could not load leaderboard: service down" in out
    assert "No players on the board yet" in out
