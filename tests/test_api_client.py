import json
from io import BytesIO
from urllib.error import HTTPError, URLError

import pytest

import mcsrboard.api_client as api_module
from mcsrboard.api_client import (
    PlayerNotFoundError,
    RankedAPIClient,
    RankedAPIError,
    RateLimitedError,
)
from mcsrboard.models import MatchDetail
from tests.helpers import load_fixture


@pytest.fixture
def client():
    return RankedAPIClient(base_url="https://api.example.com/", backoff_seconds=1.0)


@pytest.fixture
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(api_module.time, "sleep", lambda seconds: calls.append(seconds))
    return calls


def _body(payload) -> BytesIO:
    return BytesIO(json.dumps(payload).encode("utf-8"))


def _http_error(url: str, code: int) -> HTTPError:
    return HTTPError(url, code, "error", hdrs=None, fp=BytesIO(b"{}"))


def test_parse_leaderboard(client):
    players, season = client.parse_leaderboard(load_fixture("leaderboard.json"))

    assert [p.uuid for p in players] == ["aa11", "bb22", "cc33", "dd44", "ee55"]
    assert players[1].country == "vn"
    assert players[4].elo_rate is None
    assert season["number"] == 6


def test_parse_leaderboard_without_users(client):
    players, season = client.parse_leaderboard({"status": "success", "data": {}})

    assert players == []
    assert season is None


@pytest.mark.parametrize(
    "payload",
    [
        {"status": "success", "data": [{"id": 1}, {"id": 2}]},
        {"status": "success", "data": {"matches": [{"id": 1}, {"id": 2}]}},
        {"status": "success", "data": {"data": [{"id": 1}, {"id": 2}]}},
    ],
)
def test_parse_match_list_shapes(client, payload):
    matches = client.parse_match_list(payload)

    assert [m.id for m in matches] == ["1", "2"]


def test_parse_match_list_fixture(client):
    matches = client.parse_match_list(load_fixture("user_matches.json"))

    assert len(matches) == 4
    assert matches[0].winner_uuid == "bb22"
    assert matches[0].change_for("bb22").change == 14
    assert matches[1].forfeited is True
    assert matches[3].result is None


def test_parse_match_detail(client):
    detail = client.parse_match_detail(load_fixture("match_detail.json"))

    assert isinstance(detail, MatchDetail)
    assert len(detail.players) == 2
    assert detail.completions[0].time == 612345


def test_parse_match_detail_requires_data(client):
    with pytest.raises(RankedAPIError):
        client.parse_match_detail({"status": "success", "data": None})


def test_build_url_skips_none_params(client):
    url = client._build_url("leaderboard", {"type": 2, "country": None, "count": 50})

    assert url == "https://api.example.com/leaderboard?type=2&count=50"


def test_get_leaderboard_passes_query(client, monkeypatch):
    calls = []

    def fake_get(path, params=None):
        calls.append((path, params))
        return load_fixture("leaderboard.json")

    monkeypatch.setattr(client, "_get_json", fake_get)
    players, _ = client.get_leaderboard(country="vn")

    assert calls == [("leaderboard", {"type": None, "country": "vn", "count": None})]
    assert len(players) == 5


def test_get_user_matches_builds_path(client, monkeypatch):
    calls = []

    def fake_get(path, params=None):
        calls.append((path, params))
        return load_fixture("user_matches.json")

    monkeypatch.setattr(client, "_get_json", fake_get)
    matches = client.get_user_matches("vn Speedy", match_type=2, count=10)

    assert calls[0] == ("users/vn%20Speedy/matches", {"type": 2, "count": 10})
    assert len(matches) == 4


def test_get_user_not_found(client, monkeypatch):
    def fake_get(path, params=None):
        raise _http_error("https://api.example.com/users/ghost", 404)

    monkeypatch.setattr(client, "_get_json", fake_get)

    with pytest.raises(PlayerNotFoundError):
        client.get_user("ghost")


def test_get_user(client, monkeypatch):
    monkeypatch.setattr(client, "_get_json", lambda path, params=None: load_fixture("user.json"))

    player = client.get_user("bb22")

    assert player.nickname == "vnSpeedy"
    assert player.highest_elo_rate == 2044


def test_retry_with_linear_backoff(client, monkeypatch, sleeps):
    calls = {"count": 0}

    def fake_urlopen(req, timeout=20):
        calls["count"] += 1
        if calls["count"] < 3:
            raise URLError("connection reset")
        return _body({"status": "success", "data": {"ok": True}})

    monkeypatch.setattr(api_module, "urlopen", fake_urlopen)

    payload = client._get_json("leaderboard")

    assert payload["data"]["ok"] is True
    assert calls["count"] == 3
    assert sleeps == [1.0, 2.0]


def test_rate_limit_exhausts_retries(client, monkeypatch, sleeps):
    calls = {"count": 0}

    def fake_urlopen(req, timeout=20):
        calls["count"] += 1
        raise _http_error(req.full_url, 429)

    monkeypatch.setattr(api_module, "urlopen", fake_urlopen)

    with pytest.raises(RateLimitedError):
        client._get_json("leaderboard")
    assert calls["count"] == 3
    assert sleeps == [1.0, 2.0]


def test_server_errors_exhaust_retries(client, monkeypatch, sleeps):
    def fake_urlopen(req, timeout=20):
        raise _http_error(req.full_url, 503)

    monkeypatch.setattr(api_module, "urlopen", fake_urlopen)

    with pytest.raises(RankedAPIError) as excinfo:
        client._get_json("leaderboard")
    assert not isinstance(excinfo.value, RateLimitedError)


def test_client_errors_are_not_retried(client, monkeypatch, sleeps):
    calls = {"count": 0}

    def fake_urlopen(req, timeout=20):
        calls["count"] += 1
        raise _http_error(req.full_url, 404)

    monkeypatch.setattr(api_module, "urlopen", fake_urlopen)

    with pytest.raises(HTTPError):
        client._get_json("matches/1")
    assert calls["count"] == 1
    assert sleeps == []


def test_malformed_json_is_not_retried(client, monkeypatch, sleeps):
    calls = {"count": 0}

    def fake_urlopen(req, timeout=20):
        calls["count"] += 1
        return BytesIO(b"<html>oops</html>")

    monkeypatch.setattr(api_module, "urlopen", fake_urlopen)

    with pytest.raises(RankedAPIError):
        client._get_json("leaderboard")
    assert calls["count"] == 1
    assert sleeps == []


def test_error_status_payload(client, monkeypatch):
    monkeypatch.setattr(
        api_module,
        "urlopen",
        lambda req, timeout=20: _body({"status": "error", "data": "Too many requests"}),
    )

    with pytest.raises(RankedAPIError, match="Too many requests"):
        client._get_json("leaderboard")
