from typing import Any, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from watchworthy import main
from watchworthy.main import app
from watchworthy.services import espn_nba, espn_nhl, espn_soccer, standings


def _team(team_id: str, name: str, score: int) -> Dict[str, Any]:
    return {"id": team_id, "name": name, "score": score}


def _nba(event_id: str, status: str, home: int, away: int, **extra: Any) -> Dict[str, Any]:
    game = {
        "id": event_id,
        "status": status,
        "date": "2026-02-22T00:30Z",
        "period": 4,
        "homeTeam": _team("1", f"Home {event_id}", home),
        "awayTeam": _team("2", f"Away {event_id}", away),
        "plays": [],
    }
    game.update(extra)
    return game


def _nhl(event_id: str, status: str, home: int, away: int, **extra: Any) -> Dict[str, Any]:
    game = {
        "id": event_id,
        "status": status,
        "date": "2026-02-22T00:00Z",
        "period": 3,
        "homeTeam": _team("10", "Boston Bruins", home),
        "awayTeam": _team("20", "Toronto Maple Leafs", away),
        "goals": [],
    }
    game.update(extra)
    return game


NBA_SLATE = [
    _nba("1", "finished", 130, 90),
    _nba("2", "scheduled", 0, 0, odds={"overUnder": 230, "spread": 2, "homeMoneyline": -120, "awayMoneyline": 100}),
    _nba("3", "in_progress", 60, 58, clock="Q3 4:12"),
    _nba("4", "finished", 111, 110, period=5, winProbSwings=12),
    _nba("5", "scheduled", 0, 0),
]


def _returns(value: Any):
    async def fake(*args: Any, **kwargs: Any) -> Any:
        return value

    return fake


def _raises(exc: Exception):
    async def fake(*args: Any, **kwargs: Any) -> Any:
        raise exc

    return fake


@pytest.fixture
def client(monkeypatch) -> TestClient:
    monkeypatch.setattr(espn_nba, "get_games_for_date", _returns(NBA_SLATE))
    monkeypatch.setattr(espn_nhl, "get_games_for_date", _returns([_nhl("7", "finished", 4, 3, period=4)]))
    monkeypatch.setattr(espn_soccer, "get_matches_for_date", _returns([]))
    monkeypatch.setattr(standings, "get_standings", _returns({}))
    return TestClient(app, raise_server_exceptions=False)


def _by_id(games: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    return {g["id"]: g for g in games}


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"ok": True}


def test_status(client: TestClient) -> None:
    body = client.get("/status").json()
    assert body["ok"] is True
    assert body["sports"] == ["football", "nba", "nhl"]


def test_nba_games_sorted_and_cached(client: TestClient) -> None:
    resp = client.get("/api/nba/games", params={"date": "2026-02-22"})
    assert resp.status_code == 200
    assert resp.headers["cache-control"] == "public, s-maxage=300, stale-while-revalidate=60"

    body = resp.json()
    assert body["date"] == "2026-02-22"
    ids = [g["id"] for g in body["games"]]
    # overtime one-pointer, prediction, blowout, then unscored games in feed order
    assert ids == ["nba-4", "nba-2", "nba-1", "nba-3", "nba-5"]


def test_nba_finished_games_get_eggs_only_when_finished(client: TestClient) -> None:
    games = _by_id(client.get("/api/nba/games", params={"date": "2026-02-22"}).json()["games"])

    finished = games["nba-4"]
    assert finished["status"] == "finished"
    assert "predicted" not in finished["excitement"]
    assert [e["id"] for e in finished["easterEggs"]] == ["overtime"]
    assert "clock" not in finished

    scheduled = games["nba-2"]
    assert scheduled["excitement"]["predicted"] is True
    assert "easterEggs" not in scheduled

    live = games["nba-3"]
    assert live["clock"] == "Q3 4:12"
    assert "excitement" not in live
    assert "easterEggs" not in live

    assert "excitement" not in games["nba-5"]


def test_summary_shape(client: TestClient) -> None:
    game = _by_id(client.get("/api/nba/games", params={"date": "2026-02-22"}).json()["games"])["nba-1"]
    assert game == {
        "id": "nba-1",
        "homeTeam": "Home 1",
        "awayTeam": "Away 1",
        "competition": "NBA",
        "sport": "nba",
        "status": "finished",
        "excitement": {"score": 3.2, "label": "Skip It"},
        "easterEggs": [],
        "date": "2026-02-22T00:30Z",
    }


def test_standings_reach_the_engine(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(standings, "get_standings", _returns({"Home 1": 1, "Away 1": 2}))
    game = _by_id(client.get("/api/nba/games", params={"date": "2026-02-22"}).json()["games"])["nba-1"]
    assert game["excitement"]["score"] == 4.2


def test_upstream_failure_fails_soft(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(espn_nba, "get_games_for_date", _raises(httpx.ConnectError("espn down")))
    resp = client.get("/api/nba/games", params={"date": "2026-02-22"})
    assert resp.status_code == 500
    assert resp.json() == {"games": [], "date": "2026-02-22", "error": "Failed to fetch NBA data"}


def test_football_failure_message(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(espn_soccer, "get_matches_for_date", _raises(httpx.ConnectError("espn down")))
    resp = client.get("/api/football/games", params={"date": "2026-02-22"})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to fetch football data"


def test_bad_date_is_rejected(client: TestClient) -> None:
    assert client.get("/api/nhl/games", params={"date": "22/02/2026"}).status_code == 422


def test_default_date_is_today(client: TestClient) -> None:
    body = client.get("/api/nhl/games").json()
    assert len(body["date"]) == 10
    assert body["games"][0]["id"] == "nhl-7"


def test_football_predictions_use_league_standings(client: TestClient, monkeypatch) -> None:
    match = {
        "id": "740",
        "status": "scheduled",
        "date": "2026-02-22T15:00Z",
        "competition": "Premier League",
        "leagueSlug": "eng.1",
        "homeTeam": _team("359", "Arsenal", 0),
        "awayTeam": _team("363", "Chelsea", 0),
        "goals": [],
        "cards": [],
        "isKnockout": False,
        "knockoutRound": None,
        "aggregateDiff": None,
        "odds": {"overUnder": 2.5, "spread": 0.5, "homeMoneyline": 120, "awayMoneyline": 220, "drawMoneyline": 230},
    }
    seen: List[str] = []

    async def fake_standings(sport: str, league: str) -> Dict[str, int]:
        seen.append(f"{sport}/{league}")
        return {"Arsenal": 1, "Chelsea": 3, **{f"Team {i}": i for i in range(4, 21)}}

    monkeypatch.setattr(espn_soccer, "get_matches_for_date", _returns([match]))
    monkeypatch.setattr(standings, "get_standings", fake_standings)

    game = client.get("/api/football/games", params={"date": "2026-02-22"}).json()["games"][0]
    assert seen == ["soccer/eng.1"]
    assert game["competition"] == "Premier League"
    assert game["excitement"]["predicted"] is True


def test_combined_list_merges_and_sorts(client: TestClient) -> None:
    body = client.get("/api/games", params={"date": "2026-02-22"}).json()
    scores = [g["excitement"]["score"] for g in body["games"] if "excitement" in g]
    assert scores == sorted(scores, reverse=True)
    assert {g["sport"] for g in body["games"]} == {"nba", "nhl"}


def test_combined_list_skips_failing_sport(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(espn_nba, "get_games_for_date", _raises(httpx.ConnectError("espn down")))
    resp = client.get("/api/games", params={"date": "2026-02-22"})
    assert resp.status_code == 200
    assert [g["id"] for g in resp.json()["games"]] == ["nhl-7"]


def test_combined_list_single_sport(client: TestClient) -> None:
    body = client.get("/api/games", params={"date": "2026-02-22", "sport": "nhl"}).json()
    assert [g["sport"] for g in body["games"]] == ["nhl"]


def test_combined_list_rejects_unknown_sport(client: TestClient) -> None:
    assert client.get("/api/games", params={"sport": "curling"}).status_code == 422


def test_run_serves_app_with_uvicorn(monkeypatch) -> None:
    calls: List[Dict[str, Any]] = []
    monkeypatch.setattr(main.uvicorn, "run", lambda target, **kwargs: calls.append({"target": target, **kwargs}))
    monkeypatch.setattr(main.config, "PORT", 9123)
    main.run()
    assert calls == [{"target": app, "host": main.config.HOST, "port": 9123, "log_level": main.config.LOG_LEVEL.lower()}]
