from __future__ import annotations

import urllib.error

import pytest
from fastapi.testclient import TestClient

from src.hothand.errors import RetriesExhaustedError, UpstreamError
from tests.factories import (
    player_profile,
    rankings_payload,
    roster_payload,
    season,
    teams_payload,
)

PROFILE_PATH = "players/player-1/profile.json"


@pytest.fixture()
def seeded_upstream(fake_upstream):
    fake_upstream.responses.update(
        {
            "league/teams.json": teams_payload(("team-1", "Gonzaga"), ("team-2", "Duke")),
            "teams/team-1/profile.json": roster_payload(("player-1", "Test Shooter"), ("player-2", "Big Man")),
            PROFILE_PATH: player_profile(season(2024, 0.41, three_att=5.0), season(2023, 0.36), season(2022, 0.3)),
            "seasons/2024/REG/netrankings.json": rankings_payload(("team-2", 2), ("team-1", 9)),
        }
    )
    return fake_upstream


def test_health_reports_table_counts(app_client):
    response = app_client.get("/api/health")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"
    payload = response.json()
    assert payload["upstream_configured"] is True
    assert payload["tables"]["teams"] == 0
    assert set(payload["tables"]) == {
        "teams",
        "team_rosters",
        "team_stats",
        "player_stats",
        "historical_player_stats",
        "team_rankings",
    }


def test_teams_listing_is_cached_and_public(app_client, seeded_upstream):
    first = app_client.get("/api/teams")
    second = app_client.get("/api/teams")

    assert first.status_code == 200
    assert first.json()[0] == {"id": "team-1", "name": "Gonzaga", "alias": "GONZ", "market": "Gonzaga University"}
    assert {team["id"] for team in second.json()} == {"team-1", "team-2"}
    assert first.headers["cache-control"].startswith("public, max-age=")
    assert seeded_upstream.calls.count("league/teams.json") == 1


def test_teams_listing_when_throttled_returns_empty_list(app_client, fake_upstream):
    fake_upstream.responses["league/teams.json"] = RetriesExhaustedError("throttled", attempts=3)

    response = app_client.get("/api/teams")

    assert response.status_code == 429
    assert response.json() == []
    assert response.headers["cache-control"] == "no-store"


def test_roster_uses_camel_case(app_client, seeded_upstream):
    response = app_client.get("/api/team/team-1/roster")

    assert response.status_code == 200
    assert response.json()[0] == {
        "teamId": "team-1",
        "playerId": "player-1",
        "fullName": "Test Shooter",
        "jerseyNumber": "3",
        "position": "G",
        "experience": "JR",
    }


@pytest.mark.parametrize(
    "query",
    ["", "?playerId=player-1", "?teamId=team-1", "?playerId=%20&teamId=team-1"],
)
def test_player_stats_requires_both_ids(app_client, seeded_upstream, query: str):
    response = app_client.get(f"/api/player-stats{query}")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"
    assert response.json()["error"]["message"] == "Missing playerId or teamId"
    assert seeded_upstream.calls == []


def test_player_stats_unknown_player_is_not_found(app_client, seeded_upstream):
    app_client.get("/api/team/team-1/roster")

    response = app_client.get("/api/player-stats?playerId=nobody&teamId=team-1")

    assert response.status_code == 404
    assert response.json()["ok"] is False
    assert PROFILE_PATH not in seeded_upstream.calls


def test_player_stats_second_call_is_served_from_cache(app_client, seeded_upstream):
    app_client.get("/api/team/team-1/roster")

    first = app_client.get("/api/player-stats?playerId=player-1&teamId=team-1")
    second = app_client.get("/api/player-stats?playerId=player-1&teamId=team-1")

    assert first.status_code == 200
    assert first.content == second.content
    assert first.json()["threePtPercentage"] == pytest.approx(41.0)
    assert first.json()["playerId"] == "player-1"
    assert seeded_upstream.calls.count(PROFILE_PATH) == 1


def test_player_stats_failure_without_cache_uses_error_envelope(app_client, seeded_upstream):
    app_client.get("/api/team/team-1/roster")
    seeded_upstream.responses[PROFILE_PATH] = UpstreamError("upstream down", upstream_status=503)

    response = app_client.get("/api/player-stats?playerId=player-1&teamId=team-1")

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "UPSTREAM_UNAVAILABLE"


def test_historical_stats_success_and_synthesized_fallback(app_client, seeded_upstream):
    ok = app_client.get("/api/historical-player-stats?playerId=player-1&teamId=team-1")
    seeded_upstream.responses["players/player-2/profile.json"] = UpstreamError("down", upstream_status=500)
    synthesized = app_client.get("/api/historical-player-stats?playerId=player-2&teamId=team-1")

    assert ok.status_code == 200
    assert ok.json()["year1"] == 2024
    assert ok.json()["threePtPctYear3"] == pytest.approx(30.0)
    assert synthesized.status_code == 200
    assert synthesized.json() == {
        "playerId": "player-2",
        "teamId": "team-1",
        "year1": 2024,
        "threePtPctYear1": 0,
        "year2": 2023,
        "threePtPctYear2": 0,
        "year3": 2022,
        "threePtPctYear3": 0,
    }


def test_team_stats_failure_returns_empty_object(app_client, seeded_upstream):
    response = app_client.get("/api/team/team-9/stats")

    assert response.status_code == 404
    assert response.json() == {}


def test_rankings_include_unranked_teams(app_client, seeded_upstream):
    app_client.get("/api/teams")

    response = app_client.get("/api/rankings")

    assert response.status_code == 200
    assert response.json() == [
        {"teamId": "team-2", "netRank": 2},
        {"teamId": "team-1", "netRank": 9},
    ]


def test_player_threat_classification(app_client, seeded_upstream):
    app_client.get("/api/team/team-1/roster")

    response = app_client.get("/api/player-threat?playerId=player-1&teamId=team-1")

    assert response.status_code == 200
    assert response.json()["status"] == "lethal"
    assert response.json()["threePtAttemptsPerGame"] == 5.0


def test_request_id_is_echoed(app_client):
    response = app_client.get("/api/health", headers={"X-Request-Id": "req-123"})

    assert response.headers["X-Request-Id"] == "req-123"


def test_missing_credential_is_a_configuration_error(settings_env, monkeypatch):
    from src.hothand.main import create_app
    from src.hothand.services.upstream_client import UpstreamClient

    calls = {"count": 0}

    def fake_urlopen(request, timeout=0):
        calls["count"] += 1
        raise urllib.error.URLError("should not be called")

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    app = create_app(client=UpstreamClient(api_key="", base_url="https://example.com"))

    with TestClient(app) as client:
        health = client.get("/api/health")
        response = client.get("/api/teams")

    assert health.json()["upstream_configured"] is False
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"
    assert calls["count"] == 0
