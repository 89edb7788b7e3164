from __future__ import annotations

import asyncio
import json
import urllib.error

import pytest

from src.hothand.db.models import ResourceKind
from src.hothand.errors import ConfigurationError, NotFoundError, RetriesExhaustedError, UpstreamError, UpstreamUnavailableError
from src.hothand.services.gateway import build_gateways
from src.hothand.services.resources import json_body
from src.hothand.services.upstream_client import UpstreamClient
from tests.factories import (
    FakeUpstream,
    player_profile,
    rankings_payload,
    roster_payload,
    season,
    team_statistics_payload,
    teams_payload,
)

PROFILE_PATH = "players/player-1/profile.json"
ROSTER_PATH = "teams/team-1/profile.json"


class Clock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock():
    return Clock()


@pytest.fixture()
def upstream():
    return FakeUpstream(
        {
            "league/teams.json": teams_payload(("team-1", "Gonzaga"), ("team-2", "Duke"), ("team-3", "Houston")),
            ROSTER_PATH: roster_payload(("player-1", "Test Shooter"), ("player-2", "Big Man")),
            PROFILE_PATH: player_profile(season(2024, 0.41, three_att=5.0), season(2023, 0.36)),
            "seasons/2024/REG/teams/team-1/statistics.json": team_statistics_payload(),
            "seasons/2024/REG/netrankings.json": rankings_payload(("team-2", 3), ("team-1", 11)),
        }
    )


@pytest.fixture()
def gateways(settings_env, store, upstream, clock):
    return build_gateways(store, upstream, settings_env, clock=clock)


def _run(coro):
    return asyncio.run(coro)


def test_player_stats_served_from_cache_within_ttl(gateways, upstream, clock):
    _run(gateways.roster.get("team-1"))

    first = json_body(_run(gateways.player_stats.get(("player-1", "team-1"))))
    clock.now += 3599
    second = json_body(_run(gateways.player_stats.get(("player-1", "team-1"))))

    assert json.dumps(first) == json.dumps(second)
    assert upstream.calls.count(PROFILE_PATH) == 1
    assert first["threePtPercentage"] == pytest.approx(41.0)


def test_player_stats_refetched_after_ttl(gateways, upstream, clock):
    _run(gateways.roster.get("team-1"))
    _run(gateways.player_stats.get(("player-1", "team-1")))

    clock.now += 3600
    _run(gateways.player_stats.get(("player-1", "team-1")))

    assert upstream.calls.count(PROFILE_PATH) == 2


def test_all_zero_player_stats_always_refresh(gateways, upstream, clock):
    upstream.responses[PROFILE_PATH] = player_profile(season(2022, 0.4))
    _run(gateways.roster.get("team-1"))

    first = _run(gateways.player_stats.get(("player-1", "team-1")))
    clock.now += 5
    _run(gateways.player_stats.get(("player-1", "team-1")))

    assert first.points_per_game == 0 and first.three_pt_percentage == 0
    assert upstream.calls.count(PROFILE_PATH) == 2


def test_player_stats_serve_stale_on_upstream_failure(gateways, upstream, clock):
    _run(gateways.roster.get("team-1"))
    fresh = _run(gateways.player_stats.get(("player-1", "team-1")))

    clock.now += 7200
    upstream.responses[PROFILE_PATH] = RetriesExhaustedError("throttled", attempts=3)
    stale = _run(gateways.player_stats.get(("player-1", "team-1")))

    assert stale == fresh


def test_player_stats_failure_without_cache_surfaces_upstream_status(gateways, upstream):
    _run(gateways.roster.get("team-1"))
    upstream.responses[PROFILE_PATH] = UpstreamError("boom", upstream_status=503)

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        _run(gateways.player_stats.get(("player-1", "team-1")))

    assert excinfo.value.status_code == 503
    assert excinfo.value.payload is None


def test_player_not_on_cached_roster_is_not_found(gateways, upstream):
    with pytest.raises(NotFoundError):
        _run(gateways.player_stats.get(("player-1", "team-1")))

    assert upstream.calls == []


def test_historical_stats_cached_for_a_day(gateways, upstream, clock):
    first = _run(gateways.historical_player_stats.get(("player-1", "team-1")))
    clock.now += 86399
    second = _run(gateways.historical_player_stats.get(("player-1", "team-1")))
    clock.now += 1
    _run(gateways.historical_player_stats.get(("player-1", "team-1")))

    assert first == second
    assert (first.year1, first.year2, first.year3) == (2024, 2023, 2022)
    assert upstream.calls.count(PROFILE_PATH) == 2


def test_historical_stats_synthesized_when_upstream_and_cache_empty(gateways, upstream, store):
    upstream.responses[PROFILE_PATH] = UpstreamError("down")

    stats = _run(gateways.historical_player_stats.get(("player-1", "team-1")))

    assert (stats.year1, stats.three_pt_pct_year1, stats.year3, stats.three_pt_pct_year3) == (2024, 0, 2022, 0)
    assert store.get(ResourceKind.HISTORICAL_PLAYER_STATS, {"player_id": "player-1", "team_id": "team-1"}) is None


def test_historical_stats_prefer_stale_cache_to_synthesized(gateways, upstream, clock):
    cached = _run(gateways.historical_player_stats.get(("player-1", "team-1")))
    clock.now += 3 * 86400
    upstream.responses[PROFILE_PATH] = UpstreamError("down")

    assert _run(gateways.historical_player_stats.get(("player-1", "team-1"))) == cached


def test_teams_are_cache_once(gateways, upstream, clock, store):
    teams = _run(gateways.teams.get())
    clock.now += 365 * 86400
    again = _run(gateways.teams.get())

    assert [team.id for team in teams] == ["team-1", "team-2", "team-3"]
    assert sorted(team.id for team in again) == ["team-1", "team-2", "team-3"]
    assert upstream.calls.count("league/teams.json") == 1
    assert store.count(ResourceKind.TEAMS) == 3


def test_empty_team_listing_failure_returns_empty_payload(gateways, upstream):
    upstream.responses["league/teams.json"] = RetriesExhaustedError("throttled", attempts=3)

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        _run(gateways.teams.get())

    assert excinfo.value.status_code == 429
    assert excinfo.value.payload == []


def test_roster_refresh_is_scoped_to_team(gateways, upstream, store):
    upstream.responses["teams/team-2/profile.json"] = roster_payload(("player-9", "Other Guy"))
    _run(gateways.roster.get("team-1"))
    _run(gateways.roster.get("team-2"))

    roster = _run(gateways.roster.get("team-1"))

    assert {entry.player_id for entry in roster} == {"player-1", "player-2"}
    assert store.count(ResourceKind.ROSTERS) == 3
    assert upstream.calls.count(ROSTER_PATH) == 1


def test_team_stats_failure_returns_empty_object(gateways, upstream):
    with pytest.raises(UpstreamUnavailableError) as excinfo:
        _run(gateways.team_stats.get("team-404"))

    assert excinfo.value.status_code == 404
    assert excinfo.value.payload == {}


def test_team_stats_never_expire(gateways, upstream, clock):
    first = _run(gateways.team_stats.get("team-1"))
    clock.now += 10 * 365 * 86400
    second = _run(gateways.team_stats.get("team-1"))

    assert first == second
    assert upstream.calls.count("seasons/2024/REG/teams/team-1/statistics.json") == 1


def test_rankings_seeded_and_refreshed_on_shared_clock(gateways, upstream, clock):
    _run(gateways.teams.get())

    rankings = _run(gateways.rankings.get())
    clock.now += 23 * 3600
    cached = _run(gateways.rankings.get())
    clock.now += 3600
    _run(gateways.rankings.get())

    assert [(ranking.team_id, ranking.net_rank) for ranking in rankings] == [
        ("team-2", 3),
        ("team-1", 11),
        ("team-3", None),
    ]
    assert cached == rankings
    assert upstream.calls.count("seasons/2024/REG/netrankings.json") == 2


def test_rankings_failure_returns_empty_list(gateways, upstream):
    upstream.responses["seasons/2024/REG/netrankings.json"] = UpstreamError("nope", upstream_status=500)

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        _run(gateways.rankings.get())

    assert excinfo.value.status_code == 500
    assert excinfo.value.payload == []


def test_missing_credential_makes_no_network_calls(settings_env, store, monkeypatch):
    calls = {"count": 0}

    def fake_urlopen(request, timeout=0):
        calls["count"] += 1
        raise urllib.error.URLError("should not be called")

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    client = UpstreamClient(api_key="", base_url="https://example.com")
    gateways = build_gateways(store, client, settings_env)

    with pytest.raises(ConfigurationError):
        _run(gateways.teams.get())
    with pytest.raises(ConfigurationError):
        _run(gateways.historical_player_stats.get(("player-1", "team-1")))

    assert calls["count"] == 0


def test_rankings_ignore_teams_missing_from_team_list(gateways, upstream, store):
    upstream.responses["seasons/2024/REG/netrankings.json"] = rankings_payload(("team-2", 3), ("team-9", 1))
    _run(gateways.teams.get())

    rankings = _run(gateways.rankings.get())

    assert [(ranking.team_id, ranking.net_rank) for ranking in rankings] == [
        ("team-2", 3),
        ("team-1", None),
        ("team-3", None),
    ]
    assert store.count(ResourceKind.RANKINGS) == 3
    assert store.get(ResourceKind.RANKINGS, {"team_id": "team-9"}) is None


class GatedUpstream(FakeUpstream):
    """Holds profile fetches until ``expected`` of them are in flight."""

    def __init__(self, responses: dict, *, expected: int) -> None:
        super().__init__(responses)
        self.expected = expected
        self.in_flight = 0
        self.served = 0
        self._released: asyncio.Event | None = None

    async def fetch_resource(self, path: str):
        if path != PROFILE_PATH:
            return await super().fetch_resource(path)
        if self._released is None:
            self._released = asyncio.Event()
        self.in_flight += 1
        if self.in_flight >= self.expected:
            self._released.set()
        await self._released.wait()
        self.served += 1
        self.calls.append(path)
        return player_profile(season(2024, 0.4, points=10.0 * self.served))


def test_concurrent_misses_both_fetch_and_last_write_wins(settings_env, store, clock):
    gated = GatedUpstream({ROSTER_PATH: roster_payload(("player-1", "Test Shooter"))}, expected=2)
    gateways = build_gateways(store, gated, settings_env, clock=clock)
    _run(gateways.roster.get("team-1"))

    async def both():
        key = ("player-1", "team-1")
        return await asyncio.wait_for(
            asyncio.gather(gateways.player_stats.get(key), gateways.player_stats.get(key)),
            timeout=5,
        )

    first, second = _run(both())
    cached = _run(gateways.player_stats.get(("player-1", "team-1")))

    assert gated.calls.count(PROFILE_PATH) == 2
    assert store.count(ResourceKind.PLAYER_STATS) == 1
    assert {first.points_per_game, second.points_per_game} == {10.0, 20.0}
    assert cached in (first, second)
