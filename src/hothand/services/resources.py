"""Per-kind glue between the cache store, the upstream paths and the normalizer."""

from __future__ import annotations

import logging
from typing import Any

from src.hothand.api.schemas.players import HistoricalPlayerStats, PlayerStats
from src.hothand.api.schemas.teams import RosterEntry, Team, TeamRanking, TeamStats
from src.hothand.db.models import ResourceKind
from src.hothand.db.repositories.rankings_repository import (
    clear_rankings,
    fetch_rankings,
    fetch_rankings_clock,
    seed_unranked_teams,
    update_rank,
)
from src.hothand.db.store import CacheStore
from src.hothand.errors import NotFoundError
from src.hothand.services import normalizer
from src.hothand.services.freshness import CachedEntry

logger = logging.getLogger("hothand.resources")


class Resource:
    kind: ResourceKind

    def path(self, key: Any) -> str:
        raise NotImplementedError

    def load(self, store: CacheStore, key: Any) -> CachedEntry | None:
        raise NotImplementedError

    def normalize(self, raw: Any, key: Any) -> Any:
        raise NotImplementedError

    def save(self, store: CacheStore, key: Any, value: Any, now: float) -> Any:
        """Write ``value`` through to the store and return what should be served."""
        raise NotImplementedError

    def empty(self, key: Any) -> Any:
        raise NotImplementedError

    def check_request(self, store: CacheStore, key: Any) -> None:
        """Reject a request before any upstream call is made."""


class TeamsResource(Resource):
    kind = ResourceKind.TEAMS

    def path(self, key: None) -> str:
        return "league/teams.json"

    def load(self, store: CacheStore, key: None) -> CachedEntry | None:
        rows = store.list_all(self.kind)
        if not rows:
            return None
        teams = [Team(id=row["id"], name=row["name"], alias=row["alias"], market=row["market"]) for row in rows]
        return CachedEntry(teams, min(row["cached_at"] for row in rows))

    def normalize(self, raw: Any, key: None) -> list[Team]:
        return normalizer.normalize_teams(raw)

    def save(self, store: CacheStore, key: None, value: list[Team], now: float) -> list[Team]:
        store.delete_all(self.kind)
        store.put_many(
            self.kind,
            (({"id": team.id}, team.model_dump(exclude={"id"})) for team in value),
            now,
        )
        return [team for team in value if team.id]

    def empty(self, key: None) -> list:
        return []


class RosterResource(Resource):
    kind = ResourceKind.ROSTERS

    def path(self, team_id: str) -> str:
        return f"teams/{team_id}/profile.json"

    def load(self, store: CacheStore, team_id: str) -> CachedEntry | None:
        rows = store.find(self.kind, {"team_id": team_id})
        if not rows:
            return None
        roster = [
            RosterEntry(
                team_id=row["team_id"],
                player_id=row["player_id"],
                full_name=row["full_name"],
                jersey_number=row["jersey_number"],
                position=row["position"],
                experience=row["experience"],
            )
            for row in rows
        ]
        return CachedEntry(roster, min(row["cached_at"] for row in rows))

    def normalize(self, raw: Any, team_id: str) -> list[RosterEntry]:
        return normalizer.normalize_roster(raw, team_id)

    def save(self, store: CacheStore, team_id: str, value: list[RosterEntry], now: float) -> list[RosterEntry]:
        store.delete_by_partial_key(self.kind, {"team_id": team_id})
        store.put_many(
            self.kind,
            (
                (
                    {"team_id": team_id, "player_id": entry.player_id},
                    entry.model_dump(exclude={"team_id", "player_id"}),
                )
                for entry in value
            ),
            now,
        )
        return [entry for entry in value if entry.player_id]

    def empty(self, team_id: str) -> list:
        return []


class TeamStatsResource(Resource):
    kind = ResourceKind.TEAM_STATS

    def __init__(self, season_year: int) -> None:
        self._season_year = season_year

    def path(self, team_id: str) -> str:
        return f"seasons/{self._season_year}/REG/teams/{team_id}/statistics.json"

    def load(self, store: CacheStore, team_id: str) -> CachedEntry | None:
        row = store.get(self.kind, {"team_id": team_id})
        if row is None:
            return None
        return CachedEntry(TeamStats.model_validate_json(row["data"]), row["cached_at"])

    def normalize(self, raw: Any, team_id: str) -> TeamStats:
        return normalizer.normalize_team_stats(raw, team_id)

    def save(self, store: CacheStore, team_id: str, value: TeamStats, now: float) -> TeamStats:
        store.put(self.kind, {"team_id": team_id}, {"data": value.model_dump_json(by_alias=True)}, now)
        return value

    def empty(self, team_id: str) -> dict:
        return {}


class PlayerStatsResource(Resource):
    """Keyed by ``(player_id, team_id)``; requires the player on the cached roster."""

    kind = ResourceKind.PLAYER_STATS

    def __init__(self, season_year: int) -> None:
        self._season_year = season_year

    def path(self, key: tuple[str, str]) -> str:
        player_id, _team_id = key
        return f"players/{player_id}/profile.json"

    def load(self, store: CacheStore, key: tuple[str, str]) -> CachedEntry | None:
        player_id, team_id = key
        row = store.get(self.kind, {"player_id": player_id, "team_id": team_id})
        if row is None:
            return None
        return CachedEntry(PlayerStats.model_validate_json(row["data"]), row["cached_at"])

    def check_request(self, store: CacheStore, key: tuple[str, str]) -> None:
        player_id, team_id = key
        if store.get(ResourceKind.ROSTERS, {"team_id": team_id, "player_id": player_id}) is None:
            raise NotFoundError(f"Player with ID {player_id} not found on roster")

    def normalize(self, raw: Any, key: tuple[str, str]) -> PlayerStats:
        player_id, team_id = key
        return normalizer.normalize_player_stats(raw, player_id, team_id, self._season_year)

    def save(self, store: CacheStore, key: tuple[str, str], value: PlayerStats, now: float) -> PlayerStats:
        player_id, team_id = key
        store.put(
            self.kind,
            {"player_id": player_id, "team_id": team_id},
            {"data": value.model_dump_json(by_alias=True)},
            now,
        )
        return value

    def empty(self, key: tuple[str, str]) -> None:
        return None


class HistoricalPlayerStatsResource(Resource):
    kind = ResourceKind.HISTORICAL_PLAYER_STATS

    def __init__(self, season_year: int) -> None:
        self._season_year = season_year

    def path(self, key: tuple[str, str]) -> str:
        player_id, _team_id = key
        return f"players/{player_id}/profile.json"

    def load(self, store: CacheStore, key: tuple[str, str]) -> CachedEntry | None:
        player_id, team_id = key
        row = store.get(self.kind, {"player_id": player_id, "team_id": team_id})
        if row is None:
            return None
        stats = HistoricalPlayerStats(
            player_id=player_id,
            team_id=team_id,
            year1=row["year1"],
            three_pt_pct_year1=row["three_pt_pct_year1"],
            year2=row["year2"],
            three_pt_pct_year2=row["three_pt_pct_year2"],
            year3=row["year3"],
            three_pt_pct_year3=row["three_pt_pct_year3"],
        )
        return CachedEntry(stats, row["cached_at"])

    def normalize(self, raw: Any, key: tuple[str, str]) -> HistoricalPlayerStats:
        player_id, team_id = key
        return normalizer.normalize_historical_stats(raw, player_id, team_id, self._season_year)

    def save(self, store: CacheStore, key: tuple[str, str], value: HistoricalPlayerStats, now: float) -> HistoricalPlayerStats:
        player_id, team_id = key
        store.put(
            self.kind,
            {"player_id": player_id, "team_id": team_id},
            value.model_dump(exclude={"player_id", "team_id"}),
            now,
        )
        return value

    def empty(self, key: tuple[str, str]) -> HistoricalPlayerStats:
        player_id, team_id = key
        return normalizer.empty_historical_stats(player_id, team_id, self._season_year)


class RankingsResource(Resource):
    kind = ResourceKind.RANKINGS

    def __init__(self, season_year: int) -> None:
        self._season_year = season_year

    def path(self, key: None) -> str:
        return f"seasons/{self._season_year}/REG/netrankings.json"

    def load(self, store: CacheStore, key: None) -> CachedEntry:
        with store.transaction() as connection:
            seed_unranked_teams(connection)
            clock = fetch_rankings_clock(connection)
            rows = fetch_rankings(connection)
        return CachedEntry([TeamRanking(**row) for row in rows], clock)

    def normalize(self, raw: Any, key: None) -> list[TeamRanking]:
        return normalizer.normalize_rankings(raw)

    def save(self, store: CacheStore, key: None, value: list[TeamRanking], now: float) -> list[TeamRanking]:
        # Only teams already listed get a rank; unknown ids are dropped.
        with store.transaction() as connection:
            seed_unranked_teams(connection)
            clear_rankings(connection)
            unknown = [
                ranking.team_id
                for ranking in value
                if ranking.net_rank
                and not update_rank(connection, team_id=ranking.team_id, net_rank=ranking.net_rank, updated_at=now)
            ]
        if unknown:
            logger.info("Ignored rankings for %s teams missing from the team list", len(unknown))
        return self.load(store, key).value

    def empty(self, key: None) -> list:
        return []


def json_body(value: Any) -> Any:
    """Render a resource value (model, list of models or plain data) as JSON-ready data."""
    if isinstance(value, list):
        return [json_body(item) for item in value]
    if hasattr(value, "to_json_dict"):
        return value.to_json_dict()
    return value
