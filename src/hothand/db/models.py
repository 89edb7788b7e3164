from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text

metadata = MetaData()


class ResourceKind(str, Enum):
    TEAMS = "teams"
    ROSTERS = "team_rosters"
    TEAM_STATS = "team_stats"
    PLAYER_STATS = "player_stats"
    HISTORICAL_PLAYER_STATS = "historical_player_stats"
    RANKINGS = "team_rankings"


teams = Table(
    "teams",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("alias", String, nullable=False, default=""),
    Column("market", String, nullable=False, default=""),
    Column("cached_at", Float, nullable=False),
)

team_rosters = Table(
    "team_rosters",
    metadata,
    Column("team_id", String, primary_key=True),
    Column("player_id", String, primary_key=True),
    Column("full_name", String, nullable=False),
    Column("jersey_number", String),
    Column("position", String, nullable=False, default=""),
    Column("experience", String, nullable=False, default=""),
    Column("cached_at", Float, nullable=False),
)

team_stats = Table(
    "team_stats",
    metadata,
    Column("team_id", String, primary_key=True),
    Column("data", Text, nullable=False),
    Column("cached_at", Float, nullable=False),
)

player_stats = Table(
    "player_stats",
    metadata,
    Column("player_id", String, primary_key=True),
    Column("team_id", String, primary_key=True),
    Column("data", Text, nullable=False),
    Column("cached_at", Float, nullable=False),
)

historical_player_stats = Table(
    "historical_player_stats",
    metadata,
    Column("player_id", String, primary_key=True),
    Column("team_id", String, primary_key=True),
    Column("year1", Integer, nullable=False),
    Column("three_pt_pct_year1", Float, nullable=False),
    Column("year2", Integer, nullable=False),
    Column("three_pt_pct_year2", Float, nullable=False),
    Column("year3", Integer, nullable=False),
    Column("three_pt_pct_year3", Float, nullable=False),
    Column("cached_at", Float, nullable=False),
)

team_rankings = Table(
    "team_rankings",
    metadata,
    Column("team_id", String, primary_key=True),
    Column("net_rank", Integer),
    Column("updated_at", Float),
)

TABLES: dict[ResourceKind, Table] = {
    ResourceKind.TEAMS: teams,
    ResourceKind.ROSTERS: team_rosters,
    ResourceKind.TEAM_STATS: team_stats,
    ResourceKind.PLAYER_STATS: player_stats,
    ResourceKind.HISTORICAL_PLAYER_STATS: historical_player_stats,
    ResourceKind.RANKINGS: team_rankings,
}

# Column holding the freshness timestamp (epoch seconds) for each kind.
TIMESTAMP_COLUMNS: dict[ResourceKind, str] = {
    ResourceKind.TEAMS: "cached_at",
    ResourceKind.ROSTERS: "cached_at",
    ResourceKind.TEAM_STATS: "cached_at",
    ResourceKind.PLAYER_STATS: "cached_at",
    ResourceKind.HISTORICAL_PLAYER_STATS: "cached_at",
    ResourceKind.RANKINGS: "updated_at",
}
