"""cache tables

Revision ID: 0001_cache_tables
Revises:
Create Date: 2026-10-19
"""

from alembic import op

revision = "0001_cache_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS teams (
          id VARCHAR PRIMARY KEY,
          name VARCHAR NOT NULL,
          alias VARCHAR NOT NULL,
          market VARCHAR NOT NULL,
          cached_at FLOAT NOT NULL
        )
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS team_rosters (
          team_id VARCHAR NOT NULL,
          player_id VARCHAR NOT NULL,
          full_name VARCHAR NOT NULL,
          jersey_number VARCHAR,
          position VARCHAR NOT NULL,
          experience VARCHAR NOT NULL,
          cached_at FLOAT NOT NULL,
          PRIMARY KEY (team_id, player_id)
        )
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS team_stats (
          team_id VARCHAR PRIMARY KEY,
          data TEXT NOT NULL,
          cached_at FLOAT NOT NULL
        )
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS player_stats (
          player_id VARCHAR NOT NULL,
          team_id VARCHAR NOT NULL,
          data TEXT NOT NULL,
          cached_at FLOAT NOT NULL,
          PRIMARY KEY (player_id, team_id)
        )
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS historical_player_stats (
          player_id VARCHAR NOT NULL,
          team_id VARCHAR NOT NULL,
          year1 INTEGER NOT NULL,
          three_pt_pct_year1 FLOAT NOT NULL,
          year2 INTEGER NOT NULL,
          three_pt_pct_year2 FLOAT NOT NULL,
          year3 INTEGER NOT NULL,
          three_pt_pct_year3 FLOAT NOT NULL,
          cached_at FLOAT NOT NULL,
          PRIMARY KEY (player_id, team_id)
        )
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS team_rankings (
          team_id VARCHAR PRIMARY KEY,
          net_rank INTEGER,
          updated_at FLOAT
        )
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS team_rankings")
    op.execute("DROP TABLE IF EXISTS historical_player_stats")
    op.execute("DROP TABLE IF EXISTS player_stats")
    op.execute("DROP TABLE IF EXISTS team_stats")
    op.execute("DROP TABLE IF EXISTS team_rosters")
    op.execute("DROP TABLE IF EXISTS teams")
