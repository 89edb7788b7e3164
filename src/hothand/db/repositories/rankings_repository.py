from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Connection


def seed_unranked_teams(connection: Connection) -> None:
    connection.execute(
        text(
            """
            INSERT OR IGNORE INTO team_rankings (team_id, net_rank, updated_at)
            SELECT id, NULL, NULL FROM teams
            """
        )
    )


def clear_rankings(connection: Connection) -> None:
    connection.execute(text("UPDATE team_rankings SET net_rank = NULL, updated_at = NULL"))


def update_rank(connection: Connection, *, team_id: str, net_rank: int, updated_at: float) -> bool:
    result = connection.execute(
        text("UPDATE team_rankings SET net_rank = :net_rank, updated_at = :updated_at WHERE team_id = :team_id"),
        {"team_id": team_id, "net_rank": net_rank, "updated_at": updated_at},
    )
    return result.rowcount > 0


def fetch_rankings_clock(connection: Connection) -> float | None:
    # One populated row stands in for the whole set.
    row = connection.execute(
        text("SELECT updated_at FROM team_rankings WHERE updated_at IS NOT NULL LIMIT 1")
    ).mappings().first()
    if not row:
        return None
    return float(row["updated_at"])


def fetch_rankings(connection: Connection) -> list[dict]:
    rows = connection.execute(
        text(
            """
            SELECT team_id, net_rank
            FROM team_rankings
            ORDER BY CASE WHEN net_rank IS NULL THEN 1 ELSE 0 END, net_rank ASC, team_id ASC
            """
        )
    ).mappings().all()
    return [
        {
            "team_id": row["team_id"],
            "net_rank": int(row["net_rank"]) if row["net_rank"] is not None else None,
        }
        for row in rows
    ]
