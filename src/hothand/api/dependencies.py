from __future__ import annotations

from fastapi import Request

from src.hothand.db.store import CacheStore
from src.hothand.errors import BadRequestError
from src.hothand.services.gateway import Gateways


def get_gateways(request: Request) -> Gateways:
    return request.app.state.gateways


def get_store(request: Request) -> CacheStore:
    return request.app.state.store


def require_player_and_team(player_id: str | None, team_id: str | None) -> tuple[str, str]:
    player_id = (player_id or "").strip()
    team_id = (team_id or "").strip()
    if not player_id or not team_id:
        raise BadRequestError("Missing playerId or teamId")
    return player_id, team_id
