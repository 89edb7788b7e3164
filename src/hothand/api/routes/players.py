from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from src.hothand.api.dependencies import get_gateways, require_player_and_team
from src.hothand.services.classifier import assess_player
from src.hothand.services.gateway import Gateways
from src.hothand.services.resources import json_body

router = APIRouter(tags=["players"])


@router.get("/player-stats")
async def get_player_stats(
    request: Request,
    player_id: str | None = Query(default=None, alias="playerId"),
    team_id: str | None = Query(default=None, alias="teamId"),
    gateways: Gateways = Depends(get_gateways),
):
    _ = request.state.request_id
    key = require_player_and_team(player_id, team_id)
    return json_body(await gateways.player_stats.get(key))


@router.get("/historical-player-stats")
async def get_historical_player_stats(
    request: Request,
    player_id: str | None = Query(default=None, alias="playerId"),
    team_id: str | None = Query(default=None, alias="teamId"),
    gateways: Gateways = Depends(get_gateways),
):
    _ = request.state.request_id
    key = require_player_and_team(player_id, team_id)
    return json_body(await gateways.historical_player_stats.get(key))


@router.get("/player-threat")
async def get_player_threat(
    request: Request,
    player_id: str | None = Query(default=None, alias="playerId"),
    team_id: str | None = Query(default=None, alias="teamId"),
    gateways: Gateways = Depends(get_gateways),
):
    _ = request.state.request_id
    key = require_player_and_team(player_id, team_id)
    stats = await gateways.player_stats.get(key)
    return json_body(assess_player(stats, team_id=key[1]))
