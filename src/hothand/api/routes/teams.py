from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from src.hothand.api.dependencies import get_gateways
from src.hothand.services.gateway import Gateways
from src.hothand.services.resources import json_body

router = APIRouter(tags=["teams"])


@router.get("/teams")
async def get_teams(request: Request, gateways: Gateways = Depends(get_gateways)):
    _ = request.state.request_id
    return json_body(await gateways.teams.get())


@router.get("/team/{team_id}/roster")
async def get_team_roster(request: Request, team_id: str, gateways: Gateways = Depends(get_gateways)):
    _ = request.state.request_id
    return json_body(await gateways.roster.get(team_id))


@router.get("/team/{team_id}/stats")
async def get_team_stats(request: Request, team_id: str, gateways: Gateways = Depends(get_gateways)):
    _ = request.state.request_id
    return json_body(await gateways.team_stats.get(team_id))


@router.get("/rankings")
async def get_rankings(request: Request, gateways: Gateways = Depends(get_gateways)):
    _ = request.state.request_id
    return json_body(await gateways.rankings.get())
