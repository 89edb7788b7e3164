from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from src.hothand.api.dependencies import get_gateways, get_store
from src.hothand.db.repositories.health_repository import fetch_health_summary
from src.hothand.db.store import CacheStore
from src.hothand.services.gateway import Gateways

router = APIRouter(tags=["health"])


@router.get("/health")
def get_health(
    request: Request,
    store: CacheStore = Depends(get_store),
    gateways: Gateways = Depends(get_gateways),
):
    _ = request.state.request_id
    return fetch_health_summary(store, upstream_configured=gateways.client.has_credentials)
