from __future__ import annotations

from src.hothand.db.models import ResourceKind
from src.hothand.db.store import CacheStore


def fetch_health_summary(store: CacheStore, *, upstream_configured: bool) -> dict:
    return {
        "database_path": str(store.engine.url.database or ""),
        "upstream_configured": upstream_configured,
        "tables": {kind.value: store.count(kind) for kind in ResourceKind},
    }
