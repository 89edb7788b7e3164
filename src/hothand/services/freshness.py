from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from src.hothand.config import Settings
from src.hothand.db.models import ResourceKind


class Fallback(str, Enum):
    SERVE_STALE = "serve_stale"
    # Error envelope with the upstream status.
    FAIL = "fail"
    # Empty list/object body with the upstream status.
    EMPTY = "empty"
    # Zeroed record with a 200.
    SYNTHESIZE = "synthesize"


@dataclass(frozen=True)
class CachedEntry:
    value: Any
    cached_at: float | None


def _always_valid(_value: Any) -> bool:
    return True


@dataclass(frozen=True)
class FreshnessPolicy:
    kind: ResourceKind
    ttl_seconds: int | None = None
    is_valid: Callable[[Any], bool] = _always_valid
    serve_stale: bool = False
    fallback: Fallback = Fallback.EMPTY

    def is_fresh(self, entry: CachedEntry | None, now: float) -> bool:
        if entry is None:
            return False
        if self.ttl_seconds is not None:
            if entry.cached_at is None or now - entry.cached_at >= self.ttl_seconds:
                return False
        return self.is_valid(entry.value)

    def on_upstream_failure(self, entry: CachedEntry | None) -> Fallback:
        if entry is not None and self.serve_stale:
            return Fallback.SERVE_STALE
        return self.fallback


def player_stats_have_content(stats: Any) -> bool:
    # An all-zero row usually means the season was cached before it had data.
    return not (stats.points_per_game == 0 and stats.three_pt_percentage == 0)


def build_policies(settings: Settings) -> dict[ResourceKind, FreshnessPolicy]:
    return {
        ResourceKind.TEAMS: FreshnessPolicy(ResourceKind.TEAMS),
        ResourceKind.ROSTERS: FreshnessPolicy(ResourceKind.ROSTERS),
        ResourceKind.TEAM_STATS: FreshnessPolicy(ResourceKind.TEAM_STATS),
        ResourceKind.PLAYER_STATS: FreshnessPolicy(
            ResourceKind.PLAYER_STATS,
            ttl_seconds=settings.player_stats_ttl_seconds,
            is_valid=player_stats_have_content,
            serve_stale=True,
            fallback=Fallback.FAIL,
        ),
        ResourceKind.HISTORICAL_PLAYER_STATS: FreshnessPolicy(
            ResourceKind.HISTORICAL_PLAYER_STATS,
            ttl_seconds=settings.historical_stats_ttl_seconds,
            serve_stale=True,
            fallback=Fallback.SYNTHESIZE,
        ),
        ResourceKind.RANKINGS: FreshnessPolicy(
            ResourceKind.RANKINGS,
            ttl_seconds=settings.rankings_ttl_seconds,
        ),
    }
