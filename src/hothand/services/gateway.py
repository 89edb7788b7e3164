from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from src.hothand.config import Settings
from src.hothand.db.models import ResourceKind
from src.hothand.db.store import CacheStore
from src.hothand.errors import UpstreamError, UpstreamUnavailableError
from src.hothand.services.freshness import Fallback, FreshnessPolicy, build_policies
from src.hothand.services.resources import (
    HistoricalPlayerStatsResource,
    PlayerStatsResource,
    RankingsResource,
    Resource,
    RosterResource,
    TeamStatsResource,
    TeamsResource,
)
from src.hothand.services.upstream_client import UpstreamClient

logger = logging.getLogger("hothand.gateway")


class StatsGateway:
    """Read-through cache for one resource kind.

    A fresh cached entry is served as-is. Otherwise the upstream is fetched,
    normalized and written through. When the upstream fails, the policy picks
    between the stale entry, an empty body, a synthesized record or an error.
    Concurrent misses on the same key are not deduplicated.
    """

    def __init__(
        self,
        *,
        store: CacheStore,
        client: UpstreamClient,
        resource: Resource,
        policy: FreshnessPolicy,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._client = client
        self._resource = resource
        self._policy = policy
        self._clock = clock

    @property
    def kind(self) -> ResourceKind:
        return self._resource.kind

    async def get(self, key: Any = None) -> Any:
        now = self._clock()
        cached = await asyncio.to_thread(self._resource.load, self._store, key)
        if self._policy.is_fresh(cached, now):
            logger.debug("Cache hit for %s %s", self.kind.value, key)
            return cached.value

        await asyncio.to_thread(self._resource.check_request, self._store, key)

        try:
            raw = await self._client.fetch_resource(self._resource.path(key))
        except UpstreamError as error:
            return self._fall_back(key, cached, error)

        value = self._resource.normalize(raw, key)
        served = await asyncio.to_thread(self._resource.save, self._store, key, value, now)
        logger.info("Refreshed %s %s from upstream", self.kind.value, key)
        return served

    def _fall_back(self, key: Any, cached: Any, error: UpstreamError) -> Any:
        decision = self._policy.on_upstream_failure(cached)
        logger.warning("Upstream failed for %s %s (%s); falling back to %s", self.kind.value, key, error, decision.value)

        if decision is Fallback.SERVE_STALE:
            return cached.value
        if decision is Fallback.SYNTHESIZE:
            return self._resource.empty(key)
        if decision is Fallback.EMPTY:
            raise UpstreamUnavailableError.from_upstream(error, payload=self._resource.empty(key)) from error
        raise UpstreamUnavailableError.from_upstream(error) from error


@dataclass(frozen=True)
class Gateways:
    client: UpstreamClient
    teams: StatsGateway
    roster: StatsGateway
    team_stats: StatsGateway
    player_stats: StatsGateway
    historical_player_stats: StatsGateway
    rankings: StatsGateway


def build_gateways(
    store: CacheStore,
    client: UpstreamClient,
    settings: Settings,
    *,
    clock: Callable[[], float] = time.time,
) -> Gateways:
    policies = build_policies(settings)
    season = settings.season_year

    def gateway(resource: Resource) -> StatsGateway:
        return StatsGateway(
            store=store,
            client=client,
            resource=resource,
            policy=policies[resource.kind],
            clock=clock,
        )

    return Gateways(
        client=client,
        teams=gateway(TeamsResource()),
        roster=gateway(RosterResource()),
        team_stats=gateway(TeamStatsResource(season)),
        player_stats=gateway(PlayerStatsResource(season)),
        historical_player_stats=gateway(HistoricalPlayerStatsResource(season)),
        rankings=gateway(RankingsResource(season)),
    )
