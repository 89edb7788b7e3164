from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from src.hothand.config import Settings, get_settings
from src.hothand.errors import ConfigurationError, RetriesExhaustedError, UpstreamError

logger = logging.getLogger("hothand.upstream")

THROTTLED_STATUS = 429


@dataclass
class UpstreamClient:
    """Sportradar client: one JSON GET per resource path, retrying on 429 only."""

    api_key: str
    base_url: str
    timeout_seconds: int = 15
    max_concurrency: int = 4
    retry_attempts: int = 3
    retry_base_seconds: float = 1.0
    retry_max_seconds: float = 30.0
    backoff: str = "exponential"
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def __post_init__(self) -> None:
        self.retry_attempts = max(1, self.retry_attempts)
        self.max_concurrency = max(1, self.max_concurrency)
        if self.backoff not in {"exponential", "linear"}:
            raise ValueError(f"Unknown backoff mode: {self.backoff}")
        self._semaphore: asyncio.Semaphore | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "UpstreamClient":
        settings = settings or get_settings()
        return cls(
            api_key=settings.sportradar_api_key,
            base_url=settings.upstream_base_url,
            timeout_seconds=settings.upstream_timeout_seconds,
            max_concurrency=settings.upstream_max_concurrency,
            retry_attempts=settings.upstream_retry_attempts,
            retry_base_seconds=settings.upstream_retry_base_seconds,
            retry_max_seconds=settings.upstream_retry_max_seconds,
            backoff=settings.upstream_backoff,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    def backoff_delay(self, attempt: int) -> float:
        if self.backoff == "linear":
            delay = self.retry_base_seconds * attempt
        else:
            delay = self.retry_base_seconds * 2 ** (attempt - 1)
        return min(delay, self.retry_max_seconds)

    async def fetch_resource(self, path: str) -> dict | list:
        if not self.api_key:
            raise ConfigurationError("Missing SPORTRADAR_API_KEY; upstream access is not configured.")

        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)

        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        async with self._semaphore:
            for attempt in range(1, self.retry_attempts + 1):
                try:
                    return await asyncio.to_thread(self._request, url)
                except UpstreamError as error:
                    if error.upstream_status != THROTTLED_STATUS:
                        raise
                    if attempt >= self.retry_attempts:
                        break
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        "Rate limited by upstream (attempt %s/%s), retrying in %.2fs: %s",
                        attempt,
                        self.retry_attempts,
                        delay,
                        url,
                    )
                    await self.sleep(delay)

        raise RetriesExhaustedError(
            f"Upstream still throttling after {self.retry_attempts} attempts: {url}",
            attempts=self.retry_attempts,
        )

    def _request(self, url: str) -> dict | list:
        request = urllib.request.Request(
            url,
            headers={
                "User-Agent": "hothand/1.0",
                "accept": "application/json",
                "x-api-key": self.api_key,
            },
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                raw = response.read()
        except urllib.error.HTTPError as error:
            raise UpstreamError(f"Upstream returned {error.code} for {url}", upstream_status=error.code) from error
        except (urllib.error.URLError, TimeoutError) as error:
            raise UpstreamError(f"Upstream request failed for {url}: {error}") from error

        try:
            return json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, ValueError) as error:
            raise UpstreamError(f"Upstream returned an undecodable body for {url}: {error}") from error
