from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_UPSTREAM_BASE_URL = "https://api.sportradar.com/ncaamb/trial/v8/en"
BACKOFF_MODES = {"exponential", "linear"}


def _to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_env: str
    debug: bool
    log_level: str
    db_path: Path
    cors_allow_origins: list[str]
    request_timeout_seconds: int
    sportradar_api_key: str
    upstream_base_url: str
    upstream_timeout_seconds: int
    upstream_max_concurrency: int
    upstream_retry_attempts: int
    upstream_retry_base_seconds: float
    upstream_retry_max_seconds: float
    upstream_backoff: str
    season_year: int
    player_stats_ttl_seconds: int
    historical_stats_ttl_seconds: int
    rankings_ttl_seconds: int
    store_batch_size: int
    api_cache_teams_seconds: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    env = os.getenv("HOTHAND_APP_ENV", "development").strip().lower()
    db_path = Path(os.getenv("HOTHAND_DB_PATH", str(PROJECT_ROOT / "data" / "ncaamb_data.db"))).expanduser()
    cors_raw = os.getenv("HOTHAND_CORS_ALLOW_ORIGINS", "http://localhost:3000")
    origins = [entry.strip() for entry in cors_raw.split(",") if entry.strip()]
    if not origins:
        origins = ["http://localhost:3000"]

    backoff = os.getenv("HOTHAND_UPSTREAM_BACKOFF", "exponential").strip().lower()
    if backoff not in BACKOFF_MODES:
        raise ValueError(f"HOTHAND_UPSTREAM_BACKOFF must be one of {sorted(BACKOFF_MODES)}, got {backoff!r}")

    return Settings(
        app_env=env,
        debug=_to_bool(os.getenv("HOTHAND_DEBUG"), default=(env != "production")),
        log_level=os.getenv("HOTHAND_LOG_LEVEL", "INFO").strip().upper(),
        db_path=db_path,
        cors_allow_origins=origins,
        request_timeout_seconds=int(os.getenv("HOTHAND_REQUEST_TIMEOUT_SECONDS", "30")),
        sportradar_api_key=os.getenv("SPORTRADAR_API_KEY", "").strip(),
        upstream_base_url=os.getenv("HOTHAND_UPSTREAM_BASE_URL", DEFAULT_UPSTREAM_BASE_URL),
        upstream_timeout_seconds=int(os.getenv("HOTHAND_UPSTREAM_TIMEOUT_SECONDS", "15")),
        upstream_max_concurrency=int(os.getenv("HOTHAND_UPSTREAM_MAX_CONCURRENCY", "4")),
        upstream_retry_attempts=int(os.getenv("HOTHAND_UPSTREAM_RETRY_ATTEMPTS", "3")),
        upstream_retry_base_seconds=float(os.getenv("HOTHAND_UPSTREAM_RETRY_BASE_SECONDS", "1.0")),
        upstream_retry_max_seconds=float(os.getenv("HOTHAND_UPSTREAM_RETRY_MAX_SECONDS", "30.0")),
        upstream_backoff=backoff,
        season_year=int(os.getenv("HOTHAND_SEASON_YEAR", "2024")),
        player_stats_ttl_seconds=int(os.getenv("HOTHAND_PLAYER_STATS_TTL_SECONDS", str(60 * 60))),
        historical_stats_ttl_seconds=int(os.getenv("HOTHAND_HISTORICAL_STATS_TTL_SECONDS", str(24 * 60 * 60))),
        rankings_ttl_seconds=int(os.getenv("HOTHAND_RANKINGS_TTL_SECONDS", str(24 * 60 * 60))),
        store_batch_size=int(os.getenv("HOTHAND_STORE_BATCH_SIZE", "500")),
        api_cache_teams_seconds=int(os.getenv("HOTHAND_API_CACHE_TEAMS_SECONDS", "300")),
    )


def reset_settings_cache() -> None:
    get_settings.cache_clear()
