from __future__ import annotations

import math
from typing import Any

from src.hothand.api.schemas.players import PlayerStats, PlayerThreat, ShooterStatus

# Earlier revisions of the viewer used 35% / 0.2 attempts; these are the current cutoffs.
LETHAL_PCT = 37.0
FIFTY_FIFTY_PCT = 30.0
LETHAL_MIN_ATTEMPTS = 2.0
MIN_ATTEMPTS = 0.5


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(parsed) or math.isinf(parsed):
        return None
    return parsed


def classify(three_pt_pct: Any, three_pt_attempts_per_game: Any) -> ShooterStatus:
    """Rate how dangerous a shooter is from 3P% (0-100) and 3PA per game."""
    pct = _as_number(three_pt_pct)
    attempts = _as_number(three_pt_attempts_per_game)
    if pct is None or attempts is None:
        return "unknown"
    if attempts <= MIN_ATTEMPTS:
        return "unknown"
    if pct >= LETHAL_PCT and attempts >= LETHAL_MIN_ATTEMPTS:
        return "lethal"
    if FIFTY_FIFTY_PCT <= pct < LETHAL_PCT or (pct >= LETHAL_PCT and attempts < LETHAL_MIN_ATTEMPTS):
        return "fifty-fifty"
    if pct < FIFTY_FIFTY_PCT:
        return "let-him-shoot"
    return "unknown"


def assess_player(stats: PlayerStats, team_id: str) -> PlayerThreat:
    return PlayerThreat(
        player_id=stats.player_id,
        team_id=team_id,
        status=classify(stats.three_pt_percentage, stats.three_pt_attempts_per_game),
        three_pt_percentage=stats.three_pt_percentage,
        three_pt_attempts_per_game=stats.three_pt_attempts_per_game,
    )
