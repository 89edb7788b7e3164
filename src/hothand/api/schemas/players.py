from __future__ import annotations

from typing import Literal

from pydantic import Field

from .common import CamelModel

ShooterStatus = Literal["lethal", "fifty-fifty", "let-him-shoot", "unknown"]


class PlayerStats(CamelModel):
    player_id: str
    games_played: int = 0
    minutes_per_game: float = 0
    points_per_game: float = 0
    rebounds_per_game: float = 0
    assists_per_game: float = 0
    steals_per_game: float = 0
    blocks_per_game: float = 0
    turnovers_per_game: float = 0
    personal_fouls_per_game: float = 0
    three_pt_percentage: float = 0
    three_pt_attempts_per_game: float = 0
    three_pt_made_per_game: float = 0
    fg_percentage: float = 0
    fg_attempts_per_game: float = 0
    fg_made_per_game: float = 0
    ft_percentage: float = 0
    ft_attempts_per_game: float = 0
    ft_made_per_game: float = 0
    true_shooting_percentage: float = 0
    efficiency: float = 0
    # Per-game logs are not fetched upstream, so this stays empty.
    game_log: list[dict] = Field(default_factory=list)


class HistoricalPlayerStats(CamelModel):
    player_id: str
    team_id: str
    year1: int
    three_pt_pct_year1: float = 0
    year2: int
    three_pt_pct_year2: float = 0
    year3: int
    three_pt_pct_year3: float = 0


class PlayerThreat(CamelModel):
    player_id: str
    team_id: str
    status: ShooterStatus
    three_pt_percentage: float
    three_pt_attempts_per_game: float
