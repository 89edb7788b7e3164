from __future__ import annotations

from .common import CamelModel


class Team(CamelModel):
    id: str
    name: str = "Unknown"
    alias: str = ""
    market: str = ""


class RosterEntry(CamelModel):
    team_id: str
    player_id: str
    full_name: str = "Unknown"
    jersey_number: str | None = None
    position: str = ""
    experience: str = ""


class TeamStats(CamelModel):
    team_id: str
    games_played: int = 0
    minutes: float = 0
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
    points_in_paint_per_game: float = 0
    second_chance_points_per_game: float = 0
    fast_break_points_per_game: float = 0
    points_off_turnovers_per_game: float = 0
    true_shooting_percentage: float = 0
    efficiency: float = 0


class TeamRanking(CamelModel):
    team_id: str
    net_rank: int | None = None
