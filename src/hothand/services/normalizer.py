"""Map raw Sportradar payloads onto flat cache records.

Every accessor here is defensive: a missing or mistyped nested path produces
the field's default, never an exception. Upstream percentages are fractions and
are scaled to 0-100.
"""

from __future__ import annotations

import math
from typing import Any

from src.hothand.api.schemas.players import HistoricalPlayerStats, PlayerStats
from src.hothand.api.schemas.teams import RosterEntry, Team, TeamRanking, TeamStats

REGULAR_SEASON = "REG"
HISTORY_DEPTH = 3


def dig(payload: Any, *path: str | int) -> Any:
    current = payload
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(parsed) or math.isinf(parsed):
        return default
    return parsed


def integer(value: Any, default: int = 0) -> int:
    return int(number(value, default))


def text(value: Any, default: str = "") -> str:
    if value is None or isinstance(value, (dict, list)):
        return default
    token = str(value).strip()
    return token or default


def percent(value: Any) -> float:
    return number(value) * 100


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def normalize_teams(raw: Any) -> list[Team]:
    return [
        Team(
            id=text(team.get("id")),
            name=text(team.get("name"), "Unknown"),
            alias=text(team.get("alias")),
            market=text(team.get("market")),
        )
        for team in _list(dig(raw, "teams"))
        if isinstance(team, dict)
    ]


def normalize_roster(raw: Any, team_id: str) -> list[RosterEntry]:
    return [
        RosterEntry(
            team_id=team_id,
            player_id=text(player.get("id")),
            full_name=text(player.get("full_name"), "Unknown"),
            jersey_number=text(player.get("jersey_number")) or None,
            position=text(player.get("position")),
            experience=text(player.get("experience")),
        )
        for player in _list(dig(raw, "players"))
        if isinstance(player, dict)
    ]


def normalize_team_stats(raw: Any, team_id: str) -> TeamStats:
    total = dig(raw, "own_record", "total") or {}
    average = dig(raw, "own_record", "average") or {}
    return TeamStats(
        team_id=team_id,
        games_played=integer(dig(total, "games_played")),
        minutes=number(dig(total, "minutes")),
        points_per_game=number(dig(average, "points")),
        rebounds_per_game=number(dig(average, "rebounds")),
        assists_per_game=number(dig(average, "assists")),
        steals_per_game=number(dig(average, "steals")),
        blocks_per_game=number(dig(average, "blocks")),
        turnovers_per_game=number(dig(average, "turnovers")),
        personal_fouls_per_game=number(dig(average, "personal_fouls")),
        three_pt_percentage=percent(dig(total, "three_points_pct")),
        three_pt_attempts_per_game=number(dig(average, "three_points_att")),
        three_pt_made_per_game=number(dig(average, "three_points_made")),
        fg_percentage=percent(dig(total, "field_goals_pct")),
        fg_attempts_per_game=number(dig(average, "field_goals_att")),
        fg_made_per_game=number(dig(average, "field_goals_made")),
        ft_percentage=percent(dig(total, "free_throws_pct")),
        ft_attempts_per_game=number(dig(average, "free_throws_att")),
        ft_made_per_game=number(dig(average, "free_throws_made")),
        points_in_paint_per_game=number(dig(average, "points_in_paint")),
        second_chance_points_per_game=number(dig(average, "second_chance_pts")),
        fast_break_points_per_game=number(dig(average, "fast_break_pts")),
        points_off_turnovers_per_game=number(dig(average, "points_off_turnovers")),
        true_shooting_percentage=percent(dig(total, "true_shooting_pct")),
        efficiency=number(dig(total, "efficiency")),
    )


def _regular_seasons(raw: Any) -> list[dict]:
    return [
        season
        for season in _list(dig(raw, "seasons"))
        if isinstance(season, dict) and season.get("type") == REGULAR_SEASON
    ]


def _team_block(season: dict, team_id: str | None) -> dict:
    blocks = [block for block in _list(season.get("teams")) if isinstance(block, dict)]
    if not blocks:
        return {}
    if team_id:
        for block in blocks:
            if block.get("id") == team_id:
                return block
    return blocks[0]


def normalize_player_stats(raw: Any, player_id: str, team_id: str | None, season_year: int) -> PlayerStats:
    season = next(
        (entry for entry in _regular_seasons(raw) if integer(entry.get("year"), -1) == season_year),
        None,
    )
    if season is None:
        return PlayerStats(player_id=player_id)

    block = _team_block(season, team_id)
    total = block.get("total") or {}
    average = block.get("average") or {}
    return PlayerStats(
        player_id=player_id,
        games_played=integer(dig(total, "games_played")),
        minutes_per_game=number(dig(average, "minutes")),
        points_per_game=number(dig(average, "points")),
        rebounds_per_game=number(dig(average, "rebounds")),
        assists_per_game=number(dig(average, "assists")),
        steals_per_game=number(dig(average, "steals")),
        blocks_per_game=number(dig(average, "blocks")),
        turnovers_per_game=number(dig(average, "turnovers")),
        personal_fouls_per_game=number(dig(average, "personal_fouls")),
        three_pt_percentage=percent(dig(total, "three_points_pct")),
        three_pt_attempts_per_game=number(dig(average, "three_points_att")),
        three_pt_made_per_game=number(dig(average, "three_points_made")),
        fg_percentage=percent(dig(total, "field_goals_pct")),
        fg_attempts_per_game=number(dig(average, "field_goals_att")),
        fg_made_per_game=number(dig(average, "field_goals_made")),
        ft_percentage=percent(dig(total, "free_throws_pct")),
        ft_attempts_per_game=number(dig(average, "free_throws_att")),
        ft_made_per_game=number(dig(average, "free_throws_made")),
        true_shooting_percentage=percent(dig(total, "true_shooting_pct")),
        efficiency=number(dig(total, "efficiency")),
    )


def empty_historical_stats(player_id: str, team_id: str, current_year: int) -> HistoricalPlayerStats:
    return HistoricalPlayerStats(
        player_id=player_id,
        team_id=team_id,
        year1=current_year,
        year2=current_year - 1,
        year3=current_year - 2,
    )


def normalize_historical_stats(raw: Any, player_id: str, team_id: str, current_year: int) -> HistoricalPlayerStats:
    seasons = sorted(_regular_seasons(raw), key=lambda season: integer(season.get("year")), reverse=True)
    seasons = seasons[:HISTORY_DEPTH]
    if not seasons:
        return empty_historical_stats(player_id, team_id, current_year)

    slots: list[tuple[int, float]] = []
    for season in seasons:
        block = _team_block(season, None)
        slots.append((integer(season.get("year")), percent(dig(block, "total", "three_points_pct"))))
    while len(slots) < HISTORY_DEPTH:
        slots.append((slots[-1][0] - 1, 0.0))

    return HistoricalPlayerStats(
        player_id=player_id,
        team_id=team_id,
        year1=slots[0][0],
        three_pt_pct_year1=slots[0][1],
        year2=slots[1][0],
        three_pt_pct_year2=slots[1][1],
        year3=slots[2][0],
        three_pt_pct_year3=slots[2][1],
    )


def normalize_rankings(raw: Any) -> list[TeamRanking]:
    rankings = []
    for entry in _list(dig(raw, "rankings")):
        if not isinstance(entry, dict):
            continue
        rank = integer(entry.get("net_rank"))
        rankings.append(TeamRanking(team_id=text(entry.get("id")), net_rank=rank if rank > 0 else None))
    return rankings
