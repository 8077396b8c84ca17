# watchworthy/models/nhl_model.py
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from watchworthy.models.nhl_types import NhlGame, NhlGoal, NhlPredictionInput
from watchworthy.models.types import (
    EasterEgg,
    ExcitementResult,
    count_lead_changes,
    make_result,
    moneyline_balance,
    require_fields,
    require_teams,
    round_half_up,
)

BASE_SCORE = 4.0
LATE_P3_SECONDS = 120


def clock_seconds(clock: Optional[str]) -> Optional[int]:
    """'MM:SS' remaining -> seconds. None when the clock can't be read."""
    if not clock or ":" not in clock:
        return None
    mm, _, ss = clock.partition(":")
    try:
        return int(mm) * 60 + int(ss)
    except ValueError:
        return None


def _sorted_goals(game: NhlGame) -> List[NhlGoal]:
    return sorted(game["goals"], key=lambda g: (g["period"], -(clock_seconds(g.get("clock")) or 0)))


def _stat(game: NhlGame, side: str, key: str) -> float:
    stats = game.get(side) or {}
    return stats.get(key) or 0


def _both(game: NhlGame, key: str) -> float:
    return _stat(game, "homeStats", key) + _stat(game, "awayStats", key)


def _has_both_stats(game: NhlGame) -> bool:
    return bool(game.get("homeStats")) and bool(game.get("awayStats"))


def _count_lead_changes(goals: List[NhlGoal]) -> int:
    return count_lead_changes((g["homeScore"], g["awayScore"]) for g in goals)


def _max_deficits(goals: List[NhlGoal]) -> Tuple[int, int]:
    home_def = away_def = 0
    for g in goals:
        diff = g["homeScore"] - g["awayScore"]
        if diff < 0:
            home_def = max(home_def, -diff)
        elif diff > 0:
            away_def = max(away_def, diff)
    return home_def, away_def


def _is_comeback(game: NhlGame, goals: List[NhlGoal]) -> bool:
    home_def, away_def = _max_deficits(goals)
    final_diff = game["homeTeam"]["score"] - game["awayTeam"]["score"]
    return (home_def >= 2 and final_diff >= 0) or (away_def >= 2 and final_diff <= 0)


def _went_to_shootout(game: NhlGame) -> bool:
    return _both(game, "shootoutGoals") > 0


def _went_to_overtime(game: NhlGame) -> bool:
    return (game.get("period") or 3) > 3 or any(g["period"] > 3 for g in game["goals"])


# ---------------- Post-game factors ----------------

def _total_goals_points(total: int) -> float:
    if total <= 1:
        return -1.0
    if total <= 3:
        return 0.0
    if total <= 5:
        return 0.5
    return 1.0


def _closeness_points(diff: int) -> float:
    # OT/SO games always end one apart; the overtime factor covers them
    if diff == 0:
        return 0.5
    if diff == 1:
        return 0.3
    if diff == 2:
        return 0.0
    if diff == 3:
        return -0.3
    return -0.8


def _lead_changes_points(changes: int) -> float:
    if changes == 0:
        return 0.0
    if changes == 1:
        return 0.5
    if changes == 2:
        return 1.0
    return 1.2


def _overtime_points(game: NhlGame) -> float:
    if _went_to_shootout(game):
        return 1.5
    if _went_to_overtime(game):
        return 1.2
    return 0.0


def _third_period_points(goals: List[NhlGoal]) -> float:
    return min(0.6, sum(1 for g in goals if g["period"] == 3) * 0.2)


def _special_teams_points(game: NhlGame) -> float:
    total = _both(game, "powerPlayGoals") + _both(game, "shortHandedGoals")
    return min(0.6, total * 0.2)


def _shot_intensity_points(total: float) -> float:
    if total >= 70:
        return 0.3
    if total >= 60:
        return 0.15
    if total >= 50:
        return 0.0
    if total >= 40:
        return -0.1
    return -0.2


def _physicality_points(hits: float) -> float:
    if hits >= 50:
        return 0.3
    if hits >= 40:
        return 0.15
    if hits >= 30:
        return 0.0
    return -0.1


def standings_bonus(home_rank: Optional[int], away_rank: Optional[int]) -> float:
    if home_rank is None or away_rank is None:
        return 0.0
    if home_rank <= 5 and away_rank <= 5:
        return 1.0
    if home_rank <= 16 and away_rank <= 16:
        return 0.5
    if home_rank <= 5 or away_rank <= 5:
        return 0.3
    return 0.0


def calculate_nhl_excitement(
    game: NhlGame,
    home_rank: Optional[int] = None,
    away_rank: Optional[int] = None,
) -> ExcitementResult:
    require_teams(game, "goals", "nhl game")
    goals = _sorted_goals(game)
    home_score = game["homeTeam"]["score"]
    away_score = game["awayTeam"]["score"]

    points = BASE_SCORE
    points += _total_goals_points(home_score + away_score)
    points += _closeness_points(abs(home_score - away_score))
    points += _lead_changes_points(_count_lead_changes(goals))
    points += _overtime_points(game)
    points += _third_period_points(goals)
    points += _special_teams_points(game)
    points += 1.5 if _is_comeback(game, goals) else 0.0
    if _has_both_stats(game):
        points += _shot_intensity_points(_both(game, "shotsTotal"))
        points += _physicality_points(_both(game, "hits"))
    points += standings_bonus(home_rank, away_rank)
    return make_result(points)


# ---------------- Pre-game ----------------

def _competitiveness_points(home_ml: Optional[float], away_ml: Optional[float]) -> float:
    if home_ml is None or away_ml is None:
        return 0.0
    std = moneyline_balance(home_ml, away_ml)
    if std <= 0.03:
        return 0.6
    if std <= 0.06:
        return 0.4
    if std <= 0.10:
        return 0.2
    if std <= 0.15:
        return 0.0
    if std <= 0.20:
        return -0.3
    return -0.6


def predict_nhl_excitement(inp: NhlPredictionInput) -> ExcitementResult:
    """
    Pre-game excitement. The over/under stands in for total goals and the
    puck line for the final margin, both rounded to whole goals.
    """
    require_fields(inp, ("odds",), "nhl prediction input")
    odds = inp["odds"]

    points = BASE_SCORE
    if odds.get("overUnder") is not None:
        points += _total_goals_points(round_half_up(odds["overUnder"]))
    if odds.get("spread") is not None:
        points += _closeness_points(round_half_up(abs(odds["spread"])))
    points += _competitiveness_points(odds.get("homeMoneyline"), odds.get("awayMoneyline"))
    points += standings_bonus(inp.get("homeRank"), inp.get("awayRank"))
    return make_result(points, predicted=True)


# ---------------- Easter eggs ----------------

EGGS: Dict[str, EasterEgg] = {
    "cardiac": {"id": "cardiac", "emoji": "\U0001F493", "label": "Cardiac Finish",
                "tooltip": "A late 3rd period goal decided this one-goal game"},
    "rollercoaster": {"id": "rollercoaster", "emoji": "\U0001F3A2", "label": "Rollercoaster",
                      "tooltip": "The lead changed hands 3+ times"},
    "goalfest": {"id": "goalfest", "emoji": "\U0001F386", "label": "Goal Fest",
                 "tooltip": "Goals flying in from all directions"},
    "defensive": {"id": "defensive", "emoji": "\U0001F6E1️", "label": "Defensive Battle",
                  "tooltip": "A tight, defensive chess match"},
    "ot": {"id": "ot", "emoji": "\U0001F389", "label": "Free Hockey!",
           "tooltip": "This game went to overtime"},
    "shootout": {"id": "shootout", "emoji": "\U0001F3AF", "label": "Shootout",
                 "tooltip": "This game went all the way to a shootout"},
    "comeback": {"id": "comeback", "emoji": "\U0001F525", "label": "Comeback Trail",
                 "tooltip": "A team came back from 2+ goals down"},
    "shorthanded": {"id": "shorthanded", "emoji": "\U0001F9B8", "label": "Short-Handed Hero",
                    "tooltip": "A rare short-handed goal was scored"},
    "physical": {"id": "physical", "emoji": "\U0001F4AA", "label": "Physical Battle",
                 "tooltip": "A hard-hitting, physical game"},
}


def _is_late_third(goal: NhlGoal) -> bool:
    if goal["period"] != 3:
        return False
    secs = clock_seconds(goal.get("clock"))
    return secs is not None and secs <= LATE_P3_SECONDS


def detect_nhl_easter_eggs(game: NhlGame) -> List[EasterEgg]:
    require_teams(game, "goals", "nhl game")
    goals = _sorted_goals(game)
    home_score = game["homeTeam"]["score"]
    away_score = game["awayTeam"]["score"]
    total_goals = home_score + away_score

    hits = {
        "cardiac": any(_is_late_third(g) for g in goals) and abs(home_score - away_score) == 1,
        "rollercoaster": _count_lead_changes(goals) >= 3,
        "goalfest": total_goals >= 8,
        "defensive": total_goals <= 2,
        "ot": _went_to_overtime(game),
        "shootout": _went_to_shootout(game),
        "comeback": _is_comeback(game, goals),
        "shorthanded": _both(game, "shortHandedGoals") > 0,
        "physical": _both(game, "hits") >= 60 or _both(game, "penaltyMinutes") >= 30,
    }
    return [dict(egg) for key, egg in EGGS.items() if hits[key]]
