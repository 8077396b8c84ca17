# watchworthy/models/nba_model.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from watchworthy.models.nba_types import NbaGame, NbaPlay, NbaPredictionInput
from watchworthy.models.types import (
    EasterEgg,
    ExcitementResult,
    count_lead_changes,
    make_result,
    moneyline_balance,
    require_fields,
    require_teams,
)

BASE_SCORE = 4.5
DEFAULT_EXPECTED_TOTAL = 215.0  # league-average combined score
DEFAULT_EXPECTED_MARGIN = 5.0
WIN_PROB_SWING_THRESHOLD = 0.15


def _sorted_plays(game: NbaGame) -> List[NbaPlay]:
    # period ascending, clock counts down inside a period
    return sorted(game["plays"], key=lambda p: (p["period"], -p["clockValue"]))


def _stat(game: NbaGame, side: str, key: str) -> float:
    stats = game.get(side) or {}
    return stats.get(key) or 0


def _stat_lead_changes(game: NbaGame) -> float:
    for side in ("homeStats", "awayStats"):
        stats = game.get(side)
        if stats and stats.get("leadChanges") is not None:
            return stats["leadChanges"]
    return 0


def count_win_prob_swings(samples: List[Dict[str, Any]]) -> int:
    """
    Count consecutive win-probability samples whose home percentage moves
    by at least 0.15. Samples without a value are skipped.
    """
    swings = 0
    prev: Optional[float] = None
    for s in samples:
        pct = s.get("homeWinPercentage")
        if pct is None:
            continue
        if prev is not None and abs(pct - prev) >= WIN_PROB_SWING_THRESHOLD:
            swings += 1
        prev = pct
    return swings


# ---------------- Post-game factors ----------------

def _margin_points(margin: float) -> float:
    if margin <= 5:
        return 1.5
    if margin <= 10:
        return 1.0
    if margin <= 15:
        return 0.5
    if margin <= 20:
        return 0.0
    if margin <= 25:
        return -0.5
    if margin <= 35:
        return -1.0
    return -1.5


def _lead_change_bucket(changes: float) -> float:
    # any count, even zero from the play walk, earns the +0.2 floor
    if changes >= 16:
        return 1.5
    if changes >= 11:
        return 1.0
    if changes >= 6:
        return 0.5
    return 0.2


def _lead_changes_points(game: NbaGame, plays: List[NbaPlay]) -> float:
    changes = _stat_lead_changes(game)
    if changes > 0:
        return _lead_change_bucket(changes)
    return _lead_change_bucket(count_lead_changes((p["homeScore"], p["awayScore"]) for p in plays))


def _overtime_points(period: int) -> float:
    if period <= 4:
        return 0.0
    if period == 5:
        return 2.0
    return 2.5


def _fourth_quarter_closeness_points(plays: List[NbaPlay]) -> float:
    late = [p for p in plays if p["period"] == 4 and p["clockValue"] <= 120]
    if any(p["clockValue"] <= 60 and abs(p["homeScore"] - p["awayScore"]) <= 3 for p in late):
        return 1.5
    if any(abs(p["homeScore"] - p["awayScore"]) <= 5 for p in late):
        return 1.0
    return 0.0


def _comeback_points(game: NbaGame, plays: List[NbaPlay]) -> float:
    home_largest = _stat(game, "homeStats", "largestLead")
    away_largest = _stat(game, "awayStats", "largestLead")
    final_home = game["homeTeam"]["score"]
    final_away = game["awayTeam"]["score"]
    margin = final_home - final_away

    if (away_largest >= 15 and margin >= 0) or (home_largest >= 15 and margin <= 0):
        return 1.5
    if (away_largest >= 10 and margin >= 0) or (home_largest >= 10 and margin <= 0):
        return 0.8

    # box score has nothing; walk the plays
    max_home_deficit = max_away_deficit = 0
    for p in plays:
        diff = p["homeScore"] - p["awayScore"]
        if diff < 0:
            max_home_deficit = max(max_home_deficit, -diff)
        elif diff > 0:
            max_away_deficit = max(max_away_deficit, diff)

    home_held = final_home >= final_away
    away_held = final_away >= final_home
    if (max_home_deficit >= 15 and home_held) or (max_away_deficit >= 15 and away_held):
        return 1.5
    if (max_home_deficit >= 10 and home_held) or (max_away_deficit >= 10 and away_held):
        return 0.8
    return 0.0


def _win_prob_points(swings: Optional[int]) -> float:
    swings = swings or 0
    if swings >= 15:
        return 1.0
    if swings >= 10:
        return 0.7
    if swings >= 5:
        return 0.4
    if swings >= 2:
        return 0.2
    return 0.0


def _total_points_points(total: float) -> float:
    if total >= 270:
        return 0.4
    if total >= 250:
        return 0.25
    if total >= 230:
        return 0.15
    return 0.0


def _pace_points(game: NbaGame) -> float:
    total = _stat(game, "homeStats", "fastBreakPoints") + _stat(game, "awayStats", "fastBreakPoints")
    if total >= 30:
        return 0.3
    if total >= 20:
        return 0.15
    return 0.0


def standings_bonus(home_rank: Optional[int], away_rank: Optional[int]) -> float:
    if home_rank is None or away_rank is None:
        return 0.0
    if home_rank <= 5 and away_rank <= 5:
        return 1.0
    if home_rank <= 10 and away_rank <= 10:
        return 0.6
    if home_rank <= 5 or away_rank <= 5:
        return 0.3
    return 0.0


def calculate_nba_excitement(
    game: NbaGame,
    home_rank: Optional[int] = None,
    away_rank: Optional[int] = None,
) -> ExcitementResult:
    require_teams(game, "plays", "nba game")
    plays = _sorted_plays(game)
    home_score = game["homeTeam"]["score"]
    away_score = game["awayTeam"]["score"]

    points = BASE_SCORE
    points += _margin_points(abs(home_score - away_score))
    points += _lead_changes_points(game, plays)
    points += _overtime_points(game.get("period") or 4)
    points += _fourth_quarter_closeness_points(plays)
    points += _comeback_points(game, plays)
    points += _win_prob_points(game.get("winProbSwings"))
    points += _total_points_points(home_score + away_score)
    points += _pace_points(game)
    points += standings_bonus(home_rank, away_rank)
    return make_result(points)


# ---------------- Pre-game ----------------

def _competitiveness_points(home_ml: Optional[float], away_ml: Optional[float]) -> float:
    """Two-way moneyline balance; no draw in basketball."""
    if home_ml is None or away_ml is None:
        return 0.0
    std = moneyline_balance(home_ml, away_ml)
    if std <= 0.03:
        return 0.5
    if std <= 0.06:
        return 0.3
    if std <= 0.10:
        return 0.1
    if std <= 0.15:
        return 0.0
    if std <= 0.20:
        return -0.2
    return -0.5


def predict_nba_excitement(inp: NbaPredictionInput) -> ExcitementResult:
    """
    Pre-game excitement from betting lines.

    Accepts:
      - odds.overUnder   -> expected total points (default 215)
      - odds.spread      -> expected margin (default 5)
      - odds.*Moneyline  -> competitiveness
      - homeRank/awayRank
    """
    require_fields(inp, ("odds",), "nba prediction input")
    odds = inp["odds"]
    total = odds.get("overUnder")
    spread = odds.get("spread")
    expected_total = DEFAULT_EXPECTED_TOTAL if total is None else total
    expected_margin = DEFAULT_EXPECTED_MARGIN if spread is None else abs(spread)

    points = BASE_SCORE
    points += _margin_points(expected_margin)
    points += _total_points_points(expected_total)
    points += _competitiveness_points(odds.get("homeMoneyline"), odds.get("awayMoneyline"))
    points += standings_bonus(inp.get("homeRank"), inp.get("awayRank"))
    return make_result(points, predicted=True)


# ---------------- Easter eggs ----------------

EGGS: Dict[str, EasterEgg] = {
    "cardiac": {"id": "cardiac", "emoji": "\U0001F493", "label": "Cardiac Finish",
                "tooltip": "Neck and neck in the final minute"},
    "rollercoaster": {"id": "rollercoaster", "emoji": "\U0001F3A2", "label": "Rollercoaster",
                      "tooltip": "The lead swung back and forth constantly"},
    "drama": {"id": "drama", "emoji": "\U0001F3AD", "label": "Drama Alert",
              "tooltip": "Win probability was all over the place"},
    "offensive": {"id": "offensive", "emoji": "\U0001F4A5", "label": "Offensive Explosion",
                  "tooltip": "Points galore in this high-scoring affair"},
    "defensive": {"id": "defensive", "emoji": "\U0001F6E1️", "label": "Defensive Battle",
                  "tooltip": "A grinding, low-scoring defensive game"},
    "overtime": {"id": "overtime", "emoji": "⏰", "label": "Extra Time",
                 "tooltip": "This game needed overtime to decide"},
    "comeback": {"id": "comeback", "emoji": "\U0001F525", "label": "Comeback Trail",
                 "tooltip": "A team erased a 15+ point deficit"},
}


def detect_nba_easter_eggs(game: NbaGame) -> List[EasterEgg]:
    require_teams(game, "plays", "nba game")
    home_score = game["homeTeam"]["score"]
    away_score = game["awayTeam"]["score"]
    total = home_score + away_score
    margin = home_score - away_score
    home_largest = _stat(game, "homeStats", "largestLead")
    away_largest = _stat(game, "awayStats", "largestLead")

    hits = {
        "cardiac": any(
            p["period"] == 4 and p["clockValue"] <= 60 and abs(p["homeScore"] - p["awayScore"]) <= 3
            for p in game["plays"]
        ),
        "rollercoaster": _stat_lead_changes(game) >= 16,
        "drama": (game.get("winProbSwings") or 0) >= 15,
        "offensive": total >= 270,
        "defensive": total <= 170,
        "overtime": (game.get("period") or 4) > 4,
        "comeback": (away_largest >= 15 and margin >= 0) or (home_largest >= 15 and margin <= 0),
    }
    return [dict(egg) for key, egg in EGGS.items() if hits[key]]
