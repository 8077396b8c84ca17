# watchworthy/models/football_model.py
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from watchworthy.models.football_types import (
    FootballMatch,
    FootballPredictionInput,
    GoalEvent,
)
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
PREDICTION_BASE_SCORE = 3.5
DEFAULT_TOTAL_TEAMS = 20

KNOCKOUT_ROUND_BONUS: Dict[str, float] = {
    "Knockout Round Playoffs": 0.5,
    "Rd of 16": 0.7,
    "Quarterfinals": 0.9,
    "Semifinals": 1.1,
    "Final": 1.3,
}
DEFAULT_KNOCKOUT_BONUS = 0.5
CLOSE_AGGREGATE_BONUS = 0.5


def _sorted_goals(match: FootballMatch) -> List[GoalEvent]:
    # stable: same-minute goals keep feed order
    return sorted(match["goals"], key=lambda g: g["minute"])


def _final_scores(match: FootballMatch) -> Tuple[int, int]:
    return match["homeTeam"]["score"], match["awayTeam"]["score"]


def _red_cards(match: FootballMatch) -> int:
    return sum(1 for c in (match.get("cards") or []) if c.get("cardType") == "red")


def _yellow_cards(match: FootballMatch) -> int:
    return sum(1 for c in (match.get("cards") or []) if c.get("cardType") == "yellow")


# ---------------- Timeline walks ----------------

def _running_scores(goals: List[GoalEvent], home_id: str) -> List[Tuple[int, int]]:
    """(home, away) after each goal; a goal not credited to home counts for away."""
    home = away = 0
    out = []
    for g in goals:
        if g["teamId"] == home_id:
            home += 1
        else:
            away += 1
        out.append((home, away))
    return out


def _count_lead_changes(goals: List[GoalEvent], home_id: str) -> int:
    return count_lead_changes(_running_scores(goals, home_id))


def _max_deficits(goals: List[GoalEvent], home_id: str) -> Tuple[int, int]:
    """(largest home deficit, largest away deficit) over the running score."""
    home_def = away_def = 0
    for home, away in _running_scores(goals, home_id):
        home_def = max(home_def, away - home)
        away_def = max(away_def, home - away)
    return home_def, away_def


def _is_comeback(goals: List[GoalEvent], home_id: str, final_diff: int) -> bool:
    home_def, away_def = _max_deficits(goals, home_id)
    return (home_def >= 2 and final_diff >= 0) or (away_def >= 2 and final_diff <= 0)


# ---------------- Post-game factors ----------------

def _total_goals_points(total_goals: int) -> float:
    if total_goals == 0:
        return -1.5
    if total_goals == 1:
        return -0.5
    if total_goals == 2:
        return 0.0
    if total_goals == 3:
        return 0.5
    if total_goals == 4:
        return 0.8
    return 1.2


def _closeness_points(home_score: int, away_score: int) -> float:
    diff = abs(home_score - away_score)
    if diff == 0:
        return 0.5
    if diff == 1:
        return 0.3
    if diff == 2:
        return 0.0
    if diff == 3:
        return -0.3
    return -0.8


def _late_goals_points(goals: List[GoalEvent]) -> float:
    pts = 0.0
    for g in goals:
        if g["minute"] >= 90:
            pts += 0.7
        elif g["minute"] >= 75:
            pts += 0.4
    return min(1.2, pts)


def _lead_changes_points(changes: int) -> float:
    if changes == 0:
        return 0.0
    if changes == 1:
        return 0.8
    return 1.5


def _red_cards_points(reds: int) -> float:
    return min(0.6, reds * 0.3)


def _comeback_points(goals: List[GoalEvent], home_id: str, final_diff: int) -> float:
    return 1.5 if _is_comeback(goals, home_id, final_diff) else 0.0


def _late_equalizer_points(goals: List[GoalEvent], home_score: int, away_score: int) -> float:
    if home_score != away_score or not goals:
        return 0.0
    return 1.0 if goals[-1]["minute"] >= 85 else 0.0


def _shot_intensity_points(total_shots: float) -> float:
    if total_shots >= 30:
        return 0.3
    if total_shots >= 24:
        return 0.15
    if total_shots >= 18:
        return 0.0
    if total_shots >= 12:
        return -0.1
    return -0.2


def _shots_on_target_points(total: float) -> float:
    if total >= 14:
        return 0.3
    if total >= 10:
        return 0.15
    if total >= 7:
        return 0.0
    if total >= 4:
        return -0.1
    return -0.2


def _possession_points(home_possession: Optional[float]) -> float:
    diff = abs((50 if home_possession is None else home_possession) - 50)
    if diff <= 5:
        return 0.2
    if diff <= 10:
        return 0.1
    if diff <= 15:
        return 0.0
    return -0.2


def _physical_points(fouls: float, yellows: int) -> float:
    intensity = fouls + yellows * 3
    if intensity >= 35:
        return 0.2
    if intensity >= 28:
        return 0.1
    if intensity >= 20:
        return 0.0
    return -0.1


def _stats_points(match: FootballMatch) -> float:
    """Box-score factors; zero unless both sides have stats."""
    hs, as_ = match.get("homeStats"), match.get("awayStats")
    if not hs or not as_:
        return 0.0

    def both(key: str) -> float:
        return (hs.get(key) or 0) + (as_.get(key) or 0)

    pts = _shot_intensity_points(both("totalShots"))
    pts += _shots_on_target_points(both("shotsOnTarget"))
    pts += _possession_points(hs.get("possessionPct"))
    pts += _physical_points(both("foulsCommitted"), _yellow_cards(match))
    return pts


def standings_bonus(
    home_rank: Optional[int],
    away_rank: Optional[int],
    total_teams: Optional[int] = None,
) -> float:
    """
    Percentile bands scaled to league size (default 20 teams).
    First matching band wins; bands are never summed.
    """
    if home_rank is None or away_rank is None:
        return 0.0
    n = total_teams or DEFAULT_TOTAL_TEAMS

    top4 = int(n * 0.2)
    top6 = int(n * 0.3)
    top8 = int(n * 0.4)
    bottom4 = n - int(n * 0.2) + 1

    both_top4 = home_rank <= top4 and away_rank <= top4
    both_top8 = home_rank <= top8 and away_rank <= top8
    both_bottom4 = home_rank >= bottom4 and away_rank >= bottom4
    one_top4 = home_rank <= top4 or away_rank <= top4
    one_bottom4 = home_rank >= bottom4 or away_rank >= bottom4
    one_top6 = home_rank <= top6 or away_rank <= top6

    if both_top4:
        return 1.0
    if both_bottom4:
        return 0.8
    if both_top8:
        return 0.6
    if one_top4 and one_bottom4:
        return 0.5
    if one_top6:
        return 0.3
    return 0.0


def knockout_bonus(
    is_knockout: Optional[bool],
    knockout_round: Optional[str],
    aggregate_diff: Optional[int] = None,
) -> float:
    if not is_knockout:
        return 0.0
    pts = KNOCKOUT_ROUND_BONUS.get(knockout_round or "", DEFAULT_KNOCKOUT_BONUS)
    # second leg still in the balance
    if aggregate_diff is not None and aggregate_diff <= 1:
        pts += CLOSE_AGGREGATE_BONUS
    return pts


def calculate_football_excitement(
    match: FootballMatch,
    home_rank: Optional[int] = None,
    away_rank: Optional[int] = None,
    total_teams: Optional[int] = None,
) -> ExcitementResult:
    """Post-game excitement for a finished match."""
    require_teams(match, "goals", "football match")
    goals = _sorted_goals(match)
    home_id = match["homeTeam"]["id"]
    home_score, away_score = _final_scores(match)
    final_diff = home_score - away_score

    points = BASE_SCORE
    points += _total_goals_points(home_score + away_score)
    points += _closeness_points(home_score, away_score)
    points += _late_goals_points(goals)
    points += _lead_changes_points(_count_lead_changes(goals, home_id))
    points += _red_cards_points(_red_cards(match))
    points += _comeback_points(goals, home_id, final_diff)
    points += _late_equalizer_points(goals, home_score, away_score)
    points += _stats_points(match)
    points += standings_bonus(home_rank, away_rank, total_teams)
    points += knockout_bonus(
        match.get("isKnockout"), match.get("knockoutRound"), match.get("aggregateDiff")
    )
    return make_result(points)


# ---------------- Pre-game factors ----------------

def _over_under_points(over_under: Optional[float]) -> float:
    if over_under is None:
        return 0.0
    if over_under <= 1.5:
        return -1.5
    if over_under <= 2.0:
        return -0.5
    if over_under <= 2.5:
        return 0.0
    if over_under <= 3.0:
        return 0.8
    if over_under <= 3.5:
        return 1.4
    return 2.0


def _spread_closeness_points(spread: Optional[float]) -> float:
    if spread is None:
        return 0.0
    s = abs(spread)
    if s <= 0.5:
        return 1.2
    if s <= 1.0:
        return 0.6
    if s <= 1.5:
        return 0.0
    if s <= 2.0:
        return -0.5
    return -1.2


def _moneyline_balance_points(
    home_ml: Optional[float],
    away_ml: Optional[float],
    draw_ml: Optional[float],
) -> float:
    """Three-way market: an even book means nobody knows who wins."""
    if home_ml is None or away_ml is None:
        return 0.0
    std = moneyline_balance(home_ml, away_ml, draw_ml)
    if std <= 0.05:
        return 1.5
    if std <= 0.10:
        return 0.9
    if std <= 0.15:
        return 0.4
    if std <= 0.20:
        return 0.0
    if std <= 0.25:
        return -0.5
    return -1.0


def predict_football_excitement(inp: FootballPredictionInput) -> ExcitementResult:
    """Pre-game excitement from market odds (plus standings / knockout context)."""
    require_fields(inp, ("odds",), "football prediction input")
    odds = inp["odds"]

    points = PREDICTION_BASE_SCORE
    points += _over_under_points(odds.get("overUnder"))
    points += _spread_closeness_points(odds.get("spread"))
    points += _moneyline_balance_points(
        odds.get("homeMoneyline"), odds.get("awayMoneyline"), odds.get("drawMoneyline")
    )
    points += standings_bonus(inp.get("homeRank"), inp.get("awayRank"), inp.get("totalTeams"))
    points += knockout_bonus(inp.get("isKnockout"), inp.get("knockoutRound"))
    return make_result(points, predicted=True)


# ---------------- Easter eggs ----------------

CARDIAC: EasterEgg = {"id": "cardiac", "emoji": "\U0001F493", "label": "Cardiac Finish",
                      "tooltip": "A late goal decided this tight game"}
ROLLERCOASTER: EasterEgg = {"id": "rollercoaster", "emoji": "\U0001F3A2", "label": "Rollercoaster",
                            "tooltip": "The lead changed hands multiple times"}
GOAL_FEST: EasterEgg = {"id": "goalfest", "emoji": "\U0001F386", "label": "Goal Fest",
                        "tooltip": "A barrage of goals"}
DEFENSIVE: EasterEgg = {"id": "defensive", "emoji": "\U0001F6E1️", "label": "Defensive Battle",
                        "tooltip": "A tightly contested defensive affair"}
COMEBACK: EasterEgg = {"id": "comeback", "emoji": "\U0001F525", "label": "Comeback Trail",
                       "tooltip": "A team fought back from 2+ goals down"}
SEEING_RED: EasterEgg = {"id": "red-card", "emoji": "\U0001F7E5", "label": "Seeing Red",
                         "tooltip": "A red card shook things up"}
PENALTY: EasterEgg = {"id": "penalty", "emoji": "\U0001F945", "label": "Penalty Drama",
                      "tooltip": "A penalty kick featured in this match"}
PHYSICAL: EasterEgg = {"id": "physical", "emoji": "\U0001F4AA", "label": "Physical Battle",
                       "tooltip": "A bruising, physical encounter"}


def detect_football_easter_eggs(match: FootballMatch) -> List[EasterEgg]:
    require_teams(match, "goals", "football match")
    goals = _sorted_goals(match)
    home_id = match["homeTeam"]["id"]
    home_score, away_score = _final_scores(match)
    total_goals = home_score + away_score
    margin = abs(home_score - away_score)
    reds = _red_cards(match)

    fouls = sum(
        (match.get(side) or {}).get("foulsCommitted") or 0
        for side in ("homeStats", "awayStats")
    )

    checks = [
        (CARDIAC, any(g["minute"] >= 85 for g in goals) and margin <= 1),
        (ROLLERCOASTER, _count_lead_changes(goals, home_id) >= 2),
        (GOAL_FEST, total_goals >= 5),
        (DEFENSIVE, total_goals <= 1),
        (COMEBACK, _is_comeback(goals, home_id, home_score - away_score)),
        (SEEING_RED, reds >= 1),
        (PENALTY, any(g.get("isPenalty") for g in goals)),
        (PHYSICAL, fouls >= 30 or reds >= 2),
    ]
    return [dict(egg) for egg, hit in checks if hit]
