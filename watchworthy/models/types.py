# watchworthy/models/types.py
from __future__ import annotations

import math
from statistics import pstdev
from typing import Any, Iterable, List, Literal, Mapping, Optional, Tuple

from typing_extensions import NotRequired, TypedDict

Sport = Literal["football", "nba", "nhl"]
GameStatus = Literal["finished", "in_progress", "scheduled"]


class ExcitementResult(TypedDict):
    score: float  # 1-10, one decimal
    label: str
    predicted: NotRequired[bool]  # only on pre-game predictions


class EasterEgg(TypedDict):
    id: str
    emoji: str
    label: str
    tooltip: str


class TeamRef(TypedDict):
    id: str
    name: str
    score: int


class GameSummary(TypedDict):
    id: str
    homeTeam: str
    awayTeam: str
    competition: str
    sport: Sport
    status: GameStatus
    clock: NotRequired[Optional[str]]
    excitement: NotRequired[Optional[ExcitementResult]]
    easterEggs: NotRequired[Optional[List[EasterEgg]]]
    date: str


class InvalidGameRecord(ValueError):
    """A game record is missing a field the engine cannot do without."""


def require_fields(record: Mapping[str, Any], fields: Iterable[str], kind: str) -> None:
    if not isinstance(record, Mapping):
        raise InvalidGameRecord(f"{kind} must be a mapping, got {type(record).__name__}")
    for name in fields:
        if record.get(name) is None:
            raise InvalidGameRecord(f"{kind} is missing required field '{name}'")


def require_teams(record: Mapping[str, Any], timeline: str, kind: str) -> None:
    """Both sides need an id and a score, and the timeline list must exist."""
    require_fields(record, ("homeTeam", "awayTeam", timeline), kind)
    for side in ("homeTeam", "awayTeam"):
        require_fields(record[side], ("id", "score"), f"{kind} {side}")


# -----------------------------------------------------------
# Score helpers
# -----------------------------------------------------------
def round_half_up(x: float) -> int:
    """Round half away from zero (2.5 -> 3, -2.5 -> -3), unlike round()."""
    if x < 0:
        return -math.floor(-x + 0.5)
    return math.floor(x + 0.5)


def get_label(score: float) -> str:
    if score >= 8:
        return "Must Watch"
    if score >= 6:
        return "Good Watch"
    if score >= 4:
        return "Fair Game"
    return "Skip It"


def clamp_score(score: float) -> float:
    """One decimal, half away from zero, then clamped to [1, 10]."""
    rounded = round_half_up(score * 10) / 10
    return min(10.0, max(1.0, rounded))


def make_result(points: float, predicted: bool = False) -> ExcitementResult:
    score = clamp_score(points)
    result: ExcitementResult = {"score": score, "label": get_label(score)}
    if predicted:
        result["predicted"] = True
    return result


def count_lead_changes(scores: Iterable[Tuple[int, int]]) -> int:
    """
    Walk running (home, away) scores in order and count the times the
    leading side differs from the last side that led. Ties in between
    don't count and don't reset who led last.
    """
    leader: Optional[str] = None
    changes = 0
    for home, away in scores:
        if home == away:
            continue
        new_leader = "home" if home > away else "away"
        if leader is not None and new_leader != leader:
            changes += 1
        leader = new_leader
    return changes


# -----------------------------------------------------------
# Market helpers
# -----------------------------------------------------------
def moneyline_to_prob(ml: float) -> float:
    """American moneyline -> implied probability (0-1)."""
    if ml < 0:
        return abs(ml) / (abs(ml) + 100)
    return 100 / (ml + 100)


def moneyline_balance(*moneylines: Optional[float]) -> Optional[float]:
    """
    Population std dev of vig-free implied probabilities.

    Missing prices are skipped; fewer than two leaves nothing to compare.
    Lower means a more evenly priced matchup.
    """
    probs = [moneyline_to_prob(ml) for ml in moneylines if ml is not None]
    if len(probs) < 2:
        return None
    total = sum(probs)
    return pstdev([p / total for p in probs])
