# watchworthy/models/football_types.py
from typing_extensions import TypedDict, Literal, NotRequired
from typing import List, Optional

from watchworthy.models.types import TeamRef


class GoalEvent(TypedDict):
    minute: int
    teamId: str
    isPenalty: NotRequired[bool]
    isOwnGoal: NotRequired[bool]


class CardEvent(TypedDict):
    minute: int
    teamId: str
    cardType: Literal["yellow", "red"]


class FootballTeamStats(TypedDict):
    totalShots: float
    shotsOnTarget: float
    possessionPct: float
    foulsCommitted: float
    wonCorners: float
    saves: float


class FootballOdds(TypedDict, total=False):
    overUnder: Optional[float]
    spread: Optional[float]
    homeMoneyline: Optional[float]
    awayMoneyline: Optional[float]
    drawMoneyline: Optional[float]


class FootballMatch(TypedDict):
    id: str
    status: str
    date: str
    competition: str
    homeTeam: TeamRef
    awayTeam: TeamRef
    goals: List[GoalEvent]
    cards: NotRequired[List[CardEvent]]
    homeStats: NotRequired[Optional[FootballTeamStats]]
    awayStats: NotRequired[Optional[FootballTeamStats]]
    clock: NotRequired[Optional[str]]
    isKnockout: NotRequired[bool]
    knockoutRound: NotRequired[Optional[str]]
    aggregateDiff: NotRequired[Optional[int]]  # second legs only
    odds: NotRequired[Optional[FootballOdds]]
    leagueSlug: NotRequired[str]


class FootballPredictionInput(TypedDict):
    odds: FootballOdds
    homeRank: NotRequired[Optional[int]]
    awayRank: NotRequired[Optional[int]]
    totalTeams: NotRequired[Optional[int]]
    isKnockout: NotRequired[bool]
    knockoutRound: NotRequired[Optional[str]]
