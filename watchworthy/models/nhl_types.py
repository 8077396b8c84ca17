# watchworthy/models/nhl_types.py
from typing_extensions import TypedDict, NotRequired
from typing import List, Optional

from watchworthy.models.types import TeamRef


class NhlGoal(TypedDict):
    period: int
    clock: str  # "MM:SS" remaining in the period
    teamId: str
    text: str
    homeScore: int
    awayScore: int


class NhlTeamStats(TypedDict):
    shotsTotal: float
    hits: float
    blockedShots: float
    powerPlayGoals: float
    powerPlayOpportunities: float
    shortHandedGoals: float
    shootoutGoals: float
    penalties: float
    penaltyMinutes: float
    takeaways: float
    giveaways: float
    faceoffPercent: float


class NhlOdds(TypedDict, total=False):
    overUnder: Optional[float]
    spread: Optional[float]
    homeMoneyline: Optional[float]
    awayMoneyline: Optional[float]


class NhlGame(TypedDict):
    id: str
    status: str
    date: str
    period: int
    homeTeam: TeamRef
    awayTeam: TeamRef
    goals: List[NhlGoal]
    homeStats: NotRequired[Optional[NhlTeamStats]]
    awayStats: NotRequired[Optional[NhlTeamStats]]
    clock: NotRequired[Optional[str]]
    odds: NotRequired[Optional[NhlOdds]]


class NhlPredictionInput(TypedDict):
    odds: NhlOdds
    homeRank: NotRequired[Optional[int]]
    awayRank: NotRequired[Optional[int]]
