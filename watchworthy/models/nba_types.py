# watchworthy/models/nba_types.py
from typing_extensions import TypedDict, NotRequired
from typing import List, Optional

from watchworthy.models.types import TeamRef


class NbaPlay(TypedDict):
    period: int
    clock: str
    clockValue: float  # seconds remaining in the period
    homeScore: int
    awayScore: int
    scoringPlay: bool


class NbaTeamStats(TypedDict):
    leadChanges: float
    largestLead: float
    fastBreakPoints: float
    pointsInPaint: float
    turnovers: float
    totalTurnovers: float
    fouls: float
    technicalFouls: float


class NbaOdds(TypedDict, total=False):
    overUnder: Optional[float]
    spread: Optional[float]
    homeMoneyline: Optional[float]
    awayMoneyline: Optional[float]


class NbaGame(TypedDict):
    id: str
    status: str
    date: str
    period: int
    homeTeam: TeamRef
    awayTeam: TeamRef
    plays: List[NbaPlay]
    homeStats: NotRequired[Optional[NbaTeamStats]]
    awayStats: NotRequired[Optional[NbaTeamStats]]
    winProbSwings: NotRequired[Optional[int]]
    clock: NotRequired[Optional[str]]
    odds: NotRequired[Optional[NbaOdds]]


class NbaPredictionInput(TypedDict):
    odds: NbaOdds
    homeRank: NotRequired[Optional[int]]
    awayRank: NotRequired[Optional[int]]
