# watchworthy/services/slate.py
"""
Turns adapter records into the GameSummary list the API returns.

Finished games are scored and get easter eggs, scheduled games with odds get
a prediction, in-progress games only carry their clock.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from watchworthy.models import football_model, nba_model, nhl_model
from watchworthy.models.types import (
    EasterEgg,
    ExcitementResult,
    GameSummary,
    InvalidGameRecord,
    Sport,
)
from watchworthy.services import espn_nba, espn_nhl, espn_soccer, standings
from watchworthy.services.standings import StandingsLookup

logger = logging.getLogger("watchworthy.slate")

SPORTS: List[Sport] = ["football", "nba", "nhl"]


# ---------- Summary building ----------

def build_summary(
    sport: Sport,
    record: Dict[str, Any],
    competition: str,
    excitement: Optional[ExcitementResult] = None,
    eggs: Optional[List[EasterEgg]] = None,
) -> GameSummary:
    status = record["status"]
    summary: GameSummary = {
        "id": f"{sport}-{record['id']}",
        "homeTeam": record["homeTeam"]["name"],
        "awayTeam": record["awayTeam"]["name"],
        "competition": competition,
        "sport": sport,
        "status": status,
        "date": record.get("date") or "",
    }
    if status == "in_progress" and record.get("clock"):
        summary["clock"] = record["clock"]
    if excitement is not None:
        summary["excitement"] = excitement
    if eggs is not None:
        summary["easterEggs"] = eggs
    return summary


def _score(
    sport: Sport,
    record: Dict[str, Any],
    calculate: Callable[[], ExcitementResult],
    detect: Callable[[], List[EasterEgg]],
    predict: Callable[[], ExcitementResult],
) -> Dict[str, Any]:
    """calculate-or-predict for one record; a malformed record is listed unscored."""
    status = record["status"]
    try:
        if status == "finished":
            return {"excitement": calculate(), "eggs": detect()}
        if status == "scheduled" and record.get("odds"):
            return {"excitement": predict()}
    except InvalidGameRecord as e:
        logger.warning("%s game %s not scored: %s", sport, record.get("id"), e)
    return {}


def _ranks(lookup: StandingsLookup, record: Dict[str, Any]) -> Dict[str, Optional[int]]:
    return {
        "homeRank": lookup.get(record["homeTeam"]["name"]),
        "awayRank": lookup.get(record["awayTeam"]["name"]),
    }


def summarize_football(match: Dict[str, Any], lookup: StandingsLookup) -> GameSummary:
    r = _ranks(lookup, match)
    total_teams = len(lookup) or None
    scored = _score(
        "football",
        match,
        lambda: football_model.calculate_football_excitement(
            match, r["homeRank"], r["awayRank"], total_teams
        ),
        lambda: football_model.detect_football_easter_eggs(match),
        lambda: football_model.predict_football_excitement({
            "odds": match["odds"],
            "homeRank": r["homeRank"],
            "awayRank": r["awayRank"],
            "totalTeams": total_teams,
            "isKnockout": bool(match.get("isKnockout")),
            "knockoutRound": match.get("knockoutRound"),
        }),
    )
    return build_summary("football", match, match.get("competition") or "", scored.get("excitement"), scored.get("eggs"))


def summarize_nba(game: Dict[str, Any], lookup: StandingsLookup) -> GameSummary:
    r = _ranks(lookup, game)
    scored = _score(
        "nba",
        game,
        lambda: nba_model.calculate_nba_excitement(game, r["homeRank"], r["awayRank"]),
        lambda: nba_model.detect_nba_easter_eggs(game),
        lambda: nba_model.predict_nba_excitement({"odds": game["odds"], **r}),
    )
    return build_summary("nba", game, "NBA", scored.get("excitement"), scored.get("eggs"))


def summarize_nhl(game: Dict[str, Any], lookup: StandingsLookup) -> GameSummary:
    r = _ranks(lookup, game)
    scored = _score(
        "nhl",
        game,
        lambda: nhl_model.calculate_nhl_excitement(game, r["homeRank"], r["awayRank"]),
        lambda: nhl_model.detect_nhl_easter_eggs(game),
        lambda: nhl_model.predict_nhl_excitement({"odds": game["odds"], **r}),
    )
    return build_summary("nhl", game, "NHL", scored.get("excitement"), scored.get("eggs"))


def sort_summaries(games: List[GameSummary]) -> List[GameSummary]:
    """Highest excitement first; unscored games keep their order at the end."""
    return sorted(games, key=lambda g: -((g.get("excitement") or {}).get("score", -1)))


# ---------- Per-sport slates ----------

async def football_slate(date: Optional[str] = None) -> List[GameSummary]:
    matches = await espn_soccer.get_matches_for_date(date)
    # standings only for leagues that actually have a scored or predicted match
    slugs = sorted({
        m["leagueSlug"] for m in matches
        if m["status"] == "finished" or (m["status"] == "scheduled" and m.get("odds"))
    })
    tables = await asyncio.gather(*(standings.get_football_standings(s) for s in slugs))
    by_slug = dict(zip(slugs, tables))
    return sort_summaries([summarize_football(m, by_slug.get(m["leagueSlug"], {})) for m in matches])


async def nba_slate(date: Optional[str] = None) -> List[GameSummary]:
    games, lookup = await asyncio.gather(
        espn_nba.get_games_for_date(date),
        standings.get_nba_standings(),
    )
    return sort_summaries([summarize_nba(g, lookup) for g in games])


async def nhl_slate(date: Optional[str] = None) -> List[GameSummary]:
    games, lookup = await asyncio.gather(
        espn_nhl.get_games_for_date(date),
        standings.get_nhl_standings(),
    )
    return sort_summaries([summarize_nhl(g, lookup) for g in games])


SLATES: Dict[Sport, Callable[[Optional[str]], Awaitable[List[GameSummary]]]] = {
    "football": football_slate,
    "nba": nba_slate,
    "nhl": nhl_slate,
}


async def combined_slate(date: Optional[str] = None, sport: str = "all") -> List[GameSummary]:
    """Every requested sport, merged and sorted. A sport that fails is left out."""
    wanted = SPORTS if sport == "all" else [sport]
    results = await asyncio.gather(*(SLATES[s](date) for s in wanted), return_exceptions=True)

    merged: List[GameSummary] = []
    for s, res in zip(wanted, results):
        if isinstance(res, Exception):
            logger.warning("combined slate: %s failed for date=%s: %r", s, date, res)
            continue
        merged.extend(res)
    return sort_summaries(merged)
