# watchworthy/services/standings.py
from __future__ import annotations

import logging
from typing import Any, Dict

from watchworthy.services.espn_common import STANDINGS_BASE, _get_json, to_int

logger = logging.getLogger("watchworthy.standings")

StandingsLookup = Dict[str, int]

RANK_STATS = ("playoffSeed", "rank")


def parse_standings(data: Dict[str, Any]) -> StandingsLookup:
    """
    Walk children[].standings.entries[] -> {team displayName: rank}.

    Rank comes from the playoffSeed/rank stat when it parses, else the
    entry's position across all groups. A team listed twice keeps its
    first rank.
    """
    ranks: StandingsLookup = {}
    positional = 1
    for group in data.get("children") or []:
        for entry in (group.get("standings") or {}).get("entries") or []:
            name = (entry.get("team") or {}).get("displayName")
            seed = next(
                (s for s in entry.get("stats") or [] if s.get("name") in RANK_STATS),
                None,
            )
            rank = to_int(seed.get("displayValue")) if seed else 0
            if name:
                ranks.setdefault(name, rank or positional)
            positional += 1
    return ranks


async def get_standings(sport: str, league: str) -> StandingsLookup:
    """Standings are a bonus: any failure gives an empty map."""
    url = f"{STANDINGS_BASE}/{sport}/{league}/standings"
    try:
        data = await _get_json(url)
    except Exception as e:
        logger.warning("standings fetch failed %s/%s: %s", sport, league, e)
        return {}
    ranks = parse_standings(data)
    logger.info("standings %s/%s -> %d teams", sport, league, len(ranks))
    return ranks


async def get_football_standings(league_slug: str) -> StandingsLookup:
    return await get_standings("soccer", league_slug)


async def get_nba_standings() -> StandingsLookup:
    return await get_standings("basketball", "nba")


async def get_nhl_standings() -> StandingsLookup:
    return await get_standings("hockey", "nhl")
