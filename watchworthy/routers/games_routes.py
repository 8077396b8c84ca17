# watchworthy/routers/games_routes.py
from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Query, Response

from watchworthy.routers.common import CACHE_CONTROL, DATE_PATTERN, resolve_date
from watchworthy.services import slate

router = APIRouter(tags=["Games"])
logger = logging.getLogger("watchworthy.games")


@router.get("/games")
async def all_games(
    response: Response,
    date: Optional[str] = Query(None, pattern=DATE_PATTERN, description="YYYY-MM-DD; default = today"),
    sport: Literal["all", "football", "nba", "nhl"] = Query("all"),
):
    """
    Every sport's games for a date in one list, most exciting first.
    Sports whose feed is down are skipped rather than failing the request.
    """
    day = resolve_date(date)
    games = await slate.combined_slate(day, sport)
    logger.info("combined games date=%s sport=%s -> %d", day, sport, len(games))

    response.headers["Cache-Control"] = CACHE_CONTROL
    return {"games": games, "date": day}
