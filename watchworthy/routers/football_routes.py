# watchworthy/routers/football_routes.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse

from watchworthy.routers.common import CACHE_CONTROL, DATE_PATTERN, resolve_date
from watchworthy.services import slate

router = APIRouter(tags=["Football"])
logger = logging.getLogger("watchworthy.football")


@router.get("/games")
async def football_games(
    response: Response,
    date: Optional[str] = Query(None, pattern=DATE_PATTERN, description="YYYY-MM-DD; default = today"),
):
    """
    Matches across the tracked football leagues for a date, most exciting
    first. Finished matches are scored, upcoming ones predicted from odds.
    """
    day = resolve_date(date)
    try:
        games = await slate.football_slate(day)
    except Exception as e:
        logger.exception("Football games failed for date=%s: %s", day, e)
        return JSONResponse(
            status_code=500,
            content={"games": [], "date": day, "error": "Failed to fetch football data"},
        )

    response.headers["Cache-Control"] = CACHE_CONTROL
    return {"games": games, "date": day}
