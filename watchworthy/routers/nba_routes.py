# watchworthy/routers/nba_routes.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse

from watchworthy.routers.common import CACHE_CONTROL, DATE_PATTERN, resolve_date
from watchworthy.services import slate

router = APIRouter(tags=["NBA"])
logger = logging.getLogger("watchworthy.nba")


@router.get("/games")
async def nba_games(
    response: Response,
    date: Optional[str] = Query(None, pattern=DATE_PATTERN, description="YYYY-MM-DD; default = today"),
):
    """
    NBA games for a date, most exciting first.
    """
    day = resolve_date(date)
    try:
        games = await slate.nba_slate(day)
    except Exception as e:
        logger.exception("NBA games failed for date=%s: %s", day, e)
        return JSONResponse(
            status_code=500,
            content={"games": [], "date": day, "error": "Failed to fetch NBA data"},
        )

    response.headers["Cache-Control"] = CACHE_CONTROL
    return {"games": games, "date": day}
