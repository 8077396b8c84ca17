# watchworthy/routers/nhl_routes.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse

from watchworthy.routers.common import CACHE_CONTROL, DATE_PATTERN, resolve_date
from watchworthy.services import slate

router = APIRouter(tags=["NHL"])
logger = logging.getLogger("watchworthy.nhl")


@router.get("/games")
async def nhl_games(
    response: Response,
    date: Optional[str] = Query(None, pattern=DATE_PATTERN, description="YYYY-MM-DD; default = today"),
):
    """
    NHL games for a date, most exciting first. Live games only carry a clock.
    """
    day = resolve_date(date)
    try:
        games = await slate.nhl_slate(day)
    except Exception as e:
        logger.exception("NHL games failed for date=%s: %s", day, e)
        return JSONResponse(
            status_code=500,
            content={"games": [], "date": day, "error": "Failed to fetch NHL data"},
        )

    response.headers["Cache-Control"] = CACHE_CONTROL
    return {"games": games, "date": day}
