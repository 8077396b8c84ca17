# watchworthy/services/espn_common.py

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

import httpx
from zoneinfo import ZoneInfo

from watchworthy.core.config import (
    DEFAULT_TZ,
    ESPN_CONCURRENCY,
    ESPN_MAX_TRIES,
    ESPN_TIMEOUT,
    HEADERS,
)
from watchworthy.models.types import GameStatus, TeamRef

logger = logging.getLogger("watchworthy.espn_common")

SITE_BASE = "https://site.api.espn.com/apis/site/v2/sports"
STANDINGS_BASE = "https://site.api.espn.com/apis/v2/sports"

T = TypeVar("T")


# -----------------------------------------------------------
# Shared HTTP helper with retries
# -----------------------------------------------------------
async def _get_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    max_tries: int = ESPN_MAX_TRIES,
) -> Dict[str, Any]:
    """
    Small shared helper for ESPN JSON fetch with basic retry + logging.

    Used by:
      - espn_soccer
      - espn_nba
      - espn_nhl
      - standings
    """
    last: Optional[Exception] = None

    async with httpx.AsyncClient(timeout=ESPN_TIMEOUT, headers=HEADERS) as client:
        for attempt in range(1, max_tries + 1):
            try:
                r = await client.get(url, params=params)
                r.raise_for_status()
                return r.json()
            except Exception as e:
                last = e
                logger.warning("_get_json %s attempt %d failed: %s", url, attempt, repr(e))

    logger.error("_get_json giving up on %s after %d attempts", url, max_tries)
    raise last or RuntimeError("unknown http error")


async def fetch_summary(base: str, event_id: str) -> Dict[str, Any]:
    """Per-event summary. Fails soft: a game without detail still gets listed."""
    try:
        return await _get_json(f"{base}/summary", {"event": event_id})
    except Exception as e:
        logger.warning("summary fetch failed event=%s: %s", event_id, e)
        return {}


async def gather_limited(tasks: Iterable[Awaitable[T]], limit: int = ESPN_CONCURRENCY) -> List[T]:
    """asyncio.gather with at most `limit` requests in flight."""
    sem = asyncio.Semaphore(max(1, limit))

    async def _run(aw: Awaitable[T]) -> T:
        async with sem:
            return await aw

    return await asyncio.gather(*(_run(t) for t in tasks))


# -----------------------------------------------------------
# Date helpers (local “today” by default)
# -----------------------------------------------------------
def today_iso() -> str:
    return datetime.now(ZoneInfo(DEFAULT_TZ)).strftime("%Y-%m-%d")


def normalize_date_param(date: Optional[str]) -> str:
    """
    Normalize a date for ESPN's `dates` param.

    Accepts:
      - None            -> today's date in DEFAULT_TZ, YYYYMMDD
      - 'YYYYMMDD'      -> returned unchanged
      - 'YYYY-MM-DD'    -> dashes removed
    """
    if not date:
        return today_iso().replace("-", "")
    digits = re.sub(r"\D", "", date.strip())
    if len(digits) != 8:
        raise ValueError(f"unrecognized date '{date}'")
    return digits


# -----------------------------------------------------------
# Scoreboard extraction
# -----------------------------------------------------------
def to_number(value: Any) -> float:
    """Leading number of an ESPN displayValue ('54.2', '55%'); 0 when none."""
    if isinstance(value, (int, float)):
        return float(value)
    m = re.match(r"\s*(-?\d+(?:\.\d+)?)", str(value or ""))
    return float(m.group(1)) if m else 0.0


def to_int(value: Any) -> int:
    return int(to_number(value))


def pick_competitors(comp: Dict[str, Any]) -> Optional[Tuple[Dict[str, Any], Dict[str, Any]]]:
    teams = comp.get("competitors") or []
    if len(teams) < 2:
        return None
    home = next((c for c in teams if c.get("homeAway") == "home"), teams[0])
    away = next((c for c in teams if c.get("homeAway") == "away"), teams[-1])
    return home, away


def team_ref(competitor: Dict[str, Any]) -> TeamRef:
    team = competitor.get("team") or {}
    return {
        "id": str(team.get("id") or competitor.get("id") or ""),
        "name": team.get("displayName") or "",
        "score": to_int(competitor.get("score")),
    }


def game_status(comp: Dict[str, Any]) -> GameStatus:
    stype = (comp.get("status") or {}).get("type") or {}
    if stype.get("completed"):
        return "finished"
    if stype.get("name") == "STATUS_SCHEDULED":
        return "scheduled"
    return "in_progress"


def parse_team_stats(
    box_teams: Optional[Sequence[Dict[str, Any]]],
    team_id: str,
    keys: Sequence[str],
) -> Optional[Dict[str, float]]:
    """boxscore.teams[] -> {key: number} for one team; None if the team isn't there."""
    if not box_teams:
        return None
    entry = next((t for t in box_teams if str((t.get("team") or {}).get("id")) == team_id), None)
    if entry is None:
        return None
    values = {s.get("name"): s.get("displayValue") for s in entry.get("statistics") or []}
    return {k: to_number(values.get(k)) for k in keys}


def parse_odds(espn_odds: Optional[Sequence[Dict[str, Any]]], with_draw: bool = False) -> Optional[Dict[str, Any]]:
    """
    First odds provider -> {overUnder, spread (absolute), home/away[/draw]Moneyline}.
    None when the provider has nothing usable.
    """
    if not espn_odds or not espn_odds[0]:
        return None
    o = espn_odds[0]
    spread = o.get("spread")
    out: Dict[str, Any] = {
        "overUnder": o.get("overUnder"),
        "spread": abs(spread) if spread is not None else None,
        "homeMoneyline": (o.get("homeTeamOdds") or {}).get("moneyLine"),
        "awayMoneyline": (o.get("awayTeamOdds") or {}).get("moneyLine"),
    }
    if with_draw:
        out["drawMoneyline"] = (o.get("drawOdds") or {}).get("moneyLine")
    if all(v is None for v in out.values()):
        return None
    return out
