# watchworthy/services/espn_nhl.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from watchworthy.models.nhl_types import NhlGame, NhlGoal
from watchworthy.services.espn_common import (
    SITE_BASE,
    _get_json,
    fetch_summary,
    game_status,
    gather_limited,
    normalize_date_param,
    parse_odds,
    parse_team_stats,
    pick_competitors,
    team_ref,
)

logger = logging.getLogger("watchworthy.espn_nhl")

NHL_BASE = f"{SITE_BASE}/hockey/nhl"

STAT_KEYS = (
    "shotsTotal",
    "hits",
    "blockedShots",
    "powerPlayGoals",
    "powerPlayOpportunities",
    "shortHandedGoals",
    "shootoutGoals",
    "penalties",
    "penaltyMinutes",
    "takeaways",
    "giveaways",
    "faceoffPercent",
)


# ---------- Extraction ----------

def parse_goals(plays: List[Dict[str, Any]], home_id: str, away_id: str) -> List[NhlGoal]:
    """
    Scoring plays -> goals. The feed doesn't tag the scoring side reliably,
    so it's inferred from the home score moving versus the previous play.
    """
    goals: List[NhlGoal] = []
    prev: Optional[Dict[str, Any]] = None
    for p in plays or []:
        home_score = int(p.get("homeScore") or 0)
        if p.get("scoringPlay"):
            if prev is not None:
                scorer = home_id if home_score > int(prev.get("homeScore") or 0) else away_id
            else:
                scorer = home_id if home_score > 0 else away_id
            goals.append({
                "period": int((p.get("period") or {}).get("number") or 0),
                "clock": (p.get("clock") or {}).get("displayValue") or "",
                "teamId": scorer,
                "text": p.get("text") or "",
                "homeScore": home_score,
                "awayScore": int(p.get("awayScore") or 0),
            })
        prev = p
    return goals


def _live_clock(comp: Dict[str, Any]) -> Optional[str]:
    st = comp.get("status") or {}
    if not st.get("displayClock"):
        return None
    period = int(st.get("period") or 0)
    if period >= 4:
        return f"OT {st['displayClock']}"
    return f"P{period} {st['displayClock']}"


def extract_game(ev: Dict[str, Any], summary: Optional[Dict[str, Any]] = None) -> Optional[NhlGame]:
    comp = (ev.get("competitions") or [{}])[0]
    pair = pick_competitors(comp)
    if not pair:
        return None
    home, away = pair
    status = game_status(comp)
    home_ref, away_ref = team_ref(home), team_ref(away)

    game: NhlGame = {
        "id": str(ev.get("id")),
        "status": status,
        "date": ev.get("date") or comp.get("date") or "",
        "period": int((comp.get("status") or {}).get("period") or 0),
        "homeTeam": home_ref,
        "awayTeam": away_ref,
        "goals": [],
        "odds": parse_odds(comp.get("odds")),
    }
    if status == "in_progress":
        game["clock"] = _live_clock(comp)

    if summary:
        box_teams = (summary.get("boxscore") or {}).get("teams")
        game["goals"] = parse_goals(summary.get("plays") or [], home_ref["id"], away_ref["id"])
        game["homeStats"] = parse_team_stats(box_teams, home_ref["id"], STAT_KEYS)
        game["awayStats"] = parse_team_stats(box_teams, away_ref["id"], STAT_KEYS)
    return game


# ---------- Public API ----------

async def get_games_for_date(date: Optional[str] = None) -> List[NhlGame]:
    """
    Fetch NHL games for the given date.

    - date: 'YYYYMMDD' or 'YYYY-MM-DD' or None (today)
    - ESPN NHL expects 'dates' in 'YYYYMMDD' format (no range).
    """
    d = normalize_date_param(date)
    params = {"dates": d, "limit": 500}
    logger.info("NHL get_games_for_date date=%s params=%s", d, params)

    data = await _get_json(f"{NHL_BASE}/scoreboard", params)
    events = data.get("events") or []

    finished_ids = [
        str(ev.get("id")) for ev in events
        if game_status((ev.get("competitions") or [{}])[0]) == "finished"
    ]
    summaries = await gather_limited(fetch_summary(NHL_BASE, eid) for eid in finished_ids)
    by_id = dict(zip(finished_ids, summaries))

    out: List[NhlGame] = []
    for ev in events:
        g = extract_game(ev, by_id.get(str(ev.get("id"))))
        if g:
            out.append(g)

    logger.info("NHL get_games_for_date %s -> %d events", d, len(out))
    return out
