# watchworthy/services/espn_nba.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from watchworthy.models.nba_model import count_win_prob_swings
from watchworthy.models.nba_types import NbaGame, NbaPlay
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
    to_number,
)

logger = logging.getLogger("watchworthy.espn_nba")

NBA_BASE = f"{SITE_BASE}/basketball/nba"

STAT_KEYS = (
    "leadChanges",
    "largestLead",
    "fastBreakPoints",
    "pointsInPaint",
    "turnovers",
    "totalTurnovers",
    "fouls",
    "technicalFouls",
)


# ---------- Extraction ----------

def parse_plays(raw: List[Dict[str, Any]]) -> List[NbaPlay]:
    plays: List[NbaPlay] = []
    for p in raw or []:
        clock = p.get("clock") or {}
        plays.append({
            "period": int((p.get("period") or {}).get("number") or 0),
            "clock": clock.get("displayValue") or "",
            "clockValue": to_number(clock.get("value")),
            "homeScore": int(p.get("homeScore") or 0),
            "awayScore": int(p.get("awayScore") or 0),
            "scoringPlay": bool(p.get("scoringPlay")),
        })
    return plays


def _live_clock(comp: Dict[str, Any]) -> Optional[str]:
    st = comp.get("status") or {}
    if not st.get("displayClock"):
        return None
    period = int(st.get("period") or 0)
    if period > 4:
        return f"OT {st['displayClock']}"
    return f"Q{period} {st['displayClock']}"


def extract_game(ev: Dict[str, Any], summary: Optional[Dict[str, Any]] = None) -> Optional[NbaGame]:
    comp = (ev.get("competitions") or [{}])[0]
    pair = pick_competitors(comp)
    if not pair:
        return None
    home, away = pair
    status = game_status(comp)
    home_ref, away_ref = team_ref(home), team_ref(away)

    game: NbaGame = {
        "id": str(ev.get("id")),
        "status": status,
        "date": ev.get("date") or comp.get("date") or "",
        "period": int((comp.get("status") or {}).get("period") or 0),
        "homeTeam": home_ref,
        "awayTeam": away_ref,
        "plays": [],
        "odds": parse_odds(comp.get("odds")),
    }
    if status == "in_progress":
        game["clock"] = _live_clock(comp)

    if summary:
        box_teams = (summary.get("boxscore") or {}).get("teams")
        game["plays"] = parse_plays(summary.get("plays") or [])
        game["homeStats"] = parse_team_stats(box_teams, home_ref["id"], STAT_KEYS)
        game["awayStats"] = parse_team_stats(box_teams, away_ref["id"], STAT_KEYS)
        game["winProbSwings"] = count_win_prob_swings(summary.get("winprobability") or [])
        if not game["odds"]:
            game["odds"] = parse_odds(summary.get("odds")) or parse_odds(summary.get("pickcenter"))
    return game


# ---------- Public API ----------

async def get_games_for_date(date: Optional[str] = None) -> List[NbaGame]:
    """
    Fetch NBA games for the given date.

    - date: 'YYYYMMDD' or 'YYYY-MM-DD' or None (today)
    - finished games also pull the event summary (plays, box score, win prob)
    """
    d = normalize_date_param(date)
    data = await _get_json(f"{NBA_BASE}/scoreboard", {"dates": d})
    events = data.get("events") or []

    finished_ids = [
        str(ev.get("id")) for ev in events
        if game_status((ev.get("competitions") or [{}])[0]) == "finished"
    ]
    summaries = await gather_limited(fetch_summary(NBA_BASE, eid) for eid in finished_ids)
    by_id = dict(zip(finished_ids, summaries))

    out: List[NbaGame] = []
    for ev in events:
        g = extract_game(ev, by_id.get(str(ev.get("id"))))
        if g:
            out.append(g)

    logger.info("NBA get_games_for_date %s -> %d events", d, len(out))
    return out
