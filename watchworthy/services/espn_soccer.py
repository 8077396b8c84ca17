# watchworthy/services/espn_soccer.py
from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from watchworthy.models.football_types import CardEvent, FootballMatch, GoalEvent
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
    to_int,
)

logger = logging.getLogger("watchworthy.espn_soccer")

SOCCER_BASE = f"{SITE_BASE}/soccer"

# slug -> display name
LEAGUES: Dict[str, str] = {
    "eng.1": "Premier League",
    "esp.1": "La Liga",
    "ger.1": "Bundesliga",
    "ita.1": "Serie A",
    "fra.1": "Ligue 1",
    "uefa.champions": "Champions League",
    "uefa.europa": "Europa League",
    "uefa.europa.conf": "Conference League",
}

STAT_KEYS = ("totalShots", "shotsOnTarget", "possessionPct", "foulsCommitted", "wonCorners", "saves")

MINUTE_RE = re.compile(r"^(\d+)'(?:\+(\d+)')?$")
# own goals are tagged with the side credited on the scoreboard
GOAL_TYPES_EXTRA = ("Penalty - Scored", "Penalty - Loss of Lead Goal", "Own Goal")
RED_CARD_TYPES = ("Red Card", "Yellow Red Card")


# ---------- Key events ----------

def parse_minute(display: str) -> int:
    """
    Match clock -> minute.

    Accepts:
      - "32'"     -> 32
      - "90'+4'"  -> 94
      - anything else -> 0
    """
    m = MINUTE_RE.match((display or "").strip())
    if not m:
        return 0
    return int(m.group(1)) + (int(m.group(2)) if m.group(2) else 0)


def _is_goal(type_text: str) -> bool:
    return type_text.startswith("Goal") or type_text in GOAL_TYPES_EXTRA


def parse_key_events(key_events: List[Dict[str, Any]]) -> Dict[str, list]:
    goals: List[GoalEvent] = []
    cards: List[CardEvent] = []
    for ke in key_events or []:
        type_text = (ke.get("type") or {}).get("text") or ""
        minute = parse_minute((ke.get("clock") or {}).get("displayValue") or "")
        team_id = str((ke.get("team") or {}).get("id") or "")

        if _is_goal(type_text):
            goals.append({
                "minute": minute,
                "teamId": team_id,
                "isPenalty": "Penalty" in type_text,
                "isOwnGoal": "Own Goal" in type_text,
            })
        elif type_text == "Yellow Card":
            cards.append({"minute": minute, "teamId": team_id, "cardType": "yellow"})
        elif type_text in RED_CARD_TYPES:
            cards.append({"minute": minute, "teamId": team_id, "cardType": "red"})
    return {"goals": goals, "cards": cards}


def _aggregate_diff(comp: Dict[str, Any], completed: bool) -> Optional[int]:
    """Absolute aggregate differential, finished second legs only."""
    series = comp.get("series") or {}
    if not completed or (comp.get("leg") or {}).get("value") != 2:
        return None
    scores = [to_int(c.get("score")) for c in series.get("competitors") or []]
    if len(scores) != 2:
        return None
    return abs(scores[0] - scores[1])


# ---------- Extraction ----------

def extract_match(ev: Dict[str, Any], slug: str, summary: Optional[Dict[str, Any]] = None) -> Optional[FootballMatch]:
    comp = (ev.get("competitions") or [{}])[0]
    pair = pick_competitors(comp)
    if not pair:
        return None
    home, away = pair
    status = game_status(comp)
    home_ref, away_ref = team_ref(home), team_ref(away)

    match: FootballMatch = {
        "id": str(ev.get("id")),
        "status": status,
        "date": ev.get("date") or comp.get("date") or "",
        "competition": LEAGUES.get(slug, slug),
        "leagueSlug": slug,
        "homeTeam": home_ref,
        "awayTeam": away_ref,
        "goals": [],
        "cards": [],
        "isKnockout": bool(comp.get("series")),
        "knockoutRound": (comp.get("series") or {}).get("title"),
        "aggregateDiff": _aggregate_diff(comp, status == "finished"),
        "odds": parse_odds(comp.get("odds"), with_draw=True),
    }
    if status == "in_progress":
        match["clock"] = ((comp.get("status") or {}).get("type") or {}).get("detail")

    if summary:
        match.update(parse_key_events(summary.get("keyEvents") or []))
        box_teams = (summary.get("boxscore") or {}).get("teams")
        match["homeStats"] = parse_team_stats(box_teams, home_ref["id"], STAT_KEYS)
        match["awayStats"] = parse_team_stats(box_teams, away_ref["id"], STAT_KEYS)
    return match


async def _league_matches(slug: str, dates: str) -> List[FootballMatch]:
    base = f"{SOCCER_BASE}/{slug}"
    data = await _get_json(f"{base}/scoreboard", {"dates": dates})
    events = data.get("events") or []

    # detail only for finished matches
    finished_ids = [
        str(ev.get("id")) for ev in events
        if game_status((ev.get("competitions") or [{}])[0]) == "finished"
    ]
    summaries = await gather_limited(fetch_summary(base, eid) for eid in finished_ids)
    by_id = dict(zip(finished_ids, summaries))

    out: List[FootballMatch] = []
    for ev in events:
        m = extract_match(ev, slug, by_id.get(str(ev.get("id"))))
        if m:
            out.append(m)
    return out


# ---------- Public API ----------

async def get_matches_for_date(date: Optional[str] = None) -> List[FootballMatch]:
    """
    Matches across all configured leagues for a date.

    A league whose scoreboard fails is skipped; if every league fails the
    last error propagates.
    """
    d = normalize_date_param(date)
    slugs = list(LEAGUES)
    results = await asyncio.gather(
        *(_league_matches(slug, d) for slug in slugs), return_exceptions=True
    )

    out: List[FootballMatch] = []
    errors: List[Exception] = []
    for slug, res in zip(slugs, results):
        if isinstance(res, Exception):
            logger.warning("soccer scoreboard failed league=%s: %s", slug, res)
            errors.append(res)
        else:
            out.extend(res)

    if errors and len(errors) == len(slugs):
        raise errors[-1]
    logger.info("soccer get_matches_for_date %s -> %d matches", d, len(out))
    return out
