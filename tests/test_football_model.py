import copy
from typing import Any, Dict, List, Optional

import pytest

from watchworthy.models.football_model import (
    calculate_football_excitement,
    detect_football_easter_eggs,
    knockout_bonus,
    predict_football_excitement,
    standings_bonus,
)
from watchworthy.models.types import InvalidGameRecord


def _goals(*events: tuple) -> List[Dict[str, Any]]:
    """(minute, 'home'|'away') pairs -> goal events."""
    return [{"minute": m, "teamId": side} for m, side in events]


def _stats(**overrides: float) -> Dict[str, float]:
    base = {
        "totalShots": 10,
        "shotsOnTarget": 4,
        "possessionPct": 50,
        "foulsCommitted": 10,
        "wonCorners": 5,
        "saves": 3,
    }
    base.update(overrides)
    return base


def make_match(
    home_score: int,
    away_score: int,
    goals: Optional[List[Dict[str, Any]]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    match = {
        "id": "740001",
        "status": "finished",
        "date": "2026-02-22T15:00Z",
        "competition": "Premier League",
        "homeTeam": {"id": "home", "name": "Arsenal", "score": home_score},
        "awayTeam": {"id": "away", "name": "Chelsea", "score": away_score},
        "goals": goals or [],
        "cards": [],
    }
    match.update(extra)
    return match


def _thriller() -> Dict[str, Any]:
    return make_match(
        3,
        3,
        _goals((10, "home"), (25, "away"), (30, "away"), (60, "home"), (75, "home"), (91, "away")),
        homeStats=_stats(totalShots=18, shotsOnTarget=9, possessionPct=48),
        awayStats=_stats(totalShots=16, shotsOnTarget=8, possessionPct=52),
    )


# ---------- calculate ----------

def test_scoreless_draw_is_skip_it() -> None:
    result = calculate_football_excitement(make_match(0, 0))
    assert result == {"score": 3.5, "label": "Skip It"}


def test_thriller_is_must_watch() -> None:
    result = calculate_football_excitement(_thriller())
    assert result["score"] == 10.0
    assert result["label"] == "Must Watch"
    assert "predicted" not in result


def test_blowout_is_penalized() -> None:
    match = make_match(5, 0, _goals((5, "home"), (15, "home"), (30, "home"), (50, "home"), (70, "home")))
    assert calculate_football_excitement(match)["score"] == 4.9


def test_comeback_from_two_down() -> None:
    match = make_match(2, 2, _goals((10, "away"), (20, "away"), (40, "home"), (60, "home")))
    # 4.5 + 0.8 goals + 0.5 level + 1.5 comeback
    assert calculate_football_excitement(match)["score"] == 7.3


def test_late_equalizer() -> None:
    match = make_match(1, 1, _goals((10, "home"), (88, "away")))
    # 4.5 + 0 goals + 0.5 level + 0.4 late goal + 1.0 equalizer
    assert calculate_football_excitement(match)["score"] == 6.4


def test_red_cards_capped() -> None:
    cards = [{"minute": m, "teamId": "home", "cardType": "red"} for m in (20, 40, 60)]
    base = make_match(1, 0, _goals((10, "home")))
    with_reds = make_match(1, 0, _goals((10, "home")), cards=cards)
    diff = calculate_football_excitement(with_reds)["score"] - calculate_football_excitement(base)["score"]
    assert diff == pytest.approx(0.6)


def test_stats_need_both_sides() -> None:
    bare = make_match(1, 0, _goals((10, "home")))
    one_side = make_match(1, 0, _goals((10, "home")), homeStats=_stats(totalShots=40, shotsOnTarget=20))
    assert calculate_football_excitement(one_side) == calculate_football_excitement(bare)


def test_goal_order_does_not_matter() -> None:
    ordered = _thriller()
    shuffled = copy.deepcopy(ordered)
    shuffled["goals"] = list(reversed(shuffled["goals"]))
    assert calculate_football_excitement(shuffled) == calculate_football_excitement(ordered)
    assert detect_football_easter_eggs(shuffled) == detect_football_easter_eggs(ordered)


def test_competition_name_alone_does_not_change_score() -> None:
    scores = {
        calculate_football_excitement(
            make_match(2, 1, _goals((10, "home"), (50, "away"), (80, "home")), competition=name)
        )["score"]
        for name in ("Premier League", "Europa League", "Conference League")
    }
    assert len(scores) == 1


def test_knockout_round_increases_score() -> None:
    base = make_match(1, 0, _goals((10, "home")))
    final = make_match(1, 0, _goals((10, "home")), isKnockout=True, knockoutRound="Final")
    unknown = make_match(1, 0, _goals((10, "home")), isKnockout=True, knockoutRound="Playoff Round")
    assert calculate_football_excitement(base)["score"] == 4.3
    assert calculate_football_excitement(final)["score"] == 5.6
    assert calculate_football_excitement(unknown)["score"] == 4.8


def test_close_aggregate_second_leg_bonus() -> None:
    match = make_match(
        1, 0, _goals((10, "home")),
        isKnockout=True, knockoutRound="Quarterfinals", aggregateDiff=1,
    )
    assert calculate_football_excitement(match)["score"] == 5.7


def test_knockout_bonus_table() -> None:
    assert knockout_bonus(False, "Final") == 0.0
    assert knockout_bonus(True, "Rd of 16") == 0.7
    assert knockout_bonus(True, None) == 0.5
    assert knockout_bonus(True, "Semifinals", aggregate_diff=3) == 1.1
    assert knockout_bonus(True, "Semifinals", aggregate_diff=0) == pytest.approx(1.6)


@pytest.mark.parametrize(
    "home, away, teams, expected",
    [
        (1, 2, 20, 1.0),
        (17, 18, 20, 0.8),
        (5, 8, 20, 0.6),
        (1, 20, 20, 0.5),
        (6, 12, 20, 0.3),
        (10, 12, 20, 0.0),
        (9, 10, 10, 0.8),
        (1, 2, None, 1.0),
        (None, 2, 20, 0.0),
    ],
)
def test_standings_bonus_first_band_wins(home, away, teams, expected) -> None:
    assert standings_bonus(home, away, teams) == expected


def test_standings_feed_into_calculate() -> None:
    match = make_match(1, 0, _goals((10, "home")))
    assert calculate_football_excitement(match, 1, 2, 20)["score"] == 5.3


def test_missing_timeline_raises() -> None:
    match = make_match(1, 0)
    del match["goals"]
    with pytest.raises(InvalidGameRecord, match="goals"):
        calculate_football_excitement(match)


def test_missing_score_raises() -> None:
    match = make_match(1, 0)
    del match["homeTeam"]["score"]
    with pytest.raises(InvalidGameRecord):
        detect_football_easter_eggs(match)


def test_input_is_not_mutated() -> None:
    match = _thriller()
    match["goals"] = list(reversed(match["goals"]))
    snapshot = copy.deepcopy(match)
    calculate_football_excitement(match)
    detect_football_easter_eggs(match)
    assert match == snapshot


def test_scoring_is_deterministic() -> None:
    match = _thriller()
    inp = {"odds": {"overUnder": 2.75, "spread": 0.5, "homeMoneyline": 150, "awayMoneyline": 180, "drawMoneyline": 220}}
    assert calculate_football_excitement(match) == calculate_football_excitement(match)
    assert predict_football_excitement(inp) == predict_football_excitement(inp)


# ---------- predict ----------

def test_predict_lopsided_market() -> None:
    odds = {"overUnder": 2.5, "spread": 0.5, "homeMoneyline": -1000, "awayMoneyline": 2000, "drawMoneyline": 1500}
    result = predict_football_excitement({"odds": odds})
    # 3.5 + 0 + 1.2 - 1.0
    assert result == {"score": 3.7, "label": "Skip It", "predicted": True}


def test_predict_balanced_market() -> None:
    odds = {"overUnder": 3.5, "spread": 0.25, "homeMoneyline": 200, "awayMoneyline": 200, "drawMoneyline": 200}
    result = predict_football_excitement({"odds": odds})
    assert result["score"] == 7.6
    assert result["predicted"] is True


def test_predict_higher_total_line_scores_higher() -> None:
    low = predict_football_excitement({"odds": {"overUnder": 1.5, "spread": 1.0}})
    high = predict_football_excitement({"odds": {"overUnder": 4.5, "spread": 1.0}})
    assert high["score"] - low["score"] >= 1.5


def test_predict_even_three_way_market_beats_lopsided_one() -> None:
    line = {"overUnder": 2.5, "spread": 1.0}
    even = predict_football_excitement({"odds": {**line, "homeMoneyline": 200, "awayMoneyline": 200, "drawMoneyline": 200}})
    lopsided = predict_football_excitement(
        {"odds": {**line, "homeMoneyline": -1000, "awayMoneyline": 2000, "drawMoneyline": 1500}}
    )
    assert even["score"] > lopsided["score"]


def test_predict_with_no_odds_fields() -> None:
    assert predict_football_excitement({"odds": {}})["score"] == 3.5


def test_predict_two_way_market_without_draw() -> None:
    result = predict_football_excitement({"odds": {"homeMoneyline": -110, "awayMoneyline": -110}})
    assert result["score"] == 5.0


def test_predict_ignores_half_a_market() -> None:
    result = predict_football_excitement({"odds": {"homeMoneyline": -110, "drawMoneyline": 250}})
    assert result["score"] == 3.5


def test_predict_knockout_and_standings() -> None:
    result = predict_football_excitement({
        "odds": {},
        "isKnockout": True,
        "knockoutRound": "Semifinals",
        "homeRank": 1,
        "awayRank": 3,
        "totalTeams": 20,
    })
    # 3.5 + 1.1 round + 1.0 both top four
    assert result["score"] == 5.6


def test_predict_requires_odds() -> None:
    with pytest.raises(InvalidGameRecord):
        predict_football_excitement({"homeRank": 1})


# ---------- easter eggs ----------

def _ids(eggs: List[Dict[str, str]]) -> List[str]:
    return [e["id"] for e in eggs]


def test_thriller_eggs_in_check_order() -> None:
    assert _ids(detect_football_easter_eggs(_thriller())) == ["cardiac", "rollercoaster", "goalfest"]


def test_late_winner_by_one_is_cardiac() -> None:
    match = make_match(2, 1, _goals((20, "home"), (50, "away"), (88, "home")))
    assert "cardiac" in _ids(detect_football_easter_eggs(match))


def test_rollercoaster_counts_swings_through_level_scores() -> None:
    match = make_match(3, 2, _goals((10, "home"), (20, "away"), (30, "away"), (40, "home"), (50, "home")))
    assert "rollercoaster" in _ids(detect_football_easter_eggs(match))


def test_defensive_battle() -> None:
    assert _ids(detect_football_easter_eggs(make_match(0, 0))) == ["defensive"]


def test_comeback_egg() -> None:
    match = make_match(2, 2, _goals((10, "away"), (20, "away"), (40, "home"), (60, "home")))
    assert "comeback" in _ids(detect_football_easter_eggs(match))


def test_red_card_penalty_and_physical() -> None:
    goals = [{"minute": 30, "teamId": "home", "isPenalty": True}, {"minute": 60, "teamId": "away"}]
    cards = [
        {"minute": 44, "teamId": "away", "cardType": "red"},
        {"minute": 70, "teamId": "home", "cardType": "yellow"},
    ]
    match = make_match(
        1, 1, goals, cards=cards,
        homeStats=_stats(foulsCommitted=16), awayStats=_stats(foulsCommitted=15),
    )
    ids = _ids(detect_football_easter_eggs(match))
    assert ids == ["red-card", "penalty", "physical"]


def test_egg_shape() -> None:
    egg = detect_football_easter_eggs(make_match(0, 0))[0]
    assert set(egg) == {"id", "emoji", "label", "tooltip"}
    assert egg["label"] == "Defensive Battle"


def test_returned_eggs_are_fresh_copies() -> None:
    eggs = detect_football_easter_eggs(make_match(0, 0))
    eggs[0]["label"] = "changed"
    assert detect_football_easter_eggs(make_match(0, 0))[0]["label"] == "Defensive Battle"
