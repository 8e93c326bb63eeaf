# src/sports_scraper/scraper/validator.py
"""
Completeness checks applied to every record before it leaves the parser.

Parsers collect values into plain dicts as they walk the page (a value stays
``None`` until the page supplies it). A record is only built once every
required field is present; otherwise IncompleteRecord lists what is missing.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, List, Optional, Type, TypeVar

from ..db_models import HistoricalGame, LiveGame, LiveTeam, QuarterScores
from ..errors import IncompleteRecord

R = TypeVar("R")


def missing_fields(record_type: type, values: Dict[str, Any], prefix: str = "") -> List[str]:
    """Names of the required fields of ``record_type`` that are absent or None."""
    return [
        f"{prefix}{f.name}"
        for f in fields(record_type)
        if values.get(f.name) is None
    ]


def validate(record_type: Type[R], values: Dict[str, Any]) -> R:
    """Build ``record_type`` from ``values`` or raise IncompleteRecord."""
    missing = missing_fields(record_type, values)
    if missing:
        raise IncompleteRecord(record_type.__name__, missing)
    return record_type(**{f.name: values[f.name] for f in fields(record_type)})


def new_team_values() -> Dict[str, Any]:
    """Blank accumulator for one side of a live scoreboard box."""
    return {
        "name": None,
        "score": None,
        "record": None,
        "score_by_quarter": QuarterScores(),
    }


def build_live_game(
    season: int,
    week: int,
    date: Optional[str],
    home: Dict[str, Any],
    away: Dict[str, Any],
    game_status: Optional[str],
) -> LiveGame:
    """
    Validate a live scoreboard box as a whole.

    All missing values (top level and both teams) are reported together.
    """
    missing = missing_fields(LiveTeam, home, prefix="home_team.")
    missing += missing_fields(LiveTeam, away, prefix="away_team.")
    if date is None:
        missing.append("date")
    if game_status is None:
        missing.append("game_status")
    if missing:
        raise IncompleteRecord(LiveGame.__name__, missing)

    return LiveGame(
        season=season,
        week=week,
        date=date,
        home_team=validate(LiveTeam, home),
        away_team=validate(LiveTeam, away),
        game_status=game_status,
    )


def build_historical_game(values: Dict[str, Any]) -> HistoricalGame:
    return validate(HistoricalGame, values)
