# src/sports_scraper/db_models.py
"""
Schedule records and their MongoDB document shape.

SCHEDULES collection (one document per game, written by the cache write-back):

    Live game:
        {"type": 2, "season": 2016, "week": 2, "date": "Sun, Sep 18",
         "gameStatus": "FINAL ",
         "homeTeam": {"name": "Texans", "score": 19,
                      "record": {"wins": 0, "losses": 1, "ties": 0},
                      "scoreByQuarter": {"Q1": 7, "Q2": 6, "Q3": 0, "Q4": 6, "OT": 0}},
         "awayTeam": {...same shape...}}

    Historical game:
        {"type": 1, "season": 2016, "week": 11, "date": "Sunday, November 20",
         "homeTeamName": "Redskins", "homeTeamScore": 42,
         "awayTeamName": "Packers", "awayTeamScore": 24, "gameStatus": "FINAL"}

Records are immutable. A status change is stored as a new document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional

NOT_STARTED = "NOT STARTED"
TERMINAL_STATUSES = frozenset({"FINAL", "FINAL OT"})


class ModelType(IntEnum):
    """Discriminator stored in the ``type`` field of every schedule document."""
    BASE = 0
    NFL_HISTORICAL = 1
    NFL_LIVE = 2
    NFL_CURRENT = 3


class League(IntEnum):
    """Leagues exposed by the API (path parameter ``leagueType``)."""
    NFL = 0


class ParseStrategy(Enum):
    """Which page shape a fetched document is parsed as."""
    LIVE = "live"
    HISTORICAL = "historical"
    CURRENT = "current"

    @property
    def model_type(self) -> ModelType:
        return {
            ParseStrategy.LIVE: ModelType.NFL_LIVE,
            ParseStrategy.HISTORICAL: ModelType.NFL_HISTORICAL,
            ParseStrategy.CURRENT: ModelType.NFL_CURRENT,
        }[self]


class TimePeriod(IntEnum):
    """Snapshots of a simulated live week."""
    BEGINNING = 0
    MIDDLE = 1
    FINAL = 2

    @classmethod
    def from_value(cls, value: str) -> "TimePeriod":
        """Accept either the name (``final``) or the number (``2``)."""
        value = value.strip()
        if value.isdecimal():
            return cls(int(value))
        return cls[value.upper()]


def is_terminal_status(status: Optional[str]) -> bool:
    """True when a game status says the game is over ("FINAL ", "FINAL OT")."""
    if not status:
        return False
    return " ".join(status.split()).upper() in TERMINAL_STATUSES


@dataclass(frozen=True)
class ScheduleKey:
    """Cache lookup key; season/week are also stamped onto parsed records."""
    strategy: ParseStrategy
    season: int
    week: int
    league: League = League.NFL

    @property
    def model_type(self) -> ModelType:
        return self.strategy.model_type


@dataclass(frozen=True)
class TeamRecord:
    wins: int = 0
    losses: int = 0
    ties: int = 0

    def to_document(self) -> Dict[str, int]:
        return {"wins": self.wins, "losses": self.losses, "ties": self.ties}

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "TeamRecord":
        return cls(wins=doc["wins"], losses=doc["losses"], ties=doc["ties"])


@dataclass(frozen=True)
class QuarterScores:
    q1: int = 0
    q2: int = 0
    q3: int = 0
    q4: int = 0
    ot: int = 0

    def to_document(self) -> Dict[str, int]:
        return {"Q1": self.q1, "Q2": self.q2, "Q3": self.q3, "Q4": self.q4, "OT": self.ot}

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "QuarterScores":
        return cls(
            q1=doc.get("Q1", 0),
            q2=doc.get("Q2", 0),
            q3=doc.get("Q3", 0),
            q4=doc.get("Q4", 0),
            ot=doc.get("OT", 0),
        )


@dataclass(frozen=True)
class LiveTeam:
    """One side of a scoreboard box."""
    name: str
    score: int
    record: TeamRecord
    score_by_quarter: QuarterScores = field(default_factory=QuarterScores)

    def to_document(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "record": self.record.to_document(),
            "scoreByQuarter": self.score_by_quarter.to_document(),
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "LiveTeam":
        return cls(
            name=doc["name"],
            score=doc["score"],
            record=TeamRecord.from_document(doc["record"]),
            score_by_quarter=QuarterScores.from_document(doc.get("scoreByQuarter", {})),
        )


@dataclass(frozen=True)
class LiveGame:
    """A game scraped from the live scoreboard page."""
    season: int
    week: int
    date: str
    home_team: LiveTeam
    away_team: LiveTeam
    game_status: str

    model_type = ModelType.NFL_LIVE

    @property
    def is_final(self) -> bool:
        return is_terminal_status(self.game_status)

    def to_document(self) -> Dict[str, Any]:
        return {
            "type": int(self.model_type),
            "season": self.season,
            "week": self.week,
            "date": self.date,
            "homeTeam": self.home_team.to_document(),
            "awayTeam": self.away_team.to_document(),
            "gameStatus": self.game_status,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "LiveGame":
        return cls(
            season=doc["season"],
            week=doc["week"],
            date=doc["date"],
            home_team=LiveTeam.from_document(doc["homeTeam"]),
            away_team=LiveTeam.from_document(doc["awayTeam"]),
            game_status=doc["gameStatus"],
        )


@dataclass(frozen=True)
class HistoricalGame:
    """A game row from the weekly schedule listing (played or upcoming)."""
    season: int
    week: int
    date: str
    home_team_name: str
    away_team_name: str
    home_team_score: int
    away_team_score: int
    game_status: str

    model_type = ModelType.NFL_HISTORICAL

    @property
    def is_final(self) -> bool:
        return is_terminal_status(self.game_status)

    @property
    def is_started(self) -> bool:
        return self.game_status != NOT_STARTED

    def to_document(self) -> Dict[str, Any]:
        return {
            "type": int(self.model_type),
            "season": self.season,
            "week": self.week,
            "date": self.date,
            "homeTeamName": self.home_team_name,
            "homeTeamScore": self.home_team_score,
            "awayTeamName": self.away_team_name,
            "awayTeamScore": self.away_team_score,
            "gameStatus": self.game_status,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "HistoricalGame":
        return cls(
            season=doc["season"],
            week=doc["week"],
            date=doc["date"],
            home_team_name=doc["homeTeamName"],
            away_team_name=doc["awayTeamName"],
            home_team_score=doc["homeTeamScore"],
            away_team_score=doc["awayTeamScore"],
            game_status=doc["gameStatus"],
        )


@dataclass(frozen=True)
class CurrentPosition:
    """The league's current season and week, independent of any game."""
    season: int
    week: int

    model_type = ModelType.NFL_CURRENT

    def to_document(self) -> Dict[str, int]:
        return {"season": self.season, "week": self.week}

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "CurrentPosition":
        return cls(season=doc["season"], week=doc["week"])


RECORD_TYPES = {
    ModelType.NFL_LIVE: LiveGame,
    ModelType.NFL_HISTORICAL: HistoricalGame,
    ModelType.NFL_CURRENT: CurrentPosition,
}


def record_from_document(doc: Dict[str, Any]):
    """Rebuild a record from a stored document using its ``type`` field."""
    return RECORD_TYPES[ModelType(doc["type"])].from_document(doc)
