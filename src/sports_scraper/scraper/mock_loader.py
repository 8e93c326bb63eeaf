# src/sports_scraper/scraper/mock_loader.py
"""
Canned NFL pages used in place of live fetches.

The snapshots simulate one live week (2016, week 2) at three points in time:
before kickoff, mid-afternoon and after the last game.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from ..db_models import TimePeriod
from ..errors import FetchFailed

logger = logging.getLogger(__name__)

MOCK_SCHEDULES_DIR = Path(__file__).resolve().parent / "mock_schedules"

# Season/week the live snapshots were captured from.
MOCK_SEASON = 2016
MOCK_WEEK = 2


class MockFile(Enum):
    """Mock data files, relative to the mock schedules directory."""
    NFL_LIVE_BEGINNING = "NFL-live/nfl-live-mock-beginning.html"
    NFL_LIVE_MIDDLE = "NFL-live/nfl-live-mock-middle.html"
    NFL_LIVE_FINAL = "NFL-live/nfl-live-mock-final.html"

    @classmethod
    def for_period(cls, time_period: TimePeriod) -> "MockFile":
        return {
            TimePeriod.BEGINNING: cls.NFL_LIVE_BEGINNING,
            TimePeriod.MIDDLE: cls.NFL_LIVE_MIDDLE,
            TimePeriod.FINAL: cls.NFL_LIVE_FINAL,
        }[time_period]


class MockLoader:
    """Reads mock schedule files from disk."""

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else MOCK_SCHEDULES_DIR

    def path_for(self, mock_file: MockFile) -> Path:
        return self.root / mock_file.value

    def read_mock_file(self, mock_file: MockFile) -> str:
        """
        Return the HTML of a mock file.

        Raises:
            FetchFailed: the file is missing or can't be read.
        """
        path = self.path_for(mock_file)
        if not path.is_file():
            logger.error(f"File does not exist for {mock_file.value}")
            raise FetchFailed(str(path), "mock file does not exist")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"File can't be read for {mock_file.value}: {e}")
            raise FetchFailed(str(path), f"mock file can't be read: {e}") from e
