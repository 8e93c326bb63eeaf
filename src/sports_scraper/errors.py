# src/sports_scraper/errors.py
"""
Error types raised while fetching, parsing and storing schedules.

Parse-time errors (DocumentUnparsable, NodeNotFound, FieldConversionFailed,
IncompleteRecord) abort the whole page. FetchFailed aborts before parsing.
StoreUnavailable fails a request only when it happens on the read path.
"""

from __future__ import annotations

from typing import Sequence


class ScraperError(Exception):
    """Base class for every error surfaced by the scraper."""


class DocumentUnparsable(ScraperError):
    """Raw HTML could not be turned into a document tree."""


class NodeNotFound(ScraperError):
    """An expected structural element is missing from the page."""

    def __init__(self, what: str) -> None:
        super().__init__(f"Expected element not found: {what}")
        self.what = what


class FieldConversionFailed(ScraperError):
    """Text content could not be converted to the expected type."""

    def __init__(self, field: str, raw: str | None) -> None:
        super().__init__(f"Could not convert {field} from {raw!r}")
        self.field = field
        self.raw = raw


class IncompleteRecord(ScraperError):
    """A record was rejected because required fields are missing."""

    def __init__(self, record_type: str, missing_fields: Sequence[str]) -> None:
        self.record_type = record_type
        self.missing_fields = tuple(missing_fields)
        super().__init__(
            f"{record_type} is missing values for: {', '.join(self.missing_fields)}"
        )


class FetchFailed(ScraperError):
    """The page could not be retrieved (transport error, bad status, empty body)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Error fetching {url}: {reason}")
        self.url = url
        self.reason = reason


class StoreUnavailable(ScraperError):
    """The persisted store rejected a read or a write."""
