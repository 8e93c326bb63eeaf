# src/sports_scraper/scraper/orchestrator.py
"""
Cache-aside read path for schedules.

    RESOLVE -> HIT -> RESPOND -> DONE
    RESOLVE -> MISS_FETCH -> MISS_PARSE -> MISS_VALIDATE -> RESPOND [-> WRITEBACK] -> DONE

On a miss the page is fetched and parsed and the records go straight back to
the caller. Only when every game of the week is final are the records
written to the store, one insert per record on a bounded thread pool. A
write failure is logged and recorded on the WriteBack handle; it never
affects the records already returned.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from ..db_models import CurrentPosition, LiveGame, ParseStrategy, ScheduleKey, TimePeriod
from ..errors import FetchFailed, ScraperError, StoreUnavailable
from . import scraper_config
from .fetcher import build_fetcher
from .mock_loader import MOCK_SEASON, MOCK_WEEK, MockFile, MockLoader
from .nfl_scraper import parse_current_position, parse_live_schedule, parse_schedule
from .schedule_store import ScheduleStore

logger = logging.getLogger(__name__)


class ResolveState(Enum):
    RESOLVE = "resolve"
    HIT = "hit"
    MISS_FETCH = "miss_fetch"
    MISS_PARSE = "miss_parse"
    MISS_VALIDATE = "miss_validate"
    RESPOND = "respond"
    WRITEBACK = "writeback"
    DONE = "done"


@dataclass(frozen=True)
class WriteBackReport:
    attempted: int
    inserted: int
    failed: int
    first_error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.failed == 0


class WriteBack:
    """A group of independent insert tasks, joined with ``wait()``."""

    def __init__(self, log: logging.Logger) -> None:
        self.log = log
        self._futures: List[Future] = []
        self._lock = threading.Lock()
        self._first_error: Optional[BaseException] = None

    def add(self, future: Future) -> None:
        self._futures.append(future)
        future.add_done_callback(self._on_done)

    def _on_done(self, future: Future) -> None:
        error = future.exception()
        if error is None:
            return
        with self._lock:
            if self._first_error is None:
                self._first_error = error

    @property
    def done(self) -> bool:
        return all(future.done() for future in self._futures)

    def wait(self, timeout: Optional[float] = None) -> WriteBackReport:
        """Block until every insert has finished. Failed inserts don't cancel the rest."""
        wait_futures(self._futures, timeout=timeout)
        finished = [future for future in self._futures if future.done()]
        errors = [future.exception() for future in finished if future.exception() is not None]
        with self._lock:
            first_error = self._first_error
        # Done callbacks can still be running when wait() returns
        if first_error is None and errors:
            first_error = errors[0]
        report = WriteBackReport(
            attempted=len(self._futures),
            inserted=len(finished) - len(errors),
            failed=len(errors),
            first_error=first_error,
        )
        if report.failed:
            self.log.error(
                f"Write-back stored {report.inserted}/{report.attempted} records; "
                f"first error: {report.first_error}"
            )
        else:
            self.log.info(f"Write-back stored {report.inserted}/{report.attempted} records.")
        return report


@dataclass
class Resolution:
    """What ``resolve`` hands back: the records plus how they were obtained."""
    key: ScheduleKey
    records: list
    source: str  # "store" or "scrape"
    states: List[ResolveState] = field(default_factory=list)
    write_back: Optional[WriteBack] = None

    @property
    def from_cache(self) -> bool:
        return self.source == "store"

    def to_documents(self) -> List[dict]:
        return [record.to_document() for record in self.records]

    def complete(self, timeout: Optional[float] = None) -> Optional[WriteBackReport]:
        """Join the write-back group, if one was started."""
        if self.write_back is None:
            return None
        return self.write_back.wait(timeout=timeout)


class ScheduleOrchestrator:
    """Decides between the store and a fresh scrape for each schedule request."""

    def __init__(
        self,
        store,
        fetcher,
        *,
        live_url: str = scraper_config.NFL_LIVE_URL,
        historical_url: str = scraper_config.NFL_HISTORICAL_URL,
        current_url: str = scraper_config.NFL_CURRENT_URL,
        max_workers: int = scraper_config.WRITEBACK_WORKERS,
        skip_invalid_rows: bool = scraper_config.SKIP_INVALID_ROWS,
        mock_loader: Optional[MockLoader] = None,
        store_factory: Optional[Callable[[], ScheduleStore]] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._store_factory = store_factory
        self._store_lock = threading.Lock()
        self.fetcher = fetcher
        self.base_urls = {
            ParseStrategy.LIVE: live_url.rstrip("/"),
            ParseStrategy.HISTORICAL: historical_url.rstrip("/"),
        }
        self.current_url = current_url
        self.skip_invalid_rows = skip_invalid_rows
        self.mock_loader = mock_loader or MockLoader()
        self.log = log or logger
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="writeback")

    @property
    def store(self):
        """The schedule store, opened through ``store_factory`` on first use."""
        if self._store is None:
            if self._store_factory is None:
                raise StoreUnavailable("No schedule store configured")
            with self._store_lock:
                if self._store is None:
                    self._store = self._store_factory()
        return self._store

    def url_for(self, key: ScheduleKey) -> str:
        """``{base}/{season}/REG{week}`` for the key's page shape."""
        try:
            base = self.base_urls[key.strategy]
        except KeyError:
            raise ValueError(f"No schedule URL for {key.strategy.value} pages") from None
        return f"{base}/{key.season}/REG{key.week}"

    def resolve(self, key: ScheduleKey) -> Resolution:
        """
        Return the records for ``key``, from the store when present.

        Raises:
            StoreUnavailable: the initial store read failed.
            FetchFailed: the page could not be fetched or was empty.
            DocumentUnparsable, NodeNotFound, FieldConversionFailed,
            IncompleteRecord: the page could not be parsed.
        """
        states = [ResolveState.RESOLVE]

        stored = self.store.query(key.model_type, key.season, key.week)
        if stored:
            states += [ResolveState.HIT, ResolveState.RESPOND, ResolveState.DONE]
            self.log.info(f"Serving {len(stored)} stored {key.strategy.value} records for {key.season} week {key.week}.")
            return Resolution(key=key, records=list(stored), source="store", states=states)

        states.append(ResolveState.MISS_FETCH)
        try:
            html = self.fetch_page(self.url_for(key))
            states.append(ResolveState.MISS_PARSE)
            records = self._parse(key, html)
        except ScraperError as e:
            self.log.error(f"Error scraping {key.strategy.value} schedule for {key.season} week {key.week}: {e}")
            raise
        states += [ResolveState.MISS_VALIDATE, ResolveState.RESPOND]

        write_back = None
        if records and all(record.is_final for record in records):
            states.append(ResolveState.WRITEBACK)
            write_back = self.write_back(records)
        else:
            self.log.info(f"{key.season} week {key.week} is not complete; skipping write-back.")
        states.append(ResolveState.DONE)

        return Resolution(key=key, records=records, source="scrape", states=states, write_back=write_back)

    def fetch_page(self, url: str) -> str:
        html = self.fetcher.fetch(url)
        if not html or not html.strip():
            raise FetchFailed(url, "empty response body")
        return html

    def _parse(self, key: ScheduleKey, html: str) -> list:
        return parse_schedule(
            html,
            key.strategy,
            season=key.season,
            week=key.week,
            skip_invalid=self.skip_invalid_rows,
            log=self.log,
        )

    def scrape(self, key: ScheduleKey) -> list:
        """Fetch and parse ``key``'s page without reading or writing the store."""
        return self._parse(key, self.fetch_page(self.url_for(key)))

    def write_back(self, records: list) -> WriteBack:
        """Insert each record independently on the write-back pool."""
        group = WriteBack(self.log)
        for record in records:
            group.add(self._executor.submit(self._insert, record))
        return group

    def _insert(self, record) -> None:
        try:
            self.store.insert(record)
        except ScraperError as e:
            self.log.error(f"Error storing {type(record).__name__} for {record.season} week {record.week}: {e}")
            raise

    def current_position(self) -> CurrentPosition:
        """The season/week the site currently shows. Not cached."""
        try:
            html = self.fetch_page(self.current_url)
            return parse_current_position(html, log=self.log)
        except ScraperError as e:
            self.log.error(f"Error retrieving current NFL season/week: {e}")
            raise

    def mock_schedule(self, time_period: TimePeriod) -> List[LiveGame]:
        """Parse the canned live page for ``time_period``. Never touches the store."""
        try:
            html = self.mock_loader.read_mock_file(MockFile.for_period(time_period))
            return parse_live_schedule(
                html, MOCK_SEASON, MOCK_WEEK, skip_invalid=self.skip_invalid_rows, log=self.log
            )
        except ScraperError as e:
            self.log.error(f"Error loading mock data for NFL {time_period.name.lower()}: {e}")
            raise

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def build_orchestrator(connect_store: bool = True) -> ScheduleOrchestrator:
    """
    Wire a store and fetcher from the environment configuration.

    MongoDB is only contacted on the first cache lookup, so the mock and
    current-position paths work without it. With ``connect_store=False``
    there is no store at all and ``resolve`` raises StoreUnavailable.
    """
    fetcher = build_fetcher(scraper_config.FETCH_BACKEND, scraper_config.FETCH_TIMEOUT)
    store_factory = ScheduleStore.connect if connect_store else None
    return ScheduleOrchestrator(None, fetcher, store_factory=store_factory)
