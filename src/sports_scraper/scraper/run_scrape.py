# src/sports_scraper/scraper/run_scrape.py
"""Command-line runner: scrape one schedule page and print it as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from ..db_models import ParseStrategy, ScheduleKey, TimePeriod
from ..errors import ScraperError
from . import scraper_config
from .orchestrator import build_orchestrator

logger = logging.getLogger(__name__)


def _time_period(value: str) -> TimePeriod:
    try:
        return TimePeriod.from_value(value)
    except (KeyError, ValueError):
        raise argparse.ArgumentTypeError(
            f"invalid period {value!r} (expected beginning, middle, final or 0-2)"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sports-scraper")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("live", "Scrape the live scoreboard for a week"),
        ("historical", "Scrape the weekly schedule listing"),
    ):
        week_parser = subparsers.add_parser(name, help=help_text)
        week_parser.add_argument("--season", required=True, type=int)
        week_parser.add_argument("--week", required=True, type=int)
        week_parser.add_argument(
            "--no-cache", action="store_true", help="Parse the page without reading or writing MongoDB"
        )

    subparsers.add_parser("current", help="Print the current NFL season and week")

    mock_parser = subparsers.add_parser("mock", help="Parse a canned live week")
    mock_parser.add_argument("--period", required=True, type=_time_period)

    return parser


def run(args: argparse.Namespace) -> List[dict]:
    """Execute one command and return the JSON-ready documents."""
    use_store = args.command in ("live", "historical") and not args.no_cache
    orchestrator = build_orchestrator(connect_store=use_store)
    try:
        if args.command == "current":
            return [orchestrator.current_position().to_document()]
        if args.command == "mock":
            return [game.to_document() for game in orchestrator.mock_schedule(args.period)]

        key = ScheduleKey(ParseStrategy(args.command), args.season, args.week)
        if not use_store:
            return [record.to_document() for record in orchestrator.scrape(key)]

        resolution = orchestrator.resolve(key)
        logger.info(f"Resolved {len(resolution.records)} records from {resolution.source}.")
        # Wait for the write-back before the process exits
        resolution.complete()
        return resolution.to_documents()
    finally:
        orchestrator.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the scraper and print the parsed games."""
    args = build_parser().parse_args(argv)
    scraper_config.configure_logging()

    logger.info(f"--- Starting NFL {args.command} scrape ---")
    try:
        documents = run(args)
    except ScraperError as e:
        logger.error(f"Scrape failed: {e}")
        return 1

    print(json.dumps(documents, indent=2))
    logger.info(f"--- Scraper finished: {len(documents)} records ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())
