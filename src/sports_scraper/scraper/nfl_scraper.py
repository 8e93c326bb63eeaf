# src/sports_scraper/scraper/nfl_scraper.py
"""
Parsers for the three NFL page shapes.

  - live scoreboard   (nfl.com/scores/<season>/REG<week>)
  - weekly listing    (nfl.com/schedules/<season>/REG<week>)
  - current position  (season/week banner of the schedules page)

Each parser returns the complete list of records for the page or raises a
ScraperError. Rows are parsed one at a time into RowOutcome values and the
page is assembled afterwards; by default the first bad row aborts the page.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from ..db_models import (
    NOT_STARTED,
    CurrentPosition,
    HistoricalGame,
    LiveGame,
    ParseStrategy,
    QuarterScores,
    TeamRecord,
)
from ..errors import FieldConversionFailed, NodeNotFound, ScraperError
from .document import Document, Node, NodeRule
from .validator import build_historical_game, build_live_game, new_team_values

logger = logging.getLogger(__name__)

# --- Live scoreboard roles ---
SCORE_BOX = NodeRule.of("div", "new-score-box-wrapper")
SCORE_BOX_HEADING = NodeRule.of(classes="new-score-box-heading")
GAME_DATE = NodeRule.of(classes="date", attrs={"title": frozenset({"Date Aired", "Date Airing"})})
TEAM_WRAPPER = NodeRule.of(classes="team-wrapper")
AWAY_TEAM = NodeRule.of(classes="away-team")
TEAM_DATA = NodeRule.of(classes="team-data")
TEAM_INFO = NodeRule.of(classes="team-info")
TEAM_NAME = NodeRule.of(classes="team-name")
TEAM_RECORD = NodeRule.of(classes="team-record")
TOTAL_SCORE = NodeRule.of(classes="total-score")
QUARTERS_SCORE = NodeRule.of(classes="quarters-score")
GAME_CENTER = NodeRule.of(classes="game-center-area")
PARAGRAPH = NodeRule.of("p")

QUARTER_FIELDS = {
    "first-qt": "q1",
    "second-qt": "q2",
    "third-qt": "q3",
    "fourth-qt": "q4",
    "ot-qt": "ot",
}

# --- Weekly listing roles ---
SCHEDULES_TABLE = NodeRule.of("ul", "schedules-table")
LIST_DATE = NodeRule.of(classes="schedules-list-date")
# Covers "post expandable  type-reg", "post expandable primetime type-reg",
# "post  primetime type-reg" and "post   type-reg".
POST_MATCHUP = NodeRule.of(classes="schedules-list-matchup post")
BARE_ROW = NodeRule(bare=True)
POST_HEADER = NodeRule.of(classes="schedules-list-hd post")
PRE_HEADER = NodeRule.of(classes="schedules-list-hd pre")
ROW_CENTER = NodeRule.of(classes="list-matchup-row-center")
ROW_ANIM = NodeRule.of(classes="list-matchup-row-anim")
ROW_TEAM = NodeRule.of(classes="list-matchup-row-team")
ROW_TIME = NodeRule.of(classes="list-matchup-row-time")
AWAY_NAME = NodeRule.of(classes="team-name away")
AWAY_SCORE = NodeRule.of(classes="team-score away")
HOME_NAME = NodeRule.of(classes="team-name home")
HOME_SCORE = NodeRule.of(classes="team-score home")

# --- Current season/week roles ---
PAGE_NAV_LABEL = NodeRule.of("span", "page-nav-label")
PAGE_TITLE = NodeRule.of("h1", "pageTitle")
HTML_TITLE = NodeRule.of("title")
WEEK_HEADERS = (
    NodeRule.of("div", "schedules-header-title"),
    NodeRule.of("tr", "title"),
)
SEASON_IN_TITLE = re.compile(r"(\d{4})\s+nfl\s+schedule", re.IGNORECASE)
LEADING_INT = re.compile(r"\s*(\d+)")

Record = Union[LiveGame, HistoricalGame]


@dataclass(frozen=True)
class RowOutcome:
    """Result of parsing one row/box: exactly one of record or error is set."""
    position: int
    record: Optional[Record] = None
    error: Optional[ScraperError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def assemble_page(
    outcomes: Iterable[RowOutcome],
    skip_invalid: bool = False,
    log: Optional[logging.Logger] = None,
) -> List[Record]:
    """
    Collect row outcomes into the page result.

    With ``skip_invalid`` False the first failed row is raised and no partial
    result is returned. With it True, failed rows are logged and dropped.
    """
    log = log or logger
    records: List[Record] = []
    for outcome in outcomes:
        if outcome.ok:
            records.append(outcome.record)
            continue
        if not skip_invalid:
            raise outcome.error
        log.warning(f"Skipping row {outcome.position}: {outcome.error}")
    return records


def _parse_rows(rows: Iterable[Any], parse_row: Callable[[Any], Record]) -> Iterator[RowOutcome]:
    for position, row in enumerate(rows):
        try:
            yield RowOutcome(position=position, record=parse_row(row))
        except ScraperError as e:
            yield RowOutcome(position=position, error=e)


def parse_score(text: Optional[str]) -> int:
    """Scores render as digits, or as a placeholder ('--') before kickoff."""
    if text is None:
        return 0
    text = text.strip()
    return int(text) if text.isdecimal() else 0


def parse_team_record(text: str) -> TeamRecord:
    """Parse a W-L-T record such as "(1-0-0)"."""
    parts = text.replace("(", "").replace(")", "").strip().split("-")
    if len(parts) < 3:
        raise FieldConversionFailed("team record", text)
    try:
        wins, losses, ties = (int(part.strip()) for part in parts[:3])
    except ValueError as e:
        raise FieldConversionFailed("team record", text) from e
    if min(wins, losses, ties) < 0:
        raise FieldConversionFailed("team record", text)
    return TeamRecord(wins=wins, losses=losses, ties=ties)


# ---------------------------------------------------------------------------
# Live scoreboard
# ---------------------------------------------------------------------------

def _parse_live_team(team_node: Node, values: Dict[str, Any], side: str) -> None:
    """Fill ``values`` from a home-team/away-team node."""
    team_data = team_node.require_child(TEAM_DATA, f"team-data for {side} team")

    for child in team_data.children:
        if TEAM_INFO.matches(child):
            name_node = child.require_child(TEAM_NAME, f"{side} team name")
            values["name"] = name_node.text.strip()

            record_node = child.first_child_matching(TEAM_RECORD)
            if record_node is not None and record_node.first_child is not None:
                values["record"] = parse_team_record(record_node.first_child.text)
            elif record_node is not None and record_node.text.strip():
                values["record"] = parse_team_record(record_node.text)
            else:
                # No record shown: the game hasn't started.
                values["record"] = TeamRecord()
        elif TOTAL_SCORE.matches(child):
            values["score"] = parse_score(child.text)
        elif QUARTERS_SCORE.matches(child):
            quarters = {}
            for quarter_node in child.children:
                for css_class, field_name in QUARTER_FIELDS.items():
                    if css_class in quarter_node.classes:
                        quarters[field_name] = parse_score(quarter_node.text)
                        break
            values["score_by_quarter"] = QuarterScores(**quarters)


def _parse_game_status(game_center: Node) -> str:
    paragraph = game_center.first_child_matching(PARAGRAPH)
    if paragraph is None:
        raise NodeNotFound("game status paragraph in game-center-area")
    first = paragraph.first_child
    return first.text if first is not None else paragraph.text


def parse_live_box(score_box: Node, season: int, week: int) -> LiveGame:
    """Parse one ``new-score-box-wrapper`` into a LiveGame."""
    date: Optional[str] = None
    game_status: Optional[str] = None
    home = new_team_values()
    away = new_team_values()

    for box_child in score_box.children:
        if SCORE_BOX_HEADING.matches(box_child):
            heading = box_child.first_child
            date_node = heading.first_child_matching(GAME_DATE) if heading is not None else None
            if date_node is None:
                raise NodeNotFound("game date in score box heading")
            date = date_node.text
            continue

        for area in box_child.children:
            if TEAM_WRAPPER.matches(area):
                team_node = area.first_child
                if team_node is None:
                    raise NodeNotFound("team node in team-wrapper")
                if AWAY_TEAM.matches(team_node):
                    _parse_live_team(team_node, away, "away")
                else:
                    _parse_live_team(team_node, home, "home")
            elif GAME_CENTER.matches(area):
                game_status = _parse_game_status(area)

    return build_live_game(season, week, date, home, away, game_status)


def parse_live_schedule(
    html: Union[str, bytes],
    season: int,
    week: int,
    skip_invalid: bool = False,
    log: Optional[logging.Logger] = None,
) -> List[LiveGame]:
    """
    Parse the live scoreboard page into LiveGame records, one per score box.
    """
    log = log or logger
    document = Document.parse(html)

    score_boxes = document.find_all(SCORE_BOX)
    if not score_boxes:
        raise NodeNotFound("new-score-box-wrapper")

    outcomes = _parse_rows(score_boxes, lambda box: parse_live_box(box, season, week))
    games = assemble_page(outcomes, skip_invalid=skip_invalid, log=log)

    log.info(f"Successfully parsed {len(games)} NFL live games for {season} week {week}.")
    return games


# ---------------------------------------------------------------------------
# Weekly listing
# ---------------------------------------------------------------------------

def _row_team_node(row: Node, header_rule: NodeRule, kind: str) -> tuple[Node, Node]:
    """Walk hd -> row-center -> row-anim -> row-team. Returns (center, team)."""
    header = row.require_child(header_rule, f"schedules-list-hd {kind}")
    center = header.require_child(ROW_CENTER, "list-matchup-row-center")
    anim = center.require_child(ROW_ANIM, "list-matchup-row-anim")
    team = anim.require_child(ROW_TEAM, "list-matchup-row-team")
    return center, team


def parse_post_row(row: Node, season: int, week: int, date: str) -> HistoricalGame:
    """A completed game: names, scores and the final status."""
    center, team = _row_team_node(row, POST_HEADER, "post")

    away_name = team.require_child(AWAY_NAME, "away team name")
    away_score = team.require_child(AWAY_SCORE, "away team score")
    home_name = team.require_child(HOME_NAME, "home team name")
    home_score = team.require_child(HOME_SCORE, "home team score")

    time_node = center.require_child(ROW_TIME, "list-matchup-row-time")
    status_node = time_node.first_child
    if status_node is None:
        raise NodeNotFound("game status in list-matchup-row-time")

    return build_historical_game({
        "season": season,
        "week": week,
        "date": date,
        "home_team_name": home_name.text.strip(),
        "away_team_name": away_name.text.strip(),
        "home_team_score": parse_score(home_score.text),
        "away_team_score": parse_score(away_score.text),
        "game_status": status_node.text,
    })


def parse_pre_row(row: Node, season: int, week: int, date: str) -> HistoricalGame:
    """An upcoming game: only the names are on the page."""
    _, team = _row_team_node(row, PRE_HEADER, "pre")

    away_name = team.require_child(AWAY_NAME, "away team name")
    home_name = team.require_child(HOME_NAME, "home team name")

    return build_historical_game({
        "season": season,
        "week": week,
        "date": date,
        "home_team_name": home_name.text.strip(),
        "away_team_name": away_name.text.strip(),
        "home_team_score": 0,
        "away_team_score": 0,
        "game_status": NOT_STARTED,
    })


def _historical_rows(listing: Node, season: int, week: int) -> Iterator[RowOutcome]:
    """
    Walk the listing once. Date header rows update the date that every
    following game row inherits; attribute-less wrapper rows are skipped.
    """
    last_date_parsed = ""
    position = 0
    for child in listing.children:
        if LIST_DATE.matches(child):
            if child.first_child is None:
                yield RowOutcome(position=position, error=NodeNotFound("date in schedules-list-date"))
                position += 1
                continue
            last_date_parsed = child.leaf_text()
            continue
        if BARE_ROW.matches(child):
            continue

        parse_row = parse_post_row if POST_MATCHUP.matches(child) else parse_pre_row
        try:
            yield RowOutcome(position=position, record=parse_row(child, season, week, last_date_parsed))
        except ScraperError as e:
            yield RowOutcome(position=position, error=e)
        position += 1


def parse_historical_schedule(
    html: Union[str, bytes],
    season: int,
    week: int,
    skip_invalid: bool = False,
    log: Optional[logging.Logger] = None,
) -> List[HistoricalGame]:
    """Parse the weekly schedule listing into HistoricalGame records."""
    log = log or logger
    document = Document.parse(html)

    listing = document.find(SCHEDULES_TABLE)
    if listing is None:
        raise NodeNotFound("ul.schedules-table")

    games = assemble_page(_historical_rows(listing, season, week), skip_invalid=skip_invalid, log=log)

    log.info(f"Successfully parsed {len(games)} NFL historical games for {season} week {week}.")
    return games


# ---------------------------------------------------------------------------
# Current season / week
# ---------------------------------------------------------------------------

def _find_season(document: Document) -> int:
    for label in document.find_all(PAGE_NAV_LABEL):
        content = label.text.strip()
        if label.is_leaf and len(content) == 4 and content.isdecimal():
            return int(content)

    for rule in (PAGE_TITLE, HTML_TITLE):
        title = document.find(rule)
        if title is None:
            continue
        match = SEASON_IN_TITLE.search(title.text)
        if match:
            return int(match.group(1))

    raise NodeNotFound("season label")


def _week_from_label(content: str) -> int:
    index = content.lower().find("week ")
    if index < 0:
        raise FieldConversionFailed("week", content)
    match = LEADING_INT.match(content[index + len("week "):])
    if not match:
        raise FieldConversionFailed("week", content)
    return int(match.group(1))


def _find_week(document: Document) -> int:
    for rule in WEEK_HEADERS:
        header = document.find(rule)
        if header is None:
            continue
        label = header.first_child
        content = label.text if label is not None else header.text
        if "week " in content.lower():
            return _week_from_label(content)

    raise NodeNotFound("week label")


def parse_current_position(html: Union[str, bytes], log: Optional[logging.Logger] = None) -> CurrentPosition:
    """Read the season and week the site is currently showing."""
    log = log or logger
    document = Document.parse(html)
    position = CurrentPosition(season=_find_season(document), week=_find_week(document))
    log.info(f"Current NFL position is {position.season} week {position.week}.")
    return position


def parse_schedule(
    html: Union[str, bytes],
    strategy: ParseStrategy,
    season: Optional[int] = None,
    week: Optional[int] = None,
    skip_invalid: bool = False,
    log: Optional[logging.Logger] = None,
):
    """Dispatch to the parser for ``strategy``."""
    if strategy is ParseStrategy.CURRENT:
        return parse_current_position(html, log=log)
    if season is None or week is None:
        raise ValueError(f"season and week are required for {strategy.value} schedules")
    if strategy is ParseStrategy.LIVE:
        return parse_live_schedule(html, season, week, skip_invalid=skip_invalid, log=log)
    return parse_historical_schedule(html, season, week, skip_invalid=skip_invalid, log=log)
