from __future__ import annotations

import threading

import pytest

from sports_scraper.errors import FetchFailed, StoreUnavailable


def live_box(
    away=("Jets", "(1-1-0)", "37"),
    home=("Bills", "(0-2-0)", "31"),
    status="FINAL ",
    date="Thu, Sep 15",
    date_title="Date Aired",
):
    """One scoreboard box as the live page renders it."""

    def team(side, name, record, score):
        record_html = f'<p class="team-record"><a href="#">{record}</a></p>' if record is not None else ""
        return f"""
        <div class="team-wrapper">
          <div class="{side}-team">
            <div class="team-data">
              <div class="team-info">
                <p class="team-name"><a href="#">{name}</a></p>
                {record_html}
              </div>
              <p class="total-score">{score}</p>
              <p class="quarters-score">
                <span class="first-qt">7</span><span class="second-qt">3</span>
                <span class="third-qt">--</span><span class="fourth-qt">0</span>
                <span class="ot-qt">--</span>
              </p>
            </div>
          </div>
        </div>"""

    return f"""
    <div class="new-score-box-wrapper">
      <div class="new-score-box-heading">
        <p><span class="date" title="{date_title}">{date}</span></p>
      </div>
      <div class="new-score-box">
        {team("away", *away)}
        {team("home", *home)}
        <div class="game-center-area"><p><span>{status}</span></p></div>
      </div>
    </div>"""


def live_page(*boxes):
    return f"<html><body><div class='scorebox-wrapper'>{''.join(boxes)}</div></body></html>"


def post_row(away, away_score, home, home_score, status="FINAL", classes="post expandable  type-reg"):
    return f"""
    <li class="schedules-list-matchup {classes}">
      <div class="schedules-list-hd post">
        <div class="list-matchup-row-center">
          <div class="list-matchup-row-anim">
            <div class="list-matchup-row-team">
              <span class="team-name away">{away}</span>
              <span class="team-score away">{away_score}</span>
              <span class="team-score home">{home_score}</span>
              <span class="team-name home">{home}</span>
            </div>
          </div>
          <div class="list-matchup-row-time"><span class="time">{status}</span></div>
        </div>
      </div>
    </li>"""


def pre_row(away, home):
    return f"""
    <li class="schedules-list-matchup pre expandable type-reg">
      <div class="schedules-list-hd pre">
        <div class="list-matchup-row-center">
          <div class="list-matchup-row-anim">
            <div class="list-matchup-row-team">
              <span class="team-name away">{away}</span>
              <span class="team-name home">{home}</span>
            </div>
          </div>
          <div class="list-matchup-row-time"><span class="time">1:00 PM</span></div>
        </div>
      </div>
    </li>"""


def date_row(date):
    return f'<li class="schedules-list-date"><span><span>{date}</span></span></li>'


def listing_page(*rows):
    return f'<html><body><ul class="schedules-table">{"".join(rows)}</ul></body></html>'


class FakeStore:
    """In-memory stand-in for ScheduleStore."""

    def __init__(self, records=None, fail_query=False, fail_insert=False):
        self.records = list(records or [])
        self.fail_query = fail_query
        self.fail_insert = fail_insert
        self.queries = []
        self.inserted = []
        self._lock = threading.Lock()

    def query(self, model_type, season, week):
        self.queries.append((model_type, season, week))
        if self.fail_query:
            raise StoreUnavailable("store is down")
        return [
            r for r in self.records
            if r.model_type == model_type and r.season == season and r.week == week
        ]

    def insert(self, record):
        if self.fail_insert:
            raise StoreUnavailable("write refused")
        with self._lock:
            self.inserted.append(record)
        return str(len(self.inserted))


class FakeFetcher:
    """Serves pages by URL and counts fetches."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if url not in self.pages:
            raise FetchFailed(url, "404 Not Found")
        return self.pages[url]


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()
