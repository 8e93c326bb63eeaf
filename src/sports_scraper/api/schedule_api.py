# src/sports_scraper/api/schedule_api.py
from flask import Flask, current_app, jsonify
import logging
import threading

from ..db_models import League, ParseStrategy, ScheduleKey, TimePeriod
from ..errors import FetchFailed, ScraperError, StoreUnavailable
from ..scraper import scraper_config
from ..scraper.orchestrator import build_orchestrator

logger = logging.getLogger(__name__)

# Earliest season each page shape is published for
MIN_LIVE_SEASON = 2001
MIN_HISTORICAL_SEASON = 1970

INVALID_LEAGUE = "Invalid league type selected"
NON_INTEGER_PATH = "'year' and 'week' must be integers"
INVALID_WEEK = "'week' must be a positive integer"
INVALID_PERIOD = "'period' must be one of beginning, middle, final (or 0, 1, 2)"

_LEAGUE_NAMES = {"0": League.NFL, "nfl": League.NFL}

_orchestrator_lock = threading.Lock()


class InvalidPathParameter(Exception):
    """A path parameter failed validation; the message is sent to the client."""


def _error(message, status):
    return jsonify({"Error": message}), status


def _parse_league(raw):
    league = _LEAGUE_NAMES.get(raw.strip().lower())
    if league is None:
        raise InvalidPathParameter(INVALID_LEAGUE)
    return league


def _parse_key(strategy, league, year, week, min_season):
    _parse_league(league)
    try:
        season = int(year)
        week_in_season = int(week)
    except ValueError:
        raise InvalidPathParameter(NON_INTEGER_PATH) from None
    if season < min_season:
        raise InvalidPathParameter(f"'year' must be greater than {min_season}")
    if week_in_season < 1:
        raise InvalidPathParameter(INVALID_WEEK)
    return ScheduleKey(strategy, season, week_in_season)


def _error_status(error):
    if isinstance(error, FetchFailed):
        return 502
    if isinstance(error, StoreUnavailable):
        return 503
    return 500


def get_orchestrator():
    """The app's orchestrator, built from configuration on first use."""
    orchestrator = current_app.extensions.get("schedule_orchestrator")
    if orchestrator is not None:
        return orchestrator
    with _orchestrator_lock:
        orchestrator = current_app.extensions.get("schedule_orchestrator")
        if orchestrator is None:
            orchestrator = build_orchestrator()
            current_app.extensions["schedule_orchestrator"] = orchestrator
    return orchestrator


def _resolve(key):
    resolution = get_orchestrator().resolve(key)
    response = jsonify(resolution.to_documents())
    if resolution.write_back is not None:
        # Join the write-back group once the body has gone out
        response.call_on_close(resolution.complete)
    return response, 200


def create_app(orchestrator=None):
    """Build the Flask app. Without an orchestrator one is created lazily from configuration."""
    app = Flask(__name__)
    if orchestrator is not None:
        app.extensions["schedule_orchestrator"] = orchestrator

    @app.errorhandler(InvalidPathParameter)
    def handle_bad_request(e):
        logger.error(str(e))
        return _error(str(e), 400)

    @app.errorhandler(ScraperError)
    def handle_scraper_error(e):
        logger.error(f"Error serving {type(e).__name__}: {e}")
        return _error(str(e), _error_status(e))

    @app.route('/live-schedule/<league>/<year>/<week>', methods=['GET'])
    def live_schedule(league, year, week):
        """Live scoreboard for a week (2001 onwards)."""
        key = _parse_key(ParseStrategy.LIVE, league, year, week, MIN_LIVE_SEASON)
        return _resolve(key)

    @app.route('/historical-schedule/<league>/<year>/<week>', methods=['GET'])
    def historical_schedule(league, year, week):
        """Weekly schedule listing, played and upcoming games (1970 onwards)."""
        key = _parse_key(ParseStrategy.HISTORICAL, league, year, week, MIN_HISTORICAL_SEASON)
        return _resolve(key)

    @app.route('/current/<league>', methods=['GET'])
    def current_season_week(league):
        _parse_league(league)
        position = get_orchestrator().current_position()
        return jsonify(position.to_document()), 200

    @app.route('/mock-schedule/<league>/<period>', methods=['GET'])
    def mock_schedule(league, period):
        """Canned live week at one point in time; never touches the store."""
        _parse_league(league)
        try:
            time_period = TimePeriod.from_value(period)
        except (KeyError, ValueError):
            raise InvalidPathParameter(INVALID_PERIOD) from None
        games = get_orchestrator().mock_schedule(time_period)
        return jsonify([game.to_document() for game in games]), 200

    return app


def main():
    scraper_config.configure_logging()
    app = create_app()
    app.run(host=scraper_config.API_HOST, port=scraper_config.API_PORT)


if __name__ == '__main__':
    main()
