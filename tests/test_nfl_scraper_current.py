import pytest

from sports_scraper.db_models import CurrentPosition, ParseStrategy
from sports_scraper.errors import FieldConversionFailed, NodeNotFound
from sports_scraper.scraper import nfl_scraper


TITLE_LAYOUT = """
<html>
  <head><title>NFL Schedule | NFL.com</title></head>
  <body>
    <h1 class="pageTitle">2016 NFL Schedule</h1>
    <div class="schedules-header-title"><span>NFL WEEK 3</span></div>
  </body>
</html>
"""

NAV_LAYOUT = """
<html>
  <body>
    <div class="page-nav">
      <span class="page-nav-label"><a href="#">Season</a></span>
      <span class="page-nav-label">2017</span>
    </div>
    <table>
      <tr class="title"><td>Week 12</td></tr>
    </table>
  </body>
</html>
"""


def test_title_and_header_layout():
    assert nfl_scraper.parse_current_position(TITLE_LAYOUT) == CurrentPosition(season=2016, week=3)


def test_nav_label_and_table_title_layout():
    assert nfl_scraper.parse_current_position(NAV_LAYOUT) == CurrentPosition(season=2017, week=12)


def test_week_navigation_is_not_mistaken_for_the_header():
    html = """
    <html><body>
      <h1 class="pageTitle">2016 NFL Schedule</h1>
      <ul class="week-nav"><li><a>Week 1</a></li><li><a>Week 2</a></li></ul>
      <div class="schedules-header-title-v2"><span>NFL WEEK 9</span></div>
    </body></html>
    """
    with pytest.raises(NodeNotFound):
        nfl_scraper.parse_current_position(html)


def test_season_from_html_title():
    html = "<html><head><title>2014 NFL Schedule</title></head><body><div class='schedules-header-title'>NFL WEEK 1</div></body></html>"
    assert nfl_scraper.parse_current_position(html) == CurrentPosition(season=2014, week=1)


def test_missing_season_raises():
    html = "<html><body><div class='schedules-header-title'>NFL WEEK 3</div></body></html>"
    with pytest.raises(NodeNotFound):
        nfl_scraper.parse_current_position(html)


def test_missing_week_raises():
    html = "<html><body><h1 class='pageTitle'>2016 NFL Schedule</h1></body></html>"
    with pytest.raises(NodeNotFound):
        nfl_scraper.parse_current_position(html)


def test_week_label_without_number_raises():
    html = "<html><body><h1 class='pageTitle'>2016 NFL Schedule</h1><div class='schedules-header-title'>NFL WEEK TBD</div></body></html>"
    with pytest.raises(FieldConversionFailed):
        nfl_scraper.parse_current_position(html)


def test_parse_schedule_dispatches_current():
    position = nfl_scraper.parse_schedule(TITLE_LAYOUT, ParseStrategy.CURRENT)
    assert position.to_document() == {"season": 2016, "week": 3}
