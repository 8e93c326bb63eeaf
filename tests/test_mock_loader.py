import pytest

from sports_scraper.db_models import TimePeriod
from sports_scraper.errors import FetchFailed
from sports_scraper.scraper.mock_loader import MOCK_SCHEDULES_DIR, MockFile, MockLoader


@pytest.mark.parametrize("mock_file", list(MockFile))
def test_every_mock_file_ships_with_the_package(mock_file):
    assert (MOCK_SCHEDULES_DIR / mock_file.value).is_file()
    assert "new-score-box-wrapper" in MockLoader().read_mock_file(mock_file)


def test_period_maps_to_file():
    assert MockFile.for_period(TimePeriod.BEGINNING) is MockFile.NFL_LIVE_BEGINNING
    assert MockFile.for_period(TimePeriod.from_value("middle")) is MockFile.NFL_LIVE_MIDDLE
    assert MockFile.for_period(TimePeriod.from_value("2")) is MockFile.NFL_LIVE_FINAL


def test_missing_file_raises_fetch_failed(tmp_path):
    with pytest.raises(FetchFailed):
        MockLoader(root=tmp_path).read_mock_file(MockFile.NFL_LIVE_FINAL)


def test_custom_root(tmp_path):
    target = tmp_path / MockFile.NFL_LIVE_BEGINNING.value
    target.parent.mkdir(parents=True)
    target.write_text("<html><body>custom</body></html>", encoding="utf-8")
    assert MockLoader(root=tmp_path).read_mock_file(MockFile.NFL_LIVE_BEGINNING) == "<html><body>custom</body></html>"


def test_unreadable_file_raises_fetch_failed(tmp_path):
    target = tmp_path / MockFile.NFL_LIVE_MIDDLE.value
    target.parent.mkdir(parents=True)
    target.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(FetchFailed):
        MockLoader(root=tmp_path).read_mock_file(MockFile.NFL_LIVE_MIDDLE)
