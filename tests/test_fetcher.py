import pytest
import requests

from sports_scraper.errors import FetchFailed
from sports_scraper.scraper import fetcher as fetcher_module
from sports_scraper.scraper.fetcher import (
    BrowserPageFetcher,
    MockFetcher,
    PageFetcher,
    build_fetcher,
)
from sports_scraper.scraper.mock_loader import MockFile


class _FakeResponse:
    def __init__(self, text, status_error=None):
        self.text = text
        self._status_error = status_error

    def raise_for_status(self):
        if self._status_error:
            raise self._status_error


def test_page_fetcher_returns_body(mocker):
    session = mocker.Mock()
    session.get.return_value = _FakeResponse("<html><body>ok</body></html>")

    html = PageFetcher(timeout=5, session=session).fetch("http://nfl.test/scores/2016/REG2")

    assert html == "<html><body>ok</body></html>"
    session.get.assert_called_once_with(
        "http://nfl.test/scores/2016/REG2", headers=fetcher_module.DEFAULT_HEADERS, timeout=5
    )


def test_page_fetcher_bad_status(mocker):
    session = mocker.Mock()
    session.get.return_value = _FakeResponse("", status_error=requests.exceptions.HTTPError("404 Client Error"))
    with pytest.raises(FetchFailed) as excinfo:
        PageFetcher(session=session).fetch("http://nfl.test/missing")
    assert "404" in str(excinfo.value)


def test_page_fetcher_timeout(mocker):
    session = mocker.Mock()
    session.get.side_effect = requests.exceptions.ReadTimeout("slow")
    with pytest.raises(FetchFailed) as excinfo:
        PageFetcher(timeout=3, session=session).fetch("http://nfl.test/slow")
    assert excinfo.value.reason == "timed out after 3s"


def test_page_fetcher_connection_error(mocker):
    session = mocker.Mock()
    session.get.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(FetchFailed):
        PageFetcher(session=session).fetch("http://nfl.test/")


def test_page_fetcher_empty_body(mocker):
    session = mocker.Mock()
    session.get.return_value = _FakeResponse("  \n")
    with pytest.raises(FetchFailed) as excinfo:
        PageFetcher(session=session).fetch("http://nfl.test/")
    assert excinfo.value.reason == "empty response body"


class _FakePage:
    def __init__(self, html):
        self.html = html
        self.visited = []
        self.waited_for = []

    async def goto(self, url, timeout):
        self.visited.append(url)

    async def wait_for_selector(self, selector, timeout):
        self.waited_for.append(selector)

    async def content(self):
        return self.html


class _FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class _FakePlaywright:
    def __init__(self, browser):
        self.chromium = self
        self.browser = browser

    async def launch(self, headless):
        return self.browser

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def test_browser_fetcher_renders_page(mocker):
    page = _FakePage("<html><body>rendered</body></html>")
    browser = _FakeBrowser(page)
    mocker.patch.object(fetcher_module, "async_playwright", return_value=_FakePlaywright(browser))

    html = BrowserPageFetcher(wait_selector="div.new-score-box-wrapper").fetch("http://nfl.test/scores/2016/REG2")

    assert html == "<html><body>rendered</body></html>"
    assert page.visited == ["http://nfl.test/scores/2016/REG2"]
    assert page.waited_for == ["div.new-score-box-wrapper"]
    assert browser.closed


def test_browser_fetcher_empty_page(mocker):
    browser = _FakeBrowser(_FakePage(""))
    mocker.patch.object(fetcher_module, "async_playwright", return_value=_FakePlaywright(browser))
    with pytest.raises(FetchFailed):
        BrowserPageFetcher().fetch("http://nfl.test/")


def test_mock_fetcher_serves_registered_pages():
    url = "http://nfl.test/scores/2016/REG2"
    fetcher = MockFetcher({url: MockFile.NFL_LIVE_FINAL})
    assert "new-score-box-wrapper" in fetcher.fetch(url)
    with pytest.raises(FetchFailed):
        fetcher.fetch("http://nfl.test/other")


def test_build_fetcher():
    assert isinstance(build_fetcher("requests", 5), PageFetcher)
    assert isinstance(build_fetcher("browser", 5), BrowserPageFetcher)
    with pytest.raises(ValueError):
        build_fetcher("carrier-pigeon", 5)
