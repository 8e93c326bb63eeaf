# src/sports_scraper/scraper/fetcher.py
"""
Page fetchers. Every fetcher exposes ``fetch(url) -> str`` and raises
FetchFailed on transport errors, bad statuses, timeouts or empty bodies.
No retries are attempted here.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import requests
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..errors import FetchFailed
from . import scraper_config
from .mock_loader import MockFile, MockLoader

logger = logging.getLogger(__name__)

# Use a User-Agent header to mimic a real browser and avoid blocks
DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
}


class PageFetcher:
    """Plain HTTP GET with requests."""

    def __init__(self, timeout: int = scraper_config.FETCH_TIMEOUT, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str) -> str:
        """Fetches the HTML content from the target URL."""
        try:
            response = self.session.get(url, headers=DEFAULT_HEADERS, timeout=self.timeout)
            response.raise_for_status()  # Raise an exception for bad status codes (4xx or 5xx)
        except requests.exceptions.Timeout as e:
            logger.error(f"Timed out after {self.timeout}s fetching {url}")
            raise FetchFailed(url, f"timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching page: {e}")
            raise FetchFailed(url, str(e)) from e

        html = response.text
        if not html or not html.strip():
            logger.error(f"Empty response body from {url}")
            raise FetchFailed(url, "empty response body")

        logger.info(f"Successfully fetched {url}")
        return html


class BrowserPageFetcher:
    """Fetches the fully rendered HTML content using Playwright."""

    def __init__(self, wait_selector: Optional[str] = None, timeout: int = scraper_config.FETCH_TIMEOUT) -> None:
        self.wait_selector = wait_selector
        self.timeout_ms = timeout * 1000

    async def fetch_async(self, url: str) -> str:
        try:
            async with async_playwright() as p:
                # Launch a headless Chromium browser
                browser = await p.chromium.launch(headless=True)
                try:
                    page = await browser.new_page()
                    await page.goto(url, timeout=self.timeout_ms)

                    # Wait for a key schedule element to ensure the page is fully rendered
                    if self.wait_selector:
                        await page.wait_for_selector(self.wait_selector, timeout=self.timeout_ms)

                    html_content = await page.content()
                finally:
                    await browser.close()
        except PlaywrightError as e:
            logger.error(f"Playwright failed to load {url}: {e}")
            raise FetchFailed(url, str(e)) from e

        if not html_content or not html_content.strip():
            raise FetchFailed(url, "empty rendered page")

        logger.info(f"Successfully fetched and rendered {url}")
        return html_content

    def fetch(self, url: str) -> str:
        """Synchronous entry point."""
        return asyncio.run(self.fetch_async(url))


class MockFetcher:
    """Serves canned pages for known URLs instead of going to the network."""

    def __init__(self, pages: Dict[str, MockFile], loader: Optional[MockLoader] = None) -> None:
        self.pages = dict(pages)
        self.loader = loader or MockLoader()

    def fetch(self, url: str) -> str:
        mock_file = self.pages.get(url)
        if mock_file is None:
            raise FetchFailed(url, "no mock page registered for URL")
        return self.loader.read_mock_file(mock_file)


def build_fetcher(backend: str = scraper_config.FETCH_BACKEND, timeout: int = scraper_config.FETCH_TIMEOUT):
    """Pick the fetcher configured by FETCH_BACKEND."""
    if backend == "browser":
        return BrowserPageFetcher(timeout=timeout)
    if backend == "requests":
        return PageFetcher(timeout=timeout)
    raise ValueError(f"Unknown FETCH_BACKEND {backend!r} (expected 'requests' or 'browser')")
