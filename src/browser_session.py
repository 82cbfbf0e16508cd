"""Headless browser session bridged from a Canvas API token.

Canvas hands out a one-time session URL in exchange for a bearer token;
visiting it logs the browser in without going through the login form.
"""

import asyncio
import logging
from typing import Optional

import aiohttp
from playwright.async_api import async_playwright, Browser, BrowserContext, Page

from src.canvas_client import CanvasClient
from src.config import Config

logger = logging.getLogger(__name__)


class BrowserSession:
    """Owns the Playwright browser used by the CPN suites."""

    def __init__(self, client: CanvasClient, headless: Optional[bool] = None, timeout_ms: Optional[int] = None):
        self.client = client
        self.headless = Config.HEADLESS if headless is None else headless
        self.timeout_ms = timeout_ms or Config.PAGE_TIMEOUT_MS

        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def start(self):
        """Start the browser."""
        if self._playwright is None:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
            self._context = await self._browser.new_context()
            logger.info(f"Browser started (headless={self.headless})")

    async def stop(self):
        """Stop the browser."""
        if self._context:
            await self._context.close()

        if self._browser:
            await self._browser.close()

        if self._playwright:
            await self._playwright.stop()

        self._playwright = None
        self._browser = None
        self._context = None

    async def __aenter__(self) -> 'BrowserSession':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def new_page(self) -> Page:
        if self._context is None:
            raise RuntimeError("Browser session not started")
        page = await self._context.new_page()
        page.set_default_timeout(self.timeout_ms)
        return page

    async def login(self, page: Page, session: aiohttp.ClientSession) -> None:
        """Authenticate ``page`` through the session token bridge.

        Waits for the page load and the token exchange together; no retry,
        a stall past the page timeout fails the caller. The load waiter is
        cancelled when the exchange or navigation fails.
        """
        load_waiter = asyncio.ensure_future(page.wait_for_event('load'))
        try:
            session_url = await self.client.get_session_url(session)
            await page.goto(session_url)
        except Exception as e:
            load_waiter.cancel()
            await asyncio.gather(load_waiter, return_exceptions=True)
            logger.error(f"error logging in: {e}")
            raise
        await load_waiter
        logger.info("logged in")
