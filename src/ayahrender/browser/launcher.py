"""Obtain and release a Playwright browser for one request."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from ayahrender.models.browser import BrowserConnection, BrowserStrategy
from ayahrender.models.errors import BrowserConnectionError

logger = logging.getLogger(__name__)


class BrowserLauncher:
    """Turns a BrowserConnection into a live browser.

    Every browser handed out is closed (or, for a remote endpoint,
    disconnected) exactly once when the context exits, whatever the outcome.
    """

    def __init__(self, connect_timeout: float = 30.0):
        self.connect_timeout = connect_timeout

    @asynccontextmanager
    async def open(
        self, connection: BrowserConnection, fallback: BrowserConnection | None = None
    ) -> AsyncIterator[Browser]:
        try:
            playwright = await async_playwright().start()
        except Exception as e:
            raise BrowserConnectionError(
                f"Could not start the Playwright driver: {e}",
                details={"strategy": str(connection.strategy)},
            ) from e
        try:
            try:
                browser = await self.connect(playwright, connection)
            except BrowserConnectionError as e:
                if fallback is None:
                    raise
                logger.warning("%s; falling back to %s", e.message, fallback.target)
                browser = await self.connect(playwright, fallback)
            try:
                yield browser
            finally:
                await self._release(browser)
        finally:
            await playwright.stop()

    async def connect(self, playwright: Playwright, connection: BrowserConnection) -> Browser:
        chromium = playwright.chromium
        timeout_ms = self.connect_timeout * 1000
        try:
            if connection.strategy == BrowserStrategy.REMOTE:
                return await chromium.connect_over_cdp(connection.ws_endpoint, timeout=timeout_ms)
            if connection.strategy == BrowserStrategy.LOCAL:
                return await chromium.launch(args=connection.launch_args, timeout=timeout_ms)
            return await chromium.launch(timeout=timeout_ms)
        except PlaywrightError as e:
            verb = "connect to" if connection.strategy == BrowserStrategy.REMOTE else "launch"
            raise BrowserConnectionError(
                f"Could not {verb} browser at {connection.target}: {e.message}",
                details={"strategy": str(connection.strategy), "target": connection.target},
            ) from e

    async def _release(self, browser: Browser) -> None:
        try:
            await browser.close()
        except PlaywrightError as e:
            logger.warning("Browser did not close cleanly: %s", e.message)
