# bizdocs/pdf/browser.py
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Sequence, Tuple

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from bizdocs import settings
from bizdocs.errors import PdfGenerationError

log = logging.getLogger("bizdocs.pdf")

# returns (browser, playwright driver or None)
LaunchFn = Callable[[], Awaitable[Tuple[Any, Optional[Any]]]]


class BrowserSession:
    """
    One long-lived headless Chromium shared by every document generation.

    - launched lazily by the first get()
    - concurrent first callers wait on the same lock, so only one process starts
    - a browser that disconnected (crash, OOM kill) is replaced on the next get()
    - close() tears it down; get() afterwards launches a fresh one
    """

    def __init__(self, *, launch: LaunchFn | None = None, args: Sequence[str] = settings.CHROMIUM_ARGS):
        self._launch_fn = launch
        self._args = list(args)
        self._browser: Browser | None = None
        self._playwright: Playwright | None = None
        self._lock = asyncio.Lock()
        self.launch_count = 0

    @staticmethod
    def is_alive(browser: Any) -> bool:
        if browser is None:
            return False
        try:
            return bool(browser.is_connected())
        except PlaywrightError:
            return False

    @property
    def is_running(self) -> bool:
        return self.is_alive(self._browser)

    async def _launch(self) -> Tuple[Any, Optional[Any]]:
        if self._launch_fn is not None:
            return await self._launch_fn()

        pw = await async_playwright().start()
        try:
            browser = await pw.chromium.launch(headless=True, args=self._args)
        except BaseException:
            await pw.stop()
            raise
        return browser, pw

    async def get(self) -> Browser:
        browser = self._browser
        if self.is_alive(browser):
            return browser

        async with self._lock:
            if self.is_alive(self._browser):
                return self._browser

            if self._browser is not None:
                log.warning("Headless browser is no longer connected; relaunching")
                await self._dispose()

            started = time.monotonic()
            try:
                browser, pw = await self._launch()
            except Exception as e:
                raise PdfGenerationError(f"Could not launch headless browser: {type(e).__name__}: {e}") from e

            self._browser, self._playwright = browser, pw
            self.launch_count += 1
            log.info(
                "Headless browser launched",
                extra={"duration_ms": int((time.monotonic() - started) * 1000)},
            )
            return browser

    async def _dispose(self) -> None:
        browser, pw = self._browser, self._playwright
        self._browser = None
        self._playwright = None

        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as e:
                # already gone: nothing left to release
                log.debug("Ignoring error while closing browser: %s", e)
        if pw is not None:
            try:
                await pw.stop()
            except PlaywrightError as e:
                log.debug("Ignoring error while stopping playwright: %s", e)

    async def close(self) -> None:
        async with self._lock:
            if self._browser is None and self._playwright is None:
                return
            await self._dispose()
            log.info("Headless browser closed")
