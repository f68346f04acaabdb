# bizdocs/pdf/renderer.py
from __future__ import annotations

import asyncio
import io
import logging
import time

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from bizdocs.errors import PdfGenerationError
from bizdocs.pdf.base import PrintOptions
from bizdocs.pdf.browser import BrowserSession

log = logging.getLogger("bizdocs.pdf")

PDF_MAGIC = b"%PDF"


def count_pages(data: bytes, *, html: str | None = None) -> int:
    """
    Sanity check on printer output: must look like a PDF and parse with >= 1 page.
    A truncated or empty buffer is never handed to callers.
    """
    if not data or not data.startswith(PDF_MAGIC):
        raise PdfGenerationError("Renderer output is not a PDF", html=html)
    try:
        pages = len(PdfReader(io.BytesIO(data)).pages)
    except (PyPdfError, ValueError, KeyError, IndexError) as e:
        raise PdfGenerationError(f"Renderer output could not be parsed: {e}", html=html) from e
    if pages < 1:
        raise PdfGenerationError("Renderer output has no pages", html=html)
    return pages


class ChromiumPdfRenderer:
    """
    HTML -> PDF bytes with headless Chromium.

    A4, backgrounds on, 20mm margins on every side (PrintOptions defaults).
    Every call gets its own page (tab) which is always closed afterwards;
    the browser itself stays up for the next request.
    """

    def __init__(self, session: BrowserSession | None = None, options: PrintOptions | None = None):
        self.session = session or BrowserSession()
        self.options = options or PrintOptions()

    async def render_to_pdf(self, html: str) -> bytes:
        started = time.monotonic()
        browser = await self.session.get()

        page = None
        try:
            try:
                page = await browser.new_page()
                await page.set_content(
                    html,
                    wait_until="networkidle",
                    timeout=self.options.load_timeout_ms,
                )
                pdf = await asyncio.wait_for(
                    page.pdf(
                        format=self.options.page_format,
                        print_background=self.options.print_background,
                        margin=dict(self.options.margin),
                    ),
                    timeout=self.options.print_timeout_s,
                )
            except PlaywrightTimeoutError as e:
                raise PdfGenerationError(
                    f"Content did not finish loading within {self.options.load_timeout_ms} ms",
                    html=html,
                ) from e
            except asyncio.TimeoutError as e:
                raise PdfGenerationError(
                    f"Printing did not finish within {self.options.print_timeout_s:g} s",
                    html=html,
                ) from e
            except PlaywrightError as e:
                if not self.session.is_alive(browser):
                    raise PdfGenerationError("Headless browser process died during rendering", html=html) from e
                raise PdfGenerationError(f"Headless browser error: {e.message}", html=html) from e
        finally:
            if page is not None:
                await self._close_page(page)

        pages = count_pages(pdf, html=html)
        log.info(
            "PDF rendered",
            extra={
                "bytes": len(pdf),
                "pages": pages,
                "duration_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return pdf

    @staticmethod
    async def _close_page(page) -> None:
        try:
            await page.close()
        except PlaywrightError as e:
            log.debug("Ignoring error while closing page: %s", e)

    async def close(self) -> None:
        await self.session.close()
