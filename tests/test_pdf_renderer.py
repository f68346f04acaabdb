import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from bizdocs import settings
from bizdocs.errors import PdfGenerationError
from bizdocs.pdf.base import PrintOptions
from bizdocs.pdf.browser import BrowserSession
from bizdocs.pdf.renderer import ChromiumPdfRenderer, count_pages

from conftest import FakeLauncher, make_pdf

HTML = "<html><body><h1>Quote Q-1001</h1></body></html>"


def _renderer(launcher: FakeLauncher, **options) -> ChromiumPdfRenderer:
    return ChromiumPdfRenderer(
        session=BrowserSession(launch=launcher),
        options=PrintOptions(**options),
    )


# =========================
# Browser session
# =========================

def test_concurrent_first_callers_launch_one_browser():
    launcher = FakeLauncher(delay=0.01)
    session = BrowserSession(launch=launcher)

    async def go():
        return await asyncio.gather(*(session.get() for _ in range(10)))

    browsers = asyncio.run(go())

    assert session.launch_count == 1
    assert len(launcher.browsers) == 1
    assert all(b is browsers[0] for b in browsers)


def test_disconnected_browser_is_relaunched():
    launcher = FakeLauncher()
    session = BrowserSession(launch=launcher)

    async def go():
        first = await session.get()
        first.connected = False
        second = await session.get()
        return first, second

    first, second = asyncio.run(go())

    assert first is not second
    assert first.closed
    assert session.launch_count == 2
    assert session.is_running


def test_launch_failure_raises_pdf_generation_error():
    session = BrowserSession(launch=FakeLauncher(error=RuntimeError("no chromium")))
    with pytest.raises(PdfGenerationError) as exc:
        asyncio.run(session.get())
    assert exc.value.stage == "pdf_conversion"
    assert isinstance(exc.value.__cause__, RuntimeError)
    assert session.launch_count == 0


def test_close_is_idempotent_and_allows_relaunch():
    launcher = FakeLauncher()
    session = BrowserSession(launch=launcher)

    async def go():
        await session.get()
        await session.close()
        await session.close()
        assert not session.is_running
        await session.get()

    asyncio.run(go())

    assert launcher.browsers[0].closed
    assert session.launch_count == 2


# =========================
# Output validation
# =========================

def test_count_pages_accepts_real_pdf():
    assert count_pages(make_pdf()) == 1
    assert count_pages(make_pdf(pages=3)) == 3


@pytest.mark.parametrize("data", [b"", b"<html>oops</html>"])
def test_count_pages_rejects_non_pdf(data):
    with pytest.raises(PdfGenerationError):
        count_pages(data, html=HTML)


def test_count_pages_rejects_truncated_pdf():
    with pytest.raises(PdfGenerationError) as exc:
        count_pages(make_pdf()[:40], html=HTML)
    assert exc.value.html_excerpt == HTML


# =========================
# Rendering
# =========================

def test_render_prints_a4_with_fixed_margins_and_closes_page():
    launcher = FakeLauncher()
    renderer = _renderer(launcher)

    pdf = asyncio.run(renderer.render_to_pdf(HTML))

    assert pdf.startswith(b"%PDF")
    browser = launcher.browsers[0]
    page = browser.pages[0]
    assert page.content == HTML
    assert page.closed
    assert not browser.closed
    assert browser.set_content_calls == [
        {"wait_until": "networkidle", "timeout": settings.PAGE_LOAD_TIMEOUT_MS}
    ]
    assert page.pdf_kwargs == {
        "format": "A4",
        "print_background": True,
        "margin": {"top": "20mm", "right": "20mm", "bottom": "20mm", "left": "20mm"},
    }


def test_browser_is_reused_across_renders():
    launcher = FakeLauncher()
    renderer = _renderer(launcher)

    async def go():
        await asyncio.gather(*(renderer.render_to_pdf(HTML) for _ in range(5)))

    asyncio.run(go())

    assert len(launcher.browsers) == 1
    pages = launcher.browsers[0].pages
    assert len(pages) == 5
    assert all(p.closed for p in pages)


def test_load_timeout_becomes_pdf_generation_error():
    launcher = FakeLauncher()
    renderer = _renderer(launcher)

    async def go():
        browser = await renderer.session.get()
        browser.content_error = PlaywrightTimeoutError("Timeout 30000ms exceeded.")
        await renderer.render_to_pdf(HTML)

    with pytest.raises(PdfGenerationError) as exc:
        asyncio.run(go())

    assert "did not finish loading" in exc.value.message
    assert exc.value.html_excerpt == HTML
    assert launcher.browsers[0].pages[0].closed


def test_print_timeout_becomes_pdf_generation_error():
    launcher = FakeLauncher()
    renderer = _renderer(launcher, print_timeout_s=0.05)

    async def go():
        browser = await renderer.session.get()
        browser.print_delay = 5
        await renderer.render_to_pdf(HTML)

    with pytest.raises(PdfGenerationError) as exc:
        asyncio.run(go())

    assert "Printing did not finish" in exc.value.message
    assert launcher.browsers[0].pages[0].closed


def test_browser_crash_is_reported_and_next_call_relaunches():
    launcher = FakeLauncher()
    renderer = _renderer(launcher)

    async def go():
        browser = await renderer.session.get()
        browser.print_error = PlaywrightError("Target page, context or browser has been closed")
        browser.crash_on_print = True
        with pytest.raises(PdfGenerationError) as exc:
            await renderer.render_to_pdf(HTML)
        assert "died" in exc.value.message
        return await renderer.render_to_pdf(HTML)

    pdf = asyncio.run(go())

    assert pdf.startswith(b"%PDF")
    assert renderer.session.launch_count == 2


def test_long_html_excerpt_is_truncated():
    launcher = FakeLauncher()
    renderer = _renderer(launcher)
    html = "<p>" + "x" * 1000 + "</p>"

    async def go():
        browser = await renderer.session.get()
        browser.pdf_bytes = b"not a pdf"
        await renderer.render_to_pdf(html)

    with pytest.raises(PdfGenerationError) as exc:
        asyncio.run(go())

    assert len(exc.value.html_excerpt) == 200
    assert exc.value.html_length == len(html)


def test_close_shuts_down_the_browser():
    launcher = FakeLauncher()
    renderer = _renderer(launcher)

    async def go():
        await renderer.render_to_pdf(HTML)
        await renderer.close()

    asyncio.run(go())
    assert launcher.browsers[0].closed
