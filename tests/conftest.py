# tests/conftest.py
from __future__ import annotations

import asyncio
import io

import pytest
from pypdf import PdfWriter

from bizdocs.documents.types import CompanySettings, CustomerInfo, LineItem, QuoteInput


def make_pdf(pages: int = 1) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=595, height=842)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


class FakePdfRenderer:
    """Stands in for ChromiumPdfRenderer: records the HTML, returns a real one-page PDF."""

    def __init__(self, result: bytes | None = None, error: BaseException | None = None):
        self.result = result if result is not None else make_pdf()
        self.error = error
        self.html: list[str] = []
        self.closed = 0

    async def render_to_pdf(self, html: str) -> bytes:
        self.html.append(html)
        if self.error is not None:
            raise self.error
        return self.result

    async def close(self) -> None:
        self.closed += 1


class FakePage:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.closed = False
        self.content = None
        self.pdf_kwargs = None

    async def set_content(self, html, wait_until=None, timeout=None):
        self.content = html
        self.browser.set_content_calls.append({"wait_until": wait_until, "timeout": timeout})
        if self.browser.content_error is not None:
            raise self.browser.content_error

    async def pdf(self, **kwargs):
        self.pdf_kwargs = kwargs
        if self.browser.print_delay:
            await asyncio.sleep(self.browser.print_delay)
        if self.browser.print_error is not None:
            if self.browser.crash_on_print:
                self.browser.connected = False
            raise self.browser.print_error
        return self.browser.pdf_bytes

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, pdf_bytes: bytes | None = None):
        self.connected = True
        self.closed = False
        self.pages: list[FakePage] = []
        self.set_content_calls: list[dict] = []
        self.pdf_bytes = pdf_bytes if pdf_bytes is not None else make_pdf()
        self.content_error = None
        self.print_error = None
        self.crash_on_print = False
        self.print_delay = 0.0

    def is_connected(self):
        return self.connected

    async def new_page(self):
        page = FakePage(self)
        self.pages.append(page)
        return page

    async def close(self):
        self.connected = False
        self.closed = True


class FakeLauncher:
    """Async launch callable for BrowserSession; every call starts a new FakeBrowser."""

    def __init__(self, delay: float = 0.0, error: BaseException | None = None):
        self.delay = delay
        self.error = error
        self.browsers: list[FakeBrowser] = []

    async def __call__(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        browser = FakeBrowser()
        self.browsers.append(browser)
        return browser, None


@pytest.fixture
def blank_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def acme() -> CompanySettings:
    return CompanySettings(company_name="Acme")


@pytest.fixture
def widget_quote() -> QuoteInput:
    return QuoteInput(
        quote_number="Q-1001",
        items=[LineItem(description="Widget", quantity=2, unit_price=9.5, total=19.0)],
        subtotal=19.0,
        total=19.0,
        customer=CustomerInfo(name="Bob"),
    )


# =========================
# Database (SQLite in memory, one shared connection)
# =========================

@pytest.fixture
def session_factory():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from bizdocs.db import Base
    import bizdocs.models  # noqa: F401  (registers tables)

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False)
    yield factory
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    """Tenant 1 owns quote Q-1001 and invoice INV-2001; tenant 2 has nothing."""
    from datetime import date

    from bizdocs.models import (
        CompanySettingsRow,
        Customer,
        Invoice,
        InvoiceItem,
        Project,
        Quote,
        QuoteItem,
    )

    with session_factory() as db:
        db.add(CompanySettingsRow(tenant_id=1, company_name="Acme", email="office@acme.test"))
        bob = Customer(tenant_id=1, name="Bob", email="bob@example.com", city="Springfield")
        db.add(bob)
        db.flush()
        project = Project(tenant_id=1, name="Rear extension", customer_id=bob.id)
        db.add(project)
        db.flush()

        quote = Quote(
            tenant_id=1,
            quote_number="Q-1001",
            issue_date=date(2026, 10, 1),
            expiry_date=date(2026, 10, 31),
            subtotal=19.0,
            total=19.0,
            customer_id=bob.id,
            project_id=project.id,
        )
        db.add(quote)
        db.flush()
        db.add(QuoteItem(quote_id=quote.id, description="Widget", quantity=2, unit_price=9.5, total=19.0))

        invoice = Invoice(
            tenant_id=1,
            invoice_number="INV-2001",
            type="deposit",
            issue_date=date(2026, 10, 2),
            due_date=date(2026, 10, 16),
            subtotal=9.5,
            total=9.5,
            customer_id=bob.id,
            quote_id=quote.id,
        )
        db.add(invoice)
        db.flush()
        db.add(InvoiceItem(invoice_id=invoice.id, description="Deposit", quantity=1, unit_price=9.5, total=9.5))
        db.commit()

        return {"quote_id": quote.id, "invoice_id": invoice.id}
