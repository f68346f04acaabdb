# scripts/render_sample_document.py
from __future__ import annotations

import argparse
import asyncio
from datetime import date, timedelta
from pathlib import Path

from pypdf import PdfReader

from bizdocs.documents.types import (
    CompanySettings,
    CustomerInfo,
    InvoiceInput,
    LineItem,
    ProjectInfo,
    QuoteInput,
)
from bizdocs.logging_config import setup_logging
from bizdocs.services.document_service import DocumentService
from bizdocs.services.filenames import pdf_filename

SAMPLE_COMPANY = CompanySettings(
    company_name="Acme Glazing Ltd",
    address="12 High Street",
    city="Springfield",
    state="IL",
    zip_code="62701",
    country="USA",
    phone="+1 555 0100",
    email="office@acme-glazing.test",
    website="acme-glazing.test",
    vat_number="US-99887766",
    default_quote_terms="Quote valid for 30 days.\n50% deposit on acceptance.",
    default_invoice_terms="Payment due within 14 days.",
    bank_details="Acme Glazing Ltd\nAccount 12345678\nRouting 021000021",
    footer_text="Thank you for your business.",
)

SAMPLE_CUSTOMER = CustomerInfo(
    name="Jane Smith",
    email="jane@example.com",
    address="48 Oak Avenue",
    city="Springfield",
    state="IL",
    zip_code="62704",
)

SAMPLE_ITEMS = [
    LineItem("Double-glazed window unit 1200x900", 4, 325.0, 1300.0),
    LineItem("Removal and disposal of old frames", 1, 180.0, 180.0),
    LineItem("Installation labour (hours)", 6.5, 45.0, 292.5),
]


def sample_quote() -> QuoteInput:
    today = date.today()
    return QuoteInput(
        quote_number="Q-1001",
        issue_date=today,
        expiry_date=today + timedelta(days=30),
        items=list(SAMPLE_ITEMS),
        subtotal=1772.5,
        tax=354.5,
        discount=50,
        total=2077.0,
        reference="Rear extension",
        notes="Frames in anthracite grey.",
        customer=SAMPLE_CUSTOMER,
        project=ProjectInfo(name="Smith rear extension", description="Windows and patio door"),
    )


def sample_invoice() -> InvoiceInput:
    today = date.today()
    return InvoiceInput(
        invoice_number="INV-2001",
        issue_date=today,
        due_date=today + timedelta(days=14),
        items=list(SAMPLE_ITEMS),
        subtotal=1772.5,
        tax=354.5,
        total=2127.0,
        invoice_type="final",
        quote_number="Q-1001",
        customer=SAMPLE_CUSTOMER,
        project=ProjectInfo(name="Smith rear extension"),
    )


async def run(kind: str, out_dir: Path, html_only: bool) -> Path:
    service = DocumentService(company_settings=lambda tenant_id: SAMPLE_COMPANY)
    doc = sample_quote() if kind == "quote" else sample_invoice()
    try:
        if html_only:
            if kind == "quote":
                html = await service.render_quote_html(doc)
            else:
                html = await service.render_invoice_html(doc)
            out = out_dir / pdf_filename(kind, doc.number).replace(".pdf", ".html")
            out.write_text(html, encoding="utf-8")
            return out

        if kind == "quote":
            pdf = await service.generate_quote_pdf(doc)
        else:
            pdf = await service.generate_invoice_pdf(doc)
        out = out_dir / pdf_filename(kind, doc.number)
        out.write_bytes(pdf)
        return out
    finally:
        await service.cleanup()


def main():
    parser = argparse.ArgumentParser(description="Render a sample quote or invoice.")
    parser.add_argument("kind", choices=["quote", "invoice"])
    parser.add_argument("--out-dir", default="out", help="where to write the file (default: ./out)")
    parser.add_argument("--html", action="store_true", help="write the rendered HTML instead of a PDF")
    args = parser.parse_args()

    setup_logging()
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    out = asyncio.run(run(args.kind, out_dir, args.html))
    if args.html:
        print(f"✅ Wrote {out}")
    else:
        pages = len(PdfReader(str(out)).pages)
        print(f"✅ Wrote {out} ({pages} page(s), {out.stat().st_size} bytes)")


if __name__ == "__main__":
    main()
