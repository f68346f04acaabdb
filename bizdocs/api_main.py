# bizdocs/api_main.py
from __future__ import annotations

import logging
import smtplib
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from bizdocs import settings
from bizdocs.db import get_db
from bizdocs.errors import DocumentError, RecordNotFound
from bizdocs.logging_config import setup_logging
from bizdocs.services.document_email import send_invoice_email, send_quote_email
from bizdocs.services.document_service import DocumentService
from bizdocs.services.filenames import content_disposition, pdf_filename
from bizdocs.services.records import load_invoice, load_quote

log = logging.getLogger("bizdocs.api")

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    app.state.documents = DocumentService()
    try:
        yield
    finally:
        # shared headless browser goes down with the app
        await app.state.documents.cleanup()


app = FastAPI(title="Business Documents API", lifespan=lifespan)

# CORS for local frontend dev (React/Vite/etc.)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_document_service(request: Request) -> DocumentService:
    return request.app.state.documents


class EmailRequest(BaseModel):
    recipientEmail: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    includePdf: bool = True


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _pdf_response(pdf: bytes, kind: str, number: str | None, inline: bool) -> Response:
    filename = pdf_filename(kind, number)
    headers = {
        **NO_CACHE_HEADERS,
        "Content-Disposition": content_disposition(filename, inline=inline),
    }
    return Response(content=pdf, media_type="application/pdf", headers=headers)


@app.get("/")
def root():
    return {"ok": True, "try": ["/docs", "/api/health"]}


@app.get("/api/health")
def health():
    return {"ok": True}


# ------------------------------------------------------------
# PDF downloads
# (no X-Tenant-Id header: only untenanted records are visible)
# ------------------------------------------------------------
@app.get("/api/quotes/{quote_id}/pdf")
async def quote_pdf(
    quote_id: int,
    inline: bool = Query(default=False),
    x_tenant_id: Optional[int] = Header(default=None),
    db: Session = Depends(get_db),
    documents: DocumentService = Depends(get_document_service),
):
    try:
        quote = await run_in_threadpool(load_quote, db, quote_id, x_tenant_id)
        pdf = await documents.generate_quote_pdf(quote)
    except RecordNotFound:
        return _message(404, "Quote not found")
    except DocumentError as e:
        log.error(
            "Error generating quote PDF: %s",
            e,
            extra={"kind": "quote", "stage": e.stage, "tenant_id": x_tenant_id, "route": "quote_pdf"},
        )
        return _message(500, "Failed to generate PDF")

    return _pdf_response(pdf, "quote", quote.quote_number, inline)


@app.get("/api/invoices/{invoice_id}/pdf")
async def invoice_pdf(
    invoice_id: int,
    inline: bool = Query(default=False),
    x_tenant_id: Optional[int] = Header(default=None),
    db: Session = Depends(get_db),
    documents: DocumentService = Depends(get_document_service),
):
    try:
        invoice = await run_in_threadpool(load_invoice, db, invoice_id, x_tenant_id)
        pdf = await documents.generate_invoice_pdf(invoice)
    except RecordNotFound:
        return _message(404, "Invoice not found")
    except DocumentError as e:
        log.error(
            "Error generating invoice PDF: %s",
            e,
            extra={"kind": "invoice", "stage": e.stage, "tenant_id": x_tenant_id, "route": "invoice_pdf"},
        )
        return _message(500, "Failed to generate PDF")

    return _pdf_response(pdf, "invoice", invoice.invoice_number, inline)


# ------------------------------------------------------------
# Email delivery
# ------------------------------------------------------------
# SMTP not configured (RuntimeError), relay refused, or network down
_SEND_ERRORS = (DocumentError, smtplib.SMTPException, OSError, RuntimeError)


@app.post("/api/quotes/{quote_id}/email")
async def email_quote(
    quote_id: int,
    body: EmailRequest,
    x_tenant_id: Optional[int] = Header(default=None),
    db: Session = Depends(get_db),
    documents: DocumentService = Depends(get_document_service),
):
    if not (body.recipientEmail or "").strip():
        return _message(400, "Recipient email is required")

    try:
        quote = await run_in_threadpool(load_quote, db, quote_id, x_tenant_id)
    except RecordNotFound:
        return _message(404, "Quote not found")
    except DocumentError as e:
        log.error("Error loading quote %s: %s", quote_id, e, extra={"kind": "quote", "route": "email_quote"})
        return _message(500, "Failed to send quote via email")

    try:
        await send_quote_email(
            documents,
            quote,
            body.recipientEmail,
            subject=body.subject,
            message=body.message,
            include_pdf=body.includePdf,
        )
    except _SEND_ERRORS as e:
        log.error(
            "Error sending quote email: %s",
            e,
            exc_info=True,
            extra={"kind": "quote", "number": quote.quote_number, "tenant_id": x_tenant_id, "route": "email_quote"},
        )
        return _message(500, "Failed to send quote via email")

    return {"message": "Quote sent successfully via email"}


@app.post("/api/invoices/{invoice_id}/email")
async def email_invoice(
    invoice_id: int,
    body: EmailRequest,
    x_tenant_id: Optional[int] = Header(default=None),
    db: Session = Depends(get_db),
    documents: DocumentService = Depends(get_document_service),
):
    if not (body.recipientEmail or "").strip():
        return _message(400, "Recipient email is required")

    try:
        invoice = await run_in_threadpool(load_invoice, db, invoice_id, x_tenant_id)
    except RecordNotFound:
        return _message(404, "Invoice not found")
    except DocumentError as e:
        log.error("Error loading invoice %s: %s", invoice_id, e, extra={"kind": "invoice", "route": "email_invoice"})
        return _message(500, "Failed to send invoice via email")

    try:
        await send_invoice_email(
            documents,
            invoice,
            body.recipientEmail,
            subject=body.subject,
            message=body.message,
            include_pdf=body.includePdf,
        )
    except _SEND_ERRORS as e:
        log.error(
            "Error sending invoice email: %s",
            e,
            exc_info=True,
            extra={"kind": "invoice", "number": invoice.invoice_number, "tenant_id": x_tenant_id, "route": "email_invoice"},
        )
        return _message(500, "Failed to send invoice via email")

    return {"message": "Invoice sent successfully via email"}
