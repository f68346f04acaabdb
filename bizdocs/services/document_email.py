# bizdocs/services/document_email.py
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from bizdocs import settings
from bizdocs.documents.formatting import css_color, display_date, money_str, split_lines, text_or_none
from bizdocs.documents.types import CompanySettings, DocumentInput, InvoiceInput, QuoteInput
from bizdocs.email.smtp_sender import EmailAttachment, send_email
from bizdocs.email.template_router import build_subject, render_email
from bizdocs.services.document_service import DocumentService
from bizdocs.services.filenames import pdf_filename

log = logging.getLogger("bizdocs.email")


def _email_context(
    doc: DocumentInput,
    company: CompanySettings,
    *,
    message: Optional[str],
    has_attachment: bool,
) -> dict:
    symbol = company.currency_symbol or settings.DEFAULT_CURRENCY_SYMBOL
    customer = doc.customer
    message = text_or_none(message)
    return {
        "company_name": text_or_none(company.company_name) or settings.FALLBACK_COMPANY_NAME,
        "customer_name": text_or_none(customer.name if customer else None) or settings.FALLBACK_CUSTOMER_NAME,
        "number": doc.number or settings.FALLBACK_DOCUMENT_NUMBER,
        "total": money_str(doc.total, symbol),
        "expiry_date": display_date(getattr(doc, "expiry_date", None)),
        "due_date": display_date(getattr(doc, "due_date", None)),
        "message": message,
        "message_lines": split_lines(message),
        "has_attachment": has_attachment,
        "primary_color": css_color(company.primary_color),
    }


async def _send_document_email(
    service: DocumentService,
    doc: DocumentInput,
    recipient: str,
    *,
    subject: Optional[str],
    message: Optional[str],
    include_pdf: bool,
    sender: Optional[str],
    cc_emails: Optional[Iterable[str]],
) -> None:
    recipient = (recipient or "").strip()
    if not recipient:
        raise ValueError("Recipient email is required")

    company = await service.company_settings_for(doc.tenant_id)

    attachments = []
    if include_pdf:
        if isinstance(doc, QuoteInput):
            pdf = await service.generate_quote_pdf(doc, company=company)
        else:
            pdf = await service.generate_invoice_pdf(doc, company=company)
        attachments.append(
            EmailAttachment(
                filename=pdf_filename(doc.kind, doc.number),
                content_type="application/pdf",
                data=pdf,
            )
        )

    context = _email_context(doc, company, message=message, has_attachment=bool(attachments))
    html_body, text_body = render_email(doc.kind, context)
    subject = text_or_none(subject) or build_subject(doc.kind, context["number"], text_or_none(company.company_name))
    from_email = text_or_none(sender) or text_or_none(company.email) or settings.DEFAULT_SENDER_EMAIL

    await asyncio.to_thread(
        send_email,
        to_email=recipient,
        subject=subject,
        html_body=html_body,
        text_body=text_body,
        from_email=from_email,
        cc_emails=cc_emails,
        attachments=attachments,
    )
    log.info(
        "Sent %s %s by email",
        doc.kind,
        context["number"],
        extra={"kind": doc.kind, "number": context["number"], "tenant_id": doc.tenant_id},
    )


async def send_quote_email(
    service: DocumentService,
    quote: QuoteInput,
    recipient: str,
    *,
    subject: Optional[str] = None,
    message: Optional[str] = None,
    include_pdf: bool = True,
    sender: Optional[str] = None,
    cc_emails: Optional[Iterable[str]] = None,
) -> None:
    await _send_document_email(
        service,
        quote,
        recipient,
        subject=subject,
        message=message,
        include_pdf=include_pdf,
        sender=sender,
        cc_emails=cc_emails,
    )


async def send_invoice_email(
    service: DocumentService,
    invoice: InvoiceInput,
    recipient: str,
    *,
    subject: Optional[str] = None,
    message: Optional[str] = None,
    include_pdf: bool = True,
    sender: Optional[str] = None,
    cc_emails: Optional[Iterable[str]] = None,
) -> None:
    await _send_document_email(
        service,
        invoice,
        recipient,
        subject=subject,
        message=message,
        include_pdf=include_pdf,
        sender=sender,
        cc_emails=cc_emails,
    )
