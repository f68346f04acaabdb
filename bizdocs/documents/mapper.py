# bizdocs/documents/mapper.py
"""
Quote/invoice records -> template context.

The context only holds display-ready values: money and dates are already
formatted, and optional blocks are either present (with a `has_*` flag) or
absent, so templates can gate them with `{{#has_tax}}...{{/has_tax}}`.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from bizdocs import settings
from bizdocs.documents.formatting import (
    address_lines,
    css_color,
    display_date,
    money_str,
    optional_money,
    quantity_value,
    split_lines,
    text_or_none,
    to_decimal,
)
from bizdocs.documents.types import (
    CompanySettings,
    CustomerInfo,
    DocumentInput,
    InvoiceInput,
    LineItem,
    ProjectInfo,
    QuoteInput,
)


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None / empty-list entries so conditional sections stay closed."""
    return {k: v for k, v in d.items() if v is not None and v != [] and v is not False}


def company_block(company: CompanySettings) -> Dict[str, Any]:
    return _compact({
        "name": text_or_none(company.company_name) or settings.FALLBACK_COMPANY_NAME,
        "address": text_or_none(company.address),
        "city": text_or_none(company.city),
        "state": text_or_none(company.state),
        "zip_code": text_or_none(company.zip_code),
        "country": text_or_none(company.country),
        "phone": text_or_none(company.phone),
        "email": text_or_none(company.email),
        "website": text_or_none(company.website),
        "vat_number": text_or_none(company.vat_number),
        "registration_number": text_or_none(company.registration_number),
        "address_lines": address_lines(
            address=company.address,
            city=company.city,
            state=company.state,
            zip_code=company.zip_code,
            country=company.country,
        ),
    })


def customer_block(customer: Optional[CustomerInfo]) -> Dict[str, Any]:
    c = customer or CustomerInfo()
    return _compact({
        "name": text_or_none(c.name) or settings.FALLBACK_CUSTOMER_NAME,
        "address": text_or_none(c.address),
        "city": text_or_none(c.city),
        "state": text_or_none(c.state),
        "zip_code": text_or_none(c.zip_code),
        "country": text_or_none(c.country),
        "email": text_or_none(c.email),
        "phone": text_or_none(c.phone),
        "address_lines": address_lines(
            address=c.address,
            city=c.city,
            state=c.state,
            zip_code=c.zip_code,
            country=c.country,
        ),
    })


def project_block(project: Optional[ProjectInfo]) -> Optional[Dict[str, Any]]:
    if project is None or not text_or_none(project.name):
        return None
    return _compact({
        "name": text_or_none(project.name),
        "description": text_or_none(project.description),
    })


def item_rows(items: List[LineItem], symbol: str) -> List[Dict[str, Any]]:
    rows = []
    for i, it in enumerate(items or [], start=1):
        rows.append({
            "index": i,
            "description": text_or_none(it.description) or settings.FALLBACK_ITEM_DESCRIPTION,
            "quantity": quantity_value(it.quantity),
            "unit_price": money_str(it.unit_price, symbol),
            "total": money_str(it.total, symbol),
        })
    return rows


def _base_context(
    doc: DocumentInput,
    company: Optional[CompanySettings],
    customer: Optional[CustomerInfo],
    project: Optional[ProjectInfo],
    *,
    default_terms: Optional[str],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    company = company or CompanySettings()
    symbol = text_or_none(company.currency_symbol) or settings.DEFAULT_CURRENCY_SYMBOL

    issued = display_date(doc.issue_date) or display_date(doc.created_at) or display_date(today or date.today())
    terms = text_or_none(doc.terms) or text_or_none(default_terms)
    notes = text_or_none(doc.notes)
    logo = text_or_none(company.company_logo)
    proj = project_block(project)
    items = item_rows(doc.items, symbol)
    tax = optional_money(doc.tax, symbol)
    # shown as "-$x" by the template, whatever sign the record stores
    discount_amount = to_decimal(doc.discount)
    discount = optional_money(abs(discount_amount) if discount_amount is not None else None, symbol)
    reference = text_or_none(doc.reference)

    return {
        "logo_url": logo,
        "company": company_block(company),
        "customer": customer_block(customer),
        "project": proj,
        "number": text_or_none(doc.number) or settings.FALLBACK_DOCUMENT_NUMBER,
        "date": issued,
        "reference": reference,
        "items": items,
        "subtotal": money_str(doc.subtotal, symbol),
        "tax": tax,
        "discount": discount,
        "total": money_str(doc.total, symbol),
        "currency_symbol": symbol,
        "terms": terms,
        "terms_lines": split_lines(terms),
        "notes": notes,
        "footer_text": text_or_none(company.footer_text),
        "primary_color": css_color(company.primary_color),
        "has_logo": bool(logo),
        "has_project": proj is not None,
        "has_items": bool(items),
        "has_tax": tax is not None,
        "has_discount": discount is not None,
        "has_reference": reference is not None,
        "has_terms": terms is not None,
        "has_notes": notes is not None,
    }


def to_quote_context(
    quote: QuoteInput,
    company: Optional[CompanySettings],
    customer: Optional[CustomerInfo] = None,
    project: Optional[ProjectInfo] = None,
    *,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    co = company or CompanySettings()
    ctx = _base_context(
        quote,
        co,
        customer or quote.customer,
        project or quote.project,
        default_terms=co.default_quote_terms,
        today=today,
    )
    expiry = display_date(quote.expiry_date)
    ctx.update({
        "document_type": "QUOTE",
        "document_title": "Quote",
        "is_quote": True,
        "expiry_date": expiry,
        "has_expiry_date": expiry is not None,
    })
    return _compact(ctx)


def to_invoice_context(
    invoice: InvoiceInput,
    company: Optional[CompanySettings],
    customer: Optional[CustomerInfo] = None,
    project: Optional[ProjectInfo] = None,
    *,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    co = company or CompanySettings()
    ctx = _base_context(
        invoice,
        co,
        customer or invoice.customer,
        project or invoice.project,
        default_terms=co.default_invoice_terms,
        today=today,
    )
    due = display_date(invoice.due_date)
    bank = text_or_none(co.bank_details)
    is_deposit = (invoice.invoice_type or "").strip().lower() == "deposit"
    ctx.update({
        "document_type": "INVOICE",
        "document_title": "Deposit Invoice" if is_deposit else "Invoice",
        "is_invoice": True,
        "is_deposit": is_deposit,
        "due_date": due,
        "quote_number": text_or_none(invoice.quote_number),
        "bank_details": bank,
        "bank_details_lines": split_lines(bank),
        "has_due_date": due is not None,
        "has_bank_details": bank is not None,
    })
    return _compact(ctx)


def to_context(
    doc: DocumentInput,
    company: Optional[CompanySettings],
    *,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Dispatch on the document kind, using the customer/project carried by the record."""
    if isinstance(doc, QuoteInput):
        return to_quote_context(doc, company, today=today)
    if isinstance(doc, InvoiceInput):
        return to_invoice_context(doc, company, today=today)
    raise TypeError(f"Unsupported document input: {type(doc).__name__}")
