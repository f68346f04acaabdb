# bizdocs/services/records.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from bizdocs.db import new_session
from bizdocs.documents.types import (
    CompanySettings,
    CustomerInfo,
    InvoiceInput,
    LineItem,
    ProjectInfo,
    QuoteInput,
)
from bizdocs.errors import RecordNotFound, UpstreamDataError
from bizdocs.models import (
    CompanySettingsRow,
    Customer,
    Invoice,
    Project,
    Quote,
)


def _scoped(stmt, model, tenant_id: Optional[int], all_tenants: bool):
    if all_tenants:
        return stmt
    # no tenant means untenanted rows only, never every tenant
    if tenant_id is None:
        return stmt.where(model.tenant_id.is_(None))
    return stmt.where(model.tenant_id == tenant_id)


def _customer(db: Session, customer_id: Optional[int]) -> Optional[CustomerInfo]:
    if customer_id is None:
        return None
    row = db.get(Customer, customer_id)
    if row is None:
        return None
    return CustomerInfo(
        name=row.name,
        email=row.email,
        phone=row.phone,
        address=row.address,
        city=row.city,
        state=row.state,
        zip_code=row.zip_code,
        country=row.country,
    )


def _project(db: Session, project_id: Optional[int]) -> Optional[ProjectInfo]:
    if project_id is None:
        return None
    row = db.get(Project, project_id)
    if row is None:
        return None
    return ProjectInfo(name=row.name, description=row.description)


def _items(rows) -> list[LineItem]:
    return [
        LineItem(
            description=r.description,
            quantity=r.quantity,
            unit_price=r.unit_price,
            total=r.total,
        )
        for r in rows
    ]


def load_quote(
    db: Session,
    quote_id: int,
    tenant_id: Optional[int] = None,
    *,
    all_tenants: bool = False,
) -> QuoteInput:
    """
    Quote row + items + customer + project -> QuoteInput.

    A quote owned by another tenant is reported as missing. Without a
    tenant only untenanted quotes match; pass all_tenants=True for
    admin jobs that must see every tenant.
    Database failures are raised as UpstreamDataError, never papered over
    with placeholder values.
    """
    try:
        stmt = select(Quote).options(selectinload(Quote.items)).where(Quote.id == quote_id)
        q = db.execute(_scoped(stmt, Quote, tenant_id, all_tenants)).scalar_one_or_none()
        if q is None:
            raise RecordNotFound("quote", quote_id)

        return QuoteInput(
            quote_number=q.quote_number,
            issue_date=q.issue_date,
            expiry_date=q.expiry_date,
            items=_items(q.items),
            subtotal=q.subtotal,
            tax=q.tax,
            discount=q.discount,
            total=q.total,
            reference=q.reference,
            terms=q.terms,
            notes=q.notes,
            customer=_customer(db, q.customer_id),
            project=_project(db, q.project_id),
            created_at=q.created_at,
            tenant_id=q.tenant_id,
        )
    except SQLAlchemyError as e:
        raise UpstreamDataError(f"Could not load quote {quote_id}: {type(e).__name__}") from e


def load_invoice(
    db: Session,
    invoice_id: int,
    tenant_id: Optional[int] = None,
    *,
    all_tenants: bool = False,
) -> InvoiceInput:
    try:
        stmt = (
            select(Invoice)
            .options(selectinload(Invoice.items), selectinload(Invoice.quote))
            .where(Invoice.id == invoice_id)
        )
        inv = db.execute(_scoped(stmt, Invoice, tenant_id, all_tenants)).scalar_one_or_none()
        if inv is None:
            raise RecordNotFound("invoice", invoice_id)

        return InvoiceInput(
            invoice_number=inv.invoice_number,
            issue_date=inv.issue_date,
            due_date=inv.due_date,
            items=_items(inv.items),
            subtotal=inv.subtotal,
            tax=inv.tax,
            discount=inv.discount,
            total=inv.total,
            reference=inv.reference,
            terms=inv.terms,
            notes=inv.notes,
            customer=_customer(db, inv.customer_id),
            project=_project(db, inv.project_id),
            invoice_type=inv.type or "final",
            quote_number=inv.quote.quote_number if inv.quote is not None else None,
            created_at=inv.created_at,
            tenant_id=inv.tenant_id,
        )
    except SQLAlchemyError as e:
        raise UpstreamDataError(f"Could not load invoice {invoice_id}: {type(e).__name__}") from e


def load_company_settings(db: Session, tenant_id: Optional[int]) -> Optional[CompanySettings]:
    """None when the tenant has not saved any settings yet."""
    stmt = select(CompanySettingsRow)
    if tenant_id is None:
        stmt = stmt.where(CompanySettingsRow.tenant_id.is_(None))
    else:
        stmt = stmt.where(CompanySettingsRow.tenant_id == tenant_id)

    row = db.execute(stmt.limit(1)).scalar_one_or_none()
    if row is None:
        return None

    return CompanySettings(
        company_name=row.company_name,
        company_logo=row.company_logo,
        address=row.address,
        city=row.city,
        state=row.state,
        zip_code=row.zip_code,
        country=row.country,
        phone=row.phone,
        email=row.email,
        website=row.website,
        vat_number=row.vat_number,
        registration_number=row.registration_number,
        default_quote_terms=row.default_quote_terms,
        default_invoice_terms=row.default_invoice_terms,
        bank_details=row.bank_details,
        footer_text=row.footer_text,
        primary_color=row.primary_color,
        currency_symbol=row.currency_symbol,
    )


def company_settings_provider(tenant_id: Optional[int]) -> Optional[CompanySettings]:
    """Default provider for DocumentService: opens its own short-lived session."""
    db = new_session()
    try:
        return load_company_settings(db, tenant_id)
    finally:
        db.close()
