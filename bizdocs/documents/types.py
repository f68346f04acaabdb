# bizdocs/documents/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional, Union

Number = Union[int, float, Decimal]
DateLike = Union[date, datetime, str]


@dataclass
class LineItem:
    description: Optional[str] = None
    quantity: Optional[Number] = None
    unit_price: Optional[Number] = None
    total: Optional[Number] = None


@dataclass
class CustomerInfo:
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


@dataclass
class ProjectInfo:
    name: Optional[str] = None
    description: Optional[str] = None


@dataclass
class CompanySettings:
    """Tenant branding used on every document. Every field may be missing."""

    company_name: Optional[str] = None
    company_logo: Optional[str] = None  # URL (or file:// path) of the logo image

    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None

    vat_number: Optional[str] = None
    registration_number: Optional[str] = None

    default_quote_terms: Optional[str] = None
    default_invoice_terms: Optional[str] = None
    bank_details: Optional[str] = None
    footer_text: Optional[str] = None

    primary_color: Optional[str] = None
    currency_symbol: Optional[str] = None


@dataclass
class QuoteInput:
    quote_number: Optional[str] = None
    issue_date: Optional[DateLike] = None
    items: List[LineItem] = field(default_factory=list)

    # caller-supplied totals; never recomputed here
    subtotal: Optional[Number] = None
    total: Optional[Number] = None
    tax: Optional[Number] = None
    discount: Optional[Number] = None

    expiry_date: Optional[DateLike] = None
    reference: Optional[str] = None
    terms: Optional[str] = None
    notes: Optional[str] = None

    customer: Optional[CustomerInfo] = None
    project: Optional[ProjectInfo] = None

    created_at: Optional[DateLike] = None
    tenant_id: Optional[int] = None

    kind: Literal["quote"] = field(default="quote", init=False)

    @property
    def number(self) -> Optional[str]:
        return self.quote_number


@dataclass
class InvoiceInput:
    invoice_number: Optional[str] = None
    issue_date: Optional[DateLike] = None
    due_date: Optional[DateLike] = None
    items: List[LineItem] = field(default_factory=list)

    subtotal: Optional[Number] = None
    total: Optional[Number] = None
    tax: Optional[Number] = None
    discount: Optional[Number] = None

    reference: Optional[str] = None
    terms: Optional[str] = None
    notes: Optional[str] = None

    customer: Optional[CustomerInfo] = None
    project: Optional[ProjectInfo] = None

    # "deposit" | "final"
    invoice_type: str = "final"
    # number of the quote this invoice was converted from
    quote_number: Optional[str] = None

    created_at: Optional[DateLike] = None
    tenant_id: Optional[int] = None

    kind: Literal["invoice"] = field(default="invoice", init=False)

    @property
    def number(self) -> Optional[str]:
        return self.invoice_number


DocumentInput = Union[QuoteInput, InvoiceInput]
