# bizdocs/services/document_service.py
from __future__ import annotations

import asyncio
import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional, Type

from bizdocs import settings
from bizdocs.documents.mapper import to_context
from bizdocs.documents.types import CompanySettings, DocumentInput, InvoiceInput, QuoteInput
from bizdocs.errors import DocumentError, PdfGenerationError, RenderError, UpstreamDataError
from bizdocs.pdf.base import PdfRenderer
from bizdocs.pdf.renderer import ChromiumPdfRenderer
from bizdocs.templating.renderer import TemplateRenderer
from bizdocs.templating.store import TemplateStore, get_template_store

log = logging.getLogger("bizdocs.documents")

# tenant_id -> settings row (None when the tenant has none yet)
CompanySettingsProvider = Callable[[Optional[int]], Optional[CompanySettings]]


@contextmanager
def _stage(name: str, wrap: Type[DocumentError] = DocumentError):
    """Tag pipeline errors with their stage; wrap anything unexpected."""
    try:
        yield
    except DocumentError as e:
        if not e.stage:
            e.stage = name
        raise
    except Exception as e:
        err = wrap(f"{name.replace('_', ' ')} failed: {type(e).__name__}")
        err.stage = name
        raise err from e


def _html_fields(e: DocumentError) -> dict:
    if isinstance(e, PdfGenerationError) and e.html_length:
        return {"html_length": e.html_length}
    return {}


def _default_company_settings(tenant_id: Optional[int]) -> Optional[CompanySettings]:
    # imported here so the pipeline can run without a database configured
    from bizdocs.services.records import company_settings_provider

    return company_settings_provider(tenant_id)


class DocumentService:
    """
    Quote/invoice record -> PDF bytes.

      company settings -> data mapping -> template -> rendering -> pdf conversion

    Owns the PDF renderer (and through it the shared headless browser);
    call cleanup() once at shutdown.
    """

    def __init__(
        self,
        *,
        company_settings: CompanySettingsProvider | None = None,
        templates: TemplateStore | None = None,
        renderer: TemplateRenderer | None = None,
        pdf_renderer: PdfRenderer | None = None,
        template_name: str = settings.DEFAULT_TEMPLATE,
    ):
        self._company_settings = company_settings or _default_company_settings
        self.templates = templates or get_template_store()
        self.renderer = renderer or TemplateRenderer()
        self.pdf_renderer = pdf_renderer or ChromiumPdfRenderer()
        self.template_name = template_name

    async def company_settings_for(self, tenant_id: Optional[int]) -> CompanySettings:
        """Tenant branding; an empty CompanySettings when the tenant has none."""
        try:
            company = await asyncio.to_thread(self._company_settings, tenant_id)
        except DocumentError as e:
            if not e.stage:
                e.stage = "company_settings"
            raise
        except Exception as e:
            raise UpstreamDataError(
                f"Could not load company settings: {type(e).__name__}",
                stage="company_settings",
            ) from e
        return company or CompanySettings()

    async def _render_html(self, doc: DocumentInput, company: Optional[CompanySettings] = None) -> str:
        # callers that already hold the branding pass it in
        if company is None:
            company = await self.company_settings_for(doc.tenant_id)

        with _stage("data_mapping"):
            context = to_context(doc, company)

        with _stage("template"):
            template = self.templates.load(self.template_name)

        with _stage("rendering", RenderError):
            return self.renderer.render(template, context)

    async def _generate(self, doc: DocumentInput, company: Optional[CompanySettings] = None) -> bytes:
        started = time.monotonic()
        extra = {"kind": doc.kind, "number": doc.number, "tenant_id": doc.tenant_id}

        try:
            html = await self._render_html(doc, company)
            with _stage("pdf_conversion", PdfGenerationError):
                pdf = await self.pdf_renderer.render_to_pdf(html)
        except DocumentError as e:
            log.error(
                "Could not generate %s %s: %s",
                doc.kind,
                doc.number,
                e,
                exc_info=True,
                extra={**extra, "stage": e.stage, **_html_fields(e)},
            )
            if isinstance(e, PdfGenerationError) and e.html_excerpt:
                log.debug("HTML excerpt for %s %s: %r", doc.kind, doc.number, e.html_excerpt)
            raise

        log.info(
            "Generated %s PDF %s",
            doc.kind,
            doc.number,
            extra={**extra, "bytes": len(pdf), "duration_ms": int((time.monotonic() - started) * 1000)},
        )
        return pdf

    # -------------------------
    # Public API
    # -------------------------

    async def generate_quote_pdf(self, quote: QuoteInput, *, company: Optional[CompanySettings] = None) -> bytes:
        if not isinstance(quote, QuoteInput):
            raise TypeError(f"expected QuoteInput, got {type(quote).__name__}")
        return await self._generate(quote, company)

    async def generate_invoice_pdf(self, invoice: InvoiceInput, *, company: Optional[CompanySettings] = None) -> bytes:
        if not isinstance(invoice, InvoiceInput):
            raise TypeError(f"expected InvoiceInput, got {type(invoice).__name__}")
        return await self._generate(invoice, company)

    async def render_quote_html(self, quote: QuoteInput) -> str:
        return await self._render_html(quote)

    async def render_invoice_html(self, invoice: InvoiceInput) -> str:
        return await self._render_html(invoice)

    async def cleanup(self) -> None:
        await self.pdf_renderer.close()
