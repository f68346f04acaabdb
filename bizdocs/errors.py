# bizdocs/errors.py
from __future__ import annotations

from typing import Any


class DocumentError(Exception):
    """
    Base for every failure the document pipeline surfaces to callers.

    `stage` names the pipeline step that failed:
      company_settings | records | data_mapping | template | rendering | pdf_conversion
    The low-level exception (if any) is kept as __cause__ for logs only.
    """

    default_stage: str | None = None

    def __init__(self, message: str, *, stage: str | None = None, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage
        self.detail = detail or {}

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class TemplateNotFound(DocumentError):
    default_stage = "template"

    def __init__(self, name: str, *, detail: dict[str, Any] | None = None):
        super().__init__(f"Template not found: {name!r}", detail=detail)
        self.name = name


class RenderError(DocumentError):
    default_stage = "rendering"

    def __init__(self, message: str, *, position: int | None = None, stage: str | None = None):
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message, stage=stage)
        self.position = position


class PdfGenerationError(DocumentError):
    default_stage = "pdf_conversion"

    # keep excerpts short: rendered html carries customer data
    EXCERPT_LEN = 200

    def __init__(self, message: str, *, html: str | None = None):
        super().__init__(message)
        self.html_excerpt = (html or "")[: self.EXCERPT_LEN]
        self.html_length = len(html or "")


class UpstreamDataError(DocumentError):
    default_stage = "records"


class RecordNotFound(DocumentError):
    default_stage = "records"

    def __init__(self, kind: str, record_id: Any):
        super().__init__(f"{kind.capitalize()} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id
