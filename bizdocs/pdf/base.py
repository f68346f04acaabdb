# bizdocs/pdf/base.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Protocol

from bizdocs import settings


class PdfRenderer(Protocol):
    async def render_to_pdf(self, html: str) -> bytes:
        ...

    async def close(self) -> None:
        ...


@dataclass(frozen=True)
class PrintOptions:
    page_format: str = settings.PAGE_FORMAT
    print_background: bool = settings.PRINT_BACKGROUND
    margin: Dict[str, str] = field(default_factory=lambda: dict(settings.PAGE_MARGINS))
    load_timeout_ms: int = settings.PAGE_LOAD_TIMEOUT_MS
    print_timeout_s: float = settings.PRINT_TIMEOUT_S
