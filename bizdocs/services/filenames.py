# bizdocs/services/filenames.py
from __future__ import annotations

import re

from bizdocs import settings

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")

_LABELS = {
    "quote": "Quote",
    "invoice": "Invoice",
}


def _safe_label(number: str | None) -> str:
    # Keep it simple for Content-Disposition; browsers are picky.
    label = _UNSAFE.sub("_", (number or "").strip()).strip("._")
    return label or settings.FALLBACK_DOCUMENT_NUMBER


def pdf_filename(kind: str, number: str | None) -> str:
    """pdf_filename("quote", "Q-1001") -> "Quote_Q-1001.pdf" """
    prefix = _LABELS.get(kind)
    if prefix is None:
        raise ValueError(f"Unknown document kind: {kind!r}")
    return f"{prefix}_{_safe_label(number)}.pdf"


def content_disposition(filename: str, inline: bool = False) -> str:
    disp = "inline" if inline else "attachment"
    return f"{disp}; filename={filename}"
