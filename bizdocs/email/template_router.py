# bizdocs/email/template_router.py
from __future__ import annotations

from pathlib import Path
from typing import Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "templates"

_jinja = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)

_TEMPLATES = {
    "quote": "quote",
    "invoice": "invoice",
}


def template_for_kind(kind: str) -> str:
    try:
        return _TEMPLATES[kind]
    except KeyError:
        raise ValueError(f"Unknown document kind: {kind!r}") from None


def build_subject(kind: str, number: str, company_name: str | None = None) -> str:
    if kind == "quote":
        subject = f"Quote {number}"
    elif kind == "invoice":
        subject = f"Invoice {number}"
    else:
        raise ValueError(f"Unknown document kind: {kind!r}")
    if company_name:
        subject += f" from {company_name}"
    return subject


def render_email(kind: str, context: dict) -> Tuple[str, str]:
    """Returns (html_body, text_body)."""
    base = template_for_kind(kind)
    html = _jinja.get_template(f"{base}.html").render(**context)
    text = _jinja.get_template(f"{base}.txt").render(**context)
    return html, text
