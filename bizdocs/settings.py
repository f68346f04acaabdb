# bizdocs/settings.py
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Local dev convenience: loads from .env if present.
# In containers, env vars come from the deployment (no .env file).
load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent


def _env_list(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.split(",") if x.strip()]


def template_dir() -> Path:
    p = os.getenv("DOCUMENT_TEMPLATE_DIR")
    if p:
        return Path(p)
    return PACKAGE_DIR / "templates"


DEFAULT_TEMPLATE = "document"

# =========================
# Print layout (fixed for every quote/invoice so documents look the same)
# =========================

PAGE_FORMAT = "A4"
PAGE_MARGIN = "20mm"
PAGE_MARGINS = {
    "top": PAGE_MARGIN,
    "right": PAGE_MARGIN,
    "bottom": PAGE_MARGIN,
    "left": PAGE_MARGIN,
}
PRINT_BACKGROUND = True

# Guards against a broken sub-resource (e.g. unreachable logo URL)
PAGE_LOAD_TIMEOUT_MS = 30_000
PRINT_TIMEOUT_S = 30.0

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]

# =========================
# Document display defaults
# =========================

DATE_FORMAT = "%d %b %Y"
DEFAULT_CURRENCY_SYMBOL = "$"
DEFAULT_PRIMARY_COLOR = "#2563eb"

FALLBACK_COMPANY_NAME = "Your Company"
FALLBACK_CUSTOMER_NAME = "Customer Name"
FALLBACK_ITEM_DESCRIPTION = "Item description"
FALLBACK_DOCUMENT_NUMBER = "DRAFT"

DEFAULT_SENDER_EMAIL = "noreply@example.com"

CORS_ORIGINS = _env_list(
    "CORS_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
)
