# bizdocs/documents/formatting.py
from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Optional

from bizdocs import settings

CENTS = Decimal("0.01")

# hex only: the value lands inside <style> and inline style attributes
_HEX_COLOR_RE = re.compile(r"^#(?:[0-9A-Fa-f]{3,4}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")


def _clean(s: Any) -> str:
    return str(s or "").replace("\u00a0", " ").replace("\x00", "").strip()


def to_decimal(x: Any) -> Optional[Decimal]:
    """
    Numbers and numeric strings ("1,250.00", "$9.5") -> Decimal(2dp).
    Blank / None / unparseable -> None.
    """
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, Decimal):
        d = x
    elif isinstance(x, int):
        d = Decimal(x)
    elif isinstance(x, float):
        # repr avoids binary noise: 9.5 -> Decimal("9.5")
        d = Decimal(repr(x))
    else:
        t = _clean(x).replace("$", "").replace(",", "")
        if not t:
            return None
        try:
            d = Decimal(t)
        except InvalidOperation:
            return None
    if not d.is_finite():
        return None
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def money_str(x: Any, symbol: str = settings.DEFAULT_CURRENCY_SYMBOL) -> str:
    """9.5 -> "$9.50", 1234 -> "$1,234.00", -5 -> "-$5.00". Missing counts as zero."""
    d = to_decimal(x)
    if d is None:
        d = Decimal("0.00")
    sign = "-" if d < 0 else ""
    return f"{sign}{symbol}{abs(d):,.2f}"


def optional_money(x: Any, symbol: str = settings.DEFAULT_CURRENCY_SYMBOL) -> Optional[str]:
    """Like money_str, but missing or zero amounts give None (the block is hidden)."""
    d = to_decimal(x)
    if d is None or d == 0:
        return None
    return money_str(d, symbol)


def quantity_value(x: Any) -> int | str:
    """Whole quantities as int; fractional ones keep their decimals (2.50 -> "2.5")."""
    if x is None or isinstance(x, bool):
        return 1
    try:
        d = x if isinstance(x, Decimal) else Decimal(repr(x) if isinstance(x, float) else _clean(x))
    except InvalidOperation:
        return 1
    if not d.is_finite():
        return 1
    if d == d.to_integral_value():
        return int(d)
    return format(d.normalize(), "f")


def _parse_date(value: Any) -> Optional[date | datetime]:
    if isinstance(value, (datetime, date)):
        return value
    s = _clean(value)
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def display_date(value: Any, fmt: str = settings.DATE_FORMAT) -> Optional[str]:
    """
    date / datetime / ISO string -> "18 Oct 2026".
    Strings we cannot parse are shown as given; blank -> None.
    """
    if value is None:
        return None
    parsed = _parse_date(value)
    if parsed is None:
        text = _clean(value)
        return text or None
    return parsed.strftime(fmt)


def text_or_none(value: Any) -> Optional[str]:
    t = _clean(value)
    return t or None


def split_lines(text: Optional[str]) -> List[str]:
    t = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    return [ln.strip() for ln in t.split("\n") if ln.strip()]


def address_lines(*, address: Any = None, city: Any = None, state: Any = None,
                  zip_code: Any = None, country: Any = None) -> List[str]:
    """["12 High St", "Springfield, IL 62701", "USA"] with blank parts dropped."""
    lines = split_lines(_clean(address))
    locality = ", ".join(p for p in (_clean(city), " ".join(q for q in (_clean(state), _clean(zip_code)) if q)) if p)
    if locality:
        lines.append(locality)
    c = _clean(country)
    if c:
        lines.append(c)
    return lines


def css_color(value: Any, default: str = settings.DEFAULT_PRIMARY_COLOR) -> str:
    """"#2563eb" / "#fff" pass through; anything else (names, css fragments) -> default."""
    t = _clean(value)
    if _HEX_COLOR_RE.match(t):
        return t
    return default
