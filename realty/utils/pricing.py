"""Conversions between stored cents and displayed dollar amounts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

__all__ = ["dollars_to_cents", "format_price", "parse_price_to_cents"]


def format_price(price_in_cents: int) -> str:
    """Render cents as whole US dollars, e.g. ``159900000 -> "$1,599,000"``."""

    dollars = (Decimal(price_in_cents) / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"${dollars:,}"


def dollars_to_cents(dollars: int | float) -> int:
    return int((Decimal(str(dollars)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_price_to_cents(price: str) -> int:
    """Parse strings such as ``"$1,599,000"`` into cents."""

    cleaned = price.replace("$", "").replace(",", "").strip()
    try:
        return dollars_to_cents(Decimal(cleaned))
    except InvalidOperation as exc:
        raise ValueError(f"Not a price: {price!r}") from exc
