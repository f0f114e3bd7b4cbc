# This project was developed with assistance from AI tools.
"""Decimal parsing and formatting for CRM money strings.

The CRM stores amounts as text, sometimes with thousands separators
("12,500.00"). All balance arithmetic goes through these helpers so
rounding and separator handling stay consistent.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0")


def parse_amount(value) -> Decimal:
    """Parse a money value. Empty/None is zero; anything unparseable raises ValueError."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    cleaned = "".join(str(value).split()).replace(",", "")
    if not cleaned:
        return ZERO
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def parse_amount_lenient(value) -> Decimal:
    """Like parse_amount but returns zero for garbage. For display paths only."""
    try:
        return parse_amount(value)
    except ValueError:
        return ZERO


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """Two decimals, no separators -- the form written back to the CRM."""
    return f"{quantize(amount):.2f}"


def format_display(amount: Decimal) -> str:
    """Two decimals with thousands separators, for statements and messages."""
    return f"{quantize(amount):,.2f}"
