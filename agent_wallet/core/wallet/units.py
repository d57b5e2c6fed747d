"""Exact conversion between decimal amount strings and integer base units."""

from __future__ import annotations

import re
from decimal import Context, Decimal, Inexact, InvalidOperation
from typing import Union

from ..errors import InvalidParameter

MAX_UINT256 = 2**256 - 1

# Enough digits for uint256 values at any realistic decimals setting.
_CONTEXT = Context(prec=120)
# Scaling must never round; anything that would is rejected instead.
_EXACT_CONTEXT = Context(prec=120, traps=[Inexact, InvalidOperation])

_PLAIN_DECIMAL_RE = re.compile(r"[0-9]+(\.[0-9]+)?")


def _to_decimal(amount: Union[str, int, Decimal], field_name: str) -> Decimal:
    if isinstance(amount, bool):
        raise InvalidParameter(f"Invalid {field_name}: {amount!r}", field_name=field_name)
    if isinstance(amount, float):
        # Floats already carry binary rounding error; callers must pass strings.
        raise InvalidParameter(
            f"Invalid {field_name}: pass amounts as decimal strings, not floats",
            field_name=field_name,
        )
    text = amount.strip() if isinstance(amount, str) else amount
    if isinstance(text, str) and not _PLAIN_DECIMAL_RE.fullmatch(text):
        raise InvalidParameter(
            f"Invalid {field_name}. Must be a positive decimal number like '1.5'. Got: {amount!r}",
            field_name=field_name,
        )
    try:
        value = Decimal(text)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidParameter(
            f"Invalid {field_name}. Must be a positive number. Got: {amount!r}",
            field_name=field_name,
        ) from None
    if not value.is_finite():
        raise InvalidParameter(f"Invalid {field_name}: {amount!r}", field_name=field_name)
    return value


def parse_amount(amount: Union[str, int, Decimal], field_name: str = "amount") -> Decimal:
    """Parse a strictly positive decimal amount."""
    value = _to_decimal(amount, field_name)
    if value <= 0:
        raise InvalidParameter(
            f"Invalid {field_name}. Must be a positive number. Got: {amount!r}",
            field_name=field_name,
        )
    return value


def to_smallest_unit(amount: Union[str, int, Decimal], decimals: int, field_name: str = "amount") -> int:
    """Convert a human amount to integer base units (e.g. wei).

    Uses integer-exact decimal arithmetic. Amounts with more fractional digits
    than ``decimals`` are rejected rather than rounded.

    Examples:
        >>> to_smallest_unit("1.0", 18)
        1000000000000000000
        >>> to_smallest_unit("0.000001", 6)
        1
    """
    if decimals < 0:
        raise InvalidParameter(f"Invalid decimals: {decimals}", field_name="decimals")

    value = parse_amount(amount, field_name)
    try:
        scaled = value.scaleb(decimals, context=_EXACT_CONTEXT)
    except Inexact:
        raise InvalidParameter(
            f"Invalid {field_name}: {amount!r} has too many significant digits",
            field_name=field_name,
        ) from None
    integral = scaled.to_integral_value(context=_CONTEXT)
    if scaled != integral:
        raise InvalidParameter(
            f"Invalid {field_name}: {amount!r} has more than {decimals} decimal places",
            field_name=field_name,
        )
    if integral > MAX_UINT256:
        raise InvalidParameter(
            f"Invalid {field_name}: {amount!r} exceeds the uint256 range at {decimals} decimals",
            field_name=field_name,
        )
    return int(integral)


def from_smallest_unit(value: int, decimals: int) -> str:
    """Format integer base units as a plain decimal string without exponent.

    Examples:
        >>> from_smallest_unit(1500000000000000000, 18)
        '1.5'
        >>> from_smallest_unit(0, 18)
        '0'
    """
    quantity = Decimal(int(value)).scaleb(-decimals, context=_CONTEXT)
    text = format(quantity, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def format_display(value: int, decimals: int, places: int = 4) -> str:
    """Round base units for display only (never used for on-chain values)."""
    quantity = Decimal(int(value)).scaleb(-decimals, context=_CONTEXT)
    return format(quantity.quantize(Decimal(1).scaleb(-places), context=_CONTEXT), "f")
