"""
Values -- numeric and calendar coercion for billing records.

Responsibility:
    Converts user-entered and stored values into the Decimal amounts,
    integer quantities and calendar dates the engines compute with.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by entities, engines and services.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str()`` so
      ``0.1`` becomes ``Decimal("0.1")``, never its binary expansion.
    - Parse-or-zero: ``parse_non_negative_number`` and ``parse_quantity``
      never raise; anything they cannot read collapses to zero.
    - Accepted magnitudes stay below 10**1000, so line totals and ledger
      sums never trap with ``decimal.Overflow``.

Failure modes:
    - None for the parse-or-zero helpers.
    - ``parse_decimal`` and ``parse_calendar_date`` return ``None`` for
      unreadable input so callers can decide between rejecting and defaulting.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, DecimalException, localcontext
from typing import Any

ZERO = Decimal("0")

_CENT = Decimal("0.01")

# Largest accepted magnitude is below 10**1000. Products and sums of such
# values stay far inside the default context's exponent range.
MAX_ADJUSTED_EXPONENT = 999

# Leading numeric prefix, the way a form field's "12.5kg" reads as 12.5
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def _as_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return None


def _text_decimal(text: str) -> Decimal | None:
    try:
        return Decimal(text)
    except DecimalException:
        return None


def _in_range(number: Decimal) -> bool:
    """Finite and small enough that billing arithmetic cannot overflow."""
    return number.is_finite() and (not number or number.adjusted() <= MAX_ADJUSTED_EXPONENT)


def parse_non_negative_number(value: Any) -> Decimal:
    """
    Coerce an entered amount to a non-negative Decimal, falling back to zero.

    Strings are read up to the end of their leading numeric prefix, so
    ``"12abc"`` gives ``12`` and ``"abc"`` gives ``0``. Negative, NaN,
    infinite and absurdly large (``"9e999999"``) values give ``0``.
    """
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        number = _text_decimal(match.group(1)) if match is not None else None
    else:
        number = _as_decimal(value)
    if number is None or not _in_range(number) or number <= 0:
        return ZERO
    return number


def parse_quantity(value: Any) -> int:
    """
    Coerce an entered quantity to a non-negative integer, falling back to zero.

    Fractional numbers are truncated (``"2.7"`` gives ``2``). Values too
    large to bill with give ``0``, like unreadable ones.
    """
    if isinstance(value, str):
        match = _LEADING_INTEGER.match(value)
        number = _text_decimal(match.group(1)) if match is not None else None
    else:
        number = _as_decimal(value)
    if number is None or not _in_range(number):
        return 0
    return max(int(number), 0)


def parse_decimal(value: Any) -> Decimal | None:
    """
    Strictly parse a finite Decimal.

    Unlike ``parse_non_negative_number`` the whole string must be numeric
    (surrounding whitespace allowed). Returns None when it is not, or when
    the magnitude is too large to sum safely.
    """
    if isinstance(value, str):
        number = _text_decimal(value.strip())
    else:
        number = _as_decimal(value)
    if number is None or not _in_range(number):
        return None
    return number


def decimal_or_zero(value: Any) -> Decimal:
    """Read a stored amount; unreadable values read as zero."""
    number = parse_decimal(value)
    return number if number is not None else ZERO


def parse_calendar_date(value: Any) -> date | None:
    """
    Read a calendar date from a date, datetime or ISO string.

    Only the calendar date part is kept, so ``"2024-03-10T18:30:00"`` and
    ``"2024-03-10"`` read the same. Returns None for unreadable values.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def format_amount(amount: Decimal) -> str:
    """Two-decimal presentation of an amount (half-up)."""
    with localcontext() as ctx:
        # room for every integer digit plus the two cents digits
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return str(amount.quantize(_CENT, rounding=ROUND_HALF_UP))
