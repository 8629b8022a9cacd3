"""
Values -- Coercion of loosely typed record fields into domain values.

Responsibility:
    Records arrive from a remote entity API as mappings whose numeric and
    date fields may be missing, empty, strings, floats or garbage.  These
    helpers turn such values into ``Decimal`` and ``date`` without ever
    raising, so engines degrade to a zero (or default) contribution
    instead of failing.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by ``records`` and by engines that accept raw mappings.

Invariants enforced:
    - Floats never leave this module: every number becomes a ``Decimal``
      built from the float's shortest repr.
    - NaN, infinities and out-of-range magnitudes are treated as
      non-numeric.
    - Dates have day granularity; aware datetimes are normalized to UTC
      before the calendar day is taken.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")

# Amounts, counts and percentages never come near this many digits; larger
# magnitudes overflow the default decimal context once multiplied.
_MAX_ADJUSTED_EXPONENT = 100


def to_decimal(value: Any, default: Decimal | None = ZERO) -> Decimal | None:
    """Coerce *value* to a finite ``Decimal``, or return *default*.

    Booleans are rejected even though they are ``int`` subclasses.  Nonzero
    values whose magnitude lies outside 1e-100 to 1e100 are out of range
    and also give *default*.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            result = Decimal(text)
        except InvalidOperation:
            return default
    else:
        return default

    if not result.is_finite():
        return default
    if result and abs(result.adjusted()) > _MAX_ADJUSTED_EXPONENT:
        return default
    return result


def to_date(value: Any) -> date | None:
    """Coerce *value* to a calendar ``date`` or ``None``.

    Accepts ``date``, ``datetime`` and ISO-8601 strings (date-only or
    date-time, including a trailing ``Z``).
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            try:
                value = value.astimezone(timezone.utc)
            except OverflowError:
                return None
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return to_date(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def to_text(value: Any, default: str | None = None) -> str | None:
    """Coerce *value* to a stripped, non-empty string or *default*."""
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def days_between(start: date, end: date) -> int:
    """Whole calendar days from *start* to *end* (negative if end is earlier)."""
    return (end - start).days
