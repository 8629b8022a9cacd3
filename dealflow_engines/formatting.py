"""
dealflow_engines.formatting -- Display strings for engine outputs.

Responsibility:
    Format currency, percentages, sigma levels and day counts the way the
    dashboard cards show them, including the em-dash placeholder used for
    "no data" (``None``) values.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Half-up rounding everywhere (never banker's rounding).
    - ``None`` always renders as the placeholder, never as "0".
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from dealflow_kernel.domain.values import to_decimal

NO_VALUE = "—"

_MILLION = Decimal("1000000")
_ONE_PLACE = Decimal("0.1")
_WHOLE = Decimal("1")


def format_currency(value: Any, abbreviate: bool = True) -> str:
    """Format *value* as US dollars.

    With ``abbreviate`` set, values of one million and up render as
    ``$1.2M``; everything else renders as whole dollars (``-$1,235``).
    Non-numeric input formats as ``$0``.
    """
    amount = to_decimal(value)
    if abbreviate and amount >= _MILLION:
        millions = (amount / _MILLION).quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)
        return f"${millions}M"

    whole = amount.quantize(_WHOLE, rounding=ROUND_HALF_UP)
    sign = "-" if whole < 0 else ""
    return f"{sign}${abs(whole):,}"


def format_percent(value: Decimal | None, places: int = 1) -> str:
    if value is None:
        return NO_VALUE
    quantum = Decimal(1).scaleb(-places)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP)}%"


def format_sigma(value: Decimal | None) -> str:
    """Sigma level to one decimal place, e.g. ``4.0σ``."""
    if value is None:
        return NO_VALUE
    return f"{Decimal(value).quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)}σ"


def format_days(value: Decimal | None) -> str:
    if value is None:
        return NO_VALUE
    days = Decimal(value).quantize(_WHOLE, rounding=ROUND_HALF_UP)
    return f"{days} days"
