"""
dealflow_engines.sigma -- DPMO to Six-Sigma level conversion.

Responsibility:
    Map a defects-per-million-opportunities (DPMO) value to an approximate
    sigma quality level by table lookup and linear interpolation, and
    classify sigma levels into display bands.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by the process health calculator.

Invariants enforced:
    - dpmo <= 0 maps to the best sigma in the table (6.0 by default).
    - dpmo >= 1,000,000 maps to 0.
    - Between the first and last table rows the result is interpolated
      linearly inside the bracketing pair; exact table hits return the
      table sigma.
    - Below the first row the best sigma is returned; above the last row
      (and under one million) the last row's sigma (1.0) is returned.
      Together these keep the conversion non-increasing in dpmo.

Failure modes:
    - SigmaTableError when a table has fewer than two rows, non-positive or
      non-increasing DPMO values, or increasing sigma values.

This is an approximation, not an inverse-normal computation.  Results are
not meaningful beyond one decimal place.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from dealflow_kernel.domain.values import to_decimal
from dealflow_kernel.exceptions import SigmaTableError
from dealflow_kernel.logging_config import get_logger
from dealflow_engines.tracer import traced_engine

logger = get_logger("engines.sigma")

MAX_DPMO = Decimal("1000000")
ZERO_SIGMA = Decimal("0")


@dataclass(frozen=True, slots=True)
class SigmaPoint:
    """One row of the conversion table."""

    dpmo: Decimal
    sigma: Decimal


@dataclass(frozen=True)
class SigmaTable:
    """
    Ordered DPMO -> sigma conversion table.

    Contract:
        Rows are sorted by strictly increasing DPMO; sigma never increases
        from one row to the next.
    """

    points: tuple[SigmaPoint, ...]

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise SigmaTableError("at least two rows are required")
        if self.points[0].dpmo <= 0:
            raise SigmaTableError("dpmo values must be positive")
        for lower, upper in zip(self.points, self.points[1:]):
            if upper.dpmo <= lower.dpmo:
                raise SigmaTableError(
                    f"dpmo must strictly increase ({lower.dpmo} -> {upper.dpmo})"
                )
            if upper.sigma > lower.sigma:
                raise SigmaTableError(
                    f"sigma must not increase ({lower.sigma} -> {upper.sigma})"
                )

    @classmethod
    def from_pairs(cls, pairs: Any) -> SigmaTable:
        """Build a table from ``(dpmo, sigma)`` pairs."""
        return cls(tuple(
            SigmaPoint(Decimal(str(dpmo)), Decimal(str(sigma)))
            for dpmo, sigma in pairs
        ))

    @property
    def best_sigma(self) -> Decimal:
        return self.points[0].sigma

    @property
    def fallback_sigma(self) -> Decimal:
        return self.points[-1].sigma


DEFAULT_SIGMA_TABLE = SigmaTable.from_pairs((
    ("3.4", "6.0"),
    ("233", "5.0"),
    ("6210", "4.0"),
    ("66807", "3.0"),
    ("308537", "2.0"),
    ("690000", "1.0"),
))


class SigmaBand(str, Enum):
    """Display band of a sigma level."""

    EXCELLENT = "excellent"  # >= 5
    GOOD = "good"  # >= 4
    FAIR = "fair"  # >= 3
    POOR = "poor"


@traced_engine("sigma", "1.0", fingerprint_fields=("dpmo",))
def dpmo_to_sigma(dpmo: Any, table: SigmaTable = DEFAULT_SIGMA_TABLE) -> Decimal:
    """Convert a DPMO value to an approximate sigma level.

    Non-numeric input is treated as 0 DPMO.
    """
    value = to_decimal(dpmo)

    if value <= 0:
        return table.best_sigma
    if value >= MAX_DPMO:
        return ZERO_SIGMA

    points = table.points
    if value < points[0].dpmo:
        return table.best_sigma

    for lower, upper in zip(points, points[1:]):
        if lower.dpmo <= value <= upper.dpmo:
            ratio = (value - lower.dpmo) / (upper.dpmo - lower.dpmo)
            return lower.sigma - ratio * (lower.sigma - upper.sigma)

    logger.debug("sigma_fallback_used", extra={
        "dpmo": str(value),
        "sigma": str(table.fallback_sigma),
    })
    return table.fallback_sigma


def classify_sigma(sigma: Decimal | None) -> SigmaBand | None:
    if sigma is None:
        return None
    if sigma >= 5:
        return SigmaBand.EXCELLENT
    if sigma >= 4:
        return SigmaBand.GOOD
    if sigma >= 3:
        return SigmaBand.FAIR
    return SigmaBand.POOR
