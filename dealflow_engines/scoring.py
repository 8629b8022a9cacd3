"""
dealflow_engines.scoring -- Deal readiness score (0-100).

Responsibility:
    Score a deal on how far it has progressed and how complete its data
    is: stage, team assignment, priority, task completion, financial
    data, key dates and property information.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Factor points sum to 100; each factor's earned points are within
      0..points.
    - Dead deals always score 0 (factors are still reported).
    - Rounding is half-up.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from dealflow_kernel.domain.records import (
    Deal,
    DealStage,
    Proforma,
    Task,
    coerce_records,
)
from dealflow_kernel.logging_config import LogContext, get_logger
from dealflow_engines.tracer import traced_engine

logger = get_logger("engines.scoring")

STAGE_POINTS: dict[DealStage, int] = {
    DealStage.PROSPECTING: 5,
    DealStage.CONTROLLED_NOT_APPROVED: 13,
    DealStage.CONTROLLED_APPROVED: 17,
    DealStage.ENTITLEMENTS: 22,
    DealStage.DEVELOPMENT: 24,
    DealStage.CLOSED: 25,
    DealStage.DEAD: 0,
}
UNKNOWN_STAGE_POINTS = 5

PRIORITY_POINTS: dict[str, int] = {"low": 3, "medium": 6, "high": 8, "critical": 10}
UNKNOWN_PRIORITY_POINTS = 3

NO_TASKS_POINTS = 5


@dataclass(frozen=True)
class ScoreFactor:
    label: str
    points: int
    earned: int


@dataclass(frozen=True)
class DealScore:
    score: int
    label: str
    factors: tuple[ScoreFactor, ...]


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def score_label(score: int) -> str:
    if score >= 75:
        return "Strong"
    if score >= 50:
        return "Moderate"
    if score >= 25:
        return "Weak"
    return "Low"


class DealScoreCalculator:
    """
    Pure calculator for the deal score card.

    Contract:
        ``tasks`` are the tasks belonging to the deal; the caller selects
        them.  ``proforma`` is the deal's proforma, if any.
    """

    @traced_engine("deal_score", "1.0", fingerprint_fields=("deal", "tasks", "proforma"))
    def score(
        self,
        deal: Deal | Mapping[str, Any],
        tasks: Iterable[Task | Mapping[str, Any]] = (),
        proforma: Proforma | Mapping[str, Any] | None = None,
    ) -> DealScore:
        record = coerce_records((deal,), Deal)[0]
        task_records = coerce_records(tasks, Task)

        with LogContext.bind(deal_id=record.id):
            factors = (
                ScoreFactor("Deal Stage", 25, self._stage_points(record)),
                ScoreFactor("Team Assignment", 10, 10 if record.assigned_to else 0),
                ScoreFactor("Priority Level", 10, PRIORITY_POINTS.get(
                    (record.priority or "").lower(), UNKNOWN_PRIORITY_POINTS,
                )),
                ScoreFactor("Task Completion", 20, self._task_points(task_records)),
                ScoreFactor("Financial Data", 15, self._financial_points(record, proforma)),
                ScoreFactor("Key Dates", 10, self._date_points(record)),
                ScoreFactor("Property Info", 10, self._property_points(record)),
            )

            possible = sum(f.points for f in factors)
            earned = sum(f.earned for f in factors)
            score = _round_half_up(Decimal(earned) / Decimal(possible) * 100)
            if record.stage is DealStage.DEAD:
                score = 0

            logger.debug("deal_scored", extra={
                "score": score,
                "earned": earned,
            })
        return DealScore(score=score, label=score_label(score), factors=factors)

    @staticmethod
    def _stage_points(deal: Deal) -> int:
        if deal.stage is None:
            return UNKNOWN_STAGE_POINTS
        return STAGE_POINTS[deal.stage]

    @staticmethod
    def _task_points(tasks: tuple[Task, ...]) -> int:
        if not tasks:
            return NO_TASKS_POINTS
        completed = sum(1 for t in tasks if t.is_completed)
        return _round_half_up(Decimal(completed) / Decimal(len(tasks)) * 20)

    @staticmethod
    def _financial_points(deal: Deal, proforma: Any) -> int:
        earned = 0
        if deal.asking_price or deal.offer_price or deal.purchase_price:
            earned += 5
        if deal.estimated_value:
            earned += 5
        if proforma is not None:
            earned += 5
        return earned

    @staticmethod
    def _date_points(deal: Deal) -> int:
        earned = 0
        if deal.contract_date is not None:
            earned += 3
        if deal.due_diligence_deadline is not None:
            earned += 3
        if deal.close_date is not None:
            earned += 4
        return earned

    @staticmethod
    def _property_points(deal: Deal) -> int:
        earned = 0
        if deal.address and deal.city:
            earned += 3
        if deal.acreage:
            earned += 2
        if deal.number_of_lots:
            earned += 2
        if deal.zoning_current:
            earned += 3
        return earned
