"""
dealflow_engines.pipeline -- Pipeline breakdown, quarterly closings and dashboard totals.

Responsibility:
    Aggregate deals by pipeline stage and by closing quarter, and compute
    the headline numbers of the portfolio dashboard.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Quarter selection takes an explicit ``as_of`` date.

Invariants enforced:
    - Quarterly value is the sum of ``purchase_price`` of deals in stage
      ``closed`` whose close date falls inside the quarter (inclusive).
    - Stage breakdown follows pipeline order and, by default, omits the
      terminal stages (closed, dead).
    - Averages over zero deals are 0, matching what the dashboard shows.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from dealflow_kernel.domain.records import (
    Deal,
    DealStage,
    Entitlement,
    Task,
    coerce_records,
)
from dealflow_kernel.domain.values import ZERO, to_date
from dealflow_kernel.logging_config import get_logger
from dealflow_engines.tracer import traced_engine

logger = get_logger("engines.pipeline")

STAGE_LABELS: dict[DealStage, str] = {
    DealStage.PROSPECTING: "Prospecting",
    DealStage.CONTROLLED_NOT_APPROVED: "Controlled/Not Approved",
    DealStage.CONTROLLED_APPROVED: "Controlled/Approved",
    DealStage.ENTITLEMENTS: "Entitlements",
    DealStage.DEVELOPMENT: "Development",
    DealStage.CLOSED: "Closed",
    DealStage.DEAD: "Dead",
}

# Entitlements in these states no longer need attention
SETTLED_ENTITLEMENT_STATUSES = frozenset({"approved", "denied", "expired"})


@dataclass(frozen=True)
class QuarterlyDealSummary:
    quarter_label: str
    quarter_start: date
    quarter_end: date
    count: int
    total_value: Decimal
    avg_value: Decimal


@dataclass(frozen=True)
class StageSummary:
    stage: DealStage
    label: str
    count: int
    total_value: Decimal


@dataclass(frozen=True)
class DashboardSummary:
    active_deals: int
    pipeline_value: Decimal
    pipeline_lots: Decimal
    pending_tasks: int
    pending_entitlements: int


def quarter_bounds(as_of: date) -> tuple[date, date]:
    """First and last calendar day of the quarter containing *as_of*."""
    first_month = 3 * ((as_of.month - 1) // 3) + 1
    last_month = first_month + 2
    last_day = calendar.monthrange(as_of.year, last_month)[1]
    return date(as_of.year, first_month, 1), date(as_of.year, last_month, last_day)


def quarter_label(as_of: date) -> str:
    return f"{as_of.year}-Q{(as_of.month - 1) // 3 + 1}"


def _summarize_quarter(start: date, end: date, deals: list[Deal]) -> QuarterlyDealSummary:
    total = sum((d.purchase_price for d in deals), ZERO)
    avg = total / Decimal(len(deals)) if deals else ZERO
    return QuarterlyDealSummary(
        quarter_label=quarter_label(start),
        quarter_start=start,
        quarter_end=end,
        count=len(deals),
        total_value=total,
        avg_value=avg,
    )


def _closed_with_date(deals: tuple[Deal, ...]) -> list[Deal]:
    return [
        d for d in deals
        if d.stage is DealStage.CLOSED and d.close_date is not None
    ]


class PipelineCalculator:
    """
    Pure calculator for pipeline and dashboard aggregates.

    Contract:
        No I/O, no clock access, fully deterministic.
    """

    @traced_engine("quarterly_deals", "1.0", fingerprint_fields=("deals", "as_of"))
    def quarterly_closed_deals(
        self,
        deals: Iterable[Deal | Mapping[str, Any]],
        as_of: date | datetime,
    ) -> QuarterlyDealSummary:
        """Deals closed in the quarter containing *as_of*."""
        today = to_date(as_of)
        if today is None:
            raise ValueError(f"as_of must be a date or datetime, got {as_of!r}")
        start, end = quarter_bounds(today)
        in_quarter = [
            d for d in _closed_with_date(coerce_records(deals, Deal))
            if start <= d.close_date <= end
        ]
        summary = _summarize_quarter(start, end, in_quarter)
        logger.info("quarterly_deals_calculated", extra={
            "quarter": summary.quarter_label,
            "count": summary.count,
            "total_value": str(summary.total_value),
        })
        return summary

    @traced_engine("quarterly_deals", "1.0", fingerprint_fields=("deals",))
    def closed_deals_by_quarter(
        self,
        deals: Iterable[Deal | Mapping[str, Any]],
    ) -> tuple[QuarterlyDealSummary, ...]:
        """One summary per quarter that has a closed deal, oldest first."""
        by_quarter: dict[tuple[date, date], list[Deal]] = {}
        for deal in _closed_with_date(coerce_records(deals, Deal)):
            by_quarter.setdefault(quarter_bounds(deal.close_date), []).append(deal)
        return tuple(
            _summarize_quarter(start, end, by_quarter[(start, end)])
            for start, end in sorted(by_quarter)
        )

    @traced_engine("stage_breakdown", "1.0", fingerprint_fields=("deals", "include_terminal"))
    def stage_breakdown(
        self,
        deals: Iterable[Deal | Mapping[str, Any]],
        include_terminal: bool = False,
    ) -> tuple[StageSummary, ...]:
        """Deal count and estimated value per stage, in pipeline order."""
        deal_records = coerce_records(deals, Deal)
        summaries = []
        for stage in DealStage:
            if stage.is_terminal and not include_terminal:
                continue
            in_stage = [d for d in deal_records if d.stage is stage]
            summaries.append(StageSummary(
                stage=stage,
                label=STAGE_LABELS[stage],
                count=len(in_stage),
                total_value=sum((d.estimated_value for d in in_stage), ZERO),
            ))
        return tuple(summaries)

    @traced_engine(
        "dashboard_summary", "1.0",
        fingerprint_fields=("deals", "tasks", "entitlements"),
    )
    def dashboard_summary(
        self,
        deals: Iterable[Deal | Mapping[str, Any]],
        tasks: Iterable[Task | Mapping[str, Any]] = (),
        entitlements: Iterable[Entitlement | Mapping[str, Any]] = (),
    ) -> DashboardSummary:
        active = [d for d in coerce_records(deals, Deal) if d.is_active]
        pending_tasks = sum(
            1 for t in coerce_records(tasks, Task) if not t.is_completed
        )
        pending_entitlements = sum(
            1 for e in coerce_records(entitlements, Entitlement)
            if (e.status or "").lower() not in SETTLED_ENTITLEMENT_STATUSES
        )
        summary = DashboardSummary(
            active_deals=len(active),
            pipeline_value=sum((d.estimated_value for d in active), ZERO),
            pipeline_lots=sum((d.number_of_lots for d in active), ZERO),
            pending_tasks=pending_tasks,
            pending_entitlements=pending_entitlements,
        )
        logger.info("dashboard_summary_calculated", extra={
            "active_deals": summary.active_deals,
            "pending_tasks": pending_tasks,
            "pending_entitlements": pending_entitlements,
        })
        return summary
