"""
dealflow_engines.process_health -- DMAIC process-health metrics.

Responsibility:
    Derive Lean Six Sigma health indicators from the deal pipeline and
    the task list: deal conversion rate, contract-to-close cycle time,
    task on-time rate, overdue task count, active pipeline size and the
    sigma levels of the task and deal processes.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Uses dealflow_engines.sigma for DPMO conversion.  The current day is
    an explicit ``as_of`` parameter.

Invariants enforced:
    - Zero denominators yield ``None`` (never NaN, never 0), and ``None``
      rates yield ``None`` sigma levels.  "No data" is distinguishable
      from a perfect score.
    - ``overdue_tasks`` only counts tasks whose status is not completed.
    - Day differences are whole calendar days.

Failure modes:
    - None for record content.
    - ValueError when ``as_of`` is not a date or datetime.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from dealflow_kernel.domain.records import Deal, DealStage, Task, coerce_records
from dealflow_kernel.domain.values import days_between, to_date
from dealflow_kernel.logging_config import get_logger
from dealflow_engines.sigma import (
    DEFAULT_SIGMA_TABLE,
    MAX_DPMO,
    SigmaTable,
    dpmo_to_sigma,
)
from dealflow_engines.tracer import traced_engine

logger = get_logger("engines.process_health")

HUNDRED = Decimal("100")
# One percentage point of defects is 10,000 defects per million
DPMO_PER_PERCENT = Decimal("10000")


@dataclass(frozen=True)
class ProcessHealthMetrics:
    """Process health snapshot.  Rates are percentages (0-100)."""

    conversion_rate: Decimal | None
    avg_cycle_days: Decimal | None
    task_on_time_rate: Decimal | None
    overdue_tasks: int
    task_sigma: Decimal | None
    deal_sigma: Decimal | None
    active_deals: int
    total_deals: int


def _completed_on_time(task: Task) -> bool:
    # Missing dates are given the benefit of the doubt
    if task.due_date is None or task.completed_date is None:
        return True
    return task.completed_date <= task.due_date


def is_overdue(task: Task, as_of: date) -> bool:
    """Not completed and due on a calendar day before *as_of*.

    Comparison is by UTC calendar day, so a task due on *as_of* is not yet
    overdue at any hour of that day.  Dashboards that compare the due
    timestamp against the current instant flag such a task once the day
    begins, so their count can be higher than this one on the due day.
    """
    return (
        not task.is_completed
        and task.due_date is not None
        and task.due_date < as_of
    )


class ProcessHealthCalculator:
    """
    Pure calculator for process health metrics.

    Contract:
        No I/O, no clock access, fully deterministic.
    Guarantees:
        - conversion_rate = closed / (closed + dead) * 100
        - avg_cycle_days = mean(close_date - contract_date) over deals with both
        - task_on_time_rate = on-time completed / completed * 100
        - task_sigma = sigma((100 - task_on_time_rate) * 10,000 DPMO)
        - deal_sigma = sigma(dead / (closed + dead) * 1,000,000 DPMO)
    """

    def __init__(self, sigma_table: SigmaTable = DEFAULT_SIGMA_TABLE):
        self.sigma_table = sigma_table

    @traced_engine("process_health", "1.0", fingerprint_fields=("deals", "tasks", "as_of"))
    def calculate(
        self,
        deals: Iterable[Deal | Mapping[str, Any]],
        tasks: Iterable[Task | Mapping[str, Any]],
        as_of: date | datetime,
    ) -> ProcessHealthMetrics:
        deal_records = coerce_records(deals, Deal)
        task_records = coerce_records(tasks, Task)
        today = to_date(as_of)
        if today is None:
            raise ValueError(f"as_of must be a date or datetime, got {as_of!r}")

        closed = sum(1 for d in deal_records if d.stage is DealStage.CLOSED)
        dead = sum(1 for d in deal_records if d.stage is DealStage.DEAD)
        terminated = closed + dead

        conversion_rate = None
        deal_sigma = None
        if terminated > 0:
            conversion_rate = Decimal(closed) / Decimal(terminated) * HUNDRED
            deal_dpmo = Decimal(dead) / Decimal(terminated) * MAX_DPMO
            deal_sigma = dpmo_to_sigma(dpmo=deal_dpmo, table=self.sigma_table)

        cycle_days = [
            days_between(d.contract_date, d.close_date)
            for d in deal_records
            if d.contract_date is not None and d.close_date is not None
        ]
        avg_cycle_days = None
        if cycle_days:
            avg_cycle_days = Decimal(sum(cycle_days)) / Decimal(len(cycle_days))

        completed = [t for t in task_records if t.is_completed]
        task_on_time_rate = None
        task_sigma = None
        if completed:
            on_time = sum(1 for t in completed if _completed_on_time(t))
            task_on_time_rate = Decimal(on_time) / Decimal(len(completed)) * HUNDRED
            task_dpmo = (HUNDRED - task_on_time_rate) * DPMO_PER_PERCENT
            task_sigma = dpmo_to_sigma(dpmo=task_dpmo, table=self.sigma_table)

        overdue = sum(1 for t in task_records if is_overdue(t, today))
        active = sum(1 for d in deal_records if d.is_active)

        metrics = ProcessHealthMetrics(
            conversion_rate=conversion_rate,
            avg_cycle_days=avg_cycle_days,
            task_on_time_rate=task_on_time_rate,
            overdue_tasks=overdue,
            task_sigma=task_sigma,
            deal_sigma=deal_sigma,
            active_deals=active,
            total_deals=len(deal_records),
        )

        logger.info("process_health_calculated", extra={
            "as_of": today,
            "total_deals": metrics.total_deals,
            "active_deals": active,
            "completed_tasks": len(completed),
            "overdue_tasks": overdue,
            "has_conversion_rate": conversion_rate is not None,
        })
        return metrics
