"""
dealflow_engines.timeline -- Gantt chart layout for project phases and milestones.

Responsibility:
    Convert dated phases and milestones into horizontal positions
    expressed as fractions (0..1) of the overall project span.  The
    presentation layer scales the fractions to pixels or percentages.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - The span runs from the earliest to the latest date found on any
      phase (start or end) or milestone (due); ``total_days`` is at least
      1 so a single-day project never divides by zero.
    - Phases are ordered by ``order`` (stable); milestones by due date,
      with undated milestones dropped.
    - Phases missing a start or end date get a zero-width bar.

Failure modes:
    - No dated phase or milestone: ``layout`` returns ``None`` (the
      empty-timeline state) instead of raising.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from dealflow_kernel.domain.records import Milestone, Phase, coerce_records
from dealflow_kernel.domain.values import ZERO, days_between
from dealflow_kernel.logging_config import LogContext, get_logger
from dealflow_engines.tracer import traced_engine

logger = get_logger("engines.timeline")


@dataclass(frozen=True)
class PhaseBar:
    """Horizontal bar of a phase.  ``left`` and ``width`` are span fractions."""

    phase: Phase
    left: Decimal
    width: Decimal
    duration_days: int | None

    @property
    def has_bar(self) -> bool:
        return self.duration_days is not None


@dataclass(frozen=True)
class MilestoneMarker:
    milestone: Milestone
    position: Decimal


@dataclass(frozen=True)
class TimelineLayout:
    earliest: date
    latest: date
    total_days: int
    phases: tuple[PhaseBar, ...]
    milestones: tuple[MilestoneMarker, ...]


def _timeline_dates(phases: tuple[Phase, ...], milestones: tuple[Milestone, ...]) -> list[date]:
    dates = [p.start_date for p in phases if p.start_date is not None]
    dates += [p.end_date for p in phases if p.end_date is not None]
    dates += [m.due_date for m in milestones if m.due_date is not None]
    return dates


class TimelineLayoutCalculator:
    """
    Pure calculator for Gantt layout.

    Contract:
        No I/O, fully deterministic, inputs never mutated.
    Guarantees:
        - left = (start - earliest) / total_days
        - width = (end - start) / total_days
        - position = (due - earliest) / total_days
    """

    @traced_engine("timeline", "1.0", fingerprint_fields=("phases", "milestones"))
    def layout(
        self,
        phases: Iterable[Phase | Mapping[str, Any]],
        milestones: Iterable[Milestone | Mapping[str, Any]],
        project_id: str | None = None,
    ) -> TimelineLayout | None:
        """Lay out *phases* and *milestones*, or return None if nothing is dated.

        *project_id* only tags the log records written during the layout.
        """
        with LogContext.bind(project_id=project_id):
            return self._layout(
                coerce_records(phases, Phase),
                coerce_records(milestones, Milestone),
            )

    def _layout(
        self,
        phase_records: tuple[Phase, ...],
        milestone_records: tuple[Milestone, ...],
    ) -> TimelineLayout | None:
        dates = _timeline_dates(phase_records, milestone_records)
        if not dates:
            logger.info("timeline_empty", extra={
                "phase_count": len(phase_records),
                "milestone_count": len(milestone_records),
            })
            return None

        earliest = min(dates)
        latest = max(dates)
        total_days = max(1, days_between(earliest, latest))
        span = Decimal(total_days)

        bars = []
        for phase in sorted(phase_records, key=lambda p: p.order):
            if phase.start_date is None or phase.end_date is None:
                bars.append(PhaseBar(phase, ZERO, ZERO, None))
                continue
            duration = days_between(phase.start_date, phase.end_date)
            bars.append(PhaseBar(
                phase=phase,
                left=Decimal(days_between(earliest, phase.start_date)) / span,
                width=Decimal(duration) / span,
                duration_days=duration,
            ))

        markers = tuple(
            MilestoneMarker(
                milestone=m,
                position=Decimal(days_between(earliest, m.due_date)) / span,
            )
            for m in sorted(
                (m for m in milestone_records if m.due_date is not None),
                key=lambda m: m.due_date,
            )
        )

        logger.info("timeline_laid_out", extra={
            "earliest": earliest,
            "latest": latest,
            "total_days": total_days,
            "phase_count": len(bars),
            "milestone_count": len(markers),
        })
        return TimelineLayout(
            earliest=earliest,
            latest=latest,
            total_days=total_days,
            phases=tuple(bars),
            milestones=markers,
        )
