"""
Module: dealflow_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for the presentation and data-fetching layers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import dealflow_kernel (and sibling engine modules).
    MUST NOT import dealflow_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      The current day is passed in as an explicit ``as_of`` parameter.
    - Decimal-only arithmetic: amounts, rates and sigma levels are
      ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.
    - Degradation instead of failure: malformed record content coerces
      to zero or a default, and degenerate input yields ``None`` or an
      empty tuple.

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``dealflow_engines.tracer``), emitting DEALFLOW_ENGINE_TRACE log
    records that include engine name, version, input fingerprint, and
    duration.

Usage:
    from dealflow_engines.profit import ProfitCalculator
    from dealflow_engines.process_health import ProcessHealthCalculator
    from dealflow_engines.sigma import dpmo_to_sigma
    from dealflow_engines.timeline import TimelineLayoutCalculator
"""

from dealflow_kernel.logging_config import get_logger

logger = get_logger("engines")

from dealflow_engines.formatting import (
    NO_VALUE,
    format_currency,
    format_days,
    format_percent,
    format_sigma,
)
from dealflow_engines.pipeline import (
    STAGE_LABELS,
    DashboardSummary,
    PipelineCalculator,
    QuarterlyDealSummary,
    StageSummary,
    quarter_bounds,
    quarter_label,
)
from dealflow_engines.process_health import (
    ProcessHealthCalculator,
    ProcessHealthMetrics,
    is_overdue,
)
from dealflow_engines.profit import (
    DEFAULT_ASSUMPTIONS,
    DealTypeProfit,
    ProformaAnalysis,
    ProformaAssumptions,
    ProformaCalculator,
    ProfitCalculator,
    index_proformas_by_deal,
)
from dealflow_engines.scoring import (
    DealScore,
    DealScoreCalculator,
    ScoreFactor,
    score_label,
)
from dealflow_engines.sigma import (
    DEFAULT_SIGMA_TABLE,
    SigmaBand,
    SigmaPoint,
    SigmaTable,
    classify_sigma,
    dpmo_to_sigma,
)
from dealflow_engines.tasks import (
    TaskNotification,
    TaskUpdate,
    change_status,
    due_label,
    due_notifications,
    group_by_status,
    index_deals_by_id,
    subtask_progress,
    toggle_completion,
    upcoming_tasks,
)
from dealflow_engines.timeline import (
    MilestoneMarker,
    PhaseBar,
    TimelineLayout,
    TimelineLayoutCalculator,
)

__all__ = [
    # Formatting
    "NO_VALUE",
    "format_currency",
    "format_days",
    "format_percent",
    "format_sigma",
    # Sigma
    "DEFAULT_SIGMA_TABLE",
    "SigmaBand",
    "SigmaPoint",
    "SigmaTable",
    "classify_sigma",
    "dpmo_to_sigma",
    # Profit
    "DEFAULT_ASSUMPTIONS",
    "DealTypeProfit",
    "ProformaAnalysis",
    "ProformaAssumptions",
    "ProformaCalculator",
    "ProfitCalculator",
    "index_proformas_by_deal",
    # Process health
    "ProcessHealthCalculator",
    "ProcessHealthMetrics",
    "is_overdue",
    # Timeline
    "MilestoneMarker",
    "PhaseBar",
    "TimelineLayout",
    "TimelineLayoutCalculator",
    # Pipeline
    "STAGE_LABELS",
    "DashboardSummary",
    "PipelineCalculator",
    "QuarterlyDealSummary",
    "StageSummary",
    "quarter_bounds",
    "quarter_label",
    # Scoring
    "DealScore",
    "DealScoreCalculator",
    "ScoreFactor",
    "score_label",
    # Tasks
    "TaskNotification",
    "TaskUpdate",
    "change_status",
    "due_label",
    "due_notifications",
    "group_by_status",
    "index_deals_by_id",
    "subtask_progress",
    "toggle_completion",
    "upcoming_tasks",
]

logger.debug("engines_package_loaded", extra={
    "module_count": 8,
    "modules": [
        "formatting", "sigma", "profit", "process_health",
        "timeline", "pipeline", "scoring", "tasks",
    ],
})
