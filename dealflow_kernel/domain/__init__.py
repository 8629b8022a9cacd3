"""
Pure domain layer.

This module contains immutable record types and coercion helpers
with NO dependencies on:
- The remote entity API
- Time/clock (except SystemClock)
- I/O

All domain objects are immutable and deterministic.
"""

from dealflow_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from dealflow_kernel.domain.records import (
    Deal,
    DealStage,
    Entitlement,
    Milestone,
    Phase,
    Proforma,
    Task,
    TaskStatus,
    coerce_records,
)
from dealflow_kernel.domain.values import to_date, to_decimal, to_text

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # Records
    "Deal",
    "DealStage",
    "Entitlement",
    "Milestone",
    "Phase",
    "Proforma",
    "Task",
    "TaskStatus",
    "coerce_records",
    # Coercion
    "to_date",
    "to_decimal",
    "to_text",
]
