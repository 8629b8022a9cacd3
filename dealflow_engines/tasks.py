"""
dealflow_engines.tasks -- Task completion toggle, kanban grouping and due-date notifications.

Responsibility:
    The task-list logic behind the dashboard checklist, the kanban board
    and the notification bell: computing the update that toggles a task,
    grouping tasks into status columns, choosing the next tasks to show,
    and labelling tasks that are overdue or due soon.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Returns updates for the caller to persist; never mutates a task.

Invariants enforced:
    - Toggling a completed task reopens it as ``todo`` and clears its
      completed date; toggling anything else completes it on ``as_of``.
    - Notifications only consider ``todo`` and ``in_progress`` tasks with
      a due date.
    - Deal names are resolved through an explicit id index.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from dealflow_kernel.domain.records import Deal, Task, TaskStatus, coerce_records
from dealflow_kernel.domain.values import days_between, to_date
from dealflow_kernel.logging_config import get_logger
from dealflow_engines.tracer import traced_engine

logger = get_logger("engines.tasks")

DEFAULT_NOTIFICATION_WINDOW_DAYS = 7
DEFAULT_UPCOMING_LIMIT = 5

PRIORITY_ORDER: dict[str, int] = {"urgent": 0, "high": 1, "medium": 2, "low": 3}

_NOTIFIABLE_STATUSES = frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS})


@dataclass(frozen=True)
class TaskUpdate:
    """Fields to write back to the task store."""

    status: TaskStatus
    completed_date: date | None


@dataclass(frozen=True)
class TaskNotification:
    task: Task
    days_until_due: int
    is_overdue: bool
    label: str
    deal_name: str | None = None


def _require_date(as_of: date | datetime) -> date:
    today = to_date(as_of)
    if today is None:
        raise ValueError(f"as_of must be a date or datetime, got {as_of!r}")
    return today


def index_deals_by_id(deals: Iterable[Deal | Mapping[str, Any]]) -> dict[str, Deal]:
    """Map deal id to deal; the first deal with an id wins."""
    index: dict[str, Deal] = {}
    for deal in coerce_records(deals, Deal):
        if deal.id is not None and deal.id not in index:
            index[deal.id] = deal
    return index


def toggle_completion(task: Task | Mapping[str, Any], as_of: date | datetime) -> TaskUpdate:
    record = coerce_records((task,), Task)[0]
    if record.is_completed:
        return TaskUpdate(status=TaskStatus.TODO, completed_date=None)
    return TaskUpdate(status=TaskStatus.COMPLETED, completed_date=_require_date(as_of))


def change_status(
    task: Task | Mapping[str, Any],
    status: TaskStatus | str,
    as_of: date | datetime,
) -> TaskUpdate:
    """Update for moving *task* to another kanban column.

    Moving into ``completed`` stamps the completion day (an already
    completed task keeps its original day); moving out clears it.
    """
    record = coerce_records((task,), Task)[0]
    new_status = TaskStatus.parse(status)
    if new_status is not TaskStatus.COMPLETED:
        return TaskUpdate(status=new_status, completed_date=None)
    if record.is_completed and record.completed_date is not None:
        return TaskUpdate(status=new_status, completed_date=record.completed_date)
    return TaskUpdate(status=new_status, completed_date=_require_date(as_of))


def _priority_rank(task: Task) -> int:
    return PRIORITY_ORDER.get(task.priority.lower(), PRIORITY_ORDER["medium"])


def group_by_status(
    tasks: Iterable[Task | Mapping[str, Any]],
) -> dict[TaskStatus, tuple[Task, ...]]:
    """Kanban columns in workflow order, most urgent first.  Subtasks are left out."""
    columns: dict[TaskStatus, list[Task]] = {status: [] for status in TaskStatus}
    for task in coerce_records(tasks, Task):
        if task.parent_task_id is None:
            columns[task.status].append(task)
    return {
        status: tuple(sorted(items, key=_priority_rank))
        for status, items in columns.items()
    }


def subtask_progress(
    task_id: str,
    tasks: Iterable[Task | Mapping[str, Any]],
) -> tuple[int, int]:
    """(completed, total) subtasks of *task_id*."""
    subtasks = [t for t in coerce_records(tasks, Task) if t.parent_task_id == task_id]
    return sum(1 for t in subtasks if t.is_completed), len(subtasks)


def upcoming_tasks(
    tasks: Iterable[Task | Mapping[str, Any]],
    limit: int = DEFAULT_UPCOMING_LIMIT,
) -> tuple[Task, ...]:
    """Open tasks, soonest due first, undated tasks last."""
    open_tasks = [t for t in coerce_records(tasks, Task) if not t.is_completed]
    ordered = sorted(
        open_tasks,
        key=lambda t: (t.due_date is None, t.due_date or date.min),
    )
    return tuple(ordered[:limit])


def due_label(due: date, as_of: date) -> str:
    days = days_between(as_of, due)
    if days < 0:
        return "Overdue"
    if days == 0:
        return "Due Today"
    if days == 1:
        return "Due Tomorrow"
    if days <= 3:
        return f"Due in {days} days"
    return f"Due {due.strftime('%b')} {due.day}"


@traced_engine(
    "task_notifications", "1.0",
    fingerprint_fields=("tasks", "as_of", "window_days"),
)
def due_notifications(
    tasks: Iterable[Task | Mapping[str, Any]],
    as_of: date | datetime,
    window_days: int = DEFAULT_NOTIFICATION_WINDOW_DAYS,
    deals_by_id: Mapping[str, Deal] | None = None,
) -> tuple[TaskNotification, ...]:
    """Open tasks that are overdue or due within *window_days*, soonest first."""
    today = _require_date(as_of)
    deals_by_id = deals_by_id or {}

    notifications = []
    for task in coerce_records(tasks, Task):
        if task.status not in _NOTIFIABLE_STATUSES or task.due_date is None:
            continue
        days = days_between(today, task.due_date)
        if days > window_days:
            continue
        deal = deals_by_id.get(task.deal_id) if task.deal_id else None
        notifications.append(TaskNotification(
            task=task,
            days_until_due=days,
            is_overdue=days < 0,
            label=due_label(task.due_date, today),
            deal_name=deal.name if deal is not None else None,
        ))

    notifications.sort(key=lambda n: n.task.due_date)
    logger.info("task_notifications_built", extra={
        "as_of": today,
        "notification_count": len(notifications),
        "overdue_count": sum(1 for n in notifications if n.is_overdue),
    })
    return tuple(notifications)
