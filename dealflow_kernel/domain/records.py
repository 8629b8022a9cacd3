"""
Records -- Immutable value records supplied by the remote entity API.

Responsibility:
    Typed, frozen views of the deal-tracking entities the engines read:
    Deal, Proforma, Task, Entitlement, and the project timeline's Phase
    and Milestone.  Each record has a ``from_mapping`` constructor that
    tolerates absent and malformed fields.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Engines accept either these records or plain mappings; mappings are
    converted on entry through ``coerce_records``.

Invariants enforced:
    - ``Deal.stage`` is a ``DealStage`` member or ``None`` (unknown stage).
    - ``Task.status`` is always a ``TaskStatus`` member (unknown -> TODO).
    - Numeric fields are ``Decimal``; missing or non-numeric -> 0.
    - Proforma percentages stay ``None`` when absent or non-numeric so the
      calculator can apply its configured defaults.

Failure modes:
    - ``RecordTypeError`` from ``coerce_records`` when an item is neither
      the record type nor a mapping.  Field content never raises.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

from dealflow_kernel.domain.values import ZERO, to_date, to_decimal, to_text
from dealflow_kernel.exceptions import RecordTypeError


class DealStage(str, Enum):
    """Pipeline position of a deal, in acquisition-to-close order."""

    PROSPECTING = "prospecting"
    CONTROLLED_NOT_APPROVED = "controlled_not_approved"
    CONTROLLED_APPROVED = "controlled_approved"
    ENTITLEMENTS = "entitlements"
    DEVELOPMENT = "development"
    CLOSED = "closed"
    DEAD = "dead"

    @property
    def is_terminal(self) -> bool:
        return self in (DealStage.CLOSED, DealStage.DEAD)

    @classmethod
    def parse(cls, value: Any) -> DealStage | None:
        if isinstance(value, cls):
            return value
        try:
            return cls(to_text(value, ""))
        except ValueError:
            return None


class TaskStatus(str, Enum):
    """Kanban column of a task."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Any) -> TaskStatus:
        if isinstance(value, cls):
            return value
        try:
            return cls(to_text(value, ""))
        except ValueError:
            return cls.TODO


@dataclass(frozen=True, slots=True)
class Deal:
    """A land deal moving through the acquisition pipeline."""

    id: str | None
    name: str = ""
    deal_type: str | None = None
    stage: DealStage | None = DealStage.PROSPECTING
    estimated_value: Decimal = ZERO
    purchase_price: Decimal = ZERO
    contract_date: date | None = None
    close_date: date | None = None
    # Attributes read by the deal score
    assigned_to: str | None = None
    priority: str | None = None
    asking_price: Decimal = ZERO
    offer_price: Decimal = ZERO
    due_diligence_deadline: date | None = None
    address: str | None = None
    city: str | None = None
    acreage: Decimal = ZERO
    number_of_lots: Decimal = ZERO
    zoning_current: str | None = None

    @property
    def is_active(self) -> bool:
        """Neither closed nor dead.  Deals with an unknown stage are active."""
        return self.stage is None or not self.stage.is_terminal

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Deal:
        return cls(
            id=to_text(data.get("id")),
            name=to_text(data.get("name"), ""),
            deal_type=to_text(data.get("deal_type")),
            stage=DealStage.parse(data.get("stage")),
            estimated_value=to_decimal(data.get("estimated_value")),
            purchase_price=to_decimal(data.get("purchase_price")),
            contract_date=to_date(data.get("contract_date")),
            close_date=to_date(data.get("close_date")),
            assigned_to=to_text(data.get("assigned_to")),
            priority=to_text(data.get("priority")),
            asking_price=to_decimal(data.get("asking_price")),
            offer_price=to_decimal(data.get("offer_price")),
            due_diligence_deadline=to_date(data.get("due_diligence_deadline")),
            address=to_text(data.get("address")),
            city=to_text(data.get("city")),
            acreage=to_decimal(data.get("acreage")),
            number_of_lots=to_decimal(data.get("number_of_lots")),
            zoning_current=to_text(data.get("zoning_current")),
        )


@dataclass(frozen=True, slots=True)
class Proforma:
    """Financial projection attached to a deal."""

    deal_id: str | None
    number_of_units: Decimal = ZERO
    sales_price_per_unit: Decimal = ZERO
    direct_cost_per_unit: Decimal = ZERO
    purchase_price: Decimal = ZERO
    development_costs: Decimal = ZERO
    soft_costs: Decimal = ZERO
    financing_costs: Decimal = ZERO
    contingency_percentage: Decimal | None = None  # None = use default
    sales_commission_percentage: Decimal | None = None  # None = use default
    development_start_date: date | None = None
    absorption_pace: Decimal = ZERO  # units sold per month

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Proforma:
        return cls(
            deal_id=to_text(data.get("deal_id")),
            number_of_units=to_decimal(data.get("number_of_units")),
            sales_price_per_unit=to_decimal(data.get("sales_price_per_unit")),
            direct_cost_per_unit=to_decimal(data.get("direct_cost_per_unit")),
            purchase_price=to_decimal(data.get("purchase_price")),
            development_costs=to_decimal(data.get("development_costs")),
            soft_costs=to_decimal(data.get("soft_costs")),
            financing_costs=to_decimal(data.get("financing_costs")),
            contingency_percentage=to_decimal(
                data.get("contingency_percentage"), default=None
            ),
            sales_commission_percentage=to_decimal(
                data.get("sales_commission_percentage"), default=None
            ),
            development_start_date=to_date(data.get("development_start_date")),
            absorption_pace=to_decimal(data.get("absorption_pace")),
        )


@dataclass(frozen=True, slots=True)
class Task:
    """A unit of work, optionally attached to a deal."""

    id: str | None
    title: str = ""
    status: TaskStatus = TaskStatus.TODO
    due_date: date | None = None
    completed_date: date | None = None
    priority: str = "medium"
    deal_id: str | None = None
    assigned_to: str | None = None
    parent_task_id: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Task:
        return cls(
            id=to_text(data.get("id")),
            title=to_text(data.get("title"), ""),
            status=TaskStatus.parse(data.get("status")),
            due_date=to_date(data.get("due_date")),
            completed_date=to_date(data.get("completed_date")),
            priority=to_text(data.get("priority"), "medium"),
            deal_id=to_text(data.get("deal_id")),
            assigned_to=to_text(data.get("assigned_to")),
            parent_task_id=to_text(data.get("parent_task_id")),
        )


@dataclass(frozen=True, slots=True)
class Entitlement:
    """A zoning or permitting approval tracked against a deal."""

    id: str | None
    deal_id: str | None = None
    entitlement_type: str | None = None
    status: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Entitlement:
        return cls(
            id=to_text(data.get("id")),
            deal_id=to_text(data.get("deal_id")),
            entitlement_type=to_text(data.get("type") or data.get("entitlement_type")),
            status=to_text(data.get("status")),
        )


@dataclass(frozen=True, slots=True)
class Phase:
    """A development project phase shown as a Gantt bar."""

    id: str | None
    name: str = ""
    start_date: date | None = None
    end_date: date | None = None
    status: str | None = None
    order: Decimal = ZERO

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Phase:
        return cls(
            id=to_text(data.get("id")),
            name=to_text(data.get("name"), ""),
            start_date=to_date(data.get("start_date")),
            end_date=to_date(data.get("end_date")),
            status=to_text(data.get("status")),
            order=to_decimal(data.get("order")),
        )


@dataclass(frozen=True, slots=True)
class Milestone:
    """A dated checkpoint shown as a Gantt marker."""

    id: str | None
    name: str = ""
    due_date: date | None = None
    status: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Milestone:
        return cls(
            id=to_text(data.get("id")),
            name=to_text(data.get("name"), ""),
            due_date=to_date(data.get("due_date")),
            status=to_text(data.get("status")),
        )


R = TypeVar("R", Deal, Proforma, Task, Entitlement, Phase, Milestone)


def coerce_records(items: Iterable[Any] | None, record_type: type[R]) -> tuple[R, ...]:
    """Convert a collection of records or mappings into typed records.

    ``None`` is treated as an empty collection.  Input order is preserved.

    Raises:
        RecordTypeError: if an item is neither ``record_type`` nor a Mapping.
    """
    if items is None:
        return ()
    records: list[R] = []
    for item in items:
        if isinstance(item, record_type):
            records.append(item)
        elif isinstance(item, Mapping):
            records.append(record_type.from_mapping(item))
        else:
            raise RecordTypeError(record_type.__name__, type(item).__name__)
    return tuple(records)
