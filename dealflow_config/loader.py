"""
Configuration Loader (``dealflow_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses them into typed
``dealflow_config.schema`` dataclass instances.  This is internal tooling
-- the single public entry point for runtime config is
``dealflow_config.get_active_config()``.

Invariants enforced
-------------------
* No silent defaults for required sections: ``proforma`` and
  ``sigma_table`` must be present.  The ``tasks`` section is optional.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Non-numeric or negative values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from dealflow_config.schema import (
    EngineConfigurationSet,
    ProformaDefaultsDef,
    SigmaRowDef,
    TaskSettingsDef,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Top level of {path.name} must be a mapping")
    return data


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a non-negative decimal; YAML floats go through their repr."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field} must be a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field} must be a number, got {value!r}") from None
    if not result.is_finite() or result < 0:
        raise ValueError(f"{field} must be a non-negative number, got {value!r}")
    return result


def parse_positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{field} must be a positive integer, got {value!r}")
    return value


def parse_proforma(data: dict[str, Any]) -> ProformaDefaultsDef:
    return ProformaDefaultsDef(
        contingency_percentage=parse_decimal(
            data["contingency_percentage"], "proforma.contingency_percentage"
        ),
        sales_commission_percentage=parse_decimal(
            data["sales_commission_percentage"], "proforma.sales_commission_percentage"
        ),
    )


def parse_sigma_table(rows: list[dict[str, Any]]) -> tuple[SigmaRowDef, ...]:
    if not isinstance(rows, list):
        raise ValueError("sigma_table must be a list of {dpmo, sigma} rows")
    return tuple(
        SigmaRowDef(
            dpmo=parse_decimal(row["dpmo"], f"sigma_table[{i}].dpmo"),
            sigma=parse_decimal(row["sigma"], f"sigma_table[{i}].sigma"),
        )
        for i, row in enumerate(rows)
    )


def parse_task_settings(data: dict[str, Any] | None) -> TaskSettingsDef:
    if not data:
        return TaskSettingsDef()
    defaults = TaskSettingsDef()
    return TaskSettingsDef(
        notification_window_days=parse_positive_int(
            data.get("notification_window_days", defaults.notification_window_days),
            "tasks.notification_window_days",
        ),
        upcoming_limit=parse_positive_int(
            data.get("upcoming_limit", defaults.upcoming_limit),
            "tasks.upcoming_limit",
        ),
    )


def parse_configuration_set(data: dict[str, Any]) -> EngineConfigurationSet:
    """
    Parse an ``EngineConfigurationSet`` from a loaded YAML dict.

    Raises:
        KeyError: if required keys are missing.
        ValueError: if a value has the wrong type or range.
    """
    return EngineConfigurationSet(
        config_id=str(data["config_id"]),
        version=parse_positive_int(data.get("version", 1), "version"),
        proforma=parse_proforma(data["proforma"]),
        sigma_table=parse_sigma_table(data["sigma_table"]),
        tasks=parse_task_settings(data.get("tasks")),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
