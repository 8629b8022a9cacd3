"""
Engine configuration set schema.

Defines the human-authored, reviewable source artifact for engine
configuration.  YAML files are parsed into these types by the loader and
bridged into engine parameter types by ``bridges``.

Key distinction:
  EngineConfigurationSet = source artifact (human-authored, versioned)
  EngineConfig           = runtime artifact (engine parameter types)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ProformaDefaultsDef:
    """Percentages applied when a proforma leaves them unset."""

    contingency_percentage: Decimal
    sales_commission_percentage: Decimal


@dataclass(frozen=True)
class SigmaRowDef:
    """One DPMO -> sigma conversion row."""

    dpmo: Decimal
    sigma: Decimal


@dataclass(frozen=True)
class TaskSettingsDef:
    notification_window_days: int = 7
    upcoming_limit: int = 5


@dataclass(frozen=True)
class EngineConfigurationSet:
    """Root configuration artifact: one YAML file under ``sets/``."""

    config_id: str
    version: int
    proforma: ProformaDefaultsDef
    sigma_table: tuple[SigmaRowDef, ...]
    tasks: TaskSettingsDef
    checksum: str = ""
