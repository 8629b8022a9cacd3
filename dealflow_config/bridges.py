"""
Bridges -- translate a parsed configuration set into engine parameters.

The engines never import dealflow_config; they define their own
parameter types (``ProformaAssumptions``, ``SigmaTable``).  This module
is the one place that builds those types from configuration.
"""

from __future__ import annotations

from dataclasses import dataclass

from dealflow_config.schema import EngineConfigurationSet
from dealflow_engines.profit import ProformaAssumptions
from dealflow_engines.sigma import SigmaPoint, SigmaTable


@dataclass(frozen=True)
class EngineConfig:
    """Runtime configuration handed to engine callers."""

    config_id: str
    version: int
    checksum: str
    proforma_assumptions: ProformaAssumptions
    sigma_table: SigmaTable
    notification_window_days: int
    upcoming_task_limit: int


def build_engine_config(config_set: EngineConfigurationSet) -> EngineConfig:
    """
    Raises:
        SigmaTableError: if the configured table is not ordered.
    """
    return EngineConfig(
        config_id=config_set.config_id,
        version=config_set.version,
        checksum=config_set.checksum,
        proforma_assumptions=ProformaAssumptions(
            contingency_percentage=config_set.proforma.contingency_percentage,
            sales_commission_percentage=config_set.proforma.sales_commission_percentage,
        ),
        sigma_table=SigmaTable(tuple(
            SigmaPoint(dpmo=row.dpmo, sigma=row.sigma)
            for row in config_set.sigma_table
        )),
        notification_window_days=config_set.tasks.notification_window_days,
        upcoming_task_limit=config_set.tasks.upcoming_limit,
    )
