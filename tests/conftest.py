"""
Pytest fixtures for the dealflow test suite.

Provides:
- Structured logging configuration and log capture
- A deterministic clock
- Sample deal and proforma mappings
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from dealflow_kernel.domain.clock import DeterministicClock
from dealflow_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture dealflow logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ProfitCalculator().profit_by_deal_type(deals=[], proformas=[])
            logs = captured_logs()
            assert any(r["message"] == "profit_by_type_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("dealflow")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 5, 15, 12, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# Sample records
# =============================================================================


@pytest.fixture
def residential_scenario() -> tuple[list[dict], list[dict]]:
    """Single residential deal whose proforma yields a 235,000 profit."""
    deals = [{"id": "d1", "name": "Oak Ridge", "deal_type": "residential"}]
    proformas = [{
        "deal_id": "d1",
        "number_of_units": 10,
        "sales_price_per_unit": 100000,
        "direct_cost_per_unit": 50000,
        "purchase_price": 200000,
        "development_costs": 0,
        "soft_costs": 0,
        "financing_costs": 0,
        "contingency_percentage": 5,
        "sales_commission_percentage": 3,
    }]
    return deals, proformas
