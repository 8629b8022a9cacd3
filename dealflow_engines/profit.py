"""
dealflow_engines.profit -- Proforma profit analysis and average profit by deal type.

Responsibility:
    Derive the full financial picture of a proforma (costs, revenue,
    profit, ROI, margin, RONA, unlevered IRR) and aggregate average
    profit per deal type across a portfolio.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Default percentages come from ``ProformaAssumptions``; callers that
    want configured values pass the assumptions built by dealflow_config.

Invariants enforced:
    - Decimal-only arithmetic.
    - Missing or non-numeric proforma amounts contribute 0; missing or
      non-numeric percentages fall back to the assumptions.
    - At most one proforma per deal: the first with a matching deal_id.
    - ``profit_by_deal_type`` output is sorted by average profit,
      descending (stable for ties).

Failure modes:
    - None for record content.  Degenerate input (no deal with a
      proforma) returns an empty tuple; the caller renders "no data".
    - ``unlevered_irr`` is None when its inputs are incomplete, when
      Newton's method does not converge, or on decimal overflow.

Usage:
    from dealflow_engines.profit import ProfitCalculator

    calculator = ProfitCalculator()
    ranking = calculator.profit_by_deal_type(deals=deals, proformas=proformas)
    if ranking:
        top = ranking[0]  # DealTypeProfit("residential", Decimal("235000"), 1)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal
from typing import Any

from dealflow_kernel.domain.records import Deal, Proforma, coerce_records
from dealflow_kernel.domain.values import ZERO
from dealflow_kernel.logging_config import LogContext, get_logger
from dealflow_engines.tracer import traced_engine

logger = get_logger("engines.profit")

HUNDRED = Decimal("100")
UNKNOWN_DEAL_TYPE = "unknown"

_IRR_INITIAL_RATE = Decimal("0.1")
_IRR_MAX_ITERATIONS = 100
_IRR_TOLERANCE = Decimal("0.0001")


@dataclass(frozen=True)
class ProformaAssumptions:
    """Default percentages applied when a proforma leaves them unset."""

    contingency_percentage: Decimal = Decimal("5")
    sales_commission_percentage: Decimal = Decimal("3")


DEFAULT_ASSUMPTIONS = ProformaAssumptions()


@dataclass(frozen=True)
class ProformaAnalysis:
    """Derived financials of one proforma.  All percentages are 0-100."""

    deal_id: str | None
    total_direct_costs: Decimal
    contingency: Decimal
    total_costs: Decimal
    gross_revenue: Decimal
    sales_commission: Decimal
    net_revenue: Decimal
    profit: Decimal
    roi: Decimal
    profit_margin: Decimal
    net_assets: Decimal
    rona: Decimal
    development_cost_per_unit: Decimal
    unlevered_irr: Decimal | None = None


@dataclass(frozen=True)
class DealTypeProfit:
    """Average profit of the deals of one type that have a proforma."""

    deal_type: str
    avg_profit: Decimal
    count: int


def index_proformas_by_deal(proformas: Iterable[Any]) -> dict[str, Proforma]:
    """Map deal_id to its proforma; the first proforma for a deal wins."""
    index: dict[str, Proforma] = {}
    for proforma in coerce_records(proformas, Proforma):
        if proforma.deal_id is not None and proforma.deal_id not in index:
            index[proforma.deal_id] = proforma
    return index


def _ratio_percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator > 0:
        return numerator / denominator * HUNDRED
    return ZERO


class ProformaCalculator:
    """
    Pure calculator for a single proforma.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - total_direct_costs = direct_cost_per_unit * units
        - contingency = (purchase + development + soft + total_direct) * contingency%
        - total_costs = purchase + development + soft + financing
                        + total_direct + contingency
        - gross_revenue = sales_price_per_unit * units
        - profit = gross_revenue - sales_commission - total_costs
    """

    def __init__(self, assumptions: ProformaAssumptions = DEFAULT_ASSUMPTIONS):
        self.assumptions = assumptions

    def profit(self, proforma: Proforma) -> Decimal:
        return self._analyze(proforma, include_irr=False).profit

    @traced_engine("proforma", "1.0", fingerprint_fields=("proforma",))
    def analyze(self, proforma: Proforma | Mapping[str, Any]) -> ProformaAnalysis:
        """Full financial analysis of *proforma*, including unlevered IRR."""
        record = coerce_records((proforma,), Proforma)[0]
        with LogContext.bind(deal_id=record.deal_id):
            analysis = self._analyze(record, include_irr=True)
            logger.info("proforma_analyzed", extra={
                "profit": str(analysis.profit),
                "roi": str(analysis.roi),
                "has_irr": analysis.unlevered_irr is not None,
            })
        return analysis

    def _analyze(self, proforma: Proforma, include_irr: bool) -> ProformaAnalysis:
        units = proforma.number_of_units
        contingency_pct = proforma.contingency_percentage
        if contingency_pct is None:
            contingency_pct = self.assumptions.contingency_percentage
        commission_pct = proforma.sales_commission_percentage
        if commission_pct is None:
            commission_pct = self.assumptions.sales_commission_percentage

        total_direct_costs = proforma.direct_cost_per_unit * units
        base_costs = (
            proforma.purchase_price
            + proforma.development_costs
            + proforma.soft_costs
            + total_direct_costs
        )
        contingency = base_costs * (contingency_pct / HUNDRED)
        total_costs = base_costs + proforma.financing_costs + contingency

        gross_revenue = proforma.sales_price_per_unit * units
        sales_commission = gross_revenue * (commission_pct / HUNDRED)
        net_revenue = gross_revenue - sales_commission
        profit = net_revenue - total_costs

        # Net assets exclude financing costs
        net_assets = base_costs + contingency
        dev_cost_per_unit = proforma.development_costs / units if units > 0 else ZERO

        irr = None
        if include_irr:
            irr = self._unlevered_irr(proforma, net_assets, commission_pct)

        return ProformaAnalysis(
            deal_id=proforma.deal_id,
            total_direct_costs=total_direct_costs,
            contingency=contingency,
            total_costs=total_costs,
            gross_revenue=gross_revenue,
            sales_commission=sales_commission,
            net_revenue=net_revenue,
            profit=profit,
            roi=_ratio_percent(profit, total_costs),
            profit_margin=_ratio_percent(profit, gross_revenue),
            net_assets=net_assets,
            rona=_ratio_percent(profit, net_assets),
            development_cost_per_unit=dev_cost_per_unit,
            unlevered_irr=irr,
        )

    def _unlevered_irr(
        self,
        proforma: Proforma,
        net_assets: Decimal,
        commission_pct: Decimal,
    ) -> Decimal | None:
        """Annualized IRR of a monthly sell-out, or None.

        Cash flows: -net_assets at month 0, then one month of
        (price * pace) net of commission for every month needed to sell
        all units.
        """
        units = proforma.number_of_units
        pace = proforma.absorption_pace
        if proforma.development_start_date is None or pace <= 0 or units <= 0:
            return None

        months = int((units / pace).to_integral_value(rounding=ROUND_CEILING))
        monthly_gross = proforma.sales_price_per_unit * pace
        monthly_revenue = monthly_gross - monthly_gross * (commission_pct / HUNDRED)
        cash_flows = [-net_assets] + [monthly_revenue] * months

        rate = _IRR_INITIAL_RATE
        try:
            for _ in range(_IRR_MAX_ITERATIONS):
                if rate <= -1:
                    return None
                base = 1 + rate
                npv = sum(
                    (flow / base ** t for t, flow in enumerate(cash_flows)),
                    ZERO,
                )
                derivative = sum(
                    (-t * flow / base ** (t + 1) for t, flow in enumerate(cash_flows)),
                    ZERO,
                )
                if derivative == 0:
                    return None
                new_rate = rate - npv / derivative
                if abs(new_rate - rate) < _IRR_TOLERANCE:
                    return ((1 + new_rate) ** 12 - 1) * HUNDRED
                rate = new_rate
        except ArithmeticError:
            logger.warning("irr_arithmetic_error", extra={
                "deal_id": proforma.deal_id,
                "rate": str(rate),
            })
            return None

        logger.debug("irr_not_converged", extra={"deal_id": proforma.deal_id})
        return None


class ProfitCalculator:
    """
    Pure calculator for portfolio profit aggregation.

    Contract:
        No I/O, fully deterministic, inputs never mutated.
    Guarantees:
        - Deals without a proforma are skipped.
        - Deal type falls back to "unknown".
        - Output sorted by avg_profit descending.
    Non-goals:
        - Does not weight averages by deal size.
    """

    @traced_engine(
        "profit_by_type", "1.0",
        fingerprint_fields=("deals", "proformas", "assumptions"),
    )
    def profit_by_deal_type(
        self,
        deals: Iterable[Deal | Mapping[str, Any]],
        proformas: Iterable[Proforma | Mapping[str, Any]] | None = None,
        proformas_by_deal: Mapping[str, Proforma] | None = None,
        assumptions: ProformaAssumptions = DEFAULT_ASSUMPTIONS,
    ) -> tuple[DealTypeProfit, ...]:
        """Average profit and deal count per deal type.

        Pass either a ``proformas`` sequence or a pre-built
        ``proformas_by_deal`` index (see ``index_proformas_by_deal``).
        """
        if proformas_by_deal is None:
            proformas_by_deal = index_proformas_by_deal(proformas or ())

        calculator = ProformaCalculator(assumptions)
        totals: dict[str, Decimal] = {}
        counts: dict[str, int] = {}

        for deal in coerce_records(deals, Deal):
            raw = proformas_by_deal.get(deal.id) if deal.id is not None else None
            if raw is None:
                continue
            proforma = coerce_records((raw,), Proforma)[0]
            deal_type = deal.deal_type or UNKNOWN_DEAL_TYPE
            totals[deal_type] = totals.get(deal_type, ZERO) + calculator.profit(proforma)
            counts[deal_type] = counts.get(deal_type, 0) + 1

        result = tuple(sorted(
            (
                DealTypeProfit(
                    deal_type=deal_type,
                    avg_profit=totals[deal_type] / counts[deal_type],
                    count=counts[deal_type],
                )
                for deal_type in totals
            ),
            key=lambda item: item.avg_profit,
            reverse=True,
        ))

        logger.info("profit_by_type_completed", extra={
            "deal_type_count": len(result),
            "deals_with_proforma": sum(counts.values()),
        })
        return result
