"""
Hypothesis-based property tests for the metric engines.

Properties checked:
- Sigma conversion stays within the table range and never increases
- Profit arithmetic with zero percentages is revenue minus costs
- Currency formatting never raises and always carries a dollar sign
- Timeline fractions stay within [0, 1]
- Repeated calculator calls return equal results
- Profit by deal type is ordered by non-increasing average
- Field coercion never raises on arbitrary text
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from dealflow_engines.formatting import format_currency
from dealflow_engines.process_health import ProcessHealthCalculator
from dealflow_engines.profit import ProformaCalculator, ProfitCalculator
from dealflow_engines.sigma import dpmo_to_sigma
from dealflow_engines.timeline import TimelineLayoutCalculator
from dealflow_kernel.domain.records import Proforma
from dealflow_kernel.domain.values import to_date, to_decimal

dpmo_values = st.decimals(
    min_value=Decimal("-1000"),
    max_value=Decimal("2000000"),
    allow_nan=False,
    allow_infinity=False,
    places=2,
)
amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("100000000"),
    allow_nan=False,
    allow_infinity=False,
    places=2,
)
days = st.dates(min_value=date(2020, 1, 1), max_value=date(2030, 12, 31))


class TestSigmaProperties:

    @given(dpmo=dpmo_values)
    def test_within_range(self, dpmo):
        sigma = dpmo_to_sigma(dpmo)
        assert Decimal("0") <= sigma <= Decimal("6.0")

    @given(a=dpmo_values, b=dpmo_values)
    def test_non_increasing(self, a, b):
        low, high = sorted((a, b))
        assert dpmo_to_sigma(low) >= dpmo_to_sigma(high)


class TestProfitProperties:

    @given(
        units=st.integers(min_value=0, max_value=10000),
        price=amounts,
        cost=amounts,
        purchase=amounts,
        soft=amounts,
    )
    def test_zero_percentages(self, units, price, cost, purchase, soft):
        proforma = Proforma(
            deal_id="d",
            number_of_units=Decimal(units),
            sales_price_per_unit=price,
            direct_cost_per_unit=cost,
            purchase_price=purchase,
            soft_costs=soft,
            contingency_percentage=Decimal("0"),
            sales_commission_percentage=Decimal("0"),
        )
        expected = price * units - (cost * units + purchase + soft)
        assert ProformaCalculator().profit(proforma) == expected

    @given(
        units=st.integers(min_value=1, max_value=1000),
        price=amounts,
        cost=amounts,
    )
    def test_defaults_never_increase_profit(self, units, price, cost):
        bare = Proforma(
            deal_id="d",
            number_of_units=Decimal(units),
            sales_price_per_unit=price,
            direct_cost_per_unit=cost,
            contingency_percentage=Decimal("0"),
            sales_commission_percentage=Decimal("0"),
        )
        defaulted = Proforma(
            deal_id="d",
            number_of_units=Decimal(units),
            sales_price_per_unit=price,
            direct_cost_per_unit=cost,
        )
        calculator = ProformaCalculator()
        assert calculator.profit(defaulted) <= calculator.profit(bare)


class TestFormattingProperties:

    @given(value=st.one_of(
        st.none(),
        st.sampled_from(["", "n/a", "12.5", " 3 ", "-7"]),
        st.integers(min_value=-10**12, max_value=10**12),
        st.floats(min_value=-1e15, max_value=1e15),
        st.sampled_from([float("nan"), float("inf"), float("-inf")]),
    ))
    def test_never_raises(self, value):
        text = format_currency(value)
        assert text.startswith("$") or text.startswith("-$")


class TestTimelineProperties:

    @settings(max_examples=50)
    @given(
        spans=st.lists(
            st.tuples(days, st.integers(min_value=0, max_value=400)),
            min_size=1,
            max_size=8,
        ),
        milestone_days=st.lists(days, max_size=5),
    )
    def test_fractions_within_unit_interval(self, spans, milestone_days):
        phases = [
            {"id": str(i), "order": i, "start_date": start,
             "end_date": start + timedelta(days=length)}
            for i, (start, length) in enumerate(spans)
        ]
        milestones = [{"id": f"m{i}", "due_date": d} for i, d in enumerate(milestone_days)]
        layout = TimelineLayoutCalculator().layout(phases=phases, milestones=milestones)

        assert layout is not None
        for bar in layout.phases:
            assert 0 <= bar.left <= 1
            assert 0 <= bar.left + bar.width <= 1
        for marker in layout.milestones:
            assert 0 <= marker.position <= 1


class TestIdempotence:

    @given(
        stages=st.lists(st.sampled_from(
            ["prospecting", "development", "closed", "dead", "bogus", None],
        ), max_size=10),
        as_of=days,
    )
    def test_process_health_repeatable(self, stages, as_of):
        deals = [{"id": str(i), "stage": s} for i, s in enumerate(stages)]
        tasks = [{"id": str(i), "status": "todo", "due_date": as_of} for i in range(3)]
        calculator = ProcessHealthCalculator()

        first = calculator.calculate(deals=deals, tasks=tasks, as_of=as_of)
        second = calculator.calculate(deals=deals, tasks=tasks, as_of=as_of)
        assert first == second

    @given(prices=st.lists(amounts, min_size=1, max_size=6))
    def test_profit_by_type_repeatable(self, prices):
        deals = [{"id": str(i), "deal_type": f"t{i % 2}"} for i in range(len(prices))]
        proformas = [
            {"deal_id": str(i), "number_of_units": 1, "sales_price_per_unit": p}
            for i, p in enumerate(prices)
        ]
        calculator = ProfitCalculator()

        first = calculator.profit_by_deal_type(deals=deals, proformas=proformas)
        second = calculator.profit_by_deal_type(deals=deals, proformas=proformas)
        assert first == second
        averages = [r.avg_profit for r in first]
        assert averages == sorted(averages, reverse=True)

    @given(entries=st.lists(
        st.tuples(st.sampled_from(["residential", "land", "commercial", None]), amounts),
        max_size=12,
    ))
    def test_profit_by_type_ordered_by_average(self, entries):
        deals = [{"id": str(i), "deal_type": t} for i, (t, _) in enumerate(entries)]
        proformas = [
            {"deal_id": str(i), "number_of_units": 1, "sales_price_per_unit": price,
             "contingency_percentage": 0, "sales_commission_percentage": 0}
            for i, (_, price) in enumerate(entries)
        ]
        result = ProfitCalculator().profit_by_deal_type(deals=deals, proformas=proformas)

        averages = [r.avg_profit for r in result]
        assert all(a >= b for a, b in zip(averages, averages[1:]))
        assert sum(r.count for r in result) == len(entries)
        assert len({r.deal_type for r in result}) == len(result)


class TestCoercionProperties:

    @given(text=st.text(max_size=40))
    def test_text_never_raises(self, text):
        assert isinstance(to_decimal(text), Decimal)
        result = to_date(text)
        assert result is None or isinstance(result, date)
