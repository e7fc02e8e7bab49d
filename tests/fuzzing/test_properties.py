"""
Property-based tests for the costing engines.

Properties checked:
- Order extra shares always sum exactly to the order residual; single-line
  shares sum to it within one rounding step per line
- total_units is quantity times units per package for any counts
- Shipment share never decreases as weight grows at a fixed factor
- Distribution factor is zero iff the shipment carries no weight
- Weighted-average cost times units recovers total landed cost within rounding
- Display keys always match PREFIX-YYYYMMDD-RRRR
"""

import random
import re
from dataclasses import replace
from datetime import date
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from resale_engines import (
    InventoryValuationAggregator,
    LogisticsDistributionCalculator,
    PurchaseLandedCostCalculator,
    generate_display_key,
)
from resale_kernel.domain.records import LogisticsShipment, PurchaseLine, SaleLine

amounts = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("5000"), places=2,
    allow_nan=False, allow_infinity=False,
)
weights = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("500"), places=3,
    allow_nan=False, allow_infinity=False,
)
quantities = st.integers(min_value=0, max_value=200)


def _line(quantity, unit_cost, weight, sku="P1", tracking="PY-1"):
    return PurchaseLine(
        order_number="A-1",
        sku=sku,
        purchase_date=date(2024, 1, 1),
        supplier="Acme",
        quantity_acquired=quantity,
        units_per_package=1,
        unit_cost=unit_cost,
        exchange_rate=Decimal("7300"),
        weight_kg=weight,
        tracking_py=tracking,
    )


@settings(max_examples=100, deadline=None)
@given(
    costs=st.lists(st.tuples(quantities, amounts), min_size=1, max_size=12),
    invoice=amounts,
)
def test_extra_shares_conserve_order_residual(costs, invoice):
    lines = [_line(q, c, Decimal("1")) for q, c in costs]
    result = PurchaseLandedCostCalculator(rng=random.Random(0)).calculate_order(
        order_number="A-1", lines=lines, invoiced_total=invoice,
    )
    assert len(result.lines) == len(lines)
    assert result.total_extra_allocated == result.extra.extra_total
    assert abs(result.rounding_adjustment.amount) < Decimal("0.01") * len(lines)


@settings(max_examples=100, deadline=None)
@given(line_weights=st.lists(weights, max_size=8), cost=amounts)
def test_factor_zero_iff_no_weight(line_weights, cost):
    lines = [_line(1, Decimal("1"), w) for w in line_weights]
    shipment = LogisticsShipment("PY-1", date(2024, 1, 1), cost)
    result = LogisticsDistributionCalculator(rng=random.Random(0)).calculate(
        shipment=shipment, purchase_lines=lines,
    )
    assert result.distribution_factor >= 0
    if sum(line_weights, Decimal("0")) == 0:
        assert result.distribution_factor == 0
    else:
        spread = result.distribution_factor * result.aggregate_weight
        assert abs(spread - cost) <= result.aggregate_weight * Decimal("0.005") + Decimal("0.01")


@settings(max_examples=100, deadline=None)
@given(
    lots=st.lists(st.tuples(quantities, amounts), max_size=8),
    sold=st.lists(st.integers(min_value=0, max_value=100), max_size=5),
)
def test_average_cost_recovers_total(lots, sold):
    lines = [
        PurchaseLine(
            order_number="A-1", sku="P1", purchase_date=date(2024, 1, 1), supplier="Acme",
            quantity_acquired=q, units_per_package=1, unit_cost=Decimal("0"),
            exchange_rate=Decimal("1"), weight_kg=Decimal("0"),
            total_units=q, lot_cost_local=cost, shipment_cost_share=Decimal("0"),
        )
        for q, cost in lots
    ]
    sales = [SaleLine("P1", n, date(2024, 2, 1), "Customer") for n in sold]
    result = InventoryValuationAggregator().valuate(
        sku="P1", purchase_lines=lines, sale_lines=sales,
    )
    assert result.stock == sum(q for q, _ in lots) - sum(sold)
    if result.acquired_units:
        recovered = result.average_unit_cost * result.acquired_units
        exact = sum((cost for _, cost in lots), Decimal("0"))
        assert abs(recovered - exact) <= Decimal("0.005") * result.acquired_units
    else:
        assert result.average_unit_cost == 0


@settings(max_examples=100, deadline=None)
@given(
    costs=st.lists(st.tuples(quantities, amounts), min_size=1, max_size=12),
    invoice=amounts,
)
def test_single_line_shares_approximate_order_residual(costs, invoice):
    lines = [_line(q, c, Decimal("1")) for q, c in costs]
    calculator = PurchaseLandedCostCalculator(rng=random.Random(0))
    shares = [
        calculator.calculate(line=line, siblings=lines, invoiced_total=invoice).extra_cost_share
        for line in lines
    ]
    residual = calculator.order_extra_cost("A-1", lines, invoice).extra_total
    total = sum((share.amount for share in shares), Decimal("0"))
    assert abs(total - residual.amount) <= Decimal("0.005") * len(lines)


@settings(max_examples=100, deadline=None)
@given(quantity=st.integers(min_value=0, max_value=10_000), per_package=st.integers(min_value=0, max_value=500))
def test_total_units_is_quantity_times_package(quantity, per_package):
    line = replace(_line(quantity, Decimal("1.00"), Decimal("1")), units_per_package=per_package)
    result = PurchaseLandedCostCalculator(rng=random.Random(0)).calculate(line=line, siblings=[line])
    assert result.total_units == quantity * per_package


@settings(max_examples=100, deadline=None)
@given(
    pair=st.tuples(weights, weights).map(sorted),
    factor=st.decimals(
        min_value=Decimal("0"), max_value=Decimal("100000"), places=2,
        allow_nan=False, allow_infinity=False,
    ),
)
def test_shipment_share_monotone_in_weight(pair, factor):
    lighter, heavier = pair
    calculator = PurchaseLandedCostCalculator()
    light = calculator.shipment_cost_share(_line(1, Decimal("1"), lighter), factor)
    heavy = calculator.shipment_cost_share(_line(1, Decimal("1"), heavier), factor)
    assert light <= heavy


@given(
    prefix=st.sampled_from(["C", "R", "V", "CP"]),
    seed=st.integers(min_value=0, max_value=2**32),
)
def test_display_key_format(prefix, seed):
    key = generate_display_key(prefix, rng=random.Random(seed))
    assert re.fullmatch(rf"{prefix}-\d{{8}}-[1-9]\d{{3}}", key)
