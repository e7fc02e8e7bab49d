"""Tests for catalog pricing of sale lines."""

from decimal import Decimal

import pytest

from resale_engines.sale_pricing import SalePricingCalculator, find_product
from resale_kernel.domain.values import Money
from resale_kernel.exceptions import InvalidRecordError


@pytest.fixture
def calculator(clock, rng):
    return SalePricingCalculator(clock=clock, rng=rng)


def test_priced_from_list_price(calculator, make_sale, make_product):
    result = calculator.price(
        sale=make_sale(quantity_sold=2),
        products=[make_product(list_price=Decimal("120000"))],
    )
    assert result.unit_price == Money.of("120000", "PYG")
    assert result.sale_total == Money.of("240000", "PYG")
    assert result.catalog_hit
    assert result.sale_key.display_key.startswith("V-20240315-")


def test_missing_sku_prices_at_zero(calculator, make_sale, make_product, captured_logs):
    result = calculator.price(
        sale=make_sale(sku="UNKNOWN", quantity_sold=3),
        products=[make_product()],
    )
    assert result.unit_price.is_zero
    assert result.sale_total.is_zero
    assert not result.catalog_hit
    assert any(r["message"] == "sale_sku_not_in_catalog" for r in captured_logs())


def test_apply_to(calculator, make_sale, make_product):
    sale = make_sale(quantity_sold=2, receipt_number="R-77")
    priced = calculator.price(sale=sale, products=[make_product()]).apply_to(sale)
    assert priced.sale_key is not None
    assert priced.record_id is not None
    assert priced.unit_price == Decimal("120000")
    assert priced.sale_total == Decimal("240000")
    assert priced.receipt_number == "R-77"


def test_existing_key_kept(calculator, make_sale, make_product):
    sale = make_sale()
    first = calculator.price(sale=sale, products=[make_product()]).apply_to(sale)
    again = calculator.price(sale=first, products=[make_product()])
    assert again.sale_key.record_id == first.record_id
    assert again.sale_key.display_key == first.sale_key


def test_negative_quantity_rejected(calculator, make_sale):
    with pytest.raises(InvalidRecordError):
        calculator.price(sale=make_sale(quantity_sold=-1), products=[])


def test_negative_list_price_rejected(calculator, make_sale, make_product):
    with pytest.raises(InvalidRecordError) as exc_info:
        calculator.price(sale=make_sale(), products=[make_product(list_price=Decimal("-1"))])
    assert exc_info.value.record_type == "Product"


def test_find_product(make_product):
    products = [make_product(sku="A"), make_product(sku="B")]
    assert find_product("B", products).sku == "B"
    assert find_product("Z", products) is None
