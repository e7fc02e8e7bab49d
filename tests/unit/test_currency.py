"""
Unit tests for the currency registry.

Verifies:
- The purchase and sale currencies are registered with ISO 4217 precision
- Code normalization
- Unknown codes are rejected
"""

from decimal import Decimal

import pytest

from resale_kernel.domain.currency import CurrencyRegistry
from resale_kernel.domain.values import Currency
from resale_kernel.exceptions import InvalidCurrencyError


class TestCurrencyRegistry:

    def test_trade_corridor_registered(self):
        assert CurrencyRegistry.is_valid("USD")
        assert CurrencyRegistry.is_valid("PYG")

    def test_decimal_places(self):
        assert CurrencyRegistry.get_decimal_places("USD") == 2
        assert CurrencyRegistry.get_decimal_places("PYG") == 0
        assert CurrencyRegistry.get_decimal_places("CLP") == 0

    def test_unknown_code_gets_default_places(self):
        assert CurrencyRegistry.get_decimal_places("XXX") == CurrencyRegistry.DEFAULT_DECIMAL_PLACES

    def test_symbols(self):
        assert CurrencyRegistry.get_symbol("PYG") == "G$"
        assert CurrencyRegistry.get_symbol("USD") == "US$"
        assert CurrencyRegistry.get_symbol("XXX") == "XXX"

    def test_quantum(self):
        assert CurrencyRegistry.get_info("PYG").quantum == Decimal("1")
        assert CurrencyRegistry.get_info("USD").quantum == Decimal("0.01")

    def test_normalizes_case_and_whitespace(self):
        assert CurrencyRegistry.validate(" usd ") == "USD"

    @pytest.mark.parametrize("code", ["", None, "XYZ", "US", 840])
    def test_invalid_codes_rejected(self, code):
        assert not CurrencyRegistry.is_valid(code)
        with pytest.raises(InvalidCurrencyError):
            CurrencyRegistry.validate(code)

    def test_all_codes(self):
        codes = CurrencyRegistry.all_codes()
        assert {"USD", "PYG"} <= codes
        assert isinstance(codes, frozenset)


class TestCurrency:

    def test_construction_normalizes(self):
        assert Currency("pyg").code == "PYG"
        assert str(Currency("usd")) == "USD"

    def test_equality_and_hash(self):
        assert Currency("USD") == Currency("usd")
        assert len({Currency("USD"), Currency("USD"), Currency("PYG")}) == 2

    def test_precision_from_registry(self):
        assert Currency("PYG").decimal_places == 0
        assert Currency("USD").decimal_places == 2

    def test_unknown_rejected(self):
        with pytest.raises(InvalidCurrencyError) as exc_info:
            Currency("ABC")
        assert exc_info.value.code == "INVALID_CURRENCY"
