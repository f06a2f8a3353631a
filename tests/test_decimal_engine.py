"""DecimalEngine: parsing, division at configured places, exact products, rendering."""

from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from tokenswap.core.errors import InvalidNumber
from tokenswap.services.decimal_engine import (
    MAX_SAFE_INTEGER,
    DecimalConfig,
    DecimalEngine,
)

from .factories import ETH_USDC_RATE, USDC_ETH_RATE


class TestParse:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1645.93", Decimal("1645.93")),
            (" 42 ", Decimal("42")),
            (".5", Decimal("0.5")),
            (7, Decimal("7")),
            (0.1, Decimal("0.1")),
            (Decimal("3.14"), Decimal("3.14")),
            ("1e-20", Decimal("1E-20")),
        ],
    )
    def test_parses_exactly(self, decimal_engine, value, expected):
        assert decimal_engine.parse(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["", "   ", "abc", ".", "1.2.3", "1_000", "NaN", "Infinity", "-Infinity",
         float("nan"), float("inf"), True, None, [1]],
    )
    def test_rejects_invalid(self, decimal_engine, value):
        with pytest.raises(InvalidNumber):
            decimal_engine.parse(value)

    def test_invalid_number_is_a_value_error(self, decimal_engine):
        with pytest.raises(ValueError):
            decimal_engine.parse("not a number")

    def test_out_of_range_exponent_rejected(self, decimal_engine):
        with pytest.raises(InvalidNumber):
            decimal_engine.parse("1e1000000001")

    def test_coerce_substitutes_zero(self, decimal_engine):
        assert decimal_engine.coerce("garbage") == 0
        assert decimal_engine.coerce("2.5") == Decimal("2.5")


class TestArithmetic:
    def test_division_rounds_half_up_at_30_places(self, decimal_engine):
        assert decimal_engine.divide("1", "3") == Decimal("0.333333333333333333333333333333")
        assert decimal_engine.divide("2", "3") == Decimal("0.666666666666666666666666666667")

    def test_token_price_ratios(self, decimal_engine):
        assert decimal_engine.divide("1645.93", "0.989832") == ETH_USDC_RATE
        assert decimal_engine.divide("0.989832", "1645.93") == USDC_ETH_RATE

    def test_division_by_zero(self, decimal_engine):
        with pytest.raises(InvalidNumber):
            decimal_engine.divide("1", "0")

    def test_multiplication_is_exact(self, decimal_engine):
        product = decimal_engine.multiply(ETH_USDC_RATE, "0.989832")
        assert product == Decimal("1645.930000000000000000000000000000283952")

    def test_multiplication_beyond_working_precision(self, decimal_engine):
        a = "1." + "1" * 90
        b = "1." + "1" * 90
        product = decimal_engine.multiply(a, b)
        assert product == Decimal(f"{int('1' * 91) ** 2}E-180")

    def test_independent_configurations(self):
        wide = DecimalEngine(DecimalConfig(decimal_places=40))
        assert wide.divide("1", "3") == Decimal("0." + "3" * 40)
        assert DecimalEngine().divide("1", "3") == Decimal("0." + "3" * 30)

    def test_config_is_immutable(self):
        config = DecimalConfig()
        with pytest.raises(FrozenInstanceError):
            config.decimal_places = 10  # type: ignore[misc]


class TestRendering:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("1.500"), "1.5"),
            (Decimal("100"), "100"),
            (Decimal("1E+2"), "100"),
            (Decimal("0"), "0"),
            (Decimal("-0.0"), "0"),
            (Decimal("0.00000000000000001"), "0.00000000000000001"),
            (Decimal("1E-18"), "1e-18"),
            (Decimal("1.5E-19"), "1.5e-19"),
            (Decimal("12345678901234567890"), "12345678901234567890"),
            (Decimal("1E+20"), "1e+20"),
            (ETH_USDC_RATE, "1662.837734080126728576162419481286"),
        ],
    )
    def test_to_string(self, decimal_engine, value, expected):
        assert decimal_engine.to_string(value) == expected

    def test_to_string_round_trips_through_parse(self, decimal_engine):
        value = Decimal("1.5E-19")
        assert decimal_engine.parse(decimal_engine.to_string(value)) == value

    def test_to_fixed_pads_and_rounds(self, decimal_engine):
        assert decimal_engine.to_fixed(Decimal("1.5"), 6) == "1.500000"
        assert decimal_engine.to_fixed(Decimal("2.005"), 2) == "2.01"
        assert decimal_engine.to_fixed(Decimal("-0.0000001"), 2) == "0.00"

    def test_big_integer_detection(self, decimal_engine):
        assert decimal_engine.as_big_integer(Decimal(MAX_SAFE_INTEGER)) is None
        assert decimal_engine.as_big_integer(Decimal(MAX_SAFE_INTEGER + 1)) == MAX_SAFE_INTEGER + 1
        assert decimal_engine.as_big_integer(Decimal("1E+30")) == 10**30
        assert decimal_engine.as_big_integer(Decimal("9007199254740993.5")) is None
        assert decimal_engine.as_big_integer(Decimal(-(10**20))) == -(10**20)
