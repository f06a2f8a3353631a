"""Display tiers for amounts, prices and USD values."""

from decimal import Decimal

import pytest

from tokenswap.services.formatting import (
    EMPTY_USD,
    format_amount,
    format_price,
    format_rate_line,
    format_usd,
)

from .factories import ETH_USDC_RATE, USDC_ETH_RATE


@pytest.mark.parametrize(
    "value, expected",
    [
        (ETH_USDC_RATE, "1662.837734"),
        (USDC_ETH_RATE, "0.00060138159"),
        (Decimal("0.05"), "0.05"),
        (Decimal("0.123456789"), "0.12345679"),
        (Decimal("2.5"), "2.5"),
        (Decimal("0"), "0"),
        (Decimal("-1.5"), "-1.5"),
        ("0.999999999951813260588238868116652116", "1"),
        (Decimal("12345678901234567890"), "12345678901234567890"),
    ],
)
def test_format_amount(value, expected, decimal_engine):
    assert format_amount(value, decimal_engine) == expected


@pytest.mark.parametrize("value", [None, "", "abc", "NaN"])
def test_format_amount_empty(value, decimal_engine):
    assert format_amount(value, decimal_engine) == ""


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("1645.93"), "1645.93"),
        (Decimal("0.989832"), "0.9898"),
        (Decimal("0.000123456789"), "0.00012346"),
        (Decimal("4114.825"), "4114.83"),
        (None, "0"),
        ("", "0"),
    ],
)
def test_format_price(value, expected, decimal_engine):
    assert format_price(value, decimal_engine) == expected


def test_format_usd(decimal_engine):
    assert format_usd(Decimal("4114.825"), decimal_engine) == "$4114.83"
    assert format_usd(Decimal("0"), decimal_engine) == "$0"
    assert format_usd(None) == EMPTY_USD == "$0.00"


def test_format_rate_line(decimal_engine):
    line = format_rate_line("ETH", "USDC", ETH_USDC_RATE, decimal_engine)
    assert line == "1 ETH = 1662.837734 USDC"
