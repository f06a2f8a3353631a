import pytest

from tokenswap.models.token import Catalog, Token
from tokenswap.services.conversion import ConversionEngine
from tokenswap.services.decimal_engine import DecimalEngine

from .factories import make_token


@pytest.fixture
def decimal_engine() -> DecimalEngine:
    return DecimalEngine()


@pytest.fixture
def eth() -> Token:
    return make_token("ETH", "1645.93")


@pytest.fixture
def usdc() -> Token:
    return make_token("USDC", "0.989832")


@pytest.fixture
def catalog(eth, usdc) -> Catalog:
    return Catalog(
        [
            make_token("ATOM", "7.186657"),
            make_token("BLUR", "0.208115"),
            eth,
            make_token("USD", "1"),
            usdc,
        ],
        source="test",
    )


@pytest.fixture
def conversion(decimal_engine) -> ConversionEngine:
    return ConversionEngine(decimal_engine)


@pytest.fixture
def eth_to_usdc(conversion, eth, usdc) -> ConversionEngine:
    conversion.select_token("from", eth)
    conversion.select_token("to", usdc)
    conversion.set_amount("1")
    return conversion
