"""Display formatting helpers.

Centralized so the engine, session views and API responses use identical
display tiers. Formatting is for rendering only; stored values keep full
precision.

Tiers (by absolute value):
    amounts: >= 1 -> 6 places, >= 0.01 -> 8 places, otherwise 12 places
    prices:  >= 1 -> 2 places, >= 0.01 -> 4 places, otherwise 8 places
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence, Tuple

from tokenswap.core.errors import InvalidNumber
from tokenswap.services.decimal_engine import DecimalEngine, get_decimal_engine

AMOUNT_TIERS: Sequence[Tuple[Decimal, int]] = ((Decimal("1"), 6), (Decimal("0.01"), 8))
AMOUNT_FLOOR_PLACES = 12
PRICE_TIERS: Sequence[Tuple[Decimal, int]] = ((Decimal("1"), 2), (Decimal("0.01"), 4))
PRICE_FLOOR_PLACES = 8

EMPTY_USD = "$0.00"


def _strip_zeros(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _places(value: Decimal, tiers: Sequence[Tuple[Decimal, int]], floor: int) -> int:
    magnitude = abs(value)
    for threshold, places in tiers:
        if magnitude >= threshold:
            return places
    return floor


def _render(
    number: Decimal,
    tiers: Sequence[Tuple[Decimal, int]],
    floor: int,
    engine: DecimalEngine,
) -> str:
    big = engine.as_big_integer(number)
    if big is not None:
        return str(big)
    return _strip_zeros(engine.to_fixed(number, _places(number, tiers, floor)))


def format_amount(value: object, engine: Optional[DecimalEngine] = None) -> str:
    engine = engine or get_decimal_engine()
    if value is None or value == "":
        return ""
    try:
        number = engine.parse(value)
    except InvalidNumber:
        return ""
    return _render(number, AMOUNT_TIERS, AMOUNT_FLOOR_PLACES, engine)


def format_price(value: object, engine: Optional[DecimalEngine] = None) -> str:
    """USD price display; empty or non-finite input renders as "0"."""
    engine = engine or get_decimal_engine()
    return _render(engine.coerce(value), PRICE_TIERS, PRICE_FLOOR_PLACES, engine)


def format_usd(value: Optional[Decimal], engine: Optional[DecimalEngine] = None) -> str:
    if value is None:
        return EMPTY_USD
    return f"${format_price(value, engine)}"


def format_rate_line(
    from_symbol: str, to_symbol: str, rate: Decimal, engine: Optional[DecimalEngine] = None
) -> str:
    return f"1 {from_symbol} = {format_amount(rate, engine)} {to_symbol}"
