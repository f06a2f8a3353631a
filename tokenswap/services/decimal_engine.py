"""Arbitrary-precision decimal arithmetic for price and amount math.

All conversion math goes through a ``DecimalEngine`` so that prices, rates and
amounts never pass through binary floats. The engine is configured by an
immutable ``DecimalConfig``; ``get_decimal_engine()`` returns the process-wide
instance built from settings, while tests can build independent engines.

Rules:
    - Division is rounded to ``decimal_places`` fractional digits (ROUND_HALF_UP).
    - Multiplication is exact (working precision grows with the operands).
    - ``to_string`` renders without trailing zeros and switches to exponential
      notation outside ``exponential_at``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import (
    ROUND_DOWN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DecimalException,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)
from functools import lru_cache
from typing import Optional, Tuple, Union

from tokenswap.core.errors import InvalidNumber

Number = Union[Decimal, int, float, str]

# Largest integer a double can hold exactly (2**53 - 1).
MAX_SAFE_INTEGER = 9007199254740991


@dataclass(frozen=True)
class DecimalConfig:
    decimal_places: int = 30
    rounding: str = ROUND_HALF_UP
    exponential_at: Tuple[int, int] = (-18, 20)
    exponent_range: Tuple[int, int] = (-1_000_000_000, 1_000_000_000)
    # Significant digits of the working context; multiplication widens it as needed.
    precision: int = 100


class DecimalEngine:
    def __init__(self, config: Optional[DecimalConfig] = None):
        self.config = config or DecimalConfig()
        emin, emax = self.config.exponent_range
        self.context = Context(
            prec=self.config.precision,
            rounding=self.config.rounding,
            Emin=emin,
            Emax=emax,
            traps=[InvalidOperation, DivisionByZero, Overflow],
        )
        self._quantum = Decimal(1).scaleb(-self.config.decimal_places)

    # Parsing --------------------------------------------------
    def parse(self, value: object) -> Decimal:
        """Return ``value`` as a finite Decimal or raise InvalidNumber."""
        if isinstance(value, bool):
            raise InvalidNumber(f"not a number: {value!r}")
        if isinstance(value, Decimal):
            number = value
        elif isinstance(value, int):
            number = Decimal(value)
        elif isinstance(value, float):
            number = Decimal(repr(value))
        elif isinstance(value, str):
            text = value.strip()
            if not text or "_" in text:
                raise InvalidNumber(f"not a number: {value!r}")
            try:
                number = Decimal(text)
            except InvalidOperation as e:
                raise InvalidNumber(f"not a number: {value!r}") from e
        else:
            raise InvalidNumber(f"unsupported numeric type {type(value).__name__}")

        if not number.is_finite():
            raise InvalidNumber(f"not a finite number: {value!r}")
        if number.is_zero():
            return number
        emin, emax = self.config.exponent_range
        if number.adjusted() > emax:
            raise InvalidNumber(f"number out of range: {value!r}")
        if number.adjusted() < emin:
            return Decimal(0)
        return number

    def coerce(self, value: object) -> Decimal:
        """Parse for display purposes only: invalid input becomes zero."""
        try:
            return self.parse(value)
        except InvalidNumber:
            return Decimal(0)

    # Arithmetic -----------------------------------------------
    def divide(self, a: Number, b: Number) -> Decimal:
        numerator, denominator = self.parse(a), self.parse(b)
        if denominator.is_zero():
            raise InvalidNumber("division by zero")
        ctx = self._context_for(numerator.adjusted() - denominator.adjusted() + 2)
        # Truncate the wide quotient, then round once to the configured places.
        wide = ctx.copy()
        wide.rounding = ROUND_DOWN
        try:
            return wide.divide(numerator, denominator).quantize(self._quantum, context=ctx)
        except DecimalException as e:
            raise InvalidNumber(f"cannot divide {a!r} by {b!r}") from e

    def multiply(self, a: Number, b: Number) -> Decimal:
        left, right = self.parse(a), self.parse(b)
        digits = len(left.as_tuple().digits) + len(right.as_tuple().digits)
        ctx = self.context.copy()
        ctx.prec = max(ctx.prec, digits)
        try:
            return ctx.multiply(left, right)
        except DecimalException as e:
            raise InvalidNumber(f"cannot multiply {a!r} by {b!r}") from e

    # Predicates -----------------------------------------------
    @staticmethod
    def is_integer(value: Decimal) -> bool:
        return value.is_finite() and value == value.to_integral_value()

    def as_big_integer(self, value: Decimal) -> Optional[int]:
        """Return an ``int`` for exact integers beyond double precision, else None."""
        if self.is_integer(value) and abs(value) > MAX_SAFE_INTEGER:
            return int(value)
        return None

    # Rendering ------------------------------------------------
    def to_fixed(self, value: Decimal, places: int) -> str:
        """Fixed-point rendering with exactly ``places`` fractional digits."""
        ctx = self._context_for(places)
        if not value.is_zero():
            ctx = self._context_for(value.adjusted() + places + 2)
        quantized = value.quantize(Decimal(1).scaleb(-places), context=ctx)
        text = format(quantized, "f")
        if text.startswith("-") and quantized.is_zero():
            text = text[1:]
        return text

    def to_string(self, value: Decimal) -> str:
        """Canonical rendering of a full-precision value, trailing zeros removed."""
        if value.is_zero():
            return "0"
        ctx = self._context_for(len(value.as_tuple().digits))
        normalized = value.normalize(context=ctx)
        lower, upper = self.config.exponential_at
        exponent = normalized.adjusted()
        if exponent <= lower or exponent >= upper:
            return format(normalized, "e")
        return format(normalized, "f")

    def _context_for(self, digits: int) -> Context:
        ctx = self.context.copy()
        ctx.prec = max(ctx.prec, digits + self.config.decimal_places)
        return ctx


@lru_cache
def get_decimal_engine() -> DecimalEngine:
    from tokenswap.core.config import get_settings

    return DecimalEngine(get_settings().decimal_config())
