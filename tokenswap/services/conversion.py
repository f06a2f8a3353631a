from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Optional

from tokenswap.core.errors import InvalidNumber, ValidationFailed
from tokenswap.models.constants import SIDES
from tokenswap.models.conversion import ConversionState
from tokenswap.models.token import Token
from tokenswap.services.decimal_engine import DecimalEngine, get_decimal_engine
from tokenswap.services.formatting import (
    format_amount,
    format_rate_line,
    format_usd,
)
from tokenswap.services.sanitizer import is_valid_amount, sanitize

"""Conversion engine: the single mutation surface for a swap form.

Responsibilities:
    - Hold ConversionState (selected tokens, entered amount) for one session.
    - Derive exchange rate and output amount through one recompute() path, so
      derived fields never go stale relative to their inputs.
    - Keep the derived output at full precision; display tiers are applied only
      by the *_display accessors.
    - Record per-side validation errors instead of raising them.
"""

logger = logging.getLogger("tokenswap.conversion")

INVALID_AMOUNT_MESSAGE = "Please enter a valid number"


def _check_side(side: str) -> str:
    if side not in SIDES:
        raise ValueError(f"side must be one of {SIDES}, got {side!r}")
    return side


class ConversionEngine:
    def __init__(self, engine: Optional[DecimalEngine] = None):
        self._decimal = engine or get_decimal_engine()
        self.state = ConversionState()
        self._errors: Dict[str, ValidationFailed] = {}

    # Read accessors -------------------------------------------
    @property
    def decimal(self) -> DecimalEngine:
        return self._decimal

    @property
    def from_token(self) -> Optional[Token]:
        return self.state.from_token

    @property
    def to_token(self) -> Optional[Token]:
        return self.state.to_token

    @property
    def from_amount_text(self) -> str:
        return self.state.from_amount_text

    @property
    def to_amount_text(self) -> str:
        return self.state.to_amount_text

    @property
    def exchange_rate(self) -> Optional[Decimal]:
        return self.state.exchange_rate

    def error(self, side: str) -> Optional[ValidationFailed]:
        return self._errors.get(_check_side(side))

    @property
    def errors(self) -> Dict[str, str]:
        return {side: err.message for side, err in self._errors.items()}

    # Commands -------------------------------------------------
    def select_token(self, side: str, token: Optional[Token]) -> None:
        if _check_side(side) == "from":
            self.state.from_token = token
        else:
            self.state.to_token = token
        self.recompute()

    def set_amount(self, raw_text: str) -> str:
        """Store sanitized input as the source amount; returns the cleaned text."""
        clean = sanitize(raw_text)
        self.state.from_amount_text = clean
        self._errors.pop("from", None)
        if clean and not is_valid_amount(clean, self._decimal):
            self._errors["from"] = ValidationFailed("from", INVALID_AMOUNT_MESSAGE)
        self.recompute()
        return clean

    def recompute(self) -> None:
        state = self.state
        amount = self._parsed_amount()
        if state.from_token is None or state.to_token is None or amount is None:
            self._clear_derived()
            return
        try:
            rate = self._decimal.divide(state.from_token.price, state.to_token.price)
            output = self._decimal.multiply(amount, rate)
        except InvalidNumber:
            logger.exception(
                "conversion failed %s -> %s", state.from_token.symbol, state.to_token.symbol
            )
            self._clear_derived()
            return
        state.exchange_rate = rate
        state.to_amount_text = self._decimal.to_string(output)

    def swap(self) -> None:
        """Flip the pair; the new input amount is the previously displayed output."""
        state = self.state
        if state.from_token is None or state.to_token is None:
            return
        displayed_output = self.to_amount_display
        state.from_token, state.to_token = state.to_token, state.from_token
        if state.from_amount_text and state.to_amount_text:
            self.set_amount(displayed_output.replace(",", ""))
        else:
            self.recompute()

    def reset_amounts(self) -> None:
        self.state.from_amount_text = ""
        self._errors.clear()
        self.recompute()

    # Queries --------------------------------------------------
    def usd_value(self, side: str) -> Decimal:
        state = self.state
        if _check_side(side) == "from":
            token, text = state.from_token, state.from_amount_text
        else:
            token, text = state.to_token, state.to_amount_text
        if token is None or not is_valid_amount(text, self._decimal):
            return Decimal(0)
        return self._decimal.multiply(text, token.usd_price)

    def can_confirm(self) -> bool:
        amount = self._parsed_amount()
        return (
            self.state.from_token is not None
            and self.state.to_token is not None
            and amount is not None
            and amount > 0
        )

    def status_message(self) -> str:
        if self.can_confirm():
            return "Confirm Swap"
        if self.state.from_token is None or self.state.to_token is None:
            return "Select tokens to continue"
        if self._parsed_amount() is None:
            return "Enter amount"
        return "Enter amount greater than 0"

    # Display accessors ----------------------------------------
    @property
    def to_amount_display(self) -> str:
        return format_amount(self.state.to_amount_text, self._decimal)

    @property
    def exchange_rate_display(self) -> Optional[str]:
        state = self.state
        if state.exchange_rate is None or state.from_token is None or state.to_token is None:
            return None
        return format_rate_line(
            state.from_token.symbol, state.to_token.symbol, state.exchange_rate, self._decimal
        )

    def usd_display(self, side: str) -> str:
        token = self.state.token(_check_side(side))
        text = self.state.from_amount_text if side == "from" else self.state.to_amount_text
        if token is None or not is_valid_amount(text, self._decimal):
            return format_usd(None)
        return format_usd(self.usd_value(side), self._decimal)

    # Internal --------------------------------------------------
    def _parsed_amount(self) -> Optional[Decimal]:
        text = self.state.from_amount_text
        if not is_valid_amount(text, self._decimal):
            return None
        return self._decimal.parse(text)

    def _clear_derived(self) -> None:
        self.state.to_amount_text = ""
        self.state.exchange_rate = None
