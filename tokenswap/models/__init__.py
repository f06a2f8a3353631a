"""Domain models for the token swap calculator."""

from .constants import (
    DEFAULT_SAMPLE_AMOUNT,
    FALLBACK_PRICES,
    FROM_PREFERENCES,
    SAMPLE_AMOUNTS,
    SIDES,
    TO_PREFERENCES,
)  # re-export
from .conversion import (
    ConversionState,
    SessionView,
    SwapOutcome,
    TokenOut,
    TransactionReceipt,
)
from .token import Catalog, PriceEntry, Token

__all__ = [
    "DEFAULT_SAMPLE_AMOUNT",
    "FALLBACK_PRICES",
    "FROM_PREFERENCES",
    "SAMPLE_AMOUNTS",
    "SIDES",
    "TO_PREFERENCES",
    "Catalog",
    "PriceEntry",
    "Token",
    "ConversionState",
    "SessionView",
    "SwapOutcome",
    "TokenOut",
    "TransactionReceipt",
]
