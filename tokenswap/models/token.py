from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterator, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PriceEntry(BaseModel):
    """One raw quote from the price feed: ``{currency, price, date}``."""

    currency: str = Field(..., min_length=1)
    price: Decimal
    date: Optional[datetime] = None

    @field_validator("currency")
    @classmethod
    def strip_currency(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("currency must not be blank")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def price_from_json(cls, v: object) -> object:
        if isinstance(v, bool):
            raise ValueError("price must be a number")
        if isinstance(v, float):
            return repr(v)
        return v

    @field_validator("price")
    @classmethod
    def finite_price(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("price must be finite")
        return v

    @field_validator("date")
    @classmethod
    def aware_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Naive feed timestamps are treated as UTC so they compare with aware ones.
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1)
    price: Decimal = Field(..., gt=0)
    usd_price: Decimal = Field(..., gt=0)
    icon_url: str = ""
    date: Optional[datetime] = None


class Catalog:
    """Immutable ordered snapshot of tokens, unique by symbol."""

    __slots__ = ("_tokens", "_by_symbol", "source", "loaded_at")

    def __init__(
        self,
        tokens: Sequence[Token],
        source: str = "live",
        loaded_at: Optional[datetime] = None,
    ):
        by_symbol = {}
        for token in tokens:
            if token.symbol in by_symbol:
                raise ValueError(f"duplicate token symbol '{token.symbol}'")
            by_symbol[token.symbol] = token
        self._tokens = tuple(tokens)
        self._by_symbol = by_symbol
        self.source = source
        self.loaded_at = loaded_at or datetime.now(timezone.utc)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __getitem__(self, index: int) -> Token:
        return self._tokens[index]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._by_symbol

    def __repr__(self) -> str:
        return f"Catalog(source={self.source!r}, symbols={self.symbols()!r})"

    def get(self, symbol: str) -> Optional[Token]:
        return self._by_symbol.get(symbol)

    def symbols(self) -> list[str]:
        return [t.symbol for t in self._tokens]
