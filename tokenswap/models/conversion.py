from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .token import Token


@dataclass
class ConversionState:
    """Mutable session record; derived fields are owned by ConversionEngine."""

    from_token: Optional[Token] = None
    to_token: Optional[Token] = None
    from_amount_text: str = ""
    to_amount_text: str = ""
    exchange_rate: Optional[Decimal] = None

    def token(self, side: str) -> Optional[Token]:
        return self.from_token if side == "from" else self.to_token


@dataclass(frozen=True)
class TransactionReceipt:
    reference: str
    elapsed_seconds: float


class TokenOut(BaseModel):
    symbol: str
    price: str
    usd_price: str
    display_price: str
    icon_url: str


class SwapOutcome(BaseModel):
    status: str = Field(..., description="'success' or 'error'")
    title: str
    message: str
    reference: Optional[str] = None


class SessionView(BaseModel):
    """Read-only snapshot of a swap session for the driver layer."""

    session_id: str
    catalog_source: str
    from_token: Optional[str] = None
    to_token: Optional[str] = None
    from_amount: str = ""
    to_amount: str = Field("", description="Full-precision derived amount")
    to_amount_display: str = ""
    exchange_rate: Optional[str] = None
    exchange_rate_display: Optional[str] = None
    from_usd: str = "$0.00"
    to_usd: str = "$0.00"
    errors: Dict[str, str] = Field(default_factory=dict)
    can_confirm: bool = False
    status_message: str = ""
    submitting: bool = False
    visible_tokens: Dict[str, List[str]] = Field(default_factory=dict)
    last_outcome: Optional[SwapOutcome] = None
