from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional

from tokenswap.core.errors import (
    ConfirmationNotReady,
    TransactionFailed,
    UnknownSession,
    UnknownToken,
)
from tokenswap.core.logging import bind_session
from tokenswap.models.constants import SIDES
from tokenswap.models.conversion import SessionView, SwapOutcome
from tokenswap.models.token import Catalog, Token
from tokenswap.services.catalog import (
    TokenCatalogService,
    filter_tokens,
    sample_amount,
    select_default_pair,
)
from tokenswap.services.conversion import ConversionEngine
from tokenswap.services.decimal_engine import DecimalEngine
from tokenswap.services.formatting import format_amount
from tokenswap.services.scheduler import Debouncer, Scheduler
from tokenswap.services.transactions import TransactionSimulator

"""Swap session: command layer between a UI driver and the conversion engine.

Every UI event maps to one method here, and each method issues exactly one
engine operation. Keystroke-rate events (amount typing, token search) go
through Debouncers on the injected Scheduler.
"""

logger = logging.getLogger("tokenswap.session")

AMOUNT_DEBOUNCE_SECONDS = 0.3
SEARCH_DEBOUNCE_SECONDS = 0.5


class SwapSession:
    def __init__(
        self,
        catalog_service: TokenCatalogService,
        simulator: TransactionSimulator,
        scheduler: Scheduler,
        *,
        engine: Optional[DecimalEngine] = None,
        amount_debounce: float = AMOUNT_DEBOUNCE_SECONDS,
        search_debounce: float = SEARCH_DEBOUNCE_SECONDS,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.engine = ConversionEngine(engine)
        self._catalog_service = catalog_service
        self._simulator = simulator
        self.catalog: Catalog = Catalog([], source="empty")
        self.visible_tokens: Dict[str, List[Token]] = {side: [] for side in SIDES}
        self.submitting = False
        self.last_outcome: Optional[SwapOutcome] = None
        self._amount_input = Debouncer(scheduler, amount_debounce, self.engine.set_amount)
        self._search_input = {
            side: Debouncer(scheduler, search_debounce, self._make_search(side))
            for side in SIDES
        }

    # Lifecycle ------------------------------------------------
    async def start(self) -> None:
        """Load the catalog, pick the default pair and seed a sample amount."""
        with bind_session(self.session_id):
            self.catalog = await self._catalog_service.get_catalog()
            self.visible_tokens = {side: list(self.catalog) for side in SIDES}
            from_token, to_token = select_default_pair(self.catalog)
            if from_token is not None:
                self.engine.select_token("from", from_token)
            if to_token is not None:
                self.engine.select_token("to", to_token)
            if from_token is not None:
                self.engine.set_amount(sample_amount(from_token))
            logger.info(
                "session started pair=%s/%s",
                from_token.symbol if from_token else "-",
                to_token.symbol if to_token else "-",
            )

    def close(self) -> None:
        self._amount_input.cancel()
        for debouncer in self._search_input.values():
            debouncer.cancel()

    # Commands -------------------------------------------------
    def on_amount_input(self, raw_text: str) -> None:
        self._amount_input(raw_text)

    def set_amount(self, raw_text: str) -> str:
        self._amount_input.cancel()
        return self.engine.set_amount(raw_text)

    def on_search_input(self, side: str, query: str) -> None:
        debouncer = self._search_input[side]
        if query == "":
            debouncer.cancel()
            self._apply_search(side, query)
        else:
            debouncer(query)

    def select_token(self, side: str, symbol: str) -> Token:
        token = self.catalog.get(symbol)
        if token is None:
            raise UnknownToken(symbol)
        self.engine.select_token(side, token)
        return token

    def swap(self) -> None:
        self._amount_input.flush()
        self.engine.swap()

    def refresh_rate(self) -> None:
        self.engine.recompute()

    async def confirm(self) -> SwapOutcome:
        self._amount_input.flush()
        if self.submitting or not self.engine.can_confirm():
            raise ConfirmationNotReady(self.engine.status_message())

        from_token, to_token = self.engine.from_token, self.engine.to_token
        summary = (
            f"Successfully swapped {format_amount(self.engine.from_amount_text, self.engine.decimal)} "
            f"{from_token.symbol} for {format_amount(self.engine.to_amount_text, self.engine.decimal)} "
            f"{to_token.symbol}"
        )
        self.submitting = True
        with bind_session(self.session_id):
            try:
                receipt = await self._simulator.submit()
            except TransactionFailed:
                outcome = SwapOutcome(
                    status="error",
                    title="Swap Failed",
                    message="Transaction failed. Please try again.",
                )
            else:
                outcome = SwapOutcome(
                    status="success",
                    title="Swap Successful!",
                    message=summary,
                    reference=receipt.reference,
                )
                self.engine.reset_amounts()
            finally:
                self.submitting = False
        self.last_outcome = outcome
        return outcome

    # Queries --------------------------------------------------
    def view(self) -> SessionView:
        engine = self.engine
        rate = engine.exchange_rate
        return SessionView(
            session_id=self.session_id,
            catalog_source=self.catalog.source,
            from_token=engine.from_token.symbol if engine.from_token else None,
            to_token=engine.to_token.symbol if engine.to_token else None,
            from_amount=engine.from_amount_text,
            to_amount=engine.to_amount_text,
            to_amount_display=engine.to_amount_display,
            exchange_rate=engine.decimal.to_string(rate) if rate is not None else None,
            exchange_rate_display=engine.exchange_rate_display,
            from_usd=engine.usd_display("from"),
            to_usd=engine.usd_display("to"),
            errors=engine.errors,
            can_confirm=engine.can_confirm() and not self.submitting,
            status_message=engine.status_message(),
            submitting=self.submitting,
            visible_tokens={
                side: [t.symbol for t in tokens] for side, tokens in self.visible_tokens.items()
            },
            last_outcome=self.last_outcome,
        )

    # Internal --------------------------------------------------
    def _make_search(self, side: str):
        def run(query: str) -> None:
            self._apply_search(side, query)

        return run

    def _apply_search(self, side: str, query: str) -> None:
        self.visible_tokens[side] = filter_tokens(self.catalog, query)


class SessionRegistry:
    """In-memory swap sessions keyed by id; process restart clears them."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SwapSession] = {}

    def add(self, session: SwapSession) -> SwapSession:
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> SwapSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSession(session_id)
        return session

    def remove(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise UnknownSession(session_id)
        session.close()

    def __len__(self) -> int:
        return len(self._sessions)
