from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from tokenswap.core.config import Settings
from tokenswap.core.logging import bind_session
from tokenswap.models.conversion import SessionView, SwapOutcome
from tokenswap.services.scheduler import AsyncioScheduler
from tokenswap.services.session import SessionRegistry, SwapSession

"""Swap session router.

Each request maps to exactly one session command; the response is always the
resulting SessionView (or the SwapOutcome for confirm).

Endpoints:
    - POST /sessions                     -> start a session (default pair + sample amount)
    - GET /sessions/{id}                 -> current view
    - PUT /sessions/{id}/amount          -> set the source amount text
    - PUT /sessions/{id}/tokens/{side}   -> select a token for 'from' or 'to'
    - POST /sessions/{id}/swap           -> flip the pair
    - POST /sessions/{id}/refresh        -> recompute rate and output
    - POST /sessions/{id}/confirm        -> submit the simulated transaction
    - DELETE /sessions/{id}              -> discard the session
"""

router = APIRouter(prefix="/sessions", tags=["sessions"])


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SwapSession:
    return registry.get(session_id)


class AmountIn(BaseModel):
    text: str = Field(..., max_length=256, description="Raw amount text; sanitized server-side")


class TokenSelectIn(BaseModel):
    symbol: str = Field(..., min_length=1)


@router.post("/", response_model=SessionView, status_code=201, summary="Start a swap session")
async def create_session(request: Request, registry: SessionRegistry = Depends(get_registry)):
    settings: Settings = request.app.state.settings
    session = SwapSession(
        request.app.state.catalog_service,
        request.app.state.simulator,
        AsyncioScheduler(),
        engine=request.app.state.decimal_engine,
        amount_debounce=settings.amount_debounce_seconds,
        search_debounce=settings.search_debounce_seconds,
    )
    await session.start()
    registry.add(session)
    return session.view()


@router.get("/{session_id}", response_model=SessionView, summary="Get session state")
async def read_session(session: SwapSession = Depends(get_session)):
    return session.view()


@router.put("/{session_id}/amount", response_model=SessionView, summary="Set source amount")
async def set_amount(payload: AmountIn, session: SwapSession = Depends(get_session)):
    with bind_session(session.session_id):
        session.set_amount(payload.text)
    return session.view()


@router.put(
    "/{session_id}/tokens/{side}", response_model=SessionView, summary="Select a token"
)
async def select_token(
    side: Literal["from", "to"],
    payload: TokenSelectIn,
    session: SwapSession = Depends(get_session),
):
    with bind_session(session.session_id):
        session.select_token(side, payload.symbol)
    return session.view()


@router.post("/{session_id}/swap", response_model=SessionView, summary="Flip the token pair")
async def swap_tokens(session: SwapSession = Depends(get_session)):
    with bind_session(session.session_id):
        session.swap()
    return session.view()


@router.post(
    "/{session_id}/refresh", response_model=SessionView, summary="Recompute the exchange rate"
)
async def refresh_rate(session: SwapSession = Depends(get_session)):
    session.refresh_rate()
    return session.view()


@router.post("/{session_id}/confirm", response_model=SwapOutcome, summary="Confirm the swap")
async def confirm_swap(session: SwapSession = Depends(get_session)):
    return await session.confirm()


@router.delete("/{session_id}", summary="Discard a session")
async def delete_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    registry.remove(session_id)
    return {"status": "deleted", "session_id": session_id}
