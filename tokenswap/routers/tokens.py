from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from tokenswap.models.conversion import TokenOut
from tokenswap.models.token import Token
from tokenswap.services.catalog import TokenCatalogService, filter_tokens
from tokenswap.services.formatting import format_price

"""Token catalog router.

Endpoints:
    - GET /tokens            -> current catalog, optionally filtered by ?query=
    - POST /tokens/refresh   -> force a new load cycle (falls back if the feed is down)
"""

router = APIRouter(prefix="/tokens", tags=["tokens"])


def get_catalog_service(request: Request) -> TokenCatalogService:
    return request.app.state.catalog_service


def token_out(token: Token) -> TokenOut:
    return TokenOut(
        symbol=token.symbol,
        price=str(token.price),
        usd_price=str(token.usd_price),
        display_price=format_price(token.usd_price),
        icon_url=token.icon_url,
    )


@router.get("/", response_model=List[TokenOut], summary="List catalog tokens")
async def list_tokens(
    query: Optional[str] = Query(None, description="Case-insensitive symbol filter"),
    svc: TokenCatalogService = Depends(get_catalog_service),
):
    catalog = await svc.get_catalog()
    return [token_out(t) for t in filter_tokens(catalog, query or "")]


@router.post("/refresh", summary="Reload the token catalog")
async def refresh_tokens(svc: TokenCatalogService = Depends(get_catalog_service)):
    catalog = await svc.refresh()
    return {
        "status": "ok",
        "source": catalog.source,
        "count": len(catalog),
        "loaded_at": catalog.loaded_at.isoformat(),
    }
