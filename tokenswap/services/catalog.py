from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from tokenswap.core.errors import FeedUnavailable
from tokenswap.models.constants import (
    DEFAULT_SAMPLE_AMOUNT,
    FALLBACK_PRICES,
    FROM_PREFERENCES,
    SAMPLE_AMOUNTS,
    TO_PREFERENCES,
)
from tokenswap.models.token import Catalog, PriceEntry, Token
from tokenswap.services.feeds import PriceFeed

"""Token catalog loading and selection.

Purpose:
    Turn raw feed quotes into an immutable, deduplicated, positively-priced
    Catalog and pick a sensible default pair for a new swap session.

Design:
    - Raw entries are validated into PriceEntry records; malformed ones are dropped.
    - Per currency, the entry with the newest date wins; then non-positive prices go.
    - Any feed failure degrades to the built-in fallback catalog (logged, not raised).
    - load() is single-flight: concurrent callers await the same outstanding fetch.
    - get_catalog() reuses the current snapshot until its TTL expires.
"""

logger = logging.getLogger("tokenswap.catalog")

DEFAULT_ICON_BASE_URL = "https://raw.githubusercontent.com/Switcheo/token-icons/main/tokens/"


def icon_url_for(symbol: str, base_url: str = DEFAULT_ICON_BASE_URL) -> str:
    return f"{base_url}{symbol}.svg"


def _is_newer(candidate: PriceEntry, current: PriceEntry) -> bool:
    if candidate.date is None:
        return False
    return current.date is None or candidate.date > current.date


def normalize_entries(
    raw_entries: Iterable[Any], icon_base_url: str = DEFAULT_ICON_BASE_URL
) -> List[Token]:
    """Validate, dedupe (newest date wins), drop non-positive prices, sort by symbol."""
    newest: Dict[str, PriceEntry] = {}
    for raw in raw_entries:
        try:
            entry = PriceEntry.model_validate(raw)
        except ValidationError as e:
            logger.debug("skipping malformed price entry %r: %s", raw, e.errors())
            continue
        current = newest.get(entry.currency)
        if current is None or _is_newer(entry, current):
            newest[entry.currency] = entry

    tokens = [
        Token(
            symbol=e.currency,
            price=e.price,
            usd_price=e.price,
            icon_url=icon_url_for(e.currency, icon_base_url),
            date=e.date,
        )
        for e in newest.values()
        if e.price > 0
    ]
    tokens.sort(key=lambda t: (t.symbol.casefold(), t.symbol))
    return tokens


def fallback_catalog(icon_base_url: str = DEFAULT_ICON_BASE_URL) -> Catalog:
    tokens = [
        Token(
            symbol=symbol,
            price=Decimal(price),
            usd_price=Decimal(price),
            icon_url=icon_url_for(symbol, icon_base_url),
        )
        for symbol, price in FALLBACK_PRICES
    ]
    return Catalog(tokens, source="fallback")


def _first_present(catalog: Catalog, preferences: Sequence[str]) -> Optional[Token]:
    for symbol in preferences:
        token = catalog.get(symbol)
        if token is not None:
            return token
    return None


def select_default_pair(
    catalog: Catalog,
    from_preferences: Sequence[str] = FROM_PREFERENCES,
    to_preferences: Sequence[str] = TO_PREFERENCES,
) -> Tuple[Optional[Token], Optional[Token]]:
    if len(catalog) == 0:
        return None, None
    from_token = _first_present(catalog, from_preferences) or catalog[0]
    to_token = _first_present(catalog, to_preferences)
    if to_token is None:
        to_token = next((t for t in catalog if t.symbol != from_token.symbol), None)
    if to_token is None and len(catalog) > 1:
        to_token = catalog[1]
    return from_token, to_token


def sample_amount(token: Optional[Token]) -> str:
    if token is None:
        return DEFAULT_SAMPLE_AMOUNT
    return SAMPLE_AMOUNTS.get(token.symbol, DEFAULT_SAMPLE_AMOUNT)


def filter_tokens(catalog: Iterable[Token], query: str) -> List[Token]:
    """Case-insensitive substring match on symbol; empty query keeps everything."""
    if not query:
        return list(catalog)
    needle = query.casefold()
    return [t for t in catalog if needle in t.symbol.casefold()]


class TokenCatalogService:
    """Loads catalogs from a PriceFeed with fallback, single-flight and TTL reuse."""

    def __init__(
        self,
        feed: PriceFeed,
        *,
        icon_base_url: str = DEFAULT_ICON_BASE_URL,
        ttl_seconds: int = 300,
    ):
        self._feed = feed
        self._icon_base_url = icon_base_url
        self._ttl = timedelta(seconds=ttl_seconds)
        self._inflight: Optional[asyncio.Task[Catalog]] = None
        self.current: Optional[Catalog] = None
        self.load_count = 0

    # Internal --------------------------------------------------
    async def _load_once(self) -> Catalog:
        self.load_count += 1
        try:
            raw = await self._feed.fetch_entries()
            tokens = normalize_entries(raw, self._icon_base_url)
            if not tokens:
                raise FeedUnavailable("price feed returned no usable quotes")
            catalog = Catalog(tokens, source=self._feed.name)
        except FeedUnavailable as e:
            logger.warning("price feed unavailable, using fallback catalog: %s", e)
            catalog = fallback_catalog(self._icon_base_url)
        logger.info(
            "catalog loaded source=%s tokens=%d", catalog.source, len(catalog)
        )
        self.current = catalog
        return catalog

    def _is_fresh(self, catalog: Catalog) -> bool:
        return datetime.now(timezone.utc) - catalog.loaded_at < self._ttl

    # Public API -----------------------------------------------
    async def load(self) -> Catalog:
        """Start a new load cycle, or join the one already outstanding."""
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._load_once())
        return await asyncio.shield(self._inflight)

    async def get_catalog(self) -> Catalog:
        if self.current is not None and self._is_fresh(self.current):
            return self.current
        return await self.load()

    async def refresh(self) -> Catalog:
        return await self.load()
