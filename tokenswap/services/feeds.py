from __future__ import annotations

"""Price feed providers and factory.

A feed returns raw quote entries shaped like ``{currency, price, date}``.
'HttpPriceFeed' reads the live JSON feed; 'StaticPriceFeed' serves the
built-in fallback quotes and is used offline or when the live feed is down.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from tokenswap.core.errors import FeedUnavailable
from tokenswap.models.constants import FALLBACK_PRICES
from tokenswap.services.http_client import HttpError, get_json

RawEntry = Dict[str, Any]


class PriceFeed(ABC):
    name: str = "abstract"

    @abstractmethod
    async def fetch_entries(self) -> List[RawEntry]:
        """Return raw quote entries or raise FeedUnavailable."""
        raise NotImplementedError


class StaticPriceFeed(PriceFeed):
    name = "static"

    async def fetch_entries(self) -> List[RawEntry]:  # type: ignore[override]
        return [{"currency": symbol, "price": price} for symbol, price in FALLBACK_PRICES]


class HttpPriceFeed(PriceFeed):
    name = "live"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        retries: int = 2,
        backoff: float = 0.5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._client = client

    async def fetch_entries(self) -> List[RawEntry]:  # type: ignore[override]
        try:
            data = await get_json(
                self.url,
                timeout=self.timeout,
                retries=self.retries,
                backoff=self.backoff,
                client=self._client,
            )
        except HttpError as e:
            raise FeedUnavailable(str(e)) from e
        if not isinstance(data, list):
            raise FeedUnavailable(
                f"expected a JSON array from {self.url}, got {type(data).__name__}"
            )
        return data


_FEED_REGISTRY = {
    "static": StaticPriceFeed,
    "live": HttpPriceFeed,
}


def make_price_feed(kind: str, **kwargs: Any) -> PriceFeed:
    cls = _FEED_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown price feed kind '{kind}'")
    if cls is StaticPriceFeed:
        return cls()
    return cls(**kwargs)
