from __future__ import annotations

"""Simulated swap submission.

Stands in for a network round-trip: waits a uniformly random delay within
[delay_min, delay_max] seconds, then fails with probability ``failure_rate``.
No retry happens here; retry policy belongs to the caller.
"""
import asyncio
import logging
import random
import uuid
from typing import Awaitable, Callable, Optional

from tokenswap.core.errors import TransactionFailed
from tokenswap.models.conversion import TransactionReceipt

logger = logging.getLogger("tokenswap.transactions")

Sleep = Callable[[float], Awaitable[None]]


class TransactionSimulator:
    def __init__(
        self,
        *,
        delay_min: float = 2.0,
        delay_max: float = 3.0,
        failure_rate: float = 0.1,
        rng: Optional[random.Random] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if not 0 <= delay_min <= delay_max:
            raise ValueError("delay window must satisfy 0 <= delay_min <= delay_max")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1]")
        self.delay_min = delay_min
        self.delay_max = delay_max
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._sleep = sleep

    async def submit(self) -> TransactionReceipt:
        delay = self._rng.uniform(self.delay_min, self.delay_max)
        await self._sleep(delay)
        if self._rng.random() < self.failure_rate:
            logger.warning("simulated transaction failed after %.2fs", delay)
            raise TransactionFailed("Transaction failed")
        receipt = TransactionReceipt(reference=uuid.uuid4().hex, elapsed_seconds=delay)
        logger.info("simulated transaction %s settled after %.2fs", receipt.reference, delay)
        return receipt
