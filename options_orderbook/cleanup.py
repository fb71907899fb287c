"""Cleanup sweep removing expired orders from the store."""

import asyncio
import logging
import time
from typing import Callable, Optional

from options_orderbook.store import OrderLifecycleStore
from options_orderbook.traits import get_expiration
from options_orderbook.types import OrderStatus

logger = logging.getLogger(__name__)


class CleanupSweep:
    """
    Deletes ACTIVE orders whose traits expiration has passed.

    Filled and cancelled orders are kept unless a terminal retention window is
    configured. Each delete re-checks the stored status, so an order filled or
    cancelled while the sweep runs is never removed as expired.
    """

    def __init__(
        self,
        store: OrderLifecycleStore,
        terminal_retention_seconds: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize cleanup sweep.

        Args:
            store: Order store to sweep
            terminal_retention_seconds: Also delete filled/cancelled orders this
                long after their terminal transition (None keeps them forever)
            clock: Returns current unix seconds (defaults to the store clock)
        """
        if terminal_retention_seconds is not None and terminal_retention_seconds < 0:
            raise ValueError("terminal_retention_seconds must not be negative")
        self.store = store
        self.terminal_retention_seconds = terminal_retention_seconds
        self.clock = clock or store.clock

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Remove expired orders.

        Args:
            now: Unix seconds to compare expirations against

        Returns:
            Number of records removed
        """
        now = self.clock() if now is None else now
        backend = self.store.backend
        removed = 0

        for record in backend.records():
            if record.status == OrderStatus.ACTIVE:
                try:
                    expiration = get_expiration(record.order.maker_traits)
                except ValueError as e:
                    logger.warning(
                        "Skipping order %s during cleanup: %s", record.order_hash, e
                    )
                    continue
                if 0 < expiration <= now and backend.delete_if(
                    record.order_hash, OrderStatus.ACTIVE
                ):
                    removed += 1
                    logger.info(
                        "Cleaned expired order %s (expired at %s, now %s)",
                        record.order_hash,
                        expiration,
                        int(now),
                    )
            elif self._retention_elapsed(record.terminal_at, now) and backend.delete_if(
                record.order_hash, record.status
            ):
                removed += 1
                logger.info(
                    "Cleaned %s order %s past retention",
                    record.status.value,
                    record.order_hash,
                )

        logger.info("Cleaned up %d orders", removed)
        return removed

    def _retention_elapsed(self, terminal_at: Optional[float], now: float) -> bool:
        if self.terminal_retention_seconds is None or terminal_at is None:
            return False
        return terminal_at + self.terminal_retention_seconds <= now

    async def run_periodically(
        self, interval_seconds: float, stop_event: asyncio.Event
    ) -> None:
        """
        Sweep every `interval_seconds` until `stop_event` is set.

        Args:
            interval_seconds: Delay between sweeps
            stop_event: Set to stop the loop
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        while not stop_event.is_set():
            await asyncio.to_thread(self.sweep)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                continue
