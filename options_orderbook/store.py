"""Order lifecycle store.

Orders move ACTIVE -> FILLED or ACTIVE -> CANCELLED exactly once. Every
transition goes through the backend's compare-and-swap on the stored status,
so a fill racing a cancel on the same hash has exactly one winner and the
loser observes the terminal state as an error.
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Optional, Protocol

from options_orderbook.errors import (
    DuplicateOrderError,
    InvalidAmountError,
    OrderAlreadyCancelledError,
    OrderAlreadyFilledError,
    OrderLifecycleError,
    OrderNotFoundError,
)
from options_orderbook.types import Order, OrderFilters, OrderRecord, OrderStatus

logger = logging.getLogger(__name__)


class OrderBackend(Protocol):
    """Keyed storage for order records. Each method must be atomic."""

    def add(self, record: OrderRecord) -> bool:
        """Insert the record unless its hash exists. Returns True if inserted."""
        ...

    def get(self, order_hash: str) -> Optional[OrderRecord]:
        ...

    def compare_and_update(
        self, order_hash: str, expected_status: OrderStatus, updated: OrderRecord
    ) -> bool:
        """Replace the record only while its stored status is `expected_status`."""
        ...

    def delete_if(self, order_hash: str, expected_status: OrderStatus) -> bool:
        """Delete the record only while its stored status is `expected_status`."""
        ...

    def records(self) -> list[OrderRecord]:
        """Snapshot of all records."""
        ...


class InMemoryOrderBackend:
    """Dict-backed backend guarded by a lock held for single operations only."""

    def __init__(self) -> None:
        self._records: dict[str, OrderRecord] = {}
        self._lock = threading.Lock()

    def add(self, record: OrderRecord) -> bool:
        with self._lock:
            if record.order_hash in self._records:
                return False
            self._records[record.order_hash] = record
            return True

    def get(self, order_hash: str) -> Optional[OrderRecord]:
        with self._lock:
            return self._records.get(order_hash)

    def compare_and_update(
        self, order_hash: str, expected_status: OrderStatus, updated: OrderRecord
    ) -> bool:
        with self._lock:
            current = self._records.get(order_hash)
            if current is None or current.status != expected_status:
                return False
            self._records[order_hash] = updated
            return True

    def delete_if(self, order_hash: str, expected_status: OrderStatus) -> bool:
        with self._lock:
            current = self._records.get(order_hash)
            if current is None or current.status != expected_status:
                return False
            del self._records[order_hash]
            return True

    def records(self) -> list[OrderRecord]:
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def normalize_order_hash(order_hash: str) -> str:
    return order_hash.strip().lower()


class OrderLifecycleStore:
    """Keyed store mapping order hash to order record and status."""

    def __init__(
        self,
        backend: Optional[OrderBackend] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the store.

        Args:
            backend: Storage backend (defaults to in-memory)
            clock: Returns current unix seconds
        """
        self.backend: OrderBackend = backend if backend is not None else InMemoryOrderBackend()
        self.clock = clock

    def insert(
        self, order_hash: str, order: Order, signature: str, extension: bytes
    ) -> OrderRecord:
        """
        Insert a new ACTIVE order.

        Raises:
            DuplicateOrderError: If the hash is already stored
        """
        order_hash = normalize_order_hash(order_hash)
        record = OrderRecord(
            order_hash=order_hash,
            order=order,
            signature=signature,
            extension=bytes(extension),
            created_at=self.clock(),
            status=OrderStatus.ACTIVE,
        )
        if not self.backend.add(record):
            raise DuplicateOrderError(order_hash)
        logger.info("Order %s stored (maker=%s)", order_hash, order.maker)
        return record

    def get(self, order_hash: str) -> OrderRecord:
        """
        Look up an order.

        Raises:
            OrderNotFoundError: If the hash is not stored
        """
        order_hash = normalize_order_hash(order_hash)
        record = self.backend.get(order_hash)
        if record is None:
            raise OrderNotFoundError(order_hash)
        return record

    def _transition(
        self, order_hash: str, build: Callable[[OrderRecord], OrderRecord]
    ) -> OrderRecord:
        order_hash = normalize_order_hash(order_hash)
        while True:
            current = self.get(order_hash)
            if current.status == OrderStatus.FILLED:
                raise OrderAlreadyFilledError(order_hash)
            if current.status == OrderStatus.CANCELLED:
                raise OrderAlreadyCancelledError(order_hash)
            if current.status != OrderStatus.ACTIVE:
                raise OrderLifecycleError(
                    order_hash, f"Order {order_hash} has unexpected status {current.status.value}"
                )
            updated = build(current)
            if self.backend.compare_and_update(order_hash, OrderStatus.ACTIVE, updated):
                return updated
            # Lost a race; re-read to report the winner's terminal state.

    def fill(
        self,
        order_hash: str,
        fill_tx: Optional[str],
        filled_taking_amount: Optional[int] = None,
    ) -> OrderRecord:
        """
        Mark an ACTIVE order as filled.

        Args:
            order_hash: Order hash
            fill_tx: Settlement transaction reference
            filled_taking_amount: Taker amount settled (defaults to the full amount)

        Raises:
            OrderNotFoundError: If the hash is not stored
            OrderAlreadyFilledError: If the order was already filled
            OrderAlreadyCancelledError: If the order was cancelled
            InvalidAmountError: If filled_taking_amount exceeds the order
        """

        def build(current: OrderRecord) -> OrderRecord:
            amount = (
                current.order.taking_amount
                if filled_taking_amount is None
                else filled_taking_amount
            )
            if not 0 < amount <= current.order.taking_amount:
                raise InvalidAmountError(
                    f"Filled taking amount {amount} outside (0, {current.order.taking_amount}]"
                )
            return replace(
                current,
                status=OrderStatus.FILLED,
                fill_tx=fill_tx,
                filled_taking_amount=amount,
                filled_at=self.clock(),
            )

        record = self._transition(order_hash, build)
        logger.info("Order %s marked as filled (tx=%s)", record.order_hash, fill_tx)
        return record

    def cancel(self, order_hash: str) -> OrderRecord:
        """
        Mark an ACTIVE order as cancelled.

        Raises:
            OrderNotFoundError: If the hash is not stored
            OrderAlreadyFilledError: If the order was filled
            OrderAlreadyCancelledError: If the order was already cancelled
        """

        def build(current: OrderRecord) -> OrderRecord:
            return replace(
                current, status=OrderStatus.CANCELLED, cancelled_at=self.clock()
            )

        record = self._transition(order_hash, build)
        logger.info("Order %s marked as cancelled", record.order_hash)
        return record

    def _matching(self, filters: OrderFilters, now: Optional[float]) -> list[OrderRecord]:
        now = self.clock() if now is None else now
        matched = [r for r in self.backend.records() if filters.matches(r, now)]
        matched.sort(key=lambda r: r.created_at, reverse=True)
        return matched

    def query(
        self, filters: Optional[OrderFilters] = None, now: Optional[float] = None
    ) -> list[OrderRecord]:
        """Return one page of matching records, newest first."""
        filters = filters or OrderFilters()
        matched = self._matching(filters, now)
        return matched[filters.offset : filters.offset + filters.limit]

    def count(
        self, filters: Optional[OrderFilters] = None, now: Optional[float] = None
    ) -> int:
        """Number of matching records before pagination."""
        return len(self._matching(filters or OrderFilters(), now))
