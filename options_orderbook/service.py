"""Orderbook service: the boundary between API requests and the order store."""

import logging
import re
from typing import Any, Optional, Union

from options_orderbook.cleanup import CleanupSweep
from options_orderbook.constants import SALT_HASH_MASK
from options_orderbook.errors import (
    InvalidOrderError,
    InvalidSignatureError,
    MalformedExtensionError,
    OrderHashMismatchError,
    SaltExtensionMismatchError,
)
from options_orderbook.extension import (
    decode_extension,
    extension_hash160,
    to_extension_bytes,
)
from options_orderbook.order_hash import OrderHasher
from options_orderbook.signer import recover_order_signer
from options_orderbook.store import OrderLifecycleStore, normalize_order_hash
from options_orderbook.traits import has_extension_flag, validate_traits
from options_orderbook.types import Order, OrderFilters, OrderPage, OrderRecord

logger = logging.getLogger(__name__)

SIGNATURE_PATTERN = re.compile(r"^0x[0-9a-fA-F]{130}$")


def validate_signature(signature: Any) -> str:
    """
    Check a signature is 0x followed by 65 bytes of hex.

    Raises:
        InvalidSignatureError: If the format is wrong
    """
    if not signature:
        raise InvalidSignatureError("Signature is required")
    if not isinstance(signature, str):
        raise InvalidSignatureError("Signature must be a string")
    if not SIGNATURE_PATTERN.match(signature):
        raise InvalidSignatureError(
            f"Invalid signature format: length {len(signature)}, expected 0x + 130 hex chars"
        )
    return signature


class OrderbookService:
    """Create, fill, cancel, list and clean up ERC-1155 limit orders."""

    def __init__(
        self,
        store: OrderLifecycleStore,
        hasher: OrderHasher,
        sweep: Optional[CleanupSweep] = None,
        verify_signatures: bool = False,
    ):
        """
        Initialize orderbook service.

        Args:
            store: Order lifecycle store
            hasher: Hasher holding the EIP-712 domain orders are signed under
            sweep: Cleanup sweep (defaults to one over `store`)
            verify_signatures: Require the signature to recover to the maker
        """
        self.store = store
        self.hasher = hasher
        self.sweep = sweep or CleanupSweep(store)
        self.verify_signatures = verify_signatures

    def create(
        self,
        order: Union[Order, dict[str, Any]],
        signature: str,
        extension: Union[bytes, str, None],
        order_hash: Optional[str] = None,
    ) -> OrderRecord:
        """
        Validate a signed order and store it as ACTIVE.

        Args:
            order: Order or its JSON form
            signature: Maker's EIP-712 signature (0x hex)
            extension: Extension bytes or 0x hex
            order_hash: Hash claimed by the client, checked against the recomputed one

        Returns:
            Stored record

        Raises:
            OrderValidationError: If any field, the extension or the signature is invalid
            DuplicateOrderError: If the order is already stored
        """
        if not isinstance(order, Order):
            order = Order.from_dict(order)

        validate_signature(signature)

        if extension is None:
            raise MalformedExtensionError("Extension is required for ERC-1155 orders")
        raw_extension = to_extension_bytes(extension)
        if not raw_extension:
            raise MalformedExtensionError("Extension cannot be empty for ERC-1155 orders")
        decode_extension(raw_extension)

        validate_traits(order.maker_traits)
        if not has_extension_flag(order.maker_traits):
            raise InvalidOrderError("Order carries an extension but hasExtension is unset")

        if extension_hash160(raw_extension) != order.salt & SALT_HASH_MASK:
            raise SaltExtensionMismatchError(
                "Low 160 bits of salt do not match the extension hash"
            )

        calculated_hash = self.hasher.hash_hex(order)
        if order_hash is not None and normalize_order_hash(order_hash) != calculated_hash:
            logger.warning(
                "Order hash mismatch: calculated=%s provided=%s",
                calculated_hash,
                order_hash,
            )
            raise OrderHashMismatchError("Order hash mismatch - order may be corrupted")

        if self.verify_signatures:
            recovered = recover_order_signer(self.hasher, order, signature)
            if recovered.lower() != order.maker.lower():
                raise InvalidSignatureError(
                    f"Signature recovers to {recovered}, expected maker {order.maker}"
                )

        return self.store.insert(calculated_hash, order, signature, raw_extension)

    def fill(
        self,
        order_hash: str,
        tx_hash: Optional[str],
        filled_taking_amount: Optional[int] = None,
    ) -> OrderRecord:
        """Mark an order as filled by settlement transaction `tx_hash`."""
        return self.store.fill(order_hash, tx_hash, filled_taking_amount)

    def cancel(self, order_hash: str) -> OrderRecord:
        """Mark an order as cancelled."""
        return self.store.cancel(order_hash)

    def get_order(self, order_hash: str) -> OrderRecord:
        return self.store.get(order_hash)

    def list_orders(self, filters: Optional[OrderFilters] = None) -> OrderPage:
        """
        List orders matching `filters`, newest first.

        Returns:
            Page of records with the total match count
        """
        filters = filters or OrderFilters()
        now = self.store.clock()
        return OrderPage(
            records=self.store.query(filters, now=now),
            total=self.store.count(filters, now=now),
            limit=filters.limit,
            offset=filters.offset,
        )

    def cleanup(self) -> int:
        """Remove expired orders and return how many were removed."""
        return self.sweep.sweep()
