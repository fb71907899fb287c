"""Options Orderbook - ERC-1155 option orders on 1inch Limit Order Protocol v4."""

from options_orderbook.api_client import OrderbookApiClient
from options_orderbook.cleanup import CleanupSweep
from options_orderbook.constants import DEFAULT_LOP_ADDRESS, ERC1155_PROXY_ADDRESS
from options_orderbook.errors import (
    DuplicateOrderError,
    InvalidAmountError,
    InvalidExpirationError,
    InvalidNonceError,
    InvalidOrderError,
    InvalidSignatureError,
    MalformedExtensionError,
    OrderAlreadyCancelledError,
    OrderAlreadyFilledError,
    OrderbookApiError,
    OrderbookError,
    OrderHashMismatchError,
    OrderNotFoundError,
    SaltExtensionMismatchError,
)
from options_orderbook.extension import (
    ERC1155Extension,
    decode_extension,
    encode_extension,
    extension_hash160,
)
from options_orderbook.order_builder import OrderBuilder
from options_orderbook.order_hash import OrderHasher
from options_orderbook.service import OrderbookService
from options_orderbook.signer import OrderSigner, recover_order_signer
from options_orderbook.store import InMemoryOrderBackend, OrderLifecycleStore
from options_orderbook.types import (
    BuiltOrder,
    ERC1155Asset,
    Order,
    OrderFilters,
    OrderPage,
    OrderRecord,
    OrderStatus,
    SignedOrder,
)

__version__ = "0.1.0"
__all__ = [
    "BuiltOrder",
    "CleanupSweep",
    "DEFAULT_LOP_ADDRESS",
    "DuplicateOrderError",
    "ERC1155Asset",
    "ERC1155Extension",
    "ERC1155_PROXY_ADDRESS",
    "InMemoryOrderBackend",
    "InvalidAmountError",
    "InvalidExpirationError",
    "InvalidNonceError",
    "InvalidOrderError",
    "InvalidSignatureError",
    "MalformedExtensionError",
    "Order",
    "OrderAlreadyCancelledError",
    "OrderAlreadyFilledError",
    "OrderBuilder",
    "OrderFilters",
    "OrderHashMismatchError",
    "OrderHasher",
    "OrderLifecycleStore",
    "OrderNotFoundError",
    "OrderPage",
    "OrderRecord",
    "OrderSigner",
    "OrderStatus",
    "OrderbookApiClient",
    "OrderbookApiError",
    "OrderbookError",
    "OrderbookService",
    "SaltExtensionMismatchError",
    "SignedOrder",
    "decode_extension",
    "encode_extension",
    "extension_hash160",
    "recover_order_signer",
]
