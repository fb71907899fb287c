"""Type definitions for the options orderbook."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from eth_utils import is_hex_address, to_checksum_address

from options_orderbook.constants import DEFAULT_LIST_LIMIT, UINT256_MAX
from options_orderbook.errors import InvalidAmountError, InvalidOrderError
from options_orderbook.extension import to_extension_bytes
from options_orderbook.traits import get_expiration, is_active

ORDER_FIELDS = (
    "salt",
    "maker",
    "receiver",
    "makerAsset",
    "takerAsset",
    "makingAmount",
    "takingAmount",
    "makerTraits",
)


def parse_address(value: Any, field_name: str) -> str:
    """Validate an address and return its checksum form."""
    if not isinstance(value, str) or not is_hex_address(value):
        raise InvalidOrderError(f"Invalid address format for {field_name}: {value}")
    return to_checksum_address(value)


def parse_uint256(value: Any, field_name: str) -> int:
    """Parse an int, decimal string or 0x hex string as a uint256."""
    if isinstance(value, bool):
        raise InvalidOrderError(f"Invalid numeric format for {field_name}: {value}")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                parsed = int(text, 16)
            else:
                parsed = int(text, 10)
        except ValueError as e:
            raise InvalidOrderError(
                f"Invalid numeric format for {field_name}: {value}"
            ) from e
    else:
        raise InvalidOrderError(f"Invalid numeric format for {field_name}: {value}")

    if parsed < 0 or parsed > UINT256_MAX:
        raise InvalidOrderError(f"{field_name} out of uint256 range: {value}")
    return parsed


class OrderStatus(str, Enum):
    """Order status enum.

    EXPIRED is never stored; it is derived from ACTIVE plus the traits expiration.
    """

    ACTIVE = "active"
    FILLED = "filled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


STORED_STATUSES = frozenset(
    {OrderStatus.ACTIVE, OrderStatus.FILLED, OrderStatus.CANCELLED}
)


@dataclass(frozen=True)
class ERC1155Asset:
    """
    ERC-1155 position offered by the maker.

    Args:
        token: ERC-1155 contract address
        token_id: Token id of the option series
        amount: Number of tokens to sell
        data: Transfer data forwarded to safeTransferFrom
    """

    token: str
    token_id: int
    amount: int
    data: bytes = b""


@dataclass(frozen=True)
class Order:
    """1inch Limit Order Protocol v4 order."""

    salt: int
    maker: str
    receiver: str
    maker_asset: str
    taker_asset: str
    making_amount: int
    taking_amount: int
    maker_traits: int

    def to_message(self) -> dict[str, Any]:
        """Field values keyed by their EIP-712 names, in schema order."""
        return {
            "salt": self.salt,
            "maker": self.maker,
            "receiver": self.receiver,
            "makerAsset": self.maker_asset,
            "takerAsset": self.taker_asset,
            "makingAmount": self.making_amount,
            "takingAmount": self.taking_amount,
            "makerTraits": self.maker_traits,
        }

    def to_dict(self) -> dict[str, str]:
        """Convert to JSON form (uint256 values as decimal strings)."""
        return {
            "salt": str(self.salt),
            "maker": self.maker,
            "receiver": self.receiver,
            "makerAsset": self.maker_asset,
            "takerAsset": self.taker_asset,
            "makingAmount": str(self.making_amount),
            "takingAmount": str(self.taking_amount),
            "makerTraits": str(self.maker_traits),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        """
        Parse and validate an order from its JSON form.

        Raises:
            InvalidOrderError: If a field is missing or malformed
            InvalidAmountError: If an amount is not positive
        """
        if not isinstance(data, dict):
            raise InvalidOrderError("Order must be an object")
        for name in ORDER_FIELDS:
            if data.get(name) in (None, ""):
                raise InvalidOrderError(f"Missing required field: {name}")

        order = cls(
            salt=parse_uint256(data["salt"], "salt"),
            maker=parse_address(data["maker"], "maker"),
            receiver=parse_address(data["receiver"], "receiver"),
            maker_asset=parse_address(data["makerAsset"], "makerAsset"),
            taker_asset=parse_address(data["takerAsset"], "takerAsset"),
            making_amount=parse_uint256(data["makingAmount"], "makingAmount"),
            taking_amount=parse_uint256(data["takingAmount"], "takingAmount"),
            maker_traits=parse_uint256(data["makerTraits"], "makerTraits"),
        )
        if order.making_amount <= 0:
            raise InvalidAmountError("makingAmount must be positive")
        if order.taking_amount <= 0:
            raise InvalidAmountError("takingAmount must be positive")
        return order


@dataclass(frozen=True)
class BuiltOrder:
    """Unsigned order with its extension, hash and EIP-712 payload."""

    order: Order
    extension: bytes
    order_hash: str
    typed_data: dict[str, Any]


@dataclass(frozen=True)
class SignedOrder:
    """Signed order ready for submission."""

    order: Order
    extension: bytes
    order_hash: str
    signature: str

    def to_dict(self) -> dict:
        """Convert to the orderbook API submission body."""
        return {
            "order": self.order.to_dict(),
            "signature": self.signature,
            "extension": "0x" + self.extension.hex(),
            "orderHash": self.order_hash,
        }


@dataclass(frozen=True)
class OrderRecord:
    """Stored order with its lifecycle state."""

    order_hash: str
    order: Order
    signature: str
    extension: bytes
    created_at: float
    status: OrderStatus = OrderStatus.ACTIVE
    fill_tx: Optional[str] = None
    filled_taking_amount: Optional[int] = None
    filled_at: Optional[float] = None
    cancelled_at: Optional[float] = None

    @property
    def expiration(self) -> int:
        return get_expiration(self.order.maker_traits)

    @property
    def terminal_at(self) -> Optional[float]:
        if self.status == OrderStatus.FILLED:
            return self.filled_at
        if self.status == OrderStatus.CANCELLED:
            return self.cancelled_at
        return None

    def is_live(self, now: float) -> bool:
        """Active and not past its expiration."""
        return self.status == OrderStatus.ACTIVE and is_active(
            self.order.maker_traits, now
        )

    def effective_status(self, now: float) -> OrderStatus:
        if self.status == OrderStatus.ACTIVE and not is_active(
            self.order.maker_traits, now
        ):
            return OrderStatus.EXPIRED
        return self.status

    def to_dict(self) -> dict:
        """Convert to JSON form (timestamps in milliseconds)."""
        return {
            "orderHash": self.order_hash,
            "order": self.order.to_dict(),
            "signature": self.signature,
            "extension": "0x" + self.extension.hex(),
            "status": self.status.value,
            "createdAt": _to_millis(self.created_at),
            "fillTx": self.fill_tx,
            "filledTakingAmount": (
                str(self.filled_taking_amount)
                if self.filled_taking_amount is not None
                else None
            ),
            "filledAt": _to_millis(self.filled_at),
            "cancelledAt": _to_millis(self.cancelled_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderRecord":
        """
        Parse a stored or transmitted record.

        Raises:
            OrderValidationError: If the record or its order is malformed, or
                carries a status that is never stored (EXPIRED)
        """
        try:
            status = OrderStatus(data.get("status", OrderStatus.ACTIVE.value))
            if status not in STORED_STATUSES:
                raise InvalidOrderError(f"Status {status.value} is never stored")
            filled_taking_amount = data.get("filledTakingAmount")
            return cls(
                order_hash=data["orderHash"].lower(),
                order=Order.from_dict(data["order"]),
                signature=data["signature"],
                extension=to_extension_bytes(data.get("extension") or "0x"),
                created_at=_from_millis(data["createdAt"]),
                status=status,
                fill_tx=data.get("fillTx"),
                filled_taking_amount=(
                    int(filled_taking_amount)
                    if filled_taking_amount is not None
                    else None
                ),
                filled_at=_from_millis(data.get("filledAt")),
                cancelled_at=_from_millis(data.get("cancelledAt")),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidOrderError(f"Failed to parse order record: {e}") from e


def _to_millis(ts: Optional[float]) -> Optional[int]:
    return int(ts * 1000) if ts is not None else None


def _from_millis(ms: Optional[Union[int, float, str]]) -> Optional[float]:
    return float(ms) / 1000 if ms is not None else None


@dataclass
class OrderFilters:
    """
    Filters for listing orders.

    Args:
        maker: Maker address (case-insensitive)
        maker_asset: Maker asset address (case-insensitive)
        taker_asset: Taker asset address (case-insensitive)
        active: Only live orders (ACTIVE and unexpired); False applies no filter
        status: Only orders whose effective status matches (EXPIRED included)
        limit: Page size
        offset: Page start
    """

    maker: Optional[str] = None
    maker_asset: Optional[str] = None
    taker_asset: Optional[str] = None
    active: bool = False
    status: Optional[OrderStatus] = None
    limit: int = DEFAULT_LIST_LIMIT
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must not be negative, got {self.offset}")
        if self.status is not None:
            self.status = OrderStatus(self.status)

    def matches(self, record: OrderRecord, now: float) -> bool:
        order = record.order
        if self.maker and order.maker.lower() != self.maker.lower():
            return False
        if self.maker_asset and order.maker_asset.lower() != self.maker_asset.lower():
            return False
        if self.taker_asset and order.taker_asset.lower() != self.taker_asset.lower():
            return False
        if self.active and not record.is_live(now):
            return False
        if self.status is not None and record.effective_status(now) != self.status:
            return False
        return True

    def to_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.active:
            params["active"] = "true"
        if self.status is not None:
            params["status"] = self.status.value
        if self.maker:
            params["maker"] = self.maker
        if self.taker_asset:
            params["takerAsset"] = self.taker_asset
        if self.maker_asset:
            params["makerAsset"] = self.maker_asset
        params["limit"] = str(self.limit)
        params["offset"] = str(self.offset)
        return params

    @classmethod
    def from_query_params(cls, params: dict[str, str]) -> "OrderFilters":
        """
        Parse GET query parameters (`active=true`, `status=expired`, `limit=50`, ...).

        Only the exact value `active=true` filters; any other value lists all orders.
        """
        status_raw = params.get("status") or None
        try:
            status = OrderStatus(status_raw) if status_raw is not None else None
        except ValueError as e:
            raise ValueError(f"Invalid status filter: {status_raw}") from e
        try:
            limit = int(params.get("limit") or DEFAULT_LIST_LIMIT)
            offset = int(params.get("offset") or 0)
        except ValueError as e:
            raise ValueError(f"Invalid pagination parameters: {e}") from e
        return cls(
            maker=params.get("maker") or None,
            maker_asset=params.get("makerAsset") or None,
            taker_asset=params.get("takerAsset") or None,
            active=params.get("active") == "true",
            status=status,
            limit=limit,
            offset=offset,
        )


@dataclass
class OrderPage:
    """One page of an order listing."""

    records: list[OrderRecord] = field(default_factory=list)
    total: int = 0
    limit: int = DEFAULT_LIST_LIMIT
    offset: int = 0

    def to_dict(self) -> dict:
        return {
            "orders": [record.to_dict() for record in self.records],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderPage":
        records = [OrderRecord.from_dict(o) for o in data.get("orders", []) or []]
        return cls(
            records=records,
            total=int(data.get("total", len(records))),
            limit=int(data.get("limit", DEFAULT_LIST_LIMIT)),
            offset=int(data.get("offset", 0)),
        )
