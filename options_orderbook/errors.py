"""Error taxonomy for the options orderbook.

Every error carries a stable `code` and an `http_status` so the API boundary
can report it and `OrderbookApiClient` can raise the same class on the other
side of the wire.
"""

from typing import Optional


class OrderbookError(Exception):
    """Base orderbook error."""

    code = "ORDERBOOK_ERROR"
    http_status = 500

    def to_dict(self) -> dict:
        """Convert to the JSON error body returned by the orderbook API."""
        return {"error": str(self), "code": self.code}


class OrderValidationError(OrderbookError):
    """Order or submission failed validation."""

    code = "INVALID_ORDER"
    http_status = 400


class InvalidAmountError(OrderValidationError):
    """Making or taking amount is not a positive uint256."""

    code = "INVALID_AMOUNT"


class InvalidExpirationError(OrderValidationError):
    """Expiration is negative or does not fit the 40-bit traits field."""

    code = "INVALID_EXPIRATION"


class InvalidNonceError(OrderValidationError):
    """Nonce does not fit the upper 96 bits of the salt."""

    code = "INVALID_NONCE"


class InvalidOrderError(OrderValidationError):
    """Order fields are missing or malformed."""

    pass


class InvalidSignatureError(OrderValidationError):
    """Signature is malformed or was not produced by the maker."""

    code = "INVALID_SIGNATURE"


class OrderHashMismatchError(OrderValidationError):
    """Submitted order hash does not match the recomputed one."""

    code = "ORDER_HASH_MISMATCH"


class MalformedExtensionError(OrderValidationError):
    """Extension bytes cannot be decoded."""

    code = "MALFORMED_EXTENSION"


class SaltExtensionMismatchError(OrderValidationError):
    """Low 160 bits of the salt do not match the extension hash."""

    code = "SALT_EXTENSION_MISMATCH"


class OrderLifecycleError(OrderbookError):
    """Requested lifecycle transition is not allowed."""

    code = "LIFECYCLE_ERROR"
    http_status = 409

    def __init__(self, order_hash: str, message: Optional[str] = None):
        self.order_hash = order_hash
        super().__init__(message or f"{self.__class__.__name__}: {order_hash}")


class DuplicateOrderError(OrderLifecycleError):
    """Order hash is already stored."""

    code = "DUPLICATE_ORDER"

    def __init__(self, order_hash: str):
        super().__init__(order_hash, f"Order already exists: {order_hash}")


class OrderNotFoundError(OrderLifecycleError):
    """Order hash is not stored."""

    code = "ORDER_NOT_FOUND"
    http_status = 404

    def __init__(self, order_hash: str):
        super().__init__(order_hash, f"Order not found: {order_hash}")


class OrderAlreadyFilledError(OrderLifecycleError):
    """Order was already filled."""

    code = "ORDER_ALREADY_FILLED"

    def __init__(self, order_hash: str):
        super().__init__(order_hash, f"Order already filled: {order_hash}")


class OrderAlreadyCancelledError(OrderLifecycleError):
    """Order was already cancelled."""

    code = "ORDER_ALREADY_CANCELLED"

    def __init__(self, order_hash: str):
        super().__init__(order_hash, f"Order already cancelled: {order_hash}")


class OrderbookApiError(OrderbookError):
    """Orderbook API request failed."""

    code = "API_ERROR"
    http_status = 502


_VALIDATION_ERRORS = {
    cls.code: cls
    for cls in (
        OrderValidationError,
        InvalidAmountError,
        InvalidExpirationError,
        InvalidNonceError,
        InvalidOrderError,
        InvalidSignatureError,
        OrderHashMismatchError,
        MalformedExtensionError,
        SaltExtensionMismatchError,
    )
}

_LIFECYCLE_ERRORS = {
    cls.code: cls
    for cls in (
        DuplicateOrderError,
        OrderNotFoundError,
        OrderAlreadyFilledError,
        OrderAlreadyCancelledError,
    )
}


def error_from_response(
    code: Optional[str], message: str, order_hash: Optional[str] = None
) -> OrderbookError:
    """
    Rebuild an orderbook error from an API error body.

    Args:
        code: Error code from the response body
        message: Error message from the response body
        order_hash: Order hash the request referred to, if any

    Returns:
        The matching error instance, or OrderbookApiError for unknown codes
    """
    if code in _VALIDATION_ERRORS:
        return _VALIDATION_ERRORS[code](message)
    if code in _LIFECYCLE_ERRORS:
        return _LIFECYCLE_ERRORS[code](order_hash or "")
    return OrderbookApiError(message)
