"""MakerTraits codec.

`makerTraits` is a uint256 bitfield on every 1inch v4 order:

- bit 0: allow multiple fills (partial fills)
- bit 255: has extension
- bits 210-249: expiration as unix seconds, 0 means never

All other bits are reserved and must stay zero.
"""

from options_orderbook.constants import (
    ALLOW_MULTIPLE_FILLS_FLAG,
    EXPIRATION_MASK,
    EXPIRATION_OFFSET,
    HAS_EXTENSION_FLAG,
    UINT256_MAX,
)
from options_orderbook.errors import InvalidExpirationError, InvalidOrderError

_KNOWN_BITS = (
    (1 << ALLOW_MULTIPLE_FILLS_FLAG)
    | (1 << HAS_EXTENSION_FLAG)
    | (EXPIRATION_MASK << EXPIRATION_OFFSET)
)
RESERVED_BITS_MASK = UINT256_MAX & ~_KNOWN_BITS


def _check_traits(traits: int) -> int:
    if isinstance(traits, bool) or not isinstance(traits, int):
        raise ValueError(f"makerTraits must be an int, got {type(traits).__name__}")
    if traits < 0 or traits > UINT256_MAX:
        raise ValueError(f"makerTraits out of uint256 range: {traits}")
    return traits


def set_flag(traits: int, bit_index: int, value: bool) -> int:
    """Return `traits` with a single bit set or cleared."""
    traits = _check_traits(traits)
    if not 0 <= bit_index <= 255:
        raise ValueError(f"Bit index out of range: {bit_index}")
    if value:
        return traits | (1 << bit_index)
    return traits & ~(1 << bit_index)


def get_expiration(traits: int) -> int:
    """
    Extract the expiration timestamp.

    Raises:
        ValueError: If traits is not a uint256 integer
    """
    return (_check_traits(traits) >> EXPIRATION_OFFSET) & EXPIRATION_MASK


def set_expiration(traits: int, expiration: int) -> int:
    """
    Write an absolute unix timestamp into the expiration field.

    Args:
        traits: Current traits value
        expiration: Unix seconds, 0 for no expiration

    Returns:
        Updated traits

    Raises:
        InvalidExpirationError: If expiration does not fit in 40 bits
    """
    traits = _check_traits(traits)
    if isinstance(expiration, bool) or not isinstance(expiration, int):
        raise InvalidExpirationError(f"Expiration must be an int, got {expiration!r}")
    if expiration < 0 or expiration > EXPIRATION_MASK:
        raise InvalidExpirationError(
            f"Expiration {expiration} does not fit in the 40-bit traits field"
        )
    cleared = traits & ~(EXPIRATION_MASK << EXPIRATION_OFFSET)
    return cleared | (expiration << EXPIRATION_OFFSET)


def is_active(traits: int, now: float) -> bool:
    """True when the order never expires or expires after `now`."""
    expiration = get_expiration(traits)
    return expiration == 0 or expiration > now


def allows_partial_fill(traits: int) -> bool:
    return bool(_check_traits(traits) & (1 << ALLOW_MULTIPLE_FILLS_FLAG))


def has_extension_flag(traits: int) -> bool:
    return bool(_check_traits(traits) & (1 << HAS_EXTENSION_FLAG))


def validate_traits(traits: int) -> int:
    """
    Check traits are a uint256 with no reserved bits set.

    Raises:
        InvalidOrderError: If the value is out of range or uses reserved bits
    """
    try:
        traits = _check_traits(traits)
    except ValueError as e:
        raise InvalidOrderError(str(e)) from e
    if traits & RESERVED_BITS_MASK:
        raise InvalidOrderError(
            f"makerTraits sets reserved bits: {hex(traits & RESERVED_BITS_MASK)}"
        )
    return traits
