"""ERC-1155 extension codec.

1inch v4 orders only move ERC-20 style assets. ERC-1155 orders name a proxy as
`makerAsset` and carry the real token, token id and transfer data in the
order extension:

    [8 x uint32 offsets, big-endian][abi.encode(address, uint256, bytes)]

The first offset is the header length (where the tuple starts); the other
seven are zero since no other extension sections are used.
"""

from dataclasses import dataclass
from typing import Union

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak, to_bytes, to_checksum_address

from options_orderbook.constants import (
    EXTENSION_HEADER_SIZE,
    EXTENSION_OFFSET_COUNT,
    SALT_HASH_MASK,
)
from options_orderbook.errors import MalformedExtensionError

EXTENSION_TUPLE_TYPES = ["address", "uint256", "bytes"]


@dataclass(frozen=True)
class ERC1155Extension:
    """Decoded ERC-1155 transfer metadata."""

    token: str
    token_id: int
    data: bytes


def to_extension_bytes(raw: Union[bytes, str]) -> bytes:
    """Normalize a `0x` hex string or bytes to bytes."""
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    if isinstance(raw, str):
        try:
            return to_bytes(hexstr=raw)
        except ValueError as e:
            raise MalformedExtensionError(f"Extension is not valid hex: {e}") from e
    raise MalformedExtensionError(
        f"Extension must be bytes or hex string, got {type(raw).__name__}"
    )


def _encode_header(offsets: list[int]) -> bytes:
    return b"".join(offset.to_bytes(4, "big") for offset in offsets)


def _decode_header(raw: bytes) -> list[int]:
    return [
        int.from_bytes(raw[i * 4 : (i + 1) * 4], "big")
        for i in range(EXTENSION_OFFSET_COUNT)
    ]


def encode_extension(token: str, token_id: int, data: Union[bytes, str] = b"") -> bytes:
    """
    Encode ERC-1155 transfer metadata as an order extension.

    Args:
        token: ERC-1155 contract address
        token_id: ERC-1155 token id
        data: Transfer data forwarded to safeTransferFrom

    Returns:
        Raw extension bytes
    """
    payload = abi_encode(
        EXTENSION_TUPLE_TYPES,
        [to_checksum_address(token), token_id, to_extension_bytes(data)],
    )
    offsets = [EXTENSION_HEADER_SIZE] + [0] * (EXTENSION_OFFSET_COUNT - 1)
    return _encode_header(offsets) + payload


def decode_extension(raw: Union[bytes, str]) -> ERC1155Extension:
    """
    Decode an order extension back to ERC-1155 transfer metadata.

    Raises:
        MalformedExtensionError: If the payload is truncated or not ABI-decodable
    """
    raw = to_extension_bytes(raw)
    if len(raw) < EXTENSION_HEADER_SIZE:
        raise MalformedExtensionError(
            f"Extension too short: {len(raw)} bytes, header is {EXTENSION_HEADER_SIZE}"
        )

    tuple_start = _decode_header(raw)[0]
    if tuple_start < EXTENSION_HEADER_SIZE or tuple_start > len(raw):
        raise MalformedExtensionError(f"Extension offset out of range: {tuple_start}")

    try:
        token, token_id, data = abi_decode(EXTENSION_TUPLE_TYPES, raw[tuple_start:])
    except (DecodingError, ValueError) as e:
        raise MalformedExtensionError(f"Failed to decode extension tuple: {e}") from e

    return ERC1155Extension(
        token=to_checksum_address(token), token_id=token_id, data=bytes(data)
    )


def extension_hash160(raw: Union[bytes, str]) -> int:
    """Low 160 bits of keccak256 over the raw extension bytes."""
    return int.from_bytes(keccak(to_extension_bytes(raw)), "big") & SALT_HASH_MASK
