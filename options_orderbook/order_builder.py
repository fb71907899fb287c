"""Order builder for ERC-1155 option orders on 1inch Limit Order Protocol v4."""

import logging
import secrets
import time
from typing import Optional, Union

from eth_utils import is_hex_address, to_checksum_address

from options_orderbook.constants import (
    ALLOW_MULTIPLE_FILLS_FLAG,
    DEFAULT_CHAIN_ID,
    DEFAULT_LOP_ADDRESS,
    ERC1155_PROXY_ADDRESS,
    EXPIRATION_MASK,
    HAS_EXTENSION_FLAG,
    SALT_HASH_BITS,
    SALT_NONCE_BITS,
    UINT256_MAX,
)
from options_orderbook.errors import (
    InvalidAmountError,
    InvalidExpirationError,
    InvalidNonceError,
    InvalidOrderError,
)
from options_orderbook.extension import encode_extension, extension_hash160
from options_orderbook.order_hash import OrderHasher
from options_orderbook.signer import OrderSigner
from options_orderbook.traits import set_expiration, set_flag
from options_orderbook.types import BuiltOrder, ERC1155Asset, Order, SignedOrder

logger = logging.getLogger(__name__)


def default_nonce() -> int:
    """Millisecond timestamp with 32 random low bits (fits the 96-bit salt prefix)."""
    return (int(time.time() * 1000) << 32) | secrets.randbits(32)


def _checksum(address: str, field_name: str) -> str:
    if not isinstance(address, str) or not is_hex_address(address):
        raise InvalidOrderError(f"Invalid address format for {field_name}: {address}")
    return to_checksum_address(address)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class OrderBuilder:
    """Builder for ERC-1155 limit orders routed through the transfer proxy."""

    def __init__(
        self,
        chain_id: int = DEFAULT_CHAIN_ID,
        limit_order_protocol_address: str = DEFAULT_LOP_ADDRESS,
        erc1155_proxy_address: str = ERC1155_PROXY_ADDRESS,
    ):
        """
        Initialize order builder.

        Args:
            chain_id: Chain ID for the EIP-712 domain
            limit_order_protocol_address: Limit Order Protocol contract (verifying contract)
            erc1155_proxy_address: Proxy used as makerAsset for ERC-1155 orders
        """
        self.hasher = OrderHasher(chain_id, limit_order_protocol_address)
        self.erc1155_proxy_address = _checksum(
            erc1155_proxy_address, "erc1155_proxy_address"
        )

    def build_order(
        self,
        maker_address: str,
        maker_asset: ERC1155Asset,
        taker_asset: str,
        taker_amount: int,
        expiration_seconds: int = 0,
        allow_partial_fill: bool = False,
        nonce: Optional[int] = None,
        now: Optional[Union[int, float]] = None,
    ) -> BuiltOrder:
        """
        Build an unsigned order selling an ERC-1155 position.

        Args:
            maker_address: Maker wallet (also the receiver)
            maker_asset: ERC-1155 token, token id, amount and transfer data
            taker_asset: ERC-20 token the maker wants in return
            taker_amount: Amount of taker_asset in atomic units
            expiration_seconds: Lifetime from now, 0 for no expiration
            allow_partial_fill: Set the allow-multiple-fills trait
            nonce: Upper 96 bits of the salt (defaults to time + randomness)
            now: Unix seconds used for expiration (defaults to current time)

        Returns:
            Built order with extension, hash and EIP-712 payload

        Raises:
            InvalidAmountError: If an amount is not a positive uint256 int
            InvalidExpirationError: If the expiration is not an int or does not fit 40 bits
            InvalidNonceError: If the nonce is not an int or does not fit 96 bits
            InvalidOrderError: If an address or token id is malformed
        """
        if not _is_int(maker_asset.amount):
            raise InvalidAmountError(
                f"Making amount must be an int, got {type(maker_asset.amount).__name__}"
            )
        if not 0 < maker_asset.amount <= UINT256_MAX:
            raise InvalidAmountError(f"Making amount must be positive: {maker_asset.amount}")
        if not _is_int(taker_amount):
            raise InvalidAmountError(
                f"Taking amount must be an int, got {type(taker_amount).__name__}"
            )
        if not 0 < taker_amount <= UINT256_MAX:
            raise InvalidAmountError(f"Taking amount must be positive: {taker_amount}")
        if not _is_int(expiration_seconds):
            raise InvalidExpirationError(
                f"Expiration seconds must be an int, got {type(expiration_seconds).__name__}"
            )
        if expiration_seconds < 0:
            raise InvalidExpirationError(
                f"Expiration seconds must not be negative: {expiration_seconds}"
            )
        if not _is_int(maker_asset.token_id):
            raise InvalidOrderError(
                f"Token id must be an int, got {type(maker_asset.token_id).__name__}"
            )
        if not 0 <= maker_asset.token_id <= UINT256_MAX:
            raise InvalidOrderError(f"Token id out of uint256 range: {maker_asset.token_id}")

        expiration = 0
        if expiration_seconds > 0:
            current = int(time.time() if now is None else now)
            expiration = current + expiration_seconds
            if expiration > EXPIRATION_MASK:
                raise InvalidExpirationError(
                    f"Expiration {expiration} does not fit in the 40-bit traits field"
                )

        if nonce is None:
            nonce = default_nonce()
        if not _is_int(nonce):
            raise InvalidNonceError(f"Nonce must be an int, got {type(nonce).__name__}")
        if not 0 <= nonce < (1 << SALT_NONCE_BITS):
            raise InvalidNonceError(f"Nonce does not fit in {SALT_NONCE_BITS} bits: {nonce}")

        maker = _checksum(maker_address, "maker_address")
        token = _checksum(maker_asset.token, "token")
        taker_asset = _checksum(taker_asset, "taker_asset")

        extension = encode_extension(token, maker_asset.token_id, maker_asset.data)

        # Low 160 bits bind the salt to the extension contents
        salt = (nonce << SALT_HASH_BITS) | extension_hash160(extension)

        maker_traits = set_flag(0, HAS_EXTENSION_FLAG, True)
        if allow_partial_fill:
            maker_traits = set_flag(maker_traits, ALLOW_MULTIPLE_FILLS_FLAG, True)
        if expiration:
            maker_traits = set_expiration(maker_traits, expiration)

        order = Order(
            salt=salt,
            maker=maker,
            receiver=maker,
            maker_asset=self.erc1155_proxy_address,
            taker_asset=taker_asset,
            making_amount=maker_asset.amount,
            taking_amount=taker_amount,
            maker_traits=maker_traits,
        )
        order_hash = self.hasher.hash_hex(order)

        logger.debug(
            "Built order %s: token=%s tokenId=%s amount=%s expiration=%s",
            order_hash,
            token,
            maker_asset.token_id,
            maker_asset.amount,
            expiration,
        )

        return BuiltOrder(
            order=order,
            extension=extension,
            order_hash=order_hash,
            typed_data=self.hasher.typed_data(order),
        )

    def build_and_sign_order(
        self,
        signer: OrderSigner,
        maker_asset: ERC1155Asset,
        taker_asset: str,
        taker_amount: int,
        expiration_seconds: int = 0,
        allow_partial_fill: bool = False,
        nonce: Optional[int] = None,
    ) -> SignedOrder:
        """
        Build an order for the signer's own address and sign it using EIP-712.

        Args:
            signer: Maker's signer
            maker_asset: ERC-1155 position to sell
            taker_asset: ERC-20 token wanted in return
            taker_amount: Amount of taker_asset in atomic units
            expiration_seconds: Lifetime from now, 0 for no expiration
            allow_partial_fill: Set the allow-multiple-fills trait
            nonce: Upper 96 bits of the salt

        Returns:
            Signed order
        """
        if signer.hasher.domain != self.hasher.domain:
            raise InvalidOrderError("Signer and builder use different EIP-712 domains")

        built = self.build_order(
            maker_address=signer.address,
            maker_asset=maker_asset,
            taker_asset=taker_asset,
            taker_amount=taker_amount,
            expiration_seconds=expiration_seconds,
            allow_partial_fill=allow_partial_fill,
            nonce=nonce,
        )

        return SignedOrder(
            order=built.order,
            extension=built.extension,
            order_hash=built.order_hash,
            signature=signer.sign(built.order),
        )
