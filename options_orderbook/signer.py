"""Order signing with a local EIP-712 account."""

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount

from options_orderbook.errors import InvalidSignatureError
from options_orderbook.order_hash import OrderHasher
from options_orderbook.types import Order


class OrderSigner:
    """Signs orders using EIP-712 typed data."""

    def __init__(self, private_key: str, hasher: OrderHasher):
        """
        Initialize order signer.

        Args:
            private_key: Private key for signing orders (hex string with or without 0x prefix)
            hasher: Hasher holding the EIP-712 domain
        """
        if not private_key.startswith("0x"):
            private_key = f"0x{private_key}"
        self.account: LocalAccount = Account.from_key(private_key)
        self.address = self.account.address
        self.hasher = hasher

    def sign(self, order: Order) -> str:
        """Sign an order and return the 65-byte signature as 0x hex."""
        signed_message = self.account.sign_typed_data(
            full_message=self.hasher.typed_data(order)
        )
        return "0x" + bytes(signed_message.signature).hex()


def recover_order_signer(hasher: OrderHasher, order: Order, signature: str) -> str:
    """
    Recover the address that signed an order.

    Raises:
        InvalidSignatureError: If the signature cannot be recovered
    """
    signable = encode_typed_data(full_message=hasher.typed_data(order))
    try:
        return Account.recover_message(signable, signature=signature)
    except Exception as e:  # eth_keys raises its own BadSignature
        raise InvalidSignatureError(f"Failed to recover signer: {e}") from e
