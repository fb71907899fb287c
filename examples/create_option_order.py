"""Example script for selling an ERC-1155 option position through the orderbook."""

import os

from dotenv import load_dotenv

from options_orderbook import (
    ERC1155Asset,
    OrderbookApiClient,
    OrderBuilder,
    OrderHasher,
    OrderSigner,
)
from options_orderbook.constants import get_config_with_env_overrides


def main():
    """Build, sign and submit a single option order."""
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    load_dotenv(os.path.join(repo_root, ".env"), override=False)

    private_key = os.getenv("PRIVATE_KEY", "").strip()
    option_token = os.getenv("OPTION_TOKEN", "").strip()
    taker_asset = os.getenv("TAKER_ASSET", "").strip()

    if not private_key:
        raise ValueError("PRIVATE_KEY environment variable is required")
    if not option_token:
        raise ValueError("OPTION_TOKEN environment variable is required")
    if not taker_asset:
        raise ValueError("TAKER_ASSET environment variable is required")

    token_id = int(os.getenv("TOKEN_ID", "1"))
    amount = int(os.getenv("AMOUNT", "1"))
    taker_amount = int(os.getenv("TAKER_AMOUNT", str(10 * 10**18)))
    expiration_seconds = int(os.getenv("EXPIRATION_SECONDS", "3600"))

    cfg = get_config_with_env_overrides()
    builder = OrderBuilder(
        chain_id=cfg.chain_id,
        limit_order_protocol_address=cfg.limit_order_protocol_address,
        erc1155_proxy_address=cfg.erc1155_proxy_address,
    )
    signer = OrderSigner(
        private_key, OrderHasher(cfg.chain_id, cfg.limit_order_protocol_address)
    )
    client = OrderbookApiClient(api_url=cfg.api_url)

    print(f"Maker: {signer.address}")
    print(f"Chain ID: {cfg.chain_id}")
    print(f"Orderbook API: {cfg.api_url}")

    signed = builder.build_and_sign_order(
        signer=signer,
        maker_asset=ERC1155Asset(token=option_token, token_id=token_id, amount=amount),
        taker_asset=taker_asset,
        taker_amount=taker_amount,
        expiration_seconds=expiration_seconds,
    )

    print(f"\n{'Order Hash':<20s}: {signed.order_hash}")
    print(f"{'Token ID':<20s}: {token_id}")
    print(f"{'Making Amount':<20s}: {signed.order.making_amount}")
    print(f"{'Taking Amount':<20s}: {signed.order.taking_amount}")
    print(f"{'Salt':<20s}: {signed.order.salt}")

    try:
        order_hash = client.submit_order(signed)
        print(f"\n✓ Order submitted: {order_hash}")

        record = client.get_order(order_hash)
        if record is not None:
            print(f"{'Status':<20s}: {record.status.value}")
            print(f"{'Expiration':<20s}: {record.expiration}")
    except Exception as e:
        print(f"\n✗ Order submission failed: {e}")
        raise


if __name__ == "__main__":
    main()
