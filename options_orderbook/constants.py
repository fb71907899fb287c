"""Constants for the options orderbook.

This module supports environment-based defaults controlled by `ORDERBOOK_ENV`:
- `local` (default): a local fork of Gnosis Chain (Anvil/Hardhat chain id)
- `gnosis`

You can also override individual fields via environment variables:
- `ORDERBOOK_API_URL`
- `ORDERBOOK_CHAIN_ID`
- `ORDERBOOK_LOP_ADDRESS`
- `ORDERBOOK_ERC1155_PROXY_ADDRESS`
- `ORDERBOOK_DATABASE_URL`
- `ORDERBOOK_CLEANUP_INTERVAL`

Legacy constant names remain available, but note they are resolved at import
time. For runtime resolution, call `get_config_with_env_overrides()`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Literal


OrderbookEnv = Literal["local", "gnosis"]

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# 1inch Limit Order Protocol v4 (same deployment address on every chain)
LOP_V4_ADDRESS = "0x111111125421cA6dc452d289314280a0f8842A65"


@dataclass(frozen=True, slots=True)
class OrderbookEnvConfig:
    api_url: str
    chain_id: int
    limit_order_protocol_address: str
    erc1155_proxy_address: str
    database_url: str | None
    cleanup_interval_seconds: int


# -------- Environment configs --------
# NOTE: the local proxy is the first contract a fresh Anvil account 0 deploys.
LOCAL_CONFIG = OrderbookEnvConfig(
    api_url="http://localhost:3000/api/orders",
    chain_id=31337,
    limit_order_protocol_address=LOP_V4_ADDRESS,
    erc1155_proxy_address="0x5FbDB2315678afecb367f032d93F642f64180aa3",
    database_url=None,
    cleanup_interval_seconds=60,
)

# NOTE: the proxy must be provided per deployment via ORDERBOOK_ERC1155_PROXY_ADDRESS.
GNOSIS_CONFIG = OrderbookEnvConfig(
    api_url="__CHANGE_ME__",
    chain_id=100,
    limit_order_protocol_address=LOP_V4_ADDRESS,
    erc1155_proxy_address=ZERO_ADDRESS,
    database_url=None,
    cleanup_interval_seconds=300,
)


def get_orderbook_env() -> OrderbookEnv:
    """Return selected environment from `ORDERBOOK_ENV` (defaults to `local`)."""
    raw = (os.getenv("ORDERBOOK_ENV") or "local").strip().lower()
    if raw in ("local", "gnosis"):
        return raw  # type: ignore[return-value]
    raise ValueError("Invalid ORDERBOOK_ENV. Expected 'local' or 'gnosis'.")


def get_default_config() -> OrderbookEnvConfig:
    """Return the base config for the selected environment."""
    env = get_orderbook_env()
    return LOCAL_CONFIG if env == "local" else GNOSIS_CONFIG


def _parse_int_env(var_name: str) -> int | None:
    raw = os.getenv(var_name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Invalid {var_name}: expected an integer") from e


def _parse_str_env(var_name: str) -> str | None:
    raw = os.getenv(var_name)
    if raw is None or raw == "":
        return None
    return raw


def get_config_with_env_overrides() -> OrderbookEnvConfig:
    """Return selected env config, applying `ORDERBOOK_*` overrides if present."""
    cfg = get_default_config()

    api_url = _parse_str_env("ORDERBOOK_API_URL")
    chain_id = _parse_int_env("ORDERBOOK_CHAIN_ID")
    lop_address = _parse_str_env("ORDERBOOK_LOP_ADDRESS")
    proxy_address = _parse_str_env("ORDERBOOK_ERC1155_PROXY_ADDRESS")
    database_url = _parse_str_env("ORDERBOOK_DATABASE_URL")
    cleanup_interval = _parse_int_env("ORDERBOOK_CLEANUP_INTERVAL")

    cfg = replace(
        cfg,
        api_url=api_url if api_url is not None else cfg.api_url,
        chain_id=chain_id if chain_id is not None else cfg.chain_id,
        limit_order_protocol_address=(
            lop_address
            if lop_address is not None
            else cfg.limit_order_protocol_address
        ),
        erc1155_proxy_address=(
            proxy_address if proxy_address is not None else cfg.erc1155_proxy_address
        ),
        database_url=database_url if database_url is not None else cfg.database_url,
        cleanup_interval_seconds=(
            cleanup_interval
            if cleanup_interval is not None
            else cfg.cleanup_interval_seconds
        ),
    )

    if cfg.cleanup_interval_seconds <= 0:
        raise ValueError("Invalid ORDERBOOK_CLEANUP_INTERVAL: expected a positive integer")

    # Don't silently sign against placeholder gnosis config.
    if get_orderbook_env() == "gnosis":
        if (
            cfg.api_url == "__CHANGE_ME__"
            or cfg.erc1155_proxy_address == ZERO_ADDRESS
            or cfg.limit_order_protocol_address == ZERO_ADDRESS
        ):
            raise RuntimeError(
                "Gnosis config has placeholders. Set ORDERBOOK_* overrides "
                "(e.g. ORDERBOOK_API_URL, ORDERBOOK_ERC1155_PROXY_ADDRESS) "
                "or update GNOSIS_CONFIG."
            )

    return cfg


# -------- Legacy names (resolved at import time) --------
_SELECTED_CONFIG = get_config_with_env_overrides()

DEFAULT_API_URL = _SELECTED_CONFIG.api_url
DEFAULT_CHAIN_ID = _SELECTED_CONFIG.chain_id
DEFAULT_LOP_ADDRESS = _SELECTED_CONFIG.limit_order_protocol_address
ERC1155_PROXY_ADDRESS = _SELECTED_CONFIG.erc1155_proxy_address
DEFAULT_DATABASE_URL = _SELECTED_CONFIG.database_url
DEFAULT_CLEANUP_INTERVAL = _SELECTED_CONFIG.cleanup_interval_seconds

# EIP-712 Domain
DOMAIN_NAME = "1inch Limit Order Protocol"
DOMAIN_VERSION = "4"

# Order constants
ORDER_STRUCTURE = (
    "Order(uint256 salt,address maker,address receiver,address makerAsset,"
    "address takerAsset,uint256 makingAmount,uint256 takingAmount,uint256 makerTraits)"
)

UINT256_MAX = (1 << 256) - 1

# MakerTraits bit layout
ALLOW_MULTIPLE_FILLS_FLAG = 0
HAS_EXTENSION_FLAG = 255
EXPIRATION_OFFSET = 210
EXPIRATION_BITS = 40
EXPIRATION_MASK = (1 << EXPIRATION_BITS) - 1

# Salt layout: upper 96 bits nonce, lower 160 bits extension hash
SALT_HASH_BITS = 160
SALT_HASH_MASK = (1 << SALT_HASH_BITS) - 1
SALT_NONCE_BITS = 96

# Extension layout: 8 x uint32 offsets
EXTENSION_OFFSET_COUNT = 8
EXTENSION_HEADER_SIZE = EXTENSION_OFFSET_COUNT * 4

# Default page size for order listings
DEFAULT_LIST_LIMIT = 50
