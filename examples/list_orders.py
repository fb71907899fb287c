"""Example script for listing orders from the orderbook API."""

import argparse

from options_orderbook import OrderbookApiClient, OrderFilters, OrderStatus
from options_orderbook.constants import get_config_with_env_overrides


def main(maker=None, active=False, status=None, limit=20):
    """Print one page of orders."""
    cfg = get_config_with_env_overrides()
    client = OrderbookApiClient(api_url=cfg.api_url)

    page = client.list_orders(
        OrderFilters(maker=maker, active=active, status=status, limit=limit)
    )

    print(f"Orders: {len(page.records)} of {page.total}\n")
    print(f"{'Hash':<68s} {'Status':<10s} {'Making':>8s} {'Taking':>24s} {'Expiration':>12s}")
    for record in page.records:
        print(
            f"{record.order_hash:<68s} {record.status.value:<10s} "
            f"{record.order.making_amount:>8d} {record.order.taking_amount:>24d} "
            f"{record.expiration:>12d}"
        )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="List orderbook orders")
    parser.add_argument("--maker", help="Only orders from this maker")
    parser.add_argument("--active", action="store_true", help="Only live orders")
    parser.add_argument(
        "--status",
        choices=[s.value for s in OrderStatus],
        help="Only orders with this status (expired is derived from the expiration)",
    )
    parser.add_argument("--limit", type=int, default=20)
    args = parser.parse_args()

    main(maker=args.maker, active=args.active, status=args.status, limit=args.limit)
