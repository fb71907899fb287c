"""Background worker sweeping expired orders out of the PostgreSQL store."""

import asyncio
import logging
import os
import signal

from dotenv import load_dotenv

from options_orderbook import CleanupSweep, OrderLifecycleStore
from options_orderbook.constants import get_config_with_env_overrides
from options_orderbook.postgres_backend import PostgresOrderBackend


async def main() -> None:
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    load_dotenv(os.path.join(repo_root, ".env"), override=False)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = get_config_with_env_overrides()
    if not cfg.database_url:
        raise ValueError("ORDERBOOK_DATABASE_URL environment variable is required")

    retention = os.getenv("TERMINAL_RETENTION_SECONDS")
    backend = PostgresOrderBackend(cfg.database_url)
    sweep = CleanupSweep(
        OrderLifecycleStore(backend=backend),
        terminal_retention_seconds=float(retention) if retention else None,
    )

    print(f"Cleanup worker started (interval {cfg.cleanup_interval_seconds}s)")

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _signal_handler() -> None:
        print("\nShutdown signal received...")
        shutdown.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            pass

    try:
        await sweep.run_periodically(cfg.cleanup_interval_seconds, shutdown)
    finally:
        backend.close()
        print("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
