"""PostgreSQL order backend.

Status transitions and deletes are conditional statements
(`... WHERE order_hash = %s AND status = %s`), so the database serializes
concurrent fill/cancel/cleanup requests across processes.
"""

import logging
from typing import Optional

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from options_orderbook.errors import OrderValidationError
from options_orderbook.types import OrderRecord, OrderStatus

logger = logging.getLogger(__name__)


class PostgresOrderBackend:
    """Order backend storing one JSONB record per order hash."""

    def __init__(self, conninfo: str, table: str = "limit_orders"):
        """
        Connect and create the orders table if missing.

        Args:
            conninfo: PostgreSQL connection string
            table: Table name
        """
        self.table = table
        self._conn = psycopg.connect(conninfo, autocommit=True)
        self._ident = sql.Identifier(table)
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS {table} (
                order_hash TEXT PRIMARY KEY,
                status TEXT NOT NULL,
                created_at DOUBLE PRECISION NOT NULL,
                record JSONB NOT NULL
            )
            """
        )

    def _execute(self, query: str, params: tuple = ()) -> psycopg.Cursor:
        return self._conn.execute(sql.SQL(query).format(table=self._ident), params)

    def add(self, record: OrderRecord) -> bool:
        cursor = self._execute(
            """
            INSERT INTO {table} (order_hash, status, created_at, record)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (order_hash) DO NOTHING
            """,
            (
                record.order_hash,
                record.status.value,
                record.created_at,
                Jsonb(record.to_dict()),
            ),
        )
        return cursor.rowcount == 1

    def get(self, order_hash: str) -> Optional[OrderRecord]:
        row = self._execute(
            "SELECT record FROM {table} WHERE order_hash = %s", (order_hash,)
        ).fetchone()
        if row is None:
            return None
        return OrderRecord.from_dict(row[0])

    def compare_and_update(
        self, order_hash: str, expected_status: OrderStatus, updated: OrderRecord
    ) -> bool:
        cursor = self._execute(
            """
            UPDATE {table} SET status = %s, record = %s
            WHERE order_hash = %s AND status = %s
            """,
            (
                updated.status.value,
                Jsonb(updated.to_dict()),
                order_hash,
                expected_status.value,
            ),
        )
        return cursor.rowcount == 1

    def delete_if(self, order_hash: str, expected_status: OrderStatus) -> bool:
        cursor = self._execute(
            "DELETE FROM {table} WHERE order_hash = %s AND status = %s",
            (order_hash, expected_status.value),
        )
        return cursor.rowcount == 1

    def records(self) -> list[OrderRecord]:
        rows = self._execute(
            "SELECT order_hash, record FROM {table} ORDER BY created_at"
        ).fetchall()
        records = []
        for order_hash, payload in rows:
            try:
                records.append(OrderRecord.from_dict(payload))
            except OrderValidationError as e:
                logger.warning("Skipping unreadable order %s: %s", order_hash, e)
        return records

    def drop(self) -> None:
        """Drop the orders table."""
        self._execute("DROP TABLE IF EXISTS {table}")

    def close(self) -> None:
        self._conn.close()
