# educonnect/db/helpers.py
"""
Query helpers shared by repositories.

Driver and pool failures surface as DatabaseError so callers deal with one
exception type. ``recoverable`` tells the caller whether a retry could help.
"""

from typing import Any

import psycopg
from psycopg import errors as pg_errors

from educonnect.db.pool import db_pool
from educonnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

# Connection loss or timeouts; a later attempt may succeed
_TRANSIENT_ERRORS = (psycopg.OperationalError, pg_errors.QueryCanceled)


class DatabaseError(Exception):
    """A query could not be completed."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


async def fetch_all(
    query: str,
    params: tuple = (),
    *,
    operation: str = "fetch_all",
    connection: psycopg.AsyncConnection | None = None,
) -> list[dict[str, Any]]:
    """
    Run a read query and return every row as a dict.

    Args:
        query: SQL with %s placeholders
        params: Values for the placeholders
        operation: Name used in logs and on DatabaseError
        connection: Reuse this connection instead of borrowing from the pool
    """
    try:
        if connection is not None:
            async with connection.cursor() as cur:
                await cur.execute(query, params)
                return await cur.fetchall()

        async with db_pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return await cur.fetchall()

    except psycopg.Error as e:
        recoverable = isinstance(e, _TRANSIENT_ERRORS)
        logger.error(
            "Database query failed",
            operation=operation,
            sqlstate=e.sqlstate,
            recoverable=recoverable,
            error=str(e),
        )
        raise DatabaseError(f"Query failed: {e}", operation=operation, recoverable=recoverable) from e
    except RuntimeError as e:
        # Pool not opened yet or already closed
        logger.error("Database unavailable", operation=operation, error=str(e))
        raise DatabaseError(str(e), operation=operation, recoverable=False) from e
