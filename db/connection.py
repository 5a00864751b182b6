"""
db/connection.py
----------------
Process-wide PostgreSQL pool shared by every repository.

Repositories run inside worker threads (services call them through
asyncio.to_thread), hence ThreadedConnectionPool. A repository borrows a
connection with `get_connection()` and must hand it back with
`release_connection()` in a `finally` block.
"""

from typing import Optional

import psycopg2
from psycopg2 import pool

from config import DATABASE_URL, DB_POOL_MAX, DB_POOL_MIN
from utils.errors import UpstreamServiceError
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: Optional[pool.ThreadedConnectionPool] = None


def init_pool(dsn: str = DATABASE_URL, min_conn: int = DB_POOL_MIN, max_conn: int = DB_POOL_MAX) -> None:
    """
    Open the pool. Calling it again while a pool exists does nothing.

    Raises:
        psycopg2.OperationalError: The server refused or is unreachable.
    """
    global _pool
    if _pool is not None:
        return
    try:
        _pool = pool.ThreadedConnectionPool(min_conn, max_conn, dsn)
    except psycopg2.OperationalError as e:
        logger.error(f"Cannot reach PostgreSQL: {e}")
        raise
    logger.info(f"PostgreSQL pool ready ({min_conn}..{max_conn} connections)")


def get_connection():
    """
    Borrow a connection.

    Raises:
        RuntimeError: `init_pool()` was never called.
        UpstreamServiceError: All `max_conn` connections are borrowed.
    """
    if _pool is None:
        raise RuntimeError("init_pool() must run before any repository is used")
    try:
        return _pool.getconn()
    except pool.PoolError as e:
        logger.error(f"No free database connection: {e}")
        raise UpstreamServiceError("database pool exhausted") from e


def release_connection(conn) -> None:
    """Give a borrowed connection back; a closed one is discarded instead of reused."""
    if _pool is None:
        return
    _pool.putconn(conn, close=bool(conn.closed))


def close_pool() -> None:
    global _pool
    if _pool is None:
        return
    _pool.closeall()
    _pool = None
    logger.info("PostgreSQL pool closed")
