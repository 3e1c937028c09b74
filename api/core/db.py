"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any
from urllib.parse import parse_qsl, urlsplit

import asyncpg

from . import settings

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None

# Anything in here means "the store is unavailable or the statement failed".
DB_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
    RuntimeError,
)


def _has_sslmode(url: str) -> bool:
    query = urlsplit(url).query
    return any(k == "sslmode" for (k, _) in parse_qsl(query, keep_blank_values=True))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return url


def ssl_option(url: str) -> str | bool | None:
    """
    asyncpg `ssl` argument.

    DATABASE_SSL wins, then an explicit `sslmode` in the DSN (None lets asyncpg
    read it), then production's encrypted-but-unverified default.
    """
    override = settings.database_ssl_override()
    if override is not None:
        return "require" if override else False
    if _has_sslmode(url):
        return None
    if settings.is_production():
        return "require"
    return None


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    dsn = database_url()
    ssl = ssl_option(dsn)
    _pool = await asyncpg.create_pool(
        dsn=dsn,
        min_size=settings.pool_min_size(),
        max_size=settings.pool_max_size(),
        command_timeout=settings.command_timeout(),
        ssl=ssl,
    )
    logger.info(
        "db_pool_ready min_size=%s max_size=%s ssl=%s",
        settings.pool_min_size(),
        settings.pool_max_size(),
        ssl,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None
    logger.info("db_pool_closed")


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool().fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool().fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def fetch_val(sql: str, *args: Any) -> Any:
    """
    Run a query and return the first column of the first row.
    """
    return await pool().fetchval(sql, *args)


async def execute(sql: str, *args: Any) -> None:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
    """
    await pool().execute(sql, *args)
