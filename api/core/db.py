"""
Async database wiring using asyncpg.

This module owns the process-wide connection pool. It is created on first
use (or eagerly on FastAPI startup) and closed on shutdown (see `api/main.py`).
Feature code does not touch the pool directly; it asks for a
`RecordGateway` bound to it.

Configuration (env):
- DATABASE_URL, or DB_HOST / DB_PORT / DB_NAME / DB_USER / DB_PASSWORD
- DB_SSL: "require" (default) or "disable"
- DB_POOL_MIN_SIZE, DB_POOL_MAX_SIZE
- DB_CONNECT_TIMEOUT, DB_ACQUIRE_TIMEOUT, DB_IDLE_TIMEOUT, DB_COMMAND_TIMEOUT (seconds)
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

import asyncpg

from .errors import translate_error
from .gateway import RecordGateway

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None
_pool_lock = asyncio.Lock()


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class PoolSettings:
    dsn: str
    ssl: str | None = "require"
    min_size: int = 1
    max_size: int = 20
    connect_timeout: float = 2.0
    acquire_timeout: float = 10.0
    idle_timeout: float = 30.0
    command_timeout: float = 30.0


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = _env_str("DATABASE_URL")
    if url:
        return _sanitize_database_url(url)

    host = _env_str("DB_HOST")
    name = _env_str("DB_NAME")
    if not host or not name:
        raise RuntimeError("DATABASE_URL is not set (or DB_HOST / DB_NAME are missing).")

    port = _env_int("DB_PORT", 5432)
    user = quote(_env_str("DB_USER"), safe="")
    password = quote(_env_str("DB_PASSWORD"), safe="")
    auth = f"{user}:{password}@" if password else (f"{user}@" if user else "")
    return f"postgresql://{auth}{host}:{port}/{name}"


def pool_settings() -> PoolSettings:
    ssl = _env_str("DB_SSL", "require").lower()
    return PoolSettings(
        dsn=database_url(),
        ssl=None if ssl in {"disable", "0", "false", "off"} else ssl,
        min_size=max(0, _env_int("DB_POOL_MIN_SIZE", 1)),
        max_size=max(1, _env_int("DB_POOL_MAX_SIZE", 20)),
        connect_timeout=_env_float("DB_CONNECT_TIMEOUT", 2.0),
        acquire_timeout=_env_float("DB_ACQUIRE_TIMEOUT", 10.0),
        idle_timeout=_env_float("DB_IDLE_TIMEOUT", 30.0),
        command_timeout=_env_float("DB_COMMAND_TIMEOUT", 30.0),
    )


async def open_pool(settings: PoolSettings) -> asyncpg.Pool:
    """
    Create a new pool from explicit settings (no global state involved).
    """
    return await asyncpg.create_pool(
        dsn=settings.dsn,
        ssl=settings.ssl,
        min_size=min(settings.min_size, settings.max_size),
        max_size=settings.max_size,
        timeout=settings.connect_timeout,
        max_inactive_connection_lifetime=settings.idle_timeout,
        command_timeout=settings.command_timeout,
    )


async def init_pool() -> asyncpg.Pool:
    global _pool
    async with _pool_lock:
        if _pool is None:
            settings = pool_settings()
            try:
                _pool = await open_pool(settings)
            except Exception as exc:
                mapped = translate_error(exc)
                logger.warning("db_pool_open_failed kind=%s", type(mapped).__name__)
                raise mapped from exc
            logger.info("db_pool_opened")
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await RecordGateway(_pool).close_connection()
    _pool = None


async def get_pool() -> asyncpg.Pool:
    """
    Return the shared pool, creating it on first use.
    """
    if _pool is not None:
        return _pool
    return await init_pool()


async def get_gateway() -> RecordGateway:
    """
    FastAPI dependency: a gateway bound to the shared pool.
    """
    pool = await get_pool()
    return RecordGateway(pool, acquire_timeout=_env_float("DB_ACQUIRE_TIMEOUT", 10.0))
