"""Redis connection behind the Redis backing store.

Owns one client built from the ``redis_*`` settings and hands out a
RedisStore per entity type scope. Every store shares the client and keeps
its keys under ``{redis_namespace}:{scope}:``.
"""

import logging
from typing import Optional

import redis as redis_lib

from canonid.core.config import settings
from canonid.core.stores import RedisStore

logger = logging.getLogger(__name__)

_client: Optional[redis_lib.Redis] = None


def connect(host: Optional[str] = None, port: Optional[int] = None) -> redis_lib.Redis:
    """Create the shared client (call once at app startup).

    An unreachable server is logged, not raised: stores fail on first use.
    """
    global _client
    host = host or settings.redis_host
    port = port or settings.redis_port
    _client = redis_lib.Redis(host=host, port=port, decode_responses=True)
    if check_connection():
        logger.info(f"Connected to Redis at {host}:{port} (namespace '{settings.redis_namespace}')")
    else:
        logger.error(f"Redis at {host}:{port} is not answering")
    return _client


def get_client() -> redis_lib.Redis:
    if _client is None:
        raise RuntimeError("Redis is not connected. Call connect() first.")
    return _client


def make_redis_store(scope: str) -> RedisStore:
    """Store for one entity type; the scope is the owning type's name."""
    return RedisStore(get_client(), scope=scope.lower(), namespace=settings.redis_namespace)


def disconnect() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("Redis connection closed")


def check_connection() -> bool:
    """True if the shared client answers PING."""
    if _client is None:
        return False
    try:
        return bool(_client.ping())
    except redis_lib.RedisError:
        return False
