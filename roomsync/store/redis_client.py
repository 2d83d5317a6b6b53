"""
Redis connection management for the shared chat store.
"""
from typing import Optional
import logging
import redis

logger = logging.getLogger(__name__)

# Redis connection pool and client
_redis_pool: Optional[redis.ConnectionPool] = None
_redis_client: Optional[redis.Redis] = None


def init_redis(
    host: str = "localhost",
    port: int = 6379,
    db: int = 0,
    url: Optional[str] = None,
    max_connections: int = 10,
) -> None:
    """Initialize Redis connection pool. Call once at app startup."""
    global _redis_pool, _redis_client
    if url:
        _redis_pool = redis.ConnectionPool.from_url(
            url, decode_responses=True, max_connections=max_connections
        )
    else:
        _redis_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            decode_responses=True,
            max_connections=max_connections,
        )
    _redis_client = redis.Redis(connection_pool=_redis_pool)
    logger.info(f"Redis initialized: {url or f'{host}:{port}/{db}'}")


def set_redis_client(client: Optional[redis.Redis]) -> None:
    """Install an already-built client (tests, embedding). None resets."""
    global _redis_pool, _redis_client
    _redis_pool = None
    _redis_client = client


def get_redis_client() -> redis.Redis:
    """Get Redis client. Raises if not initialized."""
    if _redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis_client


def is_initialized() -> bool:
    return _redis_client is not None


def close_redis() -> None:
    global _redis_pool, _redis_client
    if _redis_pool is not None:
        _redis_pool.disconnect()
    _redis_pool = None
    _redis_client = None
