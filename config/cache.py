# config/cache.py
import logging
from typing import Optional
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from config.settings import settings
from util.errors import StoreConnectionError

logger = logging.getLogger(__name__)


def open_redis(
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
) -> Redis:
    """
    One client per worker process; callers own it and close it with close_redis().
    """
    host = host or settings.REDIS_HOST
    port = port or settings.REDIS_PORT
    client = Redis(
        host=host,
        port=port,
        db=settings.REDIS_DB if db is None else db,
        decode_responses=False,  # repositories get raw bytes
        encoding_errors="surrogateescape",  # keys are not guaranteed utf-8
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_keepalive=True,
        health_check_interval=30,
    )
    # Fail fast on startup if Redis is unreachable.
    try:
        client.ping()
    except (RedisConnectionError, RedisTimeoutError) as e:
        client.close()
        raise StoreConnectionError(f"{host}:{port} {e}") from e
    logger.debug("redis.connected host=%s port=%d", host, port)
    return client


def close_redis(client: Optional[Redis]) -> None:
    if client is not None:
        client.close()
