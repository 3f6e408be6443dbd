import os
import logging
from typing import Optional

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


def create_redis_client(redis_url: Optional[str] = None, socket_timeout: Optional[float] = None) -> aioredis.Redis:
    """
    Create an async Redis client.

    The connection is opened lazily on first command, so this never blocks
    or fails at construction. Timeouts apply to connect and to every command.
    """
    if not redis_url:
        redis_url = os.getenv("REDIS_URL", "redis://localhost:6379")

    logger.info(f"Creating new Redis client with: URL {redis_url}, socket timeout {socket_timeout}")
    return aioredis.from_url(
        redis_url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )
