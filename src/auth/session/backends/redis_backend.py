import logging
from typing import NoReturn, Optional

import redis.asyncio as aioredis
from fastapi_sessions.backends.session_backend import BackendError
from pydantic import ValidationError
from redis import RedisError, ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from ..models import SessionData
from .base import SessionStore, SessionStoreUnavailable

logger = logging.getLogger(__name__)


class RedisBackend(SessionStore):
    """
    Session store shared between service instances.

    Each session is one JSON string written with SET ... PX, so writes are
    atomic per key and the TTL travels with the value.
    """

    def __init__(self, redis_client: aioredis.Redis, default_ttl_ms: int, key_prefix: str = "sess:", owns_client: bool = True):
        """Initialize the Redis backend with an async Redis client."""
        super().__init__(default_ttl_ms)
        self.redis_client = redis_client
        self.key_prefix = key_prefix
        self.owns_client = owns_client

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def _handle_redis_error(self, operation: str, session_id: str, error: Exception) -> NoReturn:
        """Centralized error handling for Redis operations."""
        if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
            logger.error(f"Redis connection failed during {operation} for session {session_id}: {error}")
            raise SessionStoreUnavailable(f"Session store unavailable during {operation}") from error
        elif isinstance(error, RedisError):
            logger.error(f"Redis error during {operation} for session {session_id}: {error}")
            raise BackendError(f"Session store error during {operation}") from error
        else:
            logger.error(f"Unexpected error during {operation} for session {session_id}: {error}")
            raise BackendError(f"Unexpected error during {operation}") from error

    async def get(self, session_id: str) -> Optional[SessionData]:
        try:
            payload = await self.redis_client.get(self._key(session_id))
        except Exception as e:
            self._handle_redis_error("session read", session_id, e)

        if payload is None:
            return None

        try:
            return SessionData.model_validate_json(payload)
        except ValidationError as e:
            logger.error(f"Invalid session data format for session {session_id}, discarding: {e}")
            return None

    async def set(self, session_id: str, data: SessionData, ttl_ms: int) -> None:
        try:
            await self.redis_client.set(self._key(session_id), data.model_dump_json(), px=max(ttl_ms, 1))
            logger.debug(f"Session {session_id} saved (ttl={ttl_ms} ms)")
        except Exception as e:
            self._handle_redis_error("session write", session_id, e)

    async def destroy(self, session_id: str) -> None:
        try:
            deleted_count = await self.redis_client.delete(self._key(session_id))
        except Exception as e:
            self._handle_redis_error("session deletion", session_id, e)

        if deleted_count == 0:
            logger.debug(f"Session {session_id} was already gone, may have been removed concurrently")
        else:
            logger.debug(f"Session {session_id} deleted successfully")

    async def touch(self, session_id: str, ttl_ms: int) -> None:
        try:
            await self.redis_client.pexpire(self._key(session_id), max(ttl_ms, 1))
        except Exception as e:
            self._handle_redis_error("session touch", session_id, e)

    async def health_check(self) -> bool:
        try:
            return bool(await self.redis_client.ping())
        except RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        if self.owns_client:
            await self.redis_client.aclose()
