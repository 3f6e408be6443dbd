"""Session store backends and the factory that selects one from configuration."""
import logging
from typing import Optional

from service.redis_client import create_redis_client

from ..config import MemoryStoreConfig, RedisStoreConfig, SessionStoreConfig
from .base import SessionStore, SessionStoreUnavailable
from .memory_backend import DisposeCallback, MemoryBackend
from .redis_backend import RedisBackend

logger = logging.getLogger('accounts.session.backends')


def create_store(config: SessionStoreConfig, default_ttl_ms: int, dispose: Optional[DisposeCallback] = None) -> SessionStore:
    """Build the session store selected by configuration."""
    if isinstance(config, MemoryStoreConfig):
        logger.info(f"Creating memory session store (check period: {config.check_period_ms} ms)")
        return MemoryBackend(
            check_period_ms=config.check_period_ms,
            default_ttl_ms=default_ttl_ms,
            no_dispose_on_set=config.no_dispose_on_set,
            dispose=dispose,
        )
    if isinstance(config, RedisStoreConfig):
        logger.info(f"Creating redis session store ({config.url})")
        return RedisBackend(
            redis_client=create_redis_client(config.url, socket_timeout=config.socket_timeout),
            default_ttl_ms=default_ttl_ms,
            key_prefix=config.key_prefix,
        )
    raise ValueError(f"Unsupported session store config: {config!r}")


__all__ = [
    "create_store",
    "SessionStore",
    "SessionStoreUnavailable",
    "MemoryBackend",
    "RedisBackend",
]
