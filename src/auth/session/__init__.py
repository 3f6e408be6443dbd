"""HTTP session management for authentication and user state."""

from .backends import SessionStore, SessionStoreUnavailable, create_store
from .config import MemoryStoreConfig, RedisStoreConfig, SessionSettings
from .cookie import SessionCookie
from .manager import SessionManager
from .middleware import SessionMiddleware
from .models import CookieState, RequestSession, SessionData

__all__ = [
    "SessionManager",
    "SessionMiddleware",
    "SessionSettings",
    "MemoryStoreConfig",
    "RedisStoreConfig",
    "SessionStore",
    "SessionStoreUnavailable",
    "create_store",
    "SessionCookie",
    "CookieState",
    "RequestSession",
    "SessionData",
]
