import os
import logging
from typing import Annotated, Literal, Optional, Union

from fastapi_sessions.frontends.implementations.cookie import SameSiteEnum
from pydantic import BaseModel, Field

logger = logging.getLogger('accounts.session.config')

ONE_DAY_MS = 24 * 60 * 60 * 1000


class MemoryStoreConfig(BaseModel):
    type: Literal["memory"] = "memory"
    check_period_ms: int = Field(default=ONE_DAY_MS, gt=0, description="Interval between expired-session sweeps")
    no_dispose_on_set: bool = False


class RedisStoreConfig(BaseModel):
    type: Literal["redis"] = "redis"
    url: str = "redis://localhost:6379"
    key_prefix: str = "sess:"
    socket_timeout: float = 5.0


SessionStoreConfig = Annotated[Union[MemoryStoreConfig, RedisStoreConfig], Field(discriminator="type")]


class SessionSettings(BaseModel):
    """Cookie and store policy for the session layer."""
    secret_key: str
    cookie_name: str = "session"
    secure: bool = True
    same_site: SameSiteEnum = SameSiteEnum.lax
    http_only: bool = True
    max_age_ms: Optional[int] = None
    domain: Optional[str] = None
    path: str = "/"
    resave: bool = False
    save_uninitialized: bool = False
    remember_me_days: int = 7
    store_ttl_ms: int = ONE_DAY_MS
    store: SessionStoreConfig = Field(default_factory=MemoryStoreConfig)

    @property
    def remember_me_ms(self) -> int:
        return self.remember_me_days * ONE_DAY_MS

    @classmethod
    def from_env(cls) -> "SessionSettings":
        """
        Build the session settings from environment variables.

        Raises:
            ValueError: if SESSION_SECRET_KEY is not set or the store type is unknown
        """
        if not (secret_key := os.getenv("SESSION_SECRET_KEY")):
            raise ValueError("SESSION_SECRET_KEY environment variable must be set")

        max_age = os.getenv("SESSION_COOKIE_MAX_AGE_MS")

        # For development, allow insecure cookies over HTTP
        secure_cookies = _env_flag("SECURE_COOKIES", True)
        if not secure_cookies:
            logger.warning("SECURE_COOKIES disabled: session cookie will be sent over plain HTTP")

        return cls(
            secret_key=secret_key,
            cookie_name=os.getenv("SESSION_COOKIE_NAME", "session"),
            secure=secure_cookies,
            same_site=SameSiteEnum(os.getenv("SESSION_COOKIE_SAMESITE", "lax").lower()),
            http_only=_env_flag("SESSION_COOKIE_HTTPONLY", True),
            max_age_ms=int(max_age) if max_age else None,
            domain=os.getenv("COOKIE_DOMAIN") or None,
            resave=_env_flag("SESSION_RESAVE", False),
            save_uninitialized=_env_flag("SESSION_SAVE_UNINITIALIZED", False),
            remember_me_days=int(os.getenv("SESSION_REMEMBER_ME_DAYS", 7)),
            store_ttl_ms=int(os.getenv("SESSION_STORE_TTL_SECONDS", 86400)) * 1000,
            store=store_config_from_env(),
        )


def store_config_from_env() -> Union[MemoryStoreConfig, RedisStoreConfig]:
    store_type = os.getenv("SESSION_STORE_TYPE", "memory").lower()
    if store_type in ("memory", "memorystore"):
        return MemoryStoreConfig(
            check_period_ms=int(os.getenv("SESSION_STORE_CHECK_PERIOD_MS", ONE_DAY_MS)),
            no_dispose_on_set=_env_flag("SESSION_STORE_NO_DISPOSE_ON_SET", False),
        )
    if store_type == "redis":
        return RedisStoreConfig(
            url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            socket_timeout=float(os.getenv("REDIS_SOCKET_TIMEOUT", 5)),
        )
    raise ValueError(f"Unsupported SESSION_STORE_TYPE: {store_type}. Supported types: ['memory', 'redis']")


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"
