from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi_sessions.frontends.implementations.cookie import SameSiteEnum
from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CookieState(BaseModel):
    """Per-session cookie attributes, stored alongside the session payload."""
    max_age: Optional[int] = Field(default=None, description="Lifetime in milliseconds, None for a browser-session cookie")
    expires: Optional[datetime] = None
    secure: bool = True
    http_only: bool = True
    same_site: SameSiteEnum = SameSiteEnum.lax
    path: str = "/"
    domain: Optional[str] = None

    def set_max_age(self, max_age: Optional[int]) -> None:
        self.max_age = max_age
        self.expires = _utcnow() + timedelta(milliseconds=max_age) if max_age is not None else None

    def remaining_ms(self) -> Optional[int]:
        if self.expires is None:
            return None
        return int((self.expires - _utcnow()).total_seconds() * 1000)

    def is_expired(self) -> bool:
        remaining = self.remaining_ms()
        return remaining is not None and remaining <= 0


class SessionData(BaseModel):
    user_id: Optional[int] = None
    cookie: CookieState = Field(default_factory=CookieState)
    created_at: datetime = Field(default_factory=_utcnow, description="Timestamp when the session was created")


class RequestSession:
    """
    The session attached to a single request.

    Tracks whether the payload changed since it was loaded so the
    middleware knows whether it has to be written back.
    """

    def __init__(self, session_id: str, data: SessionData, is_new: bool = False):
        self.session_id = session_id
        self.data = data
        self.is_new = is_new
        self.destroyed = False
        self._snapshot = data.model_dump_json()

    @property
    def user_id(self) -> Optional[int]:
        return self.data.user_id

    @property
    def is_modified(self) -> bool:
        return self.data.model_dump_json() != self._snapshot

    def mark_saved(self) -> None:
        self._snapshot = self.data.model_dump_json()
        self.is_new = False

    def __repr__(self) -> str:
        return f"RequestSession(sid={self.session_id}, uid={self.user_id}, new={self.is_new}, destroyed={self.destroyed})"
