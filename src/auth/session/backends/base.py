"""Session store contract shared by the memory and Redis backends."""
from abc import abstractmethod
from typing import Optional

from fastapi_sessions.backends.session_backend import BackendError, SessionBackend

from ..models import SessionData


class SessionStoreUnavailable(BackendError):
    """The underlying session persistence could not be reached."""


class SessionStore(SessionBackend[str, SessionData]):
    """
    Keyed storage of session records with per-entry expiry.

    Subclasses implement get/set/destroy/touch. The SessionBackend
    create/read/update/delete methods are provided on top of them so a
    store can be used anywhere a fastapi_sessions backend is expected.
    """

    def __init__(self, default_ttl_ms: int):
        self.default_ttl_ms = default_ttl_ms

    @abstractmethod
    async def get(self, session_id: str) -> Optional[SessionData]:
        """Return a copy of the session, or None if it is absent or expired."""

    @abstractmethod
    async def set(self, session_id: str, data: SessionData, ttl_ms: int) -> None:
        """Store the session, overwriting any existing record."""

    @abstractmethod
    async def destroy(self, session_id: str) -> None:
        """Remove the session. Removing an absent session is not an error."""

    @abstractmethod
    async def touch(self, session_id: str, ttl_ms: int) -> None:
        """Refresh the expiry of an existing session without rewriting it."""

    async def start(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True

    async def create(self, session_id: str, data: SessionData) -> None:
        await self.set(session_id, data, self.default_ttl_ms)

    async def read(self, session_id: str) -> Optional[SessionData]:
        return await self.get(session_id)

    async def update(self, session_id: str, data: SessionData) -> None:
        if await self.get(session_id) is None:
            raise BackendError("Session does not exist, cannot update")
        await self.set(session_id, data, self.default_ttl_ms)

    async def delete(self, session_id: str) -> None:
        await self.destroy(session_id)
