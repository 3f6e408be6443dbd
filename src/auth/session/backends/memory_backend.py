import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..models import SessionData
from .base import SessionStore

logger = logging.getLogger(__name__)

DisposeCallback = Callable[[str, SessionData], None]


@dataclass
class _Entry:
    data: SessionData
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


def _log_dispose(session_id: str, data: SessionData) -> None:
    logger.debug(f"session memorystore: deleting key {session_id} (uid={data.user_id})")


class MemoryBackend(SessionStore):
    """
    In-process session store.

    Entries carry their own expiry and are treated as absent once it has
    passed. A sweep task started by start() removes expired entries every
    check_period_ms; it runs on the event loop so it never interleaves with
    a request that is reading or writing the same entry.
    """

    def __init__(
        self,
        check_period_ms: int,
        default_ttl_ms: int,
        no_dispose_on_set: bool = False,
        dispose: Optional[DisposeCallback] = None,
    ):
        super().__init__(default_ttl_ms)
        self.check_period_ms = check_period_ms
        self.no_dispose_on_set = no_dispose_on_set
        self.dispose = dispose or _log_dispose
        self._entries: Dict[str, _Entry] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._entries

    async def get(self, session_id: str) -> Optional[SessionData]:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if entry.expired(time.monotonic()):
            self._remove(session_id)
            return None
        return entry.data.model_copy(deep=True)

    async def set(self, session_id: str, data: SessionData, ttl_ms: int) -> None:
        previous = self._entries.get(session_id)
        self._entries[session_id] = _Entry(data.model_copy(deep=True), time.monotonic() + ttl_ms / 1000)
        if previous is not None and not self.no_dispose_on_set:
            self._dispose(session_id, previous.data)

    async def destroy(self, session_id: str) -> None:
        self._remove(session_id)

    async def touch(self, session_id: str, ttl_ms: int) -> None:
        entry = self._entries.get(session_id)
        now = time.monotonic()
        if entry is not None and not entry.expired(now):
            entry.expires_at = now + ttl_ms / 1000

    def prune(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        now = time.monotonic()
        expired = [sid for sid, entry in self._entries.items() if entry.expired(now)]
        for sid in expired:
            self._remove(sid)
        return len(expired)

    async def start(self) -> None:
        if self._sweep_task is None:
            logger.info(f"Starting stale session reaping every {self.check_period_ms} ms")
            self._sweep_task = asyncio.create_task(self._sweep())

    async def close(self) -> None:
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            logger.info("Session sweep task cancelled during shutdown")
        self._sweep_task = None

    async def _sweep(self) -> None:
        while True:
            await asyncio.sleep(self.check_period_ms / 1000)
            try:
                removed = self.prune()
                if removed:
                    logger.info(f"Session sweep completed: removed {removed} expired sessions")
            except Exception as e:
                logger.error(f"Error during session sweep: {e}", exc_info=True)

    def _remove(self, session_id: str) -> None:
        entry = self._entries.pop(session_id, None)
        if entry is not None:
            self._dispose(session_id, entry.data)

    def _dispose(self, session_id: str, data: SessionData) -> None:
        try:
            self.dispose(session_id, data)
        except Exception as e:
            logger.warning(f"Session dispose callback failed for {session_id}: {e}")
