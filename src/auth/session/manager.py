"""
SessionManager

Owns the cookie and store policy for server-side sessions: builds the
configured store, loads the session for an inbound request and writes it
back (with at most one cookie header) when the response is ready.
"""
import asyncio
import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request, Response

from .backends import SessionStore, create_store
from .config import MemoryStoreConfig, SessionSettings
from .cookie import SessionCookie
from .middleware import SessionMiddleware
from .models import CookieState, RequestSession, SessionData

logger = logging.getLogger('accounts.session.manager')


class SessionManager:
    def __init__(self, settings: SessionSettings, store: Optional[SessionStore] = None):
        logger.info(" . sessionManager: construct")
        self.settings = settings
        self.store = store if store is not None else create_store(settings.store, default_ttl_ms=settings.store_ttl_ms)
        self.cookie = SessionCookie(settings.cookie_name, settings.secret_key)
        self._log_config()

    def install(self, app: FastAPI) -> None:
        """Add the middleware that loads and commits sessions through this manager."""
        app.add_middleware(SessionMiddleware, manager=self)

    async def start(self) -> None:
        await self.store.start()

    async def close(self) -> None:
        await self.store.close()

    def new_session(self) -> RequestSession:
        data = SessionData(cookie=self._new_cookie_state())
        return RequestSession(str(uuid.uuid4()), data, is_new=True)

    async def load(self, request: Request) -> RequestSession:
        """
        Load the session referenced by the request cookie.

        A missing, tampered or expired cookie, or a cookie whose record is no
        longer in the store, yields a fresh empty session with a new id.

        Raises:
            SessionStoreUnavailable: if the store cannot be reached
        """
        session_id = self.cookie.read(request)
        if session_id:
            data = await self.store.get(session_id)
            if data is not None and not data.cookie.is_expired():
                return RequestSession(session_id, data)
            if data is not None:
                logger.debug(f"Session {session_id} cookie expired, discarding")
                await self.store.destroy(session_id)
            else:
                logger.debug(f"Session {session_id} not found in store, creating a new session")
        return self.new_session()

    async def commit(self, session: RequestSession, response: Response) -> None:
        """
        Persist the session after the route ran and set or clear the cookie.

        Store writes are shielded so a client disconnect does not drop them.

        Raises:
            SessionStoreUnavailable: if the store cannot be reached
        """
        if session.destroyed:
            self.cookie.delete_from_response(response, session.data.cookie)
            return

        modified = session.is_modified
        save = modified or self.settings.resave or (session.is_new and self.settings.save_uninitialized)

        if save:
            await asyncio.shield(self.store.set(session.session_id, session.data, self.ttl_ms(session.data)))
        elif session.is_new:
            # uninitialized sessions are never stored and never get a cookie
            return
        else:
            await asyncio.shield(self.store.touch(session.session_id, self.ttl_ms(session.data)))

        if session.is_new or modified:
            self.cookie.attach_to_response(response, session.session_id, session.data.cookie)
        session.mark_saved()

    async def destroy(self, session: RequestSession) -> None:
        """Remove the session from the store and clear its cookie on the response."""
        logger.debug(f"Destroying session {session.session_id}")
        await self.store.destroy(session.session_id)
        session.data.user_id = None
        session.destroyed = True

    def bind_user(self, session: RequestSession, user_id: int, remember_me: bool = False) -> None:
        """Bind a user to the session. Remember-me extends the cookie lifetime."""
        session.data.user_id = user_id
        if remember_me:
            logger.debug(f"Remembering user {user_id} for {self.settings.remember_me_days} days")
            session.data.cookie.set_max_age(self.settings.remember_me_ms)

    def ttl_ms(self, data: SessionData) -> int:
        remaining = data.cookie.remaining_ms()
        return remaining if remaining is not None else self.settings.store_ttl_ms

    def _new_cookie_state(self) -> CookieState:
        cookie = CookieState(
            secure=self.settings.secure,
            http_only=self.settings.http_only,
            same_site=self.settings.same_site,
            path=self.settings.path,
            domain=self.settings.domain,
        )
        cookie.set_max_age(self.settings.max_age_ms)
        return cookie

    def _log_config(self) -> None:
        settings = self.settings
        logger.info("    . session settings")
        logger.info(f"      . cookie name: {settings.cookie_name}")
        logger.info(f"      . cookie secure: {settings.secure}")
        logger.info(f"      . cookie sameSite: {settings.same_site.value}")
        logger.info(f"      . cookie httpOnly: {settings.http_only}")
        if settings.max_age_ms is None:
            logger.info("      . cookie maxAge: undefined (expires on browser close)")
        else:
            logger.info(f"      . cookie maxAge: {settings.max_age_ms} ms")
        logger.info(f"      . resave: {settings.resave}")
        logger.info(f"      . saveUninitialized: {settings.save_uninitialized}")
        logger.info(f"      . remember me: {settings.remember_me_days} days")
        logger.info(f"      . store: {settings.store.type}")
        if isinstance(settings.store, MemoryStoreConfig):
            logger.info(f"      . memorystore: sessions reaped every {settings.store.check_period_ms / (1000 * 60 * 60)} hours")
