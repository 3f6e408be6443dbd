"""
Resolution of the logged in user for a request.

Every protected route asks the AuthResolver who is making the request. The
answer is one of three things: an authenticated user, nobody (an anonymous
session, the normal case for a visitor), or a stale session whose bound
user no longer exists. A stale session is destroyed before the result is
returned so the client's next request starts out anonymous.
"""
import logging
from enum import Enum
from typing import Optional

from users import UserIdentity, UserStore

from .session import RequestSession, SessionManager

logger = logging.getLogger('accounts.auth.resolver')


class ResolutionStatus(str, Enum):
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"
    STALE = "stale"


class Resolution:
    def __init__(self, status: ResolutionStatus, user: Optional[UserIdentity] = None, user_id: Optional[int] = None):
        self.status = status
        self.user = user
        self.user_id = user.id if user is not None else user_id

    @classmethod
    def authenticated(cls, user: UserIdentity) -> "Resolution":
        return cls(ResolutionStatus.AUTHENTICATED, user)

    @classmethod
    def anonymous(cls) -> "Resolution":
        return cls(ResolutionStatus.ANONYMOUS)

    @classmethod
    def stale(cls, user_id: int) -> "Resolution":
        return cls(ResolutionStatus.STALE, user_id=user_id)

    @property
    def is_authenticated(self) -> bool:
        return self.status is ResolutionStatus.AUTHENTICATED

    @property
    def is_stale(self) -> bool:
        return self.status is ResolutionStatus.STALE

    def __repr__(self) -> str:
        return f"Resolution({self.status.value}, user={self.user!r})"


class StaleSessionError(Exception):
    """The session was bound to a user that no longer exists and has been deleted."""

    def __init__(self, session_id: str, user_id: int):
        self.session_id = session_id
        self.user_id = user_id
        super().__init__("stale user session deleted, please try again")


class AuthResolver:
    def __init__(self, session_manager: SessionManager, user_store: UserStore):
        self.session_manager = session_manager
        self.user_store = user_store

    async def load_logged_in_user(self, session: RequestSession) -> Resolution:
        """
        Resolve the user bound to a session.

        Args:
            session: the session attached to the current request

        Returns:
            Resolution: authenticated with the user, anonymous, or stale. A
            stale session has already been destroyed when this returns.

        Raises:
            SessionStoreUnavailable: if the stale session could not be removed
        """
        uid = session.user_id
        if uid is None:
            return Resolution.anonymous()

        logger.debug(f"LoadLoggedInUser: found active session (sid={session.session_id}, uid={uid})")
        user = await self.user_store.load(uid)
        if user is not None:
            return Resolution.authenticated(user)

        logger.error(f"LoadLoggedInUser: stale session (sid={session.session_id}, uid={uid}), deleting session/cookie")
        await self.session_manager.destroy(session)
        return Resolution.stale(uid)
