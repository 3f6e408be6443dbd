"""
FastAPI dependencies for the accounts service.

This module provides reusable dependency functions that can be injected
into route handlers throughout the application. Everything is read from
the app state populated by create_app, so there is no module-level state.
"""
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request

from auth import AuthResolver, StaleSessionError
from auth.session import RequestSession, SessionManager
from users import UserIdentity, UserStore


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_auth_resolver(request: Request) -> AuthResolver:
    return request.app.state.auth_resolver


def get_request_session(request: Request) -> RequestSession:
    """The session the session middleware attached to this request."""
    return request.state.session


async def get_logged_in_user(
    session: Annotated[RequestSession, Depends(get_request_session)],
    resolver: Annotated[AuthResolver, Depends(get_auth_resolver)],
) -> Optional[UserIdentity]:
    """
    Get the logged in user, or None for an anonymous visitor.

    Raises:
        StaleSessionError: if the session was bound to a deleted user
    """
    resolution = await resolver.load_logged_in_user(session)
    if resolution.is_stale:
        raise StaleSessionError(session.session_id, resolution.user_id)
    return resolution.user


async def require_logged_in_user(
    user: Annotated[Optional[UserIdentity], Depends(get_logged_in_user)],
) -> UserIdentity:
    """Like get_logged_in_user, but anonymous visitors get a 401."""
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"error_code": "login_required", "message": "logged in user required"},
        )
    return user
