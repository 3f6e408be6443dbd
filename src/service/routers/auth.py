"""
Session login/logout API

    POST     /login      login an existing user
    POST     /logout     logout the logged in user
"""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from auth.session import RequestSession, SessionManager
from users import LoginRequest, UserIdentity, UserStore
from users.models import MessageResponse
from ..dependencies import get_request_session, get_session_manager, get_user_store

logger = logging.getLogger('accounts.service.routers.auth')

router = APIRouter(
    tags=["session"],
)


@router.post(
    "/login",
    response_model=UserIdentity,
    responses={401: {"description": "Invalid credentials"}},
)
async def login(
    credentials: LoginRequest,
    session: Annotated[RequestSession, Depends(get_request_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    user_store: Annotated[UserStore, Depends(get_user_store)],
):
    """Log in with email and password, binding the user to the current session."""
    user = await user_store.authenticate(credentials.email, credentials.password)
    if user is None:
        logger.warning(f"Login (API): invalid credentials for {credentials.email}")
        raise HTTPException(status_code=401, detail="invalid email or password")

    session_manager.bind_user(session, user.id, remember_me=credentials.remember_me)
    logger.info(f"Login (API): user {user.email} logged in (uid={user.id})")
    return user


@router.post("/logout", response_model=MessageResponse)
async def logout(
    session: Annotated[RequestSession, Depends(get_request_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> MessageResponse:
    """Destroy the current session and clear its cookie. Safe to call when not logged in."""
    logger.debug(f"Logout (API): logging out session {session.session_id} (uid={session.user_id})")
    await session_manager.destroy(session)
    return MessageResponse(message="logged out")
