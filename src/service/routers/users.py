"""
User API

    GET      /user       return logged in user
    GET      /user/{id}  return user by id
    DELETE   /user/{id}  delete a user by id
    POST     /users      create (signup) a new user
"""
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from auth.session import RequestSession, SessionManager
from users import SignupRequest, UserIdentity, UserStore, parse_user_id
from users.models import MessageResponse
from ..dependencies import (
    get_logged_in_user,
    get_request_session,
    get_session_manager,
    get_user_store,
    require_logged_in_user,
)

logger = logging.getLogger('accounts.service.routers.users')

router = APIRouter(
    tags=["user"],
)


@router.get(
    "/user",
    response_model=UserIdentity,
    responses={202: {"model": MessageResponse, "description": "No user logged in"}},
)
async def get_user(user: Annotated[Optional[UserIdentity], Depends(get_logged_in_user)]):
    """Return the currently logged in user."""
    logger.debug("GetUser (API): checking for logged in user")
    if user is None:
        logger.debug("GetUser (API): no user logged in")
        return JSONResponse(status_code=202, content={"message": "user not logged in"})

    logger.debug(f"GetUser (API): user {user.email} logged in (uid={user.id})")
    return user


@router.post(
    "/users",
    status_code=201,
    response_model=UserIdentity,
    responses={409: {"model": MessageResponse, "description": "User already exists"}},
)
async def create_user(
    signup: SignupRequest,
    calling_user: Annotated[Optional[UserIdentity], Depends(get_logged_in_user)],
    session: Annotated[RequestSession, Depends(get_request_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    user_store: Annotated[UserStore, Depends(get_user_store)],
):
    """
    Create a new user.

    An anonymous caller is signing up and gets logged in as the new user. A
    logged in caller is creating an account for someone else and stays
    logged in as themselves.
    """
    if calling_user:
        logger.debug(f"CreateUser (API): existing user {calling_user.email} creating new user {signup.email}")

    logger.debug(f"CreateUser (API): create new user: email={signup.email}, firstName={signup.first_name}, lastName={signup.last_name}")
    new_user = await user_store.create(signup.email, signup.first_name, signup.last_name, signup.password)
    if new_user is None:
        raise HTTPException(status_code=409, detail="user already exists")

    logger.debug(f"CreateUser (API): new user created: email={new_user.email}, id={new_user.id}")

    if not calling_user:
        logger.debug("CreateUser (API): new user signup: creating session/cookie")
        session_manager.bind_user(session, new_user.id, remember_me=signup.remember_me)

    return new_user


def _user_id_from_path(id: str, operation: str) -> int:
    try:
        return parse_user_id(id)
    except ValueError as e:
        logger.warning(f"{operation} (API): invalid user id in request: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.get(
    "/user/{id}",
    response_model=UserIdentity,
    responses={401: {"description": "Logged in user required"}, 404: {"description": "No such user"}},
)
async def get_user_by_id(
    id: str,
    calling_user: Annotated[UserIdentity, Depends(require_logged_in_user)],
    user_store: Annotated[UserStore, Depends(get_user_store)],
):
    """Return a specific user. Logged in users only."""
    user_id = _user_id_from_path(id, "GetUserById")
    logger.debug(f"GetUserById (API): getting user with id={user_id}")
    user = await user_store.load(user_id)
    if user is None:
        logger.warning(f"GetUserById (API): no user with id={user_id}")
        raise HTTPException(status_code=404, detail=f"no user with id={user_id}")
    return user


@router.delete(
    "/user/{id}",
    response_model=UserIdentity,
    responses={401: {"description": "Logged in user required"}, 404: {"description": "No such user"}},
)
async def delete_user_by_id(
    id: str,
    calling_user: Annotated[UserIdentity, Depends(require_logged_in_user)],
    user_store: Annotated[UserStore, Depends(get_user_store)],
):
    """Delete a specific user. Logged in users only."""
    user_id = _user_id_from_path(id, "DeleteUserById")
    logger.debug(f"DeleteUserById (API): user {calling_user.email} deleting user with id={user_id}")
    user = await user_store.delete(user_id)
    if user is None:
        logger.warning(f"DeleteUserById (API): no user with id={user_id}")
        raise HTTPException(status_code=404, detail=f"no user with id={user_id}")
    return user
