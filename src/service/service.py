import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from auth import AuthResolver
from auth.session import SessionManager, SessionSettings
from users import InMemoryUserStore, PasswordHasher, UserStore

from .config import get_bcrypt_rounds, get_cors_config
from .middleware import setup_middleware
from .routers import auth as auth_routes, misc, users as user_routes

logger = logging.getLogger('accounts.service')


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    session_manager: SessionManager = app.state.session_manager

    logger.info("__________ Start session store")
    await session_manager.start()
    logger.info("Session store start: ok")

    try:
        yield
    finally:
        logger.info("__________ Stop session store")
        await session_manager.close()


def create_app(
    session_settings: Optional[SessionSettings] = None,
    user_store: Optional[UserStore] = None,
    session_manager: Optional[SessionManager] = None,
) -> FastAPI:
    """
    Build the accounts service.

    Args:
        session_settings: session policy, read from the environment when omitted
        user_store: user collaborator, an in-memory store when omitted
        session_manager: prebuilt manager, takes precedence over session_settings

    Returns:
        The configured FastAPI application
    """
    logger.info("__________ Initialize API")
    if session_manager is None:
        session_manager = SessionManager(session_settings or SessionSettings.from_env())
    if user_store is None:
        logger.warning("No user store configured, using in-memory user store (not suitable for production)")
        user_store = InMemoryUserStore(PasswordHasher(rounds=get_bcrypt_rounds()))

    app = FastAPI(title="User Accounts Service", lifespan=lifespan)
    app.state.session_manager = session_manager
    app.state.user_store = user_store
    app.state.auth_resolver = AuthResolver(session_manager, user_store)

    cors_allowed_origins, cors_allowed_methods, cors_allowed_headers = get_cors_config()
    setup_middleware(app, session_manager, cors_allowed_origins, cors_allowed_methods, cors_allowed_headers)

    app.include_router(misc.router)
    app.include_router(user_routes.router)
    app.include_router(auth_routes.router)

    return app
