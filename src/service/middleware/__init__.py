import logging as log
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi_sessions.backends.session_backend import BackendError

from auth import StaleSessionError
from auth.session import SessionManager
from .logging import RequestResponseLoggingMiddleware
from .error_handling import ErrorHandlingMiddleware
from .exception_handlers import (
    custom_http_exception_handler,
    request_validation_exception_handler,
    stale_session_exception_handler,
    session_backend_exception_handler,
)

logger = log.getLogger('accounts.service.middleware')


def setup_middleware(
    app: FastAPI,
    session_manager: SessionManager,
    cors_allowed_origins: list[str],
    cors_allowed_methods: list[str],
    cors_allowed_headers: list[str]
):
    """
    Setup exception handlers and middleware for the FastAPI application.

    Middleware are added in reverse order (last added = first executed).
    Current order of execution:
    1. CORSMiddleware (handles CORS)
    2. ErrorHandlingMiddleware (catches unhandled errors)
    3. RequestResponseLoggingMiddleware (logs requests/responses)
    4. SessionMiddleware (loads the session, saves it after the response is ready)

    Args:
        app: FastAPI application instance
        session_manager: SessionManager the session middleware is bound to
        cors_allowed_origins: List of allowed CORS origins
        cors_allowed_methods: List of allowed HTTP methods
        cors_allowed_headers: List of allowed headers
    """
    app.add_exception_handler(HTTPException, custom_http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StaleSessionError, stale_session_exception_handler)
    app.add_exception_handler(BackendError, session_backend_exception_handler)

    # Innermost, so handled exceptions still pass through the session commit
    session_manager.install(app)

    app.add_middleware(RequestResponseLoggingMiddleware, cookie_name=session_manager.settings.cookie_name)

    app.add_middleware(ErrorHandlingMiddleware)

    # Setup CORS policy, credentials are needed for the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allowed_origins,
        allow_credentials=True,
        allow_methods=cors_allowed_methods,
        allow_headers=cors_allowed_headers,
    )

    logger.info(f"CORS configured with origins: {cors_allowed_origins}")


__all__ = [
    'setup_middleware',
    'RequestResponseLoggingMiddleware',
    'ErrorHandlingMiddleware',
    'custom_http_exception_handler',
    'request_validation_exception_handler',
    'stale_session_exception_handler',
    'session_backend_exception_handler',
]
