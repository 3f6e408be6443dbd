import logging
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi_sessions.backends.session_backend import BackendError

from auth import StaleSessionError
from auth.session import SessionStoreUnavailable
from auth.session.middleware import session_unavailable_response

logger = logging.getLogger('accounts.service.middleware')


async def custom_http_exception_handler(request: Request, exc: HTTPException):
    """Render HTTPExceptions as {"message": ...}, or the detail itself when it is a dict"""
    if exc.status_code >= 500:
        logger.error(f"HTTP_EXCEPTION: {exc.status_code} - {exc.detail}")
    else:
        logger.debug(f"HTTP_EXCEPTION: {exc.status_code} - {exc.detail}")

    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"message": str(exc.detail) if exc.detail else "request failed"}

    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are a 400 with a readable message"""
    errors = exc.errors()
    messages = []
    for error in errors:
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    message = "; ".join(messages) or "invalid request"
    logger.debug(f"Bad request for {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"message": message})


async def stale_session_exception_handler(request: Request, exc: StaleSessionError):
    """
    The session pointed at a deleted user. It has been destroyed and the
    session middleware clears the cookie on this response, so a retry will
    arrive as an anonymous visitor.
    """
    return JSONResponse(
        status_code=401,
        content={
            "error": "Stale session",
            "error_code": "session_stale",
            "message": str(exc),
        },
    )


async def session_backend_exception_handler(request: Request, exc: BackendError):
    if isinstance(exc, SessionStoreUnavailable):
        logger.error(f"SESSION_STORE_UNAVAILABLE: {request.method} {request.url.path}: {exc}")
        return session_unavailable_response()

    logger.error(f"SESSION_BACKEND_ERROR: {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Session error",
            "error_code": "session_error",
            "message": "An unexpected session error occurred. Please try again later.",
        },
    )
