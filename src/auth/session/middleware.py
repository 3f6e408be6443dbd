import logging
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from fastapi.responses import JSONResponse

from .backends import SessionStoreUnavailable

if TYPE_CHECKING:
    from .manager import SessionManager

logger = logging.getLogger('accounts.session.middleware')


def session_unavailable_response() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "error": "Session store unavailable",
            "error_code": "session_store_unavailable",
            "message": "Sessions are temporarily unavailable. Please try again later.",
        },
    )


class SessionMiddleware(BaseHTTPMiddleware):
    """Attach the request session before routing and persist it after the response is ready"""

    def __init__(self, app, manager: "SessionManager"):
        super().__init__(app)
        self.manager = manager

    async def dispatch(self, request: Request, call_next):
        try:
            session = await self.manager.load(request)
        except SessionStoreUnavailable as e:
            logger.error(f"Failed to load session for {request.url.path}: {e}")
            return session_unavailable_response()

        request.state.session = session
        response = await call_next(request)

        try:
            await self.manager.commit(session, response)
        except SessionStoreUnavailable as e:
            logger.error(f"Failed to save session {session.session_id}: {e}")
            return session_unavailable_response()

        return response
