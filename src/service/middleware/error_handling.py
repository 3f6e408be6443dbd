import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger('accounts.service.middleware')


def internal_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_code": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Last line of defence for errors no exception handler claimed.

    A request that fails here never reaches the session commit, so the
    stored session and the client's cookie are left as they were.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException:
            raise
        except Exception as exc:
            session = getattr(request.state, "session", None)
            logger.error(
                f"Unhandled error for {request.method} {request.url.path} (session={session!r}): {exc}",
                exc_info=True,
            )
            return internal_error_response()
