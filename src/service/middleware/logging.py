import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger('accounts.service.middleware')


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """Log requests and responses, including whether a session cookie was presented"""

    def __init__(self, app, cookie_name: str):
        super().__init__(app)
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        logger.debug(f"REQUEST: {request.method} {request.url.path}")

        # Never log the cookie value itself
        logger.debug(f"REQUEST: Session cookie present: {self.cookie_name in request.cookies}")

        response = await call_next(request)

        logger.debug(f"RESPONSE: Status {response.status_code} for {request.method} {request.url.path}")
        set_cookie = response.headers.get("set-cookie")
        if set_cookie:
            logger.debug(f"RESPONSE: Session cookie {'cleared' if 'Max-Age=0' in set_cookie else 'set'}")

        if response.status_code >= 500:
            logger.error(f"ERROR_RESPONSE: Status {response.status_code} for {request.method} {request.url.path}")

        return response
