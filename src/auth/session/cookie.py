import logging
from typing import Optional

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeSerializer

from .models import CookieState

logger = logging.getLogger('accounts.session.cookie')


class SessionCookie:
    """
    Carries the session identifier to and from the client.

    The identifier is signed with the session secret so a client can only
    present ids this service issued.
    """

    def __init__(self, cookie_name: str, secret_key: str):
        self.cookie_name = cookie_name
        self.signer = URLSafeSerializer(secret_key, salt=cookie_name)

    def read(self, request: Request) -> Optional[str]:
        """Return the verified session id from the request, or None."""
        signed_session_id = request.cookies.get(self.cookie_name)
        if not signed_session_id:
            return None
        try:
            return str(self.signer.loads(signed_session_id))
        except BadSignature:
            logger.warning("Session cookie has invalid signature, ignoring it")
            return None

    def attach_to_response(self, response: Response, session_id: str, cookie: CookieState) -> None:
        # No Max-Age means the browser drops the cookie when it closes
        max_age = cookie.remaining_ms()
        response.set_cookie(
            key=self.cookie_name,
            value=self.signer.dumps(session_id),
            max_age=max(round(max_age / 1000), 0) if max_age is not None else None,
            path=cookie.path,
            domain=cookie.domain,
            secure=cookie.secure,
            httponly=cookie.http_only,
            samesite=cookie.same_site.value,
        )

    def delete_from_response(self, response: Response, cookie: CookieState) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path=cookie.path,
            domain=cookie.domain,
            secure=cookie.secure,
            httponly=cookie.http_only,
            samesite=cookie.same_site.value,
        )
