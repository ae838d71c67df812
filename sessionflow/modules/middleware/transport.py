"""Cookie-based identifier transport for FastAPI/Starlette requests."""

import logging
from typing import Optional

from fastapi import Request, Response

from ...config.provider import SessionConfig

logger = logging.getLogger(__name__)

_UNSET = object()


class CookieTransport:
    """
    SessionTransport reading the identifier from a request cookie.

    The outgoing identifier is buffered until apply() writes it onto the
    response, because the response does not exist while start() runs.
    """

    def __init__(self, request: Request, config: SessionConfig):
        self.request = request
        self.config = config
        self.cookie_name = config.full_cookie_name
        self.client_ip: Optional[str] = request.client.host if request.client else None
        self.user_agent: Optional[str] = request.headers.get("user-agent")
        self.is_ajax = request.headers.get("x-requested-with", "").lower() == "xmlhttprequest"
        self._outgoing = _UNSET

    @property
    def inbound_session_id(self) -> Optional[str]:
        return self.request.cookies.get(self.cookie_name)

    def get_session_id(self) -> Optional[str]:
        if self._outgoing is not _UNSET:
            return self._outgoing
        return self.inbound_session_id

    def set_session_id(self, session_id: Optional[str]) -> None:
        self._outgoing = session_id

    def apply(self, response: Response) -> None:
        """Emit Set-Cookie for the current identifier, or expire the cookie."""
        if self._outgoing is _UNSET:
            return

        cookie = self.config.cookie
        domain = cookie.domain or None
        if self._outgoing is None:
            if self.inbound_session_id is not None:
                response.delete_cookie(
                    self.cookie_name,
                    path=cookie.path,
                    domain=domain,
                    secure=cookie.secure,
                    httponly=cookie.httponly,
                    samesite=cookie.samesite,
                )
            return

        response.set_cookie(
            self.cookie_name,
            self._outgoing,
            max_age=self.config.expiration,
            path=cookie.path,
            domain=domain,
            secure=cookie.secure,
            httponly=cookie.httponly,
            samesite=cookie.samesite,
        )
