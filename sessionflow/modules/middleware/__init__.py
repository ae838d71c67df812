"""
Session Middleware Module - Black Box Interface

Purpose: Run one session cycle around every FastAPI request
Interface: SessionMiddleware, get_session dependency, CookieTransport
Hidden: Cookie parsing and emission, handler construction, cycle cleanup

Can be used by any FastAPI app or sub-app that needs server-side sessions.
"""

import logging
from typing import Dict, Optional

from fastapi import HTTPException, Request

from ...config.provider import SessionConfig
from ..handlers.factory import HandlerFactory
from ..session import Clock, SessionError, SessionManager
from .transport import CookieTransport

logger = logging.getLogger(__name__)


class SessionMiddleware:
    """
    HTTP middleware wiring SessionManager to the request/response cycle.

    The manager is exposed as request.state.session. It is closed after the
    endpoint on every path, so the handler lock is never leaked.
    """

    def __init__(
        self,
        factory: HandlerFactory,
        config: SessionConfig,
        clock: Optional[Clock] = None,
        skip_paths: Optional[Dict[str, list]] = None,
    ):
        """
        Initialize session middleware.

        Args:
            factory: Builds one session handler per request
            config: Session configuration
            clock: Time source shared by all managers
            skip_paths: Dict of {path: [methods]} that run without a session
        """
        self.factory = factory
        self.config = config
        self.clock = clock
        self.skip_paths = skip_paths or {}

    def should_skip(self, request: Request) -> bool:
        """Check if the request should bypass session handling."""
        path = str(request.url.path)
        method = request.method.upper()

        if path in self.skip_paths:
            allowed_methods = self.skip_paths[path]
            if "*" in allowed_methods or method in allowed_methods:
                return True

        return False

    async def __call__(self, request: Request, call_next):
        """Process the request inside a session cycle."""
        if self.should_skip(request):
            request.state.session = None
            return await call_next(request)

        transport = CookieTransport(request, self.config)
        manager = SessionManager(
            self.factory.build(),
            config=self.config,
            transport=transport,
            clock=self.clock,
        )

        try:
            await manager.start()
            request.state.session = manager
        except SessionError as e:
            logger.error(f"Session unavailable for {request.method} {request.url.path}: {e}")
            request.state.session = None

        try:
            response = await call_next(request)
        finally:
            await manager.close()

        transport.apply(response)
        return response


def get_session(request: Request) -> SessionManager:
    """FastAPI dependency returning the request's session manager."""
    session = getattr(request.state, "session", None)
    if session is None:
        raise HTTPException(503, "Session unavailable")
    return session


__all__ = ["CookieTransport", "SessionMiddleware", "get_session"]
