"""
Session identifier ownership: generation, validation, client binding and
the periodic regeneration policy.
"""

import logging
import re
import secrets
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ...config.provider import SessionConfig
from .clock import Clock
from .exceptions import SessionIdAllocationError
from .store import SessionStore

if TYPE_CHECKING:
    from ..handlers.interfaces import SessionHandler

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 20
SESSION_ID_PATTERN = re.compile(r"^[0-9a-f]{40}$")


class IdentityState(str, Enum):
    """Lifecycle of the identifier within a manager."""

    FRESH = "fresh"
    ACTIVE = "active"
    REGENERATING = "regenerating"


class IdentityManager:
    """
    Issues and rotates session identifiers.

    Rotation is time based: once time_to_update seconds have passed since
    the last rotation, the next start() rotates.
    """

    def __init__(self, config: SessionConfig, clock: Clock, max_attempts: int = 5):
        self.config = config
        self.clock = clock
        self.max_attempts = max_attempts
        self.state = IdentityState.FRESH

    @staticmethod
    def is_valid_id(session_id: Optional[str]) -> bool:
        return bool(session_id) and SESSION_ID_PATTERN.match(session_id) is not None

    @staticmethod
    def new_id() -> str:
        return secrets.token_hex(SESSION_ID_BYTES)

    async def generate_id(self, handler: "SessionHandler") -> str:
        """
        Generate an identifier not already used by the handler.

        Raises:
            SessionIdAllocationError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            session_id = self.new_id()
            if not await handler.exists(session_id):
                return session_id
            logger.warning(f"Session id collision on attempt {attempt}, retrying")

        raise SessionIdAllocationError(
            f"Could not allocate a session id after {self.max_attempts} attempts"
        )

    def activate(self, store: SessionStore) -> None:
        """Fresh -> Active: start rotation tracking from now."""
        store.last_regenerate = self.clock.now()
        self.state = IdentityState.ACTIVE

    def needs_regeneration(self, store: SessionStore, is_ajax: bool = False) -> bool:
        """
        Decide whether this cycle must rotate the identifier.

        A record without rotation tracking gets it initialised instead.
        """
        if is_ajax or self.config.time_to_update <= 0:
            return False
        if store.last_regenerate is None:
            store.last_regenerate = self.clock.now()
            return False
        return self.clock.now() - store.last_regenerate >= self.config.time_to_update

    def begin_regeneration(self) -> None:
        self.state = IdentityState.REGENERATING

    def finish_regeneration(self, store: SessionStore) -> None:
        store.last_regenerate = self.clock.now()
        self.state = IdentityState.ACTIVE

    def abort_regeneration(self) -> None:
        """Regenerating -> Active, keeping the previous rotation time."""
        self.state = IdentityState.ACTIVE

    def reset(self) -> None:
        self.state = IdentityState.FRESH

    # Client binding

    def bind(self, store: SessionStore, client_ip: Optional[str], user_agent: Optional[str]) -> None:
        """Record the client attributes that later cycles must match."""
        if self.config.match_ip:
            store.ip_address = client_ip
        if self.config.match_user_agent:
            store.user_agent = user_agent

    def matches(self, store: SessionStore, client_ip: Optional[str], user_agent: Optional[str]) -> bool:
        """
        Check a loaded record against the requesting client.

        Records that were never bound (binding enabled later) match and get
        bound by the caller.
        """
        if self.config.match_ip and store.ip_address is not None and store.ip_address != client_ip:
            logger.warning(f"Session IP mismatch: expected {store.ip_address}, got {client_ip}")
            return False
        if (
            self.config.match_user_agent
            and store.user_agent is not None
            and store.user_agent != user_agent
        ):
            logger.warning("Session user agent mismatch")
            return False
        return True
