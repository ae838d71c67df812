"""Boundary between the session core and whatever carries the identifier."""

from dataclasses import dataclass
from typing import Optional, Protocol


class SessionTransport(Protocol):
    """
    Protocol for identifier transports (cookies, headers, test doubles).

    The core reads the inbound identifier once per start() and writes back
    the identifier that should be sent to the client, or None once the
    session is destroyed.
    """

    client_ip: Optional[str]
    user_agent: Optional[str]
    is_ajax: bool

    def get_session_id(self) -> Optional[str]:
        """Return the identifier presented by the client, if any."""
        ...

    def set_session_id(self, session_id: Optional[str]) -> None:
        """Hand the current identifier (or None to clear it) back to the client."""
        ...


@dataclass
class StaticTransport:
    """
    In-process transport.

    The identifier written back becomes the inbound identifier of the next
    start(), like a client that always echoes its cookie.
    """

    session_id: Optional[str] = None
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None
    is_ajax: bool = False

    def get_session_id(self) -> Optional[str]:
        return self.session_id

    def set_session_id(self, session_id: Optional[str]) -> None:
        self.session_id = session_id
