"""Session error taxonomy."""

from typing import Optional


class SessionError(Exception):
    """Base class for all session layer errors."""


class SessionHandlerError(SessionError):
    """The storage backend failed or is unavailable."""

    def __init__(self, message: str, session_id: Optional[str] = None):
        super().__init__(message)
        self.session_id = session_id


class SessionDeserializationError(SessionError):
    """A stored payload could not be decoded into a session record."""


class SessionSerializationError(SessionError):
    """Session data could not be encoded for persistence."""


class SessionIdAllocationError(SessionError):
    """No unused identifier could be generated within the attempt budget."""


class SessionNotStartedError(SessionError):
    """A session operation was attempted outside an open cycle."""
