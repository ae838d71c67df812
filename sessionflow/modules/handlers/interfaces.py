"""Session handler interface following Black Box Design principles."""
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class SessionHandler(Protocol):
    """
    Protocol for session persistence backends - allows swappable storage.

    One handler instance serves one request cycle. open() acquires
    exclusive access to a record and close() releases it; a backend must
    block or queue a second open() of the same identifier until then.
    """

    async def open(self, session_id: str) -> None:
        """
        Acquire exclusive access to a session record.

        Args:
            session_id: Session identifier
        """
        ...

    async def read(self, session_id: str) -> Optional[bytes]:
        """
        Read a stored payload.

        Returns:
            Payload bytes, or None if no record exists
        """
        ...

    async def write(self, session_id: str, payload: bytes) -> None:
        """Replace the stored payload."""
        ...

    async def exists(self, session_id: str) -> bool:
        """Check whether a record exists for the identifier."""
        ...

    async def destroy(self, session_id: str) -> None:
        """Delete a session record."""
        ...

    async def close(self) -> None:
        """Release whatever open() acquired. Safe to call when nothing is held."""
        ...

    async def gc(self, max_lifetime: int) -> int:
        """
        Purge records inactive for longer than max_lifetime seconds.

        Returns:
            Number of records removed
        """
        ...
