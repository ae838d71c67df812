"""In-process session handler with per-identifier locking."""

import asyncio
import logging
from typing import Dict, Optional, Tuple

from ..session.clock import Clock, SystemClock
from ..session.exceptions import SessionHandlerError

logger = logging.getLogger(__name__)


class MemoryRecordStore:
    """
    Records shared by every MemorySessionHandler of one process.

    Suitable for development, testing, and single-process applications.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()
        self.records: Dict[str, Tuple[bytes, float]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        # Holders plus waiters per lock; the lock is dropped when it reaches 0.
        self._users: Dict[str, int] = {}

    async def acquire(self, session_id: str) -> None:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._users[session_id] = self._users.get(session_id, 0) + 1
        try:
            await lock.acquire()
        except BaseException:
            self._drop_user(session_id)
            raise

    def release(self, session_id: str) -> None:
        self._locks[session_id].release()
        self._drop_user(session_id)

    def is_locked(self, session_id: str) -> bool:
        return self._users.get(session_id, 0) > 0

    def _drop_user(self, session_id: str) -> None:
        self._users[session_id] -= 1
        if self._users[session_id] == 0:
            del self._users[session_id]
            del self._locks[session_id]


class MemorySessionHandler:
    """SessionHandler over a MemoryRecordStore."""

    def __init__(self, records: Optional[MemoryRecordStore] = None):
        self.records = records or MemoryRecordStore()
        self._held: Optional[str] = None

    async def open(self, session_id: str) -> None:
        if self._held is not None:
            raise SessionHandlerError("Handler already holds a session", self._held)
        await self.records.acquire(session_id)
        self._held = session_id

    async def read(self, session_id: str) -> Optional[bytes]:
        entry = self.records.records.get(session_id)
        if entry is None:
            return None
        payload, _ = entry
        self.records.records[session_id] = (payload, self.records.clock.now())
        return payload

    async def write(self, session_id: str, payload: bytes) -> None:
        self.records.records[session_id] = (payload, self.records.clock.now())

    async def exists(self, session_id: str) -> bool:
        return session_id in self.records.records

    async def destroy(self, session_id: str) -> None:
        self.records.records.pop(session_id, None)

    async def close(self) -> None:
        if self._held is None:
            return
        session_id, self._held = self._held, None
        self.records.release(session_id)

    async def gc(self, max_lifetime: int) -> int:
        cutoff = self.records.clock.now() - max_lifetime
        expired = [
            session_id
            for session_id, (_, last_access) in self.records.records.items()
            if last_access < cutoff and not self.records.is_locked(session_id)
        ]
        for session_id in expired:
            del self.records.records[session_id]

        if expired:
            logger.info(f"Garbage collected {len(expired)} in-memory session(s)")
        return len(expired)
