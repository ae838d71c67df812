"""
File-backed session handler.

One file per session under the save path, guarded by an exclusive
advisory lock (fcntl.flock) for the whole request cycle. Blocking file
calls run in a worker thread so the event loop keeps serving.
"""

import asyncio
import fcntl
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional

from ..session.clock import Clock, SystemClock
from ..session.exceptions import SessionHandlerError

logger = logging.getLogger(__name__)


class FileSessionHandler:
    """SessionHandler storing each record as <save_path>/<cookie_name><id>."""

    def __init__(self, save_path: str, cookie_name: str = "sf_session", clock: Optional[Clock] = None):
        if not save_path:
            raise ValueError("FileSessionHandler requires a save path")
        self.save_path = Path(save_path)
        self.prefix = cookie_name
        self.clock = clock or SystemClock()
        self._fh: Optional[BinaryIO] = None
        self._held: Optional[str] = None

    def _path(self, session_id: str) -> Path:
        return self.save_path / f"{self.prefix}{session_id}"

    async def open(self, session_id: str) -> None:
        if self._held is not None:
            raise SessionHandlerError("Handler already holds a session", self._held)
        try:
            self._fh = await asyncio.to_thread(self._open_locked, self._path(session_id))
        except OSError as e:
            raise SessionHandlerError(f"Cannot open session file: {e}", session_id) from e
        self._held = session_id

    def _open_locked(self, path: Path) -> BinaryIO:
        self.save_path.mkdir(mode=0o700, parents=True, exist_ok=True)
        fh = open(path, "a+b")
        try:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
        except OSError:
            fh.close()
            raise
        return fh

    def _require_held(self, session_id: str) -> BinaryIO:
        if self._held != session_id or self._fh is None:
            raise SessionHandlerError("Session file is not open", session_id)
        return self._fh

    async def read(self, session_id: str) -> Optional[bytes]:
        fh = self._require_held(session_id)
        try:
            data = await asyncio.to_thread(self._read_all, fh)
        except OSError as e:
            raise SessionHandlerError(f"Cannot read session file: {e}", session_id) from e
        return data or None

    @staticmethod
    def _read_all(fh: BinaryIO) -> bytes:
        fh.seek(0)
        return fh.read()

    async def write(self, session_id: str, payload: bytes) -> None:
        fh = self._require_held(session_id)
        try:
            await asyncio.to_thread(self._replace, fh, payload)
        except OSError as e:
            raise SessionHandlerError(f"Cannot write session file: {e}", session_id) from e

    @staticmethod
    def _replace(fh: BinaryIO, payload: bytes) -> None:
        fh.seek(0)
        fh.truncate()
        fh.write(payload)
        fh.flush()

    async def exists(self, session_id: str) -> bool:
        return await asyncio.to_thread(self._has_content, self._path(session_id))

    @staticmethod
    def _has_content(path: Path) -> bool:
        try:
            return path.stat().st_size > 0
        except FileNotFoundError:
            return False

    async def destroy(self, session_id: str) -> None:
        try:
            if self._held == session_id and self._fh is not None:
                # Emptied files are unlinked on close(), while still locked.
                await asyncio.to_thread(self._replace, self._fh, b"")
            else:
                await asyncio.to_thread(self._path(session_id).unlink, missing_ok=True)
        except OSError as e:
            raise SessionHandlerError(f"Cannot destroy session file: {e}", session_id) from e

    async def close(self) -> None:
        if self._fh is None:
            return
        fh, session_id = self._fh, self._held
        self._fh, self._held = None, None
        try:
            await asyncio.to_thread(self._unlock, fh, self._path(session_id))
        except OSError as e:
            raise SessionHandlerError(f"Cannot release session file: {e}", session_id) from e

    @staticmethod
    def _unlock(fh: BinaryIO, path: Path) -> None:
        try:
            if os.fstat(fh.fileno()).st_size == 0:
                path.unlink(missing_ok=True)
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
        finally:
            fh.close()

    async def gc(self, max_lifetime: int) -> int:
        return await asyncio.to_thread(self._collect, self.clock.now() - max_lifetime)

    def _collect(self, cutoff: float) -> int:
        if not self.save_path.is_dir():
            return 0

        removed = 0
        for path in self.save_path.glob(f"{self.prefix}*"):
            try:
                if path.stat().st_mtime >= cutoff:
                    continue
                with open(path, "rb") as fh:
                    try:
                        fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    except BlockingIOError:
                        continue  # in use by a live cycle
                    path.unlink(missing_ok=True)
                    removed += 1
            except FileNotFoundError:
                continue

        if removed:
            logger.info(f"Garbage collected {removed} session file(s) from {self.save_path}")
        return removed
