"""
Session handler factory.

This factory:
- Selects the backend named by the session_driver setting
- Owns the resources shared by every request cycle (record store, Redis client)
- Builds a fresh handler per request cycle
"""

import importlib
import logging
from typing import Any, Callable, Optional

from ...config.provider import SessionConfig
from ..session.clock import Clock, SystemClock
from ..storage import StorageModule
from .file import FileSessionHandler
from .interfaces import SessionHandler
from .memory import MemoryRecordStore, MemorySessionHandler
from .redis_handler import RedisSessionHandler

logger = logging.getLogger(__name__)

BUILTIN_DRIVERS = ("memory", "file", "redis")


def _load_driver_class(path: str) -> Callable[[SessionConfig], SessionHandler]:
    """Resolve a "package.module:ClassName" driver path."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(
            f"Unknown session driver {path!r}. "
            f"Use one of {', '.join(BUILTIN_DRIVERS)} or 'package.module:ClassName'."
        )
    module = importlib.import_module(module_name)
    return getattr(module, attr)


class HandlerFactory:
    """
    Composition root for session handlers.

    Usage:
        factory = HandlerFactory(config)
        await factory.connect()
        handler = factory.build()       # once per request cycle
        ...
        await factory.disconnect()

    Custom drivers ("module:Class") are called with the SessionConfig.
    """

    def __init__(
        self,
        config: SessionConfig,
        clock: Optional[Clock] = None,
        storage: Optional[StorageModule] = None,
    ):
        self.config = config
        self.clock = clock or SystemClock()
        self.driver = config.driver.strip()
        self._storage = storage
        self._redis: Optional[Any] = None
        self._records: Optional[MemoryRecordStore] = None
        self._custom: Optional[Callable[[SessionConfig], SessionHandler]] = None

        if self.driver == "memory":
            self._records = MemoryRecordStore(self.clock)
        elif self.driver == "file":
            if not config.save_path:
                raise ValueError("SESSION_SAVE_PATH is required for the file session driver")
        elif self.driver == "redis":
            self._storage = storage or StorageModule(config.save_path)
        else:
            self._custom = _load_driver_class(self.driver)

        logger.info(f"Session handler factory using '{self.driver}' driver")

    async def connect(self) -> None:
        """Open shared backend connections."""
        if self.driver == "redis" and self._redis is None:
            self._redis = await self._storage.connect()

    async def disconnect(self) -> None:
        if self.driver == "redis" and self._redis is not None:
            await self._storage.disconnect()
            self._redis = None

    def build(self) -> SessionHandler:
        """Build a handler for one request cycle."""
        if self.driver == "memory":
            return MemorySessionHandler(self._records)
        if self.driver == "file":
            return FileSessionHandler(self.config.save_path, self.config.cookie_name, self.clock)
        if self.driver == "redis":
            if self._redis is None:
                raise RuntimeError("HandlerFactory.connect() must be awaited before build()")
            return RedisSessionHandler(
                self._redis,
                cookie_name=self.config.cookie_name,
                expiration=self.config.expiration,
            )
        return self._custom(self.config)

    async def gc(self) -> int:
        """Run one garbage collection pass with the configured lifetime."""
        removed = await self.build().gc(self.config.expiration)
        logger.info(f"Session gc pass removed {removed} record(s)")
        return removed
