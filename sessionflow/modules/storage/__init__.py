"""
Storage Module - Black Box Interface

Purpose: Own the Redis connection used by Redis-backed session handlers
Interface: connect(), disconnect()
Hidden: Connection URL resolution, client construction, pooling

Can be replaced with any storage backend without affecting other modules.
"""

import logging
import os
from typing import Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, connection_url: Optional[str] = None):
        """Initialize storage with connection URL (falls back to REDIS_URL)."""
        self.url = connection_url or os.getenv("REDIS_URL", DEFAULT_REDIS_URL)
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> redis.Redis:
        """Get storage connection, creating the client on first use."""
        if not self._client:
            self._client = redis.from_url(self.url)
            logger.info(f"Session storage client created for {self._redacted_url()}")
        return self._client

    async def disconnect(self) -> None:
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _redacted_url(self) -> str:
        # Keep credentials out of logs.
        if "@" in self.url:
            scheme, _, rest = self.url.partition("://")
            return f"{scheme}://***@{rest.split('@', 1)[1]}"
        return self.url


__all__ = ["StorageModule"]
