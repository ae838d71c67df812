"""
Redis-backed session handler.

Records live under "<cookie_name>:<id>" with an expiry of the session
lifetime, so Redis itself purges idle sessions. Exclusive access uses a
"<record key>:lock" key taken with SET NX EX and released with a
compare-and-delete script, so a lock that outlived its TTL and was
re-acquired elsewhere is never released by the wrong holder.
"""

import asyncio
import logging
import secrets
from typing import Optional

from redis.exceptions import RedisError

from ..session.exceptions import SessionHandlerError

logger = logging.getLogger(__name__)

RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class RedisSessionHandler:
    def __init__(
        self,
        redis_client,
        cookie_name: str = "sf_session",
        expiration: int = 7200,
        lock_ttl: int = 300,
        lock_attempts: int = 30,
        lock_retry_delay: float = 1.0,
    ):
        """
        Initialize Redis session handler.

        Args:
            redis_client: Async Redis client
            cookie_name: Key prefix for session records
            expiration: Record TTL in seconds
            lock_ttl: Lock TTL in seconds, bounds how long a crashed cycle blocks others
            lock_attempts: Lock acquisition attempts before giving up
            lock_retry_delay: Seconds between lock attempts
        """
        self.redis = redis_client
        self.prefix = f"{cookie_name}:"
        self.expiration = expiration
        self.lock_ttl = lock_ttl
        self.lock_attempts = lock_attempts
        self.lock_retry_delay = lock_retry_delay
        self._lock_key: Optional[str] = None
        self._lock_token: Optional[str] = None

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    async def open(self, session_id: str) -> None:
        """
        Acquire the record lock.

        Raises:
            SessionHandlerError: If the lock stays taken for every attempt
        """
        if self._lock_key is not None:
            raise SessionHandlerError("Handler already holds a session", session_id)

        lock_key = f"{self._key(session_id)}:lock"
        token = secrets.token_hex(16)
        try:
            for attempt in range(self.lock_attempts):
                if await self.redis.set(lock_key, token, nx=True, ex=self.lock_ttl):
                    self._lock_key, self._lock_token = lock_key, token
                    return
                if attempt + 1 < self.lock_attempts:
                    await asyncio.sleep(self.lock_retry_delay)
        except RedisError as e:
            raise SessionHandlerError(f"Redis unavailable: {e}", session_id) from e

        raise SessionHandlerError(
            f"Unable to lock session after {self.lock_attempts} attempts", session_id
        )

    async def read(self, session_id: str) -> Optional[bytes]:
        try:
            data = await self.redis.get(self._key(session_id))
        except RedisError as e:
            raise SessionHandlerError(f"Redis unavailable: {e}", session_id) from e

        if data is None:
            return None
        # Clients created with decode_responses=True hand back str.
        return data.encode("utf-8") if isinstance(data, str) else data

    async def write(self, session_id: str, payload: bytes) -> None:
        try:
            await self.redis.set(self._key(session_id), payload, ex=self.expiration)
            if self._lock_key is not None:
                await self.redis.expire(self._lock_key, self.lock_ttl)
        except RedisError as e:
            raise SessionHandlerError(f"Redis unavailable: {e}", session_id) from e

    async def exists(self, session_id: str) -> bool:
        try:
            return await self.redis.exists(self._key(session_id)) > 0
        except RedisError as e:
            raise SessionHandlerError(f"Redis unavailable: {e}", session_id) from e

    async def destroy(self, session_id: str) -> None:
        try:
            await self.redis.delete(self._key(session_id))
        except RedisError as e:
            raise SessionHandlerError(f"Redis unavailable: {e}", session_id) from e

    async def close(self) -> None:
        if self._lock_key is None:
            return
        lock_key, token = self._lock_key, self._lock_token
        self._lock_key, self._lock_token = None, None
        try:
            await self.redis.eval(RELEASE_LOCK_SCRIPT, 1, lock_key, token)
        except RedisError as e:
            raise SessionHandlerError(f"Failed to release session lock: {e}") from e

    async def gc(self, max_lifetime: int) -> int:
        # Records carry their own TTL; Redis expires them.
        return 0
