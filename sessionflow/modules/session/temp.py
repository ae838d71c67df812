"""
Temp data: values that live until an absolute expiry time.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .clock import Clock
from .store import MarkedKeys, SessionStore, is_temp_marker

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300


def _is_ttl(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class TempDataTracker:
    """Marks session values with an expiry and sweeps expired ones."""

    def __init__(self, store: SessionStore, clock: Clock):
        self.store = store
        self.clock = clock

    def set(
        self,
        data: Union[str, Mapping[str, Any], Iterable[str]],
        value: Any = None,
        ttl: int = DEFAULT_TTL,
    ) -> bool:
        """
        Write and mark temp data.

        Forms:
            set("key", value, ttl)       single value
            set({"key": value}, ttl=...) many values; an int value is also
                                         used as that key's TTL
            set(["a", "b"], None, ttl)   mark existing values only

        Returns:
            False if the keys-only form names a key with no value
        """
        if isinstance(data, str):
            self.store.data[data] = value
            return self.mark({data: ttl})

        if isinstance(data, Mapping):
            self.store.data.update(data)
            return self.mark({key: item if _is_ttl(item) else ttl for key, item in data.items()})

        return self.mark(data, ttl)

    def mark(
        self,
        keys: Union[str, Mapping[str, int], Iterable[str]],
        ttl: int = DEFAULT_TTL,
    ) -> bool:
        """
        Mark existing keys with an expiry of now + TTL.

        Args:
            keys: A key, a list of keys sharing ttl, or a mapping of key -> ttl

        Returns:
            False without marking anything if any key has no value
        """
        if isinstance(keys, str):
            ttls = {keys: ttl}
        elif isinstance(keys, Mapping):
            ttls = dict(keys)
        else:
            ttls = {key: ttl for key in keys}

        if not self.store.all_present(ttls):
            return False

        now = self.clock.now()
        for key, key_ttl in ttls.items():
            self.store.mark(key, now + key_ttl)
        return True

    def unmark(self, keys: Union[str, Iterable[str]]) -> None:
        """Drop the temp marker; the value stays as permanent data."""
        keys = [keys] if isinstance(keys, str) else keys
        for key in keys:
            if is_temp_marker(self.store.marker(key)):
                self.store.unmark(key)

    def remove(self, keys: Union[str, Iterable[str]]) -> None:
        """Delete temp values together with their markers."""
        keys = [keys] if isinstance(keys, str) else keys
        for key in keys:
            if is_temp_marker(self.store.marker(key)):
                self.store.delete(key)

    def get(self, key: Optional[str] = None) -> Any:
        """Return one live temp value (None if absent) or all of them."""
        live = self.keys()
        if key is not None:
            return self.store.data[key] if key in live else None
        return {k: self.store.data[k] for k in live}

    def keys(self) -> MarkedKeys:
        """Keys whose temp marker has not yet expired, in marking order."""
        return self.store.keys_where(
            lambda _key, marker: is_temp_marker(marker) and self.clock.now() < marker
        )

    def expiry(self, key: str) -> Optional[float]:
        marker = self.store.marker(key)
        return marker if is_temp_marker(marker) else None

    def sweep(self) -> int:
        """
        Delete every temp value whose expiry has been reached.

        Returns:
            Number of keys deleted
        """
        now = self.clock.now()
        expired = [
            key
            for key, marker in self.store.meta.items()
            if is_temp_marker(marker) and now >= marker
        ]
        for key in expired:
            self.store.delete(key)

        if expired:
            logger.debug(f"Swept {len(expired)} expired temp key(s)")
        return len(expired)
