"""
Flash data: values visible for the cycle that set them and the next one.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .store import FlashState, MarkedKeys, SessionStore, is_flash_marker

logger = logging.getLogger(__name__)


class FlashDataTracker:
    """Marks and ages one-shot session values."""

    def __init__(self, store: SessionStore):
        self.store = store

    def set(self, data: Union[str, Mapping[str, Any]], value: Any = None) -> None:
        """
        Write value(s) and mark each key as new flash data.

        Args:
            data: A single key, or a mapping of key -> value
            value: Value for the single-key form
        """
        items = data.items() if isinstance(data, Mapping) else [(data, value)]
        for key, item in items:
            self.store.data[key] = item
            self.store.mark(key, FlashState.NEW)

    def mark(self, keys: Union[str, Iterable[str]]) -> bool:
        """
        Mark existing keys as new flash data.

        Returns:
            False without marking anything if any key has no value
        """
        keys = [keys] if isinstance(keys, str) else list(keys)
        if not self.store.all_present(keys):
            return False
        for key in keys:
            self.store.mark(key, FlashState.NEW)
        return True

    def keep(self, keys: Union[str, Iterable[str]]) -> bool:
        """Extend visibility of flash keys by one more cycle."""
        return self.mark(keys)

    def unmark(self, keys: Union[str, Iterable[str]]) -> None:
        """Drop the flash marker; the value stays as permanent data."""
        keys = [keys] if isinstance(keys, str) else keys
        for key in keys:
            if is_flash_marker(self.store.marker(key)):
                self.store.unmark(key)

    def get(self, key: Optional[str] = None) -> Any:
        """Return one flash value (None if not flash data) or all of them."""
        if key is not None:
            return self.store.data[key] if key in self.keys() else None
        return {k: self.store.data[k] for k in self.keys()}

    def keys(self) -> MarkedKeys:
        return self.store.keys_where(lambda _key, marker: is_flash_marker(marker))

    def age(self) -> int:
        """
        Advance every flash marker by one cycle.

        OLD keys are deleted together with their values; NEW keys become OLD.

        Returns:
            Number of keys deleted
        """
        removed = 0
        for key, marker in list(self.store.meta.items()):
            if marker is FlashState.OLD:
                self.store.delete(key)
                removed += 1
            elif marker is FlashState.NEW:
                self.store.meta[key] = FlashState.OLD

        if removed:
            logger.debug(f"Expired {removed} flash key(s)")
        return removed
