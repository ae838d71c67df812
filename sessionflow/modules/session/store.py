"""
In-memory session state for one request cycle.

The data mapping and the metadata (marker) mapping are kept as two
parallel dicts so a value that happens to be the string "old" can never
be confused with a flash marker.
"""

from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Union


class FlashState(str, Enum):
    """Flash marker states."""

    NEW = "new"
    OLD = "old"


# A temp marker is an absolute expiry timestamp (epoch seconds).
Marker = Union[FlashState, float]


def is_flash_marker(marker: Marker) -> bool:
    return isinstance(marker, FlashState)


def is_temp_marker(marker: Marker) -> bool:
    return isinstance(marker, (int, float)) and not isinstance(marker, bool)


class MarkedKeys:
    """
    Lazy view over the keys currently carrying a given kind of marker.

    Every iteration re-scans the live metadata mapping, so the view can be
    iterated any number of times and always reflects the current state.
    Keys are yielded in the order they were marked.
    """

    def __init__(self, store: "SessionStore", predicate: Callable[[str, Marker], bool]):
        self._store = store
        self._predicate = predicate

    def __iter__(self) -> Iterator[str]:
        for key, marker in list(self._store.meta.items()):
            if self._predicate(key, marker):
                yield key

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __contains__(self, key: object) -> bool:
        marker = self._store.meta.get(key)
        return marker is not None and self._predicate(key, marker)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MarkedKeys):
            return list(self) == list(other)
        if isinstance(other, (list, tuple)):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"MarkedKeys({list(self)!r})"


class SessionStore:
    """
    Owner of the session data for the duration of one request cycle.

    Attributes:
        data: Key -> value mapping visible to callers
        meta: Key -> marker mapping (flash state or temp expiry)
        last_regenerate: Timestamp of the last identifier rotation
        ip_address: Client IP bound to the session, if binding is enabled
        user_agent: Client user agent bound to the session, if enabled
    """

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        meta: Optional[Dict[str, Marker]] = None,
        last_regenerate: Optional[float] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ):
        self.data: Dict[str, Any] = dict(data or {})
        self.meta: Dict[str, Marker] = {}
        self.last_regenerate = last_regenerate
        self.ip_address = ip_address
        self.user_agent = user_agent

        # Drop markers that point at missing data.
        for key, marker in (meta or {}).items():
            if key in self.data:
                self.meta[key] = marker

    # Data mapping

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.data

    def put(self, key: str, value: Any) -> None:
        """Write a permanent value, clearing any marker on the key."""
        self.data[key] = value
        self.meta.pop(key, None)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
        self.meta.pop(key, None)

    def snapshot(self) -> Dict[str, Any]:
        return dict(self.data)

    def clear(self) -> None:
        self.data.clear()
        self.meta.clear()
        self.last_regenerate = None
        self.ip_address = None
        self.user_agent = None

    # Metadata mapping

    def marker(self, key: str) -> Optional[Marker]:
        return self.meta.get(key)

    def mark(self, key: str, marker: Marker) -> None:
        """
        Attach a marker to an existing key.

        The key is moved to the end of the marker order, so a re-marked key
        counts as marked most recently.

        Raises:
            KeyError: If the key has no value in the data mapping
        """
        if key not in self.data:
            raise KeyError(key)
        self.meta.pop(key, None)
        self.meta[key] = marker

    def unmark(self, key: str) -> None:
        self.meta.pop(key, None)

    def all_present(self, keys: Iterable[str]) -> bool:
        return all(key in self.data for key in keys)

    def keys_where(self, predicate: Callable[[str, Marker], bool]) -> MarkedKeys:
        return MarkedKeys(self, predicate)
