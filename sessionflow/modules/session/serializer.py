"""
Session record codec.

The handler only ever sees opaque bytes; this module owns the layout of
those bytes.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError
from pydantic_core import PydanticSerializationError

from .exceptions import SessionDeserializationError, SessionSerializationError
from .store import FlashState, SessionStore


class SessionRecord(BaseModel):
    """Persisted form of a session."""

    data: Dict[str, Any] = Field(default_factory=dict)
    vars: Dict[str, Union[FlashState, float]] = Field(default_factory=dict)
    last_regenerate: Optional[float] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_store(cls, store: SessionStore) -> "SessionRecord":
        return cls(
            data=store.data,
            vars=store.meta,
            last_regenerate=store.last_regenerate,
            ip_address=store.ip_address,
            user_agent=store.user_agent,
        )

    def to_store(self) -> SessionStore:
        return SessionStore(
            data=self.data,
            meta=self.vars,
            last_regenerate=self.last_regenerate,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
        )


class RecordSerializer:
    """JSON codec between SessionStore and handler payload bytes."""

    encoding = "utf-8"

    def dumps(self, store: SessionStore) -> bytes:
        """
        Encode the store.

        Raises:
            SessionSerializationError: If a value is not JSON serializable
        """
        try:
            return SessionRecord.from_store(store).model_dump_json().encode(self.encoding)
        except (PydanticSerializationError, ValidationError) as e:
            raise SessionSerializationError(f"Session data is not serializable: {e}") from e

    def loads(self, payload: Union[bytes, str]) -> SessionStore:
        """
        Decode a payload produced by dumps().

        Raises:
            SessionDeserializationError: If the payload is corrupt or malformed
        """
        try:
            if isinstance(payload, bytes):
                payload = payload.decode(self.encoding)
            return SessionRecord.model_validate_json(payload).to_store()
        except (UnicodeDecodeError, ValidationError) as e:
            raise SessionDeserializationError(f"Corrupt session payload: {e}") from e
