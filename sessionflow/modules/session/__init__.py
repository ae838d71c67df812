"""
Session Module - Black Box Interface

Purpose: Manage per-client session state across request cycles
Interface: SessionManager.start(), get(), set(), set_flashdata(), set_tempdata(), close()
Hidden: Identifier rotation, flash aging, temp expiry sweeping, record encoding

Replaceable storage via any SessionHandler (memory, file, redis, database).
"""

from .attributes import SessionAttributes
from .clock import Clock, FrozenClock, SystemClock
from .exceptions import (
    SessionDeserializationError,
    SessionError,
    SessionHandlerError,
    SessionIdAllocationError,
    SessionNotStartedError,
    SessionSerializationError,
)
from .identity import IdentityManager, IdentityState
from .serializer import RecordSerializer, SessionRecord
from .session import SessionManager
from .store import FlashState, MarkedKeys, SessionStore
from .transport import SessionTransport, StaticTransport

__all__ = [
    "Clock",
    "FlashState",
    "FrozenClock",
    "IdentityManager",
    "IdentityState",
    "MarkedKeys",
    "RecordSerializer",
    "SessionAttributes",
    "SessionDeserializationError",
    "SessionError",
    "SessionHandlerError",
    "SessionIdAllocationError",
    "SessionManager",
    "SessionNotStartedError",
    "SessionRecord",
    "SessionSerializationError",
    "SessionStore",
    "SessionTransport",
    "StaticTransport",
    "SystemClock",
]
