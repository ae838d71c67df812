"""
Handlers Module - Black Box Interface

Purpose: Persist serialized session records between request cycles
Interface: SessionHandler protocol (open, read, write, exists, destroy, close, gc)
Hidden: Storage medium, locking strategy, expiry mechanics

Any storage engine implementing SessionHandler can be plugged in.
"""

from .factory import HandlerFactory
from .file import FileSessionHandler
from .interfaces import SessionHandler
from .memory import MemoryRecordStore, MemorySessionHandler
from .redis_handler import RedisSessionHandler

__all__ = [
    "FileSessionHandler",
    "HandlerFactory",
    "MemoryRecordStore",
    "MemorySessionHandler",
    "RedisSessionHandler",
    "SessionHandler",
]
