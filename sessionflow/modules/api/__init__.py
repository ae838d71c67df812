"""
API Module - Black Box Interface

Purpose: Define the REST request/response contract
Interface: Pydantic models for session endpoints
Hidden: Validation rules for session keys
"""

from .models import (
    FlashRequest,
    SessionResponse,
    SetValuesRequest,
    TempRequest,
)

__all__ = [
    "FlashRequest",
    "SessionResponse",
    "SetValuesRequest",
    "TempRequest",
]
