"""
Sessionflow API data models.

These models define the request and response bodies of the session
REST endpoints.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

RESERVED_PREFIX = "__"


def _check_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    for key in data:
        if not key or key.startswith(RESERVED_PREFIX):
            raise ValueError(f"Invalid session key: {key!r}")
    return data


class SetValuesRequest(BaseModel):
    """Request to write permanent session values."""

    values: Dict[str, Any] = Field(..., description="Key/value pairs to store")

    @field_validator("values")
    @classmethod
    def validate_keys(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        return _check_keys(v)


class FlashRequest(BaseModel):
    """Request to store flash values for the next request."""

    values: Dict[str, Any] = Field(..., description="Key/value pairs visible for one more request")

    @field_validator("values")
    @classmethod
    def validate_keys(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        return _check_keys(v)


class TempRequest(BaseModel):
    """Request to store values that expire after a TTL."""

    values: Dict[str, Any] = Field(..., description="Key/value pairs to store")
    ttl: int = Field(300, ge=0, le=86400, description="Time to live in seconds")

    @field_validator("values")
    @classmethod
    def validate_keys(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        return _check_keys(v)


class SessionResponse(BaseModel):
    """Snapshot of the caller's session."""

    data: Dict[str, Any]
    flash_keys: List[str]
    temp_keys: List[str]
    regenerated: bool = False
    persistent: bool = True

