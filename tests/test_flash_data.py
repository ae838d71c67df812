"""
Unit tests for flash data: set now, read next time, then vanish.
"""

import pytest

from sessionflow.modules.session import FlashState


@pytest.mark.asyncio
async def test_can_flash_data(session):
    await session.start()

    session.set_flashdata("foo", "bar")

    assert session.has("foo") is True
    assert session.get_markers()["foo"] == "new"

    # Should reset the 'new' to 'old'
    await session.start()

    assert session.has("foo") is True
    assert session.get_markers()["foo"] == "old"

    # Should no longer be available
    await session.start()

    assert session.has("foo") is False
    assert "foo" not in session.get_markers()


@pytest.mark.asyncio
async def test_can_flash_mapping(session):
    await session.start()

    session.set_flashdata({"foo": "bar", "bar": "baz"})

    assert session.has("foo") is True
    assert session.get_markers()["foo"] is FlashState.NEW
    assert session.has("bar") is True
    assert session.get_markers()["bar"] is FlashState.NEW


@pytest.mark.asyncio
async def test_keep_flash_data(session):
    await session.start()
    session.set_flashdata("foo", "bar")

    await session.start()
    assert session.get_markers()["foo"] == "old"

    assert session.keep_flashdata("foo") is True
    assert session.get_markers()["foo"] == "new"

    # Kept for one more cycle
    await session.start()

    assert session.has("foo") is True
    assert session.get_markers()["foo"] == "old"

    await session.start()
    assert session.has("foo") is False


@pytest.mark.asyncio
async def test_keep_missing_key_returns_false(session):
    await session.start()

    assert session.keep_flashdata("nope") is False
    assert session.get_markers() == {}


@pytest.mark.asyncio
async def test_unmark_flash_data_keeps_value(session):
    await session.start()
    session.set_flashdata("foo", "bar")
    session.set("bar", "baz")

    assert "foo" in session.get_markers()

    session.unmark_flashdata("foo")

    assert session.has("foo") is True
    assert "foo" not in session.get_markers()
    assert "foo" not in session.get_flash_keys()

    # Now permanent
    await session.start()
    await session.start()
    assert session.get("foo") == "bar"


@pytest.mark.asyncio
async def test_unmark_flash_leaves_temp_marker(session, clock):
    await session.start()
    session.set_tempdata("foo", "bar", 300)

    session.unmark_flashdata("foo")

    assert session.get_temp_expiry("foo") == clock.now() + 300


@pytest.mark.asyncio
async def test_get_flash_keys_only_returns_flash_keys(session):
    await session.start()

    session.set_flashdata("foo", "bar")
    session.set("bar", "baz")
    session.set_tempdata("baz", "qux", 300)

    keys = session.get_flash_keys()

    assert "foo" in keys
    assert "bar" not in keys
    assert "baz" not in keys
    assert list(keys) == ["foo"]


@pytest.mark.asyncio
async def test_flash_keys_view_is_live_and_restartable(session):
    await session.start()
    keys = session.get_flash_keys()

    assert list(keys) == []

    session.set_flashdata({"a": 1, "b": 2})

    assert list(keys) == ["a", "b"]
    assert list(keys) == ["a", "b"]
    assert len(keys) == 2


@pytest.mark.asyncio
async def test_get_flashdata(session):
    await session.start()
    session.set_flashdata({"notice": "saved", "error": "none"})
    session.set("plain", 1)

    assert session.get_flashdata("notice") == "saved"
    assert session.get_flashdata("plain") is None
    assert session.get_flashdata() == {"notice": "saved", "error": "none"}


@pytest.mark.asyncio
async def test_mark_as_flashdata_requires_every_key(session):
    await session.start()
    session.set({"a": 1, "b": 2})

    assert session.mark_as_flashdata(["a", "missing"]) is False
    assert session.get_markers() == {}

    assert session.mark_as_flashdata(["a", "b"]) is True
    assert list(session.get_flash_keys()) == ["a", "b"]


@pytest.mark.asyncio
async def test_flash_value_equal_to_marker_name_is_plain_data(session):
    """A value of "old" is data, never mistaken for a marker."""
    await session.start()
    session.set("status", "old")

    await session.start()
    await session.start()

    assert session.get("status") == "old"


@pytest.mark.asyncio
async def test_set_flashdata_replaces_temp_marker(session):
    await session.start()
    session.set_tempdata("foo", "bar", 300)

    session.set_flashdata("foo", "baz")

    assert session.get_temp_expiry("foo") is None
    assert session.get_markers()["foo"] == "new"
