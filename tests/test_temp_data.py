"""
Unit tests for temp data: values that live until a TTL elapses.
"""

import pytest

from conftest import START_TIME


@pytest.mark.asyncio
async def test_set_tempdata_works(session):
    await session.start()

    session.set_tempdata("foo", "bar", 300)

    assert session.get("foo") == "bar"
    assert session.get_temp_expiry("foo") == START_TIME + 300


@pytest.mark.asyncio
async def test_set_tempdata_mapping_multi_ttl(session):
    """Integer values double as per-key TTLs."""
    await session.start()

    session.set_tempdata({"foo": 300, "bar": 400, "baz": 100})

    assert session.get_temp_expiry("foo") == START_TIME + 300
    assert session.get_temp_expiry("bar") == START_TIME + 400
    assert session.get_temp_expiry("baz") == START_TIME + 100


@pytest.mark.asyncio
async def test_set_tempdata_keys_single_ttl(session):
    await session.start()
    session.set({"foo": 1, "bar": 2, "baz": 3})

    assert session.set_tempdata(["foo", "bar", "baz"], None, 200) is True

    for key in ("foo", "bar", "baz"):
        assert session.get_temp_expiry(key) == START_TIME + 200
    assert session.get("foo") == 1


@pytest.mark.asyncio
async def test_set_tempdata_keys_missing_key_marks_nothing(session):
    await session.start()
    session.set("foo", 1)

    assert session.set_tempdata(["foo", "missing"], None, 200) is False
    assert session.get_markers() == {}


@pytest.mark.asyncio
async def test_set_tempdata_mapping_uses_default_ttl_for_values(session):
    await session.start()

    session.set_tempdata({"foo": "bar"}, ttl=60)

    assert session.get_temp_expiry("foo") == START_TIME + 60


@pytest.mark.asyncio
async def test_get_tempdata_returns_all(session):
    await session.start()
    data = {"foo": "bar", "bar": "baz"}

    session.set_tempdata(data)
    session.set("baz", "ballywhoo")

    assert session.get_tempdata() == data


@pytest.mark.asyncio
async def test_get_tempdata_returns_single(session):
    await session.start()

    session.set_tempdata({"foo": "bar", "bar": "baz"})

    assert session.get_tempdata("foo") == "bar"
    assert session.get_tempdata("missing") is None


@pytest.mark.asyncio
async def test_get_tempdata_ignores_plain_and_flash_data(session):
    await session.start()
    session.set("plain", 1)
    session.set_flashdata("flash", 2)

    assert session.get_tempdata("plain") is None
    assert session.get_tempdata() == {}


@pytest.mark.asyncio
async def test_remove_tempdata_actually_deletes(session):
    await session.start()
    session.set_tempdata({"foo": "bar", "bar": "baz"})

    session.remove_tempdata("foo")

    assert session.get_tempdata() == {"bar": "baz"}
    assert session.has("foo") is False


@pytest.mark.asyncio
async def test_remove_tempdata_leaves_plain_data(session):
    await session.start()
    session.set("foo", "bar")

    session.remove_tempdata("foo")

    assert session.get("foo") == "bar"


@pytest.mark.asyncio
async def test_unmark_tempdata_single(session):
    await session.start()
    session.set_tempdata({"foo": "bar", "bar": "baz"})

    session.unmark_tempdata("foo")

    assert session.get_tempdata() == {"bar": "baz"}
    assert session.get("foo") == "bar"


@pytest.mark.asyncio
async def test_unmark_tempdata_sequence(session):
    await session.start()
    session.set_tempdata({"foo": "bar", "bar": "baz"})

    session.unmark_tempdata(["foo", "bar"])

    assert session.get_tempdata() == {}
    assert session.get() == {"foo": "bar", "bar": "baz"}


@pytest.mark.asyncio
async def test_get_temp_keys(session):
    await session.start()
    session.set_tempdata({"foo": "bar", "bar": "baz"})
    session.set("baz", "ballywhoo")

    assert list(session.get_temp_keys()) == ["foo", "bar"]


@pytest.mark.asyncio
async def test_temp_keys_follow_marking_order(session):
    await session.start()
    session.set_tempdata({"foo": "bar", "bar": "baz"})

    session.set_tempdata("foo", "again", 300)

    assert list(session.get_temp_keys()) == ["bar", "foo"]


@pytest.mark.asyncio
async def test_expired_tempdata_swept_on_start(session, clock):
    await session.start()
    session.set_tempdata("short", "x", 100)
    session.set_tempdata("long", "y", 101)

    clock.advance(100)
    await session.start()

    assert session.has("short") is False
    assert "short" not in session.get_markers()
    assert session.get("long") == "y"


@pytest.mark.asyncio
async def test_tempdata_survives_many_cycles(session, clock):
    await session.start()
    session.set_tempdata("foo", "bar", 3600)

    for _ in range(5):
        clock.advance(60)
        await session.start()

    assert session.get_tempdata("foo") == "bar"


@pytest.mark.asyncio
async def test_zero_ttl_is_not_visible_as_tempdata(session):
    await session.start()

    session.set_tempdata("foo", "bar", 0)

    assert session.get_tempdata("foo") is None
    assert list(session.get_temp_keys()) == []

    await session.start()
    assert session.has("foo") is False


@pytest.mark.asyncio
async def test_mark_as_tempdata_mapping(session):
    await session.start()
    session.set({"a": 1, "b": 2})

    assert session.mark_as_tempdata({"a": 10, "b": 20}) is True

    assert session.get_temp_expiry("a") == START_TIME + 10
    assert session.get_temp_expiry("b") == START_TIME + 20
