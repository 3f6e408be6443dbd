import asyncio

import pytest
from fastapi_sessions.backends.session_backend import BackendError, SessionBackend
from unittest.mock import Mock
from uuid import uuid4

from auth.session import SessionData
from auth.session.backends import MemoryBackend, create_store
from auth.session.config import MemoryStoreConfig


def make_backend(**kwargs) -> MemoryBackend:
    kwargs.setdefault("check_period_ms", 60_000)
    kwargs.setdefault("default_ttl_ms", 60_000)
    return MemoryBackend(**kwargs)


@pytest.mark.asyncio
async def test_memory_backend_set_and_get():
    backend = make_backend()
    session_id = str(uuid4())

    await backend.set(session_id, SessionData(user_id=7), ttl_ms=60_000)
    result = await backend.get(session_id)

    assert result is not None
    assert result.user_id == 7


@pytest.mark.asyncio
async def test_memory_backend_get_returns_copy():
    backend = make_backend()
    session_id = str(uuid4())
    await backend.set(session_id, SessionData(user_id=7), ttl_ms=60_000)

    result = await backend.get(session_id)
    result.user_id = 99

    assert (await backend.get(session_id)).user_id == 7


@pytest.mark.asyncio
async def test_memory_backend_get_not_found():
    backend = make_backend()
    assert await backend.get(str(uuid4())) is None


@pytest.mark.asyncio
async def test_memory_backend_expired_entry_is_absent():
    dispose = Mock()
    backend = make_backend(dispose=dispose)
    session_id = str(uuid4())

    await backend.set(session_id, SessionData(), ttl_ms=10)
    await asyncio.sleep(0.05)

    assert await backend.get(session_id) is None
    assert session_id not in backend
    dispose.assert_called_once()


@pytest.mark.asyncio
async def test_memory_backend_destroy_is_idempotent():
    backend = make_backend()
    session_id = str(uuid4())
    await backend.set(session_id, SessionData(), ttl_ms=60_000)

    await backend.destroy(session_id)
    await backend.destroy(session_id)

    assert await backend.get(session_id) is None
    assert len(backend) == 0


@pytest.mark.asyncio
async def test_memory_backend_touch_extends_expiry():
    backend = make_backend()
    session_id = str(uuid4())
    await backend.set(session_id, SessionData(user_id=3), ttl_ms=200)

    await asyncio.sleep(0.1)
    await backend.touch(session_id, ttl_ms=1_000)
    await asyncio.sleep(0.15)

    result = await backend.get(session_id)
    assert result is not None
    assert result.user_id == 3


@pytest.mark.asyncio
async def test_memory_backend_touch_missing_session_is_noop():
    backend = make_backend()
    await backend.touch(str(uuid4()), ttl_ms=1_000)
    assert len(backend) == 0


@pytest.mark.asyncio
async def test_memory_backend_overwrite_disposes_previous_value():
    dispose = Mock()
    backend = make_backend(dispose=dispose)
    session_id = str(uuid4())

    await backend.set(session_id, SessionData(user_id=1), ttl_ms=60_000)
    await backend.set(session_id, SessionData(user_id=2), ttl_ms=60_000)

    dispose.assert_called_once()
    disposed_id, disposed_data = dispose.call_args.args
    assert disposed_id == session_id
    assert disposed_data.user_id == 1


@pytest.mark.asyncio
async def test_memory_backend_no_dispose_on_set():
    dispose = Mock()
    backend = make_backend(dispose=dispose, no_dispose_on_set=True)
    session_id = str(uuid4())

    await backend.set(session_id, SessionData(user_id=1), ttl_ms=60_000)
    await backend.set(session_id, SessionData(user_id=2), ttl_ms=60_000)

    dispose.assert_not_called()
    assert (await backend.get(session_id)).user_id == 2


@pytest.mark.asyncio
async def test_memory_backend_sweep_removes_expired_sessions():
    dispose = Mock()
    backend = make_backend(check_period_ms=100, dispose=dispose)
    expiring_id = str(uuid4())
    live_id = str(uuid4())

    await backend.start()
    try:
        await backend.set(expiring_id, SessionData(), ttl_ms=50)
        await backend.set(live_id, SessionData(), ttl_ms=60_000)
        await asyncio.sleep(0.3)

        # checked without get(), so only the sweep can have removed it
        assert expiring_id not in backend
        assert live_id in backend
        dispose.assert_called_once()
        assert dispose.call_args.args[0] == expiring_id
    finally:
        await backend.close()


@pytest.mark.asyncio
async def test_memory_backend_close_stops_sweep():
    backend = make_backend(check_period_ms=100)
    await backend.start()
    task = backend._sweep_task

    await backend.close()

    assert task.done()
    assert backend._sweep_task is None
    # closing twice is harmless
    await backend.close()


@pytest.mark.asyncio
async def test_memory_backend_prune_counts_removed():
    backend = make_backend()
    await backend.set("a", SessionData(), ttl_ms=1)
    await backend.set("b", SessionData(), ttl_ms=1)
    await backend.set("c", SessionData(), ttl_ms=60_000)
    await asyncio.sleep(0.02)

    assert backend.prune() == 2
    assert len(backend) == 1


@pytest.mark.asyncio
async def test_memory_backend_session_backend_contract():
    backend = make_backend(default_ttl_ms=60_000)
    session_id = str(uuid4())
    assert isinstance(backend, SessionBackend)

    await backend.create(session_id, SessionData(user_id=1))
    await backend.update(session_id, SessionData(user_id=2))
    assert (await backend.read(session_id)).user_id == 2

    await backend.delete(session_id)
    assert await backend.read(session_id) is None


@pytest.mark.asyncio
async def test_memory_backend_update_not_found():
    backend = make_backend()
    with pytest.raises(BackendError, match="Session does not exist, cannot update"):
        await backend.update(str(uuid4()), SessionData())


def test_create_store_selects_memory_backend():
    store = create_store(MemoryStoreConfig(check_period_ms=500, no_dispose_on_set=True), default_ttl_ms=1_000)
    assert isinstance(store, MemoryBackend)
    assert store.check_period_ms == 500
    assert store.no_dispose_on_set is True
    assert store.default_ttl_ms == 1_000
