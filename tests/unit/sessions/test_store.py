"""Unit tests for InMemorySessionStore."""

import asyncio
import time

import pytest

from contract_assistant.models.enums import ChatPhase, ContractLanguage, MessageRole
from contract_assistant.models.llm_models import ChatMessage
from contract_assistant.models.session_models import SessionState
from contract_assistant.sessions.store import InMemorySessionStore


@pytest.fixture
def store():
    return InMemorySessionStore(idle_timeout_seconds=60)


@pytest.mark.asyncio
async def test_get_unknown_session(store):
    assert await store.get("nobody") is None


@pytest.mark.asyncio
async def test_get_or_create_does_not_store(store):
    session = await store.get_or_create("s1", ContractLanguage.VYPER)

    assert session.session_id == "s1"
    assert session.language is ContractLanguage.VYPER
    assert session.phase is ChatPhase.REQUIREMENTS
    assert await store.get("s1") is None


@pytest.mark.asyncio
async def test_put_then_get(store, sample_session):
    await store.put(sample_session)
    loaded = await store.get(sample_session.session_id)

    assert loaded == sample_session
    assert loaded is not sample_session


@pytest.mark.asyncio
async def test_mutation_without_put_is_not_visible(store, sample_session):
    await store.put(sample_session)

    loaded = await store.get(sample_session.session_id)
    loaded.conversation.append(ChatMessage(role=MessageRole.USER, content="unsaved"))
    loaded.phase = ChatPhase.REVIEW

    again = await store.get(sample_session.session_id)
    assert len(again.conversation) == 2
    assert again.phase is ChatPhase.REQUIREMENTS


@pytest.mark.asyncio
async def test_put_touches_session(store):
    session = SessionState(session_id="s1", last_activity=0.0)
    await store.put(session)

    assert session.last_activity > 0
    assert (await store.get("s1")).last_activity == session.last_activity


@pytest.mark.asyncio
async def test_delete(store, sample_session):
    await store.put(sample_session)

    assert await store.delete(sample_session.session_id) is True
    assert await store.delete(sample_session.session_id) is False
    assert await store.get(sample_session.session_id) is None


@pytest.mark.asyncio
async def test_sweep_expired(store):
    await store.put(SessionState(session_id="old"))
    await store.put(SessionState(session_id="new"))
    store._sessions["old"].last_activity = time.time() - 120

    removed = await store.sweep_expired(time.time())

    assert removed == 1
    assert await store.get("old") is None
    assert await store.get("new") is not None


@pytest.mark.asyncio
async def test_sweep_with_future_clock_removes_all(store, sample_session):
    await store.put(sample_session)
    assert await store.sweep_expired(time.time() + 3600) == 1


@pytest.mark.asyncio
async def test_expired_session_is_not_returned(store):
    await store.put(SessionState(session_id="idle"))
    store._sessions["idle"].last_activity = time.time() - 120

    assert await store.get("idle") is None
    assert (await store.stats())["active_sessions"] == 0


@pytest.mark.asyncio
async def test_stats(store):
    assert await store.stats() == {
        "backend": "memory",
        "active_sessions": 0,
        "locked_sessions": 0,
        "oldest_activity": None,
    }

    await store.put(SessionState(session_id="a"))
    await store.put(SessionState(session_id="b"))
    stats = await store.stats()

    assert stats["active_sessions"] == 2
    assert stats["oldest_activity"] == store._sessions["a"].last_activity


@pytest.mark.asyncio
async def test_lock_serializes_read_modify_write(store):
    await store.put(SessionState(session_id="shared"))

    async def append(text):
        async with store.lock("shared"):
            session = await store.get("shared")
            await asyncio.sleep(0.01)
            session.conversation.append(ChatMessage(role=MessageRole.USER, content=text))
            await store.put(session)

    await asyncio.gather(*(append(f"message {i}") for i in range(5)))

    assert len((await store.get("shared")).conversation) == 5


@pytest.mark.asyncio
async def test_locks_are_per_session(store):
    async with store.lock("a"):
        # A different session is not blocked
        async with store.lock("b"):
            pass


@pytest.mark.asyncio
async def test_lock_entry_released_after_delete(store):
    for i in range(100):
        async with store.lock(f"user-{i}"):
            await store.put(SessionState(session_id=f"user-{i}"))
            await store.delete(f"user-{i}")

    assert store._locks == {}
    assert (await store.stats())["locked_sessions"] == 0


@pytest.mark.asyncio
async def test_lock_entry_released_after_failed_turn(store):
    for i in range(100):
        with pytest.raises(RuntimeError):
            async with store.lock(f"user-{i}"):
                await store.get_or_create(f"user-{i}", ContractLanguage.SOLIDITY)
                raise RuntimeError("completion failed")

    assert store._locks == {}
    assert store._lock_users == {}


@pytest.mark.asyncio
async def test_lock_kept_while_waiters_remain(store):
    order = []

    async def turn(name):
        async with store.lock("shared"):
            order.append(name)
            assert "shared" in store._locks
            await asyncio.sleep(0.01)

    await asyncio.gather(turn("first"), turn("second"), turn("third"))

    assert order == ["first", "second", "third"]
    assert store._locks == {}


@pytest.mark.asyncio
async def test_close_clears(store, sample_session):
    await store.put(sample_session)
    await store.close()
    assert await store.get(sample_session.session_id) is None
