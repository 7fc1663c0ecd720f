"""
Tests for the session lifecycle controller
"""

import asyncio

import pytest

from conftest import FakeCompletion, FakeStreamBackend
from interview_chat.session.lifecycle import SessionLifecycleController
from interview_chat.session.models import HistoryPayload, Role, SessionContext, SessionMode, SessionStatus
from interview_chat.utils.errors import CompletionError, ConfigurationError, LifecycleConflictError


def _eligible(lifecycle, count=5):
    for _ in range(count):
        lifecycle.record_sent_message()
    return lifecycle


def test_load_without_history_starts_fresh(context):
    """Test that a missing history is a valid new session, not an error"""
    backend = FakeStreamBackend(history=None)
    lifecycle = SessionLifecycleController(context, backend=backend)

    asyncio.run(lifecycle.load())

    assert lifecycle.transcript == []
    assert lifecycle.message_count == 0
    assert lifecycle.status == SessionStatus.ACTIVE
    assert backend.history_calls == [("user-456+jane@example.com", "agent-interview")]


def test_load_restores_flat_history(context):
    """Test loading messages, count and status from the flat shape"""
    history = HistoryPayload(
        messages=[
            {"role": "user", "content": "Hi", "created_at": "2025-01-01T10:00:00Z"},
            {"role": "assistant", "content": "Hello!"},
            {"role": "system", "content": "hidden"},
        ],
        message_count=6,
        session_status="active",
    )
    lifecycle = SessionLifecycleController(context, backend=FakeStreamBackend(history=history))

    asyncio.run(lifecycle.load())

    assert [(m.role, m.content) for m in lifecycle.transcript] == [(Role.USER, "Hi"), (Role.ASSISTANT, "Hello!")]
    assert lifecycle.message_count == 6
    assert lifecycle.completion_eligible


def test_load_restores_nested_session_shape(context):
    """Test that the nested session object takes precedence"""
    history = HistoryPayload.model_validate({
        "messages": [],
        "message_count": 1,
        "session": {"message_count": 7, "session_status": "processed"},
    })
    lifecycle = SessionLifecycleController(context, backend=FakeStreamBackend(history=history))

    asyncio.run(lifecycle.load())

    assert lifecycle.message_count == 7
    assert lifecycle.status == SessionStatus.PROCESSED
    assert lifecycle.is_finished


def test_load_requires_session_key():
    """Test that loading without a session is a configuration error"""
    lifecycle = SessionLifecycleController(SessionContext(session_key=None))

    with pytest.raises(ConfigurationError):
        asyncio.run(lifecycle.load())


@pytest.mark.parametrize("k", [0, 1, 4, 5, 6, 12])
def test_record_sent_message_counts_exchanges(context, k):
    """Test that k recorded exchanges give count k and eligibility k >= 5"""
    lifecycle = SessionLifecycleController(context)

    for _ in range(k):
        lifecycle.record_sent_message()

    assert lifecycle.message_count == k
    assert lifecycle.completion_eligible == (k >= 5)


def test_server_count_is_corroborating_only(context):
    """Test that server metadata never overrides the local count"""
    lifecycle = SessionLifecycleController(context)
    lifecycle.record_sent_message()

    lifecycle.observe_server_count(40)

    assert lifecycle.server_message_count == 40
    assert lifecycle.message_count == 1


def test_complete_before_threshold_is_rejected_locally(context, completion):
    """Test that early completion never reaches the collaborator"""
    lifecycle = _eligible(SessionLifecycleController(context, completion=completion), count=4)

    with pytest.raises(LifecycleConflictError):
        asyncio.run(lifecycle.complete())

    assert completion.calls == []
    assert lifecycle.status == SessionStatus.ACTIVE


def test_complete_success(context, completion):
    """Test active -> completed with the composite identity passed along"""
    lifecycle = _eligible(SessionLifecycleController(context, completion=completion))

    result = asyncio.run(lifecycle.complete())

    assert result.success
    assert lifecycle.status == SessionStatus.COMPLETED
    assert completion.calls == [("user-456+jane@example.com", "user-456", "jane@example.com")]


def test_complete_twice_is_rejected(context, completion):
    """Test that a completed session cannot be completed again"""
    lifecycle = _eligible(SessionLifecycleController(context, completion=completion))
    asyncio.run(lifecycle.complete())

    with pytest.raises(LifecycleConflictError):
        asyncio.run(lifecycle.complete())

    assert len(completion.calls) == 1


def test_complete_failure_leaves_status(context):
    """Test that a failed completion keeps the session active and surfaces the error"""
    failing = FakeCompletion(error=CompletionError("Failed to complete interview: 502", status_code=502))
    lifecycle = _eligible(SessionLifecycleController(context, completion=failing))

    with pytest.raises(CompletionError):
        asyncio.run(lifecycle.complete())

    assert lifecycle.status == SessionStatus.ACTIVE
    assert not lifecycle.completing


def test_concurrent_complete_is_rejected(context):
    """Test that a second completion while one is pending is rejected, not raced"""

    async def scenario():
        gate = asyncio.Event()
        gated = FakeCompletion(gate=gate)
        lifecycle = _eligible(SessionLifecycleController(context, completion=gated))

        first = asyncio.create_task(lifecycle.complete())
        await asyncio.sleep(0)
        assert lifecycle.completing

        with pytest.raises(LifecycleConflictError):
            await lifecycle.complete()

        gate.set()
        await first
        return lifecycle, gated

    lifecycle, gated = asyncio.run(scenario())

    assert len(gated.calls) == 1
    assert lifecycle.status == SessionStatus.COMPLETED


def test_agent_chat_cannot_be_completed(session_key, account, completion):
    """Test that knowledge-base chats have no completion transition"""
    ctx = SessionContext.resolve(session_key, account, mode=SessionMode.AGENT_CHAT)
    lifecycle = _eligible(SessionLifecycleController(ctx, completion=completion))

    with pytest.raises(LifecycleConflictError):
        asyncio.run(lifecycle.complete())

    assert completion.calls == []


def test_mark_processed_only_after_completion(context, completion):
    """Test completed -> processed and its precondition"""
    lifecycle = _eligible(SessionLifecycleController(context, completion=completion))

    with pytest.raises(LifecycleConflictError):
        lifecycle.mark_processed()

    asyncio.run(lifecycle.complete())
    lifecycle.mark_processed()

    assert lifecycle.status == SessionStatus.PROCESSED


def test_observer_failure_does_not_break_updates(context):
    """Test that a failing observer is logged and others still run"""
    seen = []

    def broken(transcript):
        raise RuntimeError("render failed")

    lifecycle = SessionLifecycleController(context)
    lifecycle.add_observer(broken)
    lifecycle.add_observer(lambda transcript: seen.append(len(transcript)))

    lifecycle.replace_transcript([])

    assert seen == [0]
