"""
Shared fixtures: fake collaborators for the session core.
"""

import asyncio
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interview_chat.services.completion import CompletionResult
from interview_chat.session.keys import SessionKey
from interview_chat.session.lifecycle import SessionLifecycleController
from interview_chat.session.models import AccountConfig, SessionContext, SessionMode
from interview_chat.session.orchestrator import SendOrchestrator


class FakeStreamBackend:
    """
    Scripted stand-in for BackendClient.

    Args:
        chunks: Byte chunks yielded by the stream, in order
        fail_before: Exception raised when opening the stream (pre-stream failure)
        fail_after: Exception raised after all chunks were yielded (mid-stream failure)
        hang: Block forever after the chunks (for timeouts)
        open_delay: Seconds to wait before the "response headers" arrive
        on_open: Callback invoked with the call arguments when the request is issued
        history: Value returned by get_history
    """

    def __init__(self, chunks=(), fail_before=None, fail_after=None, hang=False,
                 open_delay=0, on_open=None, history=None):
        self.chunks = list(chunks)
        self.fail_before = fail_before
        self.fail_after = fail_after
        self.hang = hang
        self.open_delay = open_delay
        self.on_open = on_open
        self.history = history
        self.calls = []
        self.history_calls = []
        self.chunks_read = 0
        self.released = 0

    async def get_history(self, session_key, agent_id=None):
        self.history_calls.append((session_key, agent_id))
        return self.history

    @asynccontextmanager
    async def open_stream(self, session_key, account_id, agent_id, message):
        self.calls.append({
            "session_key": session_key,
            "account_id": account_id,
            "agent_id": agent_id,
            "message": message,
        })
        if self.on_open:
            self.on_open(self.calls[-1])
        if self.open_delay:
            await asyncio.sleep(self.open_delay)
        if self.fail_before is not None:
            raise self.fail_before
        try:
            yield self._body()
        finally:
            self.released += 1

    async def _body(self):
        for chunk in self.chunks:
            self.chunks_read += 1
            yield chunk
        if self.fail_after is not None:
            raise self.fail_after
        if self.hang:
            await asyncio.sleep(3600)


class FakeCompletion:
    """Completion collaborator recording calls; optionally failing or gated."""

    def __init__(self, error=None, gate=None):
        self.error = error
        self.gate = gate
        self.calls = []

    async def complete(self, session_key, account_id, contact_identity):
        self.calls.append((session_key, account_id, contact_identity))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return CompletionResult(success=True, message="Interview completed and processed successfully", data={"ok": True})


def exchange_body(*contents):
    """Streaming body emitting each content frame followed by [DONE]."""
    lines = [f'data: {{"content": "{content}"}}\n\n' for content in contents]
    lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


@pytest.fixture
def session_key():
    return SessionKey(account_id="user-456", contact_identity="jane@example.com")


@pytest.fixture
def account():
    return AccountConfig(user_id="user-456", agent_id="agent-interview", chat_agent_id="agent-chat", rag_id="rag-1")


@pytest.fixture
def context(session_key, account):
    return SessionContext.resolve(session_key, account, mode=SessionMode.INTERVIEW)


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def make_session(context, completion):
    """Build (lifecycle, orchestrator) around a scripted backend."""

    def _make(backend, stream_timeout=5.0, ctx=None):
        lifecycle = SessionLifecycleController(ctx or context, backend=backend, completion=completion)
        orchestrator = SendOrchestrator(lifecycle, backend, stream_timeout=stream_timeout)
        return lifecycle, orchestrator

    return _make
