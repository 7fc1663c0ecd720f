"""
Send Orchestrator

Per-message control loop. For one user message it:

1. validates the input and the session configuration,
2. appends the user message and an empty assistant placeholder,
3. opens the stream and folds every decoded frame into the transcript,
4. records the exchange on success, or rolls back / marks the failure.

State per send: idle -> sending -> streaming -> {completed, failed} -> idle.
Only one send per session is in flight at a time; the flag is cleared on
every exit path.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from loguru import logger

from interview_chat.config.settings import settings
from interview_chat.session import reducer
from interview_chat.session.decoder import iter_frames
from interview_chat.session.frames import ContentDelta, Done, ErrorFrame, Frame, Metadata, Unparsed
from interview_chat.session.lifecycle import SessionLifecycleController
from interview_chat.session.models import Message, SessionMode
from interview_chat.utils.errors import AgentNotConfiguredError, ConfigurationError, StreamRequestError


class SendState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


class SendStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass
class SendOutcome:
    """
    Result of one send.

    Attributes:
        status: completed, failed, or rejected (never sent)
        notice: One-line user-facing message for failures and rejections
        user_message_id: Id of the user message, if it was added
        assistant_message_id: Id of the assistant message still in the transcript
        rolled_back: True when both messages were removed again
    """
    status: SendStatus
    notice: Optional[str] = None
    user_message_id: Optional[str] = None
    assistant_message_id: Optional[str] = None
    rolled_back: bool = False

    @property
    def ok(self) -> bool:
        return self.status == SendStatus.COMPLETED


@dataclass
class _Exchange:
    user_message: Message
    placeholder: Message
    started: bool = False  # response headers received with a 2xx status


class SendOrchestrator:
    """Drives sends for one session."""

    def __init__(self, lifecycle: SessionLifecycleController, backend, stream_timeout: Optional[float] = None):
        """
        Args:
            lifecycle: Owner of the session transcript and counters
            backend: Exposes ``open_stream(session_key, account_id, agent_id, message)``
                as an async context manager yielding an async byte iterator
            stream_timeout: Seconds a send may take before it is abandoned
        """
        self.lifecycle = lifecycle
        self.backend = backend
        self.stream_timeout = stream_timeout if stream_timeout is not None else settings.stream_timeout_seconds
        self.state = SendState.IDLE
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def send(self, text: str) -> SendOutcome:
        """
        Send one message and stream the reply into the transcript.

        Transient failures are returned as a failed outcome, never raised.

        Raises:
            ConfigurationError: no session is open
            AgentNotConfiguredError: the account has no agent for this mode
        """
        message = (text or "").strip()
        if not message:
            return SendOutcome(SendStatus.REJECTED, notice="Message is empty")
        if self._in_flight:
            return SendOutcome(SendStatus.REJECTED, notice="Please wait for the current reply to finish")

        context = self.lifecycle.context
        if context.mode == SessionMode.INTERVIEW and self.lifecycle.is_finished:
            return SendOutcome(
                SendStatus.REJECTED,
                notice=f"Interview is already {self.lifecycle.status.value}",
            )
        if context.session_key is None:
            raise ConfigurationError("No session configured")
        if not context.agent_id:
            raise AgentNotConfiguredError(
                f"No {context.mode.value} agent configured for account {context.account_id}"
            )

        self._in_flight = True
        self.state = SendState.SENDING
        exchange = _Exchange(user_message=Message.user(message), placeholder=Message.placeholder())

        try:
            self.lifecycle.replace_transcript(
                self.lifecycle.transcript + [exchange.user_message, exchange.placeholder]
            )
            return await asyncio.wait_for(self._stream_reply(exchange), timeout=self.stream_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Stream timeout after {self.stream_timeout}s - session={context.session_key}")
            return self._fail(exchange, "The assistant took too long to respond")
        except StreamRequestError as e:
            logger.error(f"Failed to open stream - session={context.session_key}: {e}")
            return self._fail(exchange, f"Failed to send message: {e}")
        except asyncio.CancelledError:
            self._fail(exchange, "Message cancelled")
            raise
        except Exception as e:
            logger.exception("Stream error occurred")
            return self._fail(exchange, f"Failed to send message: {e}")
        finally:
            self._in_flight = False
            self.state = SendState.IDLE

    async def _stream_reply(self, exchange: _Exchange) -> SendOutcome:
        context = self.lifecycle.context
        key = context.session_key
        target_id = exchange.placeholder.id

        logger.info(f"Stream started - session={key}, agent={context.agent_id}")
        async with self.backend.open_stream(key.value, key.account_id, context.agent_id, exchange.user_message.content) as chunks:
            exchange.started = True
            self.state = SendState.STREAMING

            frames = iter_frames(chunks)
            try:
                async for frame in frames:
                    if isinstance(frame, Done):
                        logger.debug("Stream completed: [DONE] received")
                        return self._finish(exchange)
                    if isinstance(frame, ErrorFrame):
                        self._apply(frame, target_id)
                        logger.error(f"Agent reported an error - session={key}: {frame.message}")
                        self.state = SendState.FAILED
                        return SendOutcome(
                            SendStatus.FAILED,
                            notice=f"Failed to get response: {frame.message}",
                            user_message_id=exchange.user_message.id,
                            assistant_message_id=target_id,
                        )
                    self._apply(frame, target_id)
            finally:
                await frames.aclose()

        logger.warning(f"Stream ended without [DONE] - session={key}")
        return self._finish(exchange)

    def _apply(self, frame: Frame, target_id: str) -> None:
        if isinstance(frame, Metadata):
            self.lifecycle.observe_server_count(frame.message_count)
            return
        if isinstance(frame, Unparsed):
            logger.debug(f"Non-JSON frame treated as content: {frame.raw_text[:100]}")
        if isinstance(frame, (ContentDelta, Unparsed, ErrorFrame)):
            self.lifecycle.replace_transcript(reducer.reduce(self.lifecycle.transcript, target_id, frame))

    def _finish(self, exchange: _Exchange) -> SendOutcome:
        self.lifecycle.record_sent_message()
        self.state = SendState.COMPLETED
        logger.info(f"Stream completed - session={self.lifecycle.session_key}, count={self.lifecycle.message_count}")
        return SendOutcome(
            SendStatus.COMPLETED,
            user_message_id=exchange.user_message.id,
            assistant_message_id=exchange.placeholder.id,
        )

    def _fail(self, exchange: _Exchange, notice: str) -> SendOutcome:
        """Roll back a send that never reached the agent; otherwise keep what arrived."""
        self.state = SendState.FAILED
        transcript = self.lifecycle.transcript

        if exchange.started:
            self.lifecycle.replace_transcript(reducer.interrupt(transcript, exchange.placeholder.id))
            return SendOutcome(
                SendStatus.FAILED,
                notice=notice,
                user_message_id=exchange.user_message.id,
                assistant_message_id=exchange.placeholder.id,
            )

        self.lifecycle.replace_transcript(
            reducer.rollback(transcript, exchange.user_message.id, exchange.placeholder.id)
        )
        return SendOutcome(SendStatus.FAILED, notice=notice, rolled_back=True)
