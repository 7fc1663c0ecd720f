"""
Session Lifecycle Controller

Owns one open session: its transcript, exchange count and status, and the
single ``active -> completed`` transition that hands the interview over to
the document pipeline.
"""

from typing import Callable, List, Optional

from loguru import logger

from interview_chat.config.settings import settings
from interview_chat.session.models import Message, SessionContext, SessionMode, SessionStatus
from interview_chat.utils.errors import (
    BackendError,
    CompletionError,
    ConfigurationError,
    LifecycleConflictError,
)


TranscriptObserver = Callable[[List[Message]], None]


class SessionLifecycleController:
    """
    State holder for one chat or interview session.

    ``message_count`` counts exchanges (one user message plus its reply) and
    is maintained locally; server-reported counts are kept only as a
    corroborating signal in ``server_message_count``.
    """

    def __init__(
        self,
        context: SessionContext,
        backend=None,
        completion=None,
        threshold: Optional[int] = None,
    ):
        """
        Args:
            context: Session identity, mode and agent
            backend: History source exposing ``get_history(session_key, agent_id)``
            completion: Completion collaborator exposing
                ``complete(session_key, account_id, contact_identity)``
            threshold: Exchanges required before completion (defaults to settings)
        """
        self.context = context
        self.backend = backend
        self.completion = completion
        self.threshold = threshold if threshold is not None else settings.completion_threshold

        self.transcript: List[Message] = []
        self.message_count = 0
        self.status = SessionStatus.ACTIVE
        self.server_message_count: Optional[int] = None

        self._completing = False
        self._observers: List[TranscriptObserver] = []

    @property
    def session_key(self):
        return self.context.session_key

    @property
    def completion_eligible(self) -> bool:
        return self.message_count >= self.threshold

    @property
    def completing(self) -> bool:
        return self._completing

    @property
    def is_finished(self) -> bool:
        return self.status in (SessionStatus.COMPLETED, SessionStatus.PROCESSED)

    # ------------------------------------------------------------------
    # Transcript ownership
    # ------------------------------------------------------------------

    def add_observer(self, observer: TranscriptObserver) -> None:
        """Register a callback invoked with the full transcript after every change."""
        self._observers.append(observer)

    def replace_transcript(self, transcript: List[Message]) -> None:
        self.transcript = transcript
        for observer in self._observers:
            try:
                observer(transcript)
            except Exception:
                logger.exception("Transcript observer failed")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """
        Load existing history, or start an empty active session when the
        backend has none.

        Raises:
            ConfigurationError: no session key in context
            BackendError: the backend could not be reached
        """
        if self.session_key is None:
            raise ConfigurationError("No session_id configured")

        history = None
        if self.backend is not None:
            history = await self.backend.get_history(self.session_key.value, self.context.agent_id)

        if history is None:
            logger.info(f"Starting new session {self.session_key}")
            self.message_count = 0
            self.status = SessionStatus.ACTIVE
            self.replace_transcript([])
            return

        self.message_count = history.resolved_count
        self.status = history.resolved_status
        self.replace_transcript(history.to_transcript())
        logger.info(
            f"Loaded session {self.session_key}: {len(self.transcript)} messages, "
            f"count={self.message_count}, status={self.status.value}"
        )

    def record_sent_message(self) -> None:
        """Count one successful exchange."""
        self.message_count += 1
        logger.debug(
            f"Session {self.session_key} message_count={self.message_count} "
            f"eligible={self.completion_eligible}"
        )

    def observe_server_count(self, count: int) -> None:
        """Record the server's count. The local count stays authoritative."""
        self.server_message_count = count
        # The local count is bumped after the exchange finishes, so the server
        # may legitimately be one ahead while streaming
        if count not in (self.message_count, self.message_count + 1):
            logger.warning(
                f"Server message_count={count} disagrees with local count={self.message_count} "
                f"for session {self.session_key}"
            )

    async def complete(self):
        """
        Complete the interview.

        Rejected locally, without any network call, when the session is a
        knowledge-base chat, is not active, has not reached the threshold, or
        already has a completion in flight.

        Returns:
            The completion collaborator's result

        Raises:
            LifecycleConflictError: transition not allowed right now
            CompletionError: the collaborator failed; status is unchanged
        """
        if self.context.mode != SessionMode.INTERVIEW:
            raise LifecycleConflictError("Only interview sessions can be completed")
        if self._completing:
            raise LifecycleConflictError("Interview completion already in progress")
        if self.status != SessionStatus.ACTIVE:
            raise LifecycleConflictError(f"Interview is already {self.status.value}")
        if not self.completion_eligible:
            raise LifecycleConflictError(
                f"Interview needs {self.threshold} exchanges before completion, has {self.message_count}"
            )
        if self.completion is None:
            raise ConfigurationError("No completion service configured")

        key = self.session_key
        self._completing = True
        try:
            result = await self.completion.complete(key.value, key.account_id, key.contact_identity)
        except CompletionError as e:
            logger.error(f"Failed to complete interview {key}: {e}")
            raise
        except BackendError as e:
            logger.error(f"Failed to complete interview {key}: {e}")
            raise CompletionError(str(e), status_code=e.status_code, detail=e.detail) from e
        finally:
            self._completing = False

        if not getattr(result, "success", False):
            raise CompletionError(getattr(result, "message", "") or "Failed to complete interview")

        self.status = SessionStatus.COMPLETED
        logger.info(f"Interview completed for session {key}")
        return result

    def mark_processed(self) -> None:
        """Downstream pipeline finished: ``completed -> processed``."""
        if self.status != SessionStatus.COMPLETED:
            raise LifecycleConflictError(f"Cannot mark a {self.status.value} session as processed")
        self.status = SessionStatus.PROCESSED
