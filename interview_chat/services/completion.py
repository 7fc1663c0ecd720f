"""
Interview completion

``InterviewCompletionService`` is the relay-side pipeline: mark the interview
complete on the backend, then run document processing and knowledge-base
training as best-effort follow-ups. ``RelayCompletionClient`` is what a
session calls: it posts to the relay's ``/api/complete-interview`` route.

Both expose ``complete(session_key, account_id, contact_identity)`` and
return a ``CompletionResult``.
"""

from typing import Any, Dict, Optional

import httpx
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from interview_chat.config.settings import settings
from interview_chat.services.backend import BackendClient
from interview_chat.utils.errors import BackendError, CompletionError


class CompletionResult(BaseModel):
    """Outcome of an interview completion"""
    success: bool
    message: str = ""
    data: Any = None
    steps: Dict[str, bool] = Field(default_factory=dict)


class InterviewCompletionService:
    """Runs the completion pipeline against the backend."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def complete(self, session_key: str, account_id: str, contact_identity: str) -> CompletionResult:
        """
        Complete an interview.

        Only the completion call itself is required; processing and
        knowledge-base training failures are logged and reported in
        ``steps`` without failing the completion.

        Raises:
            CompletionError: if the backend rejects the completion
        """
        logger.info(f"Completing interview - session={session_key}")
        data = await self.backend.complete_interview(session_key)
        logger.info(f"Interview completed: {data}")

        steps = {"complete": True}

        try:
            await self.backend.process_interview(account_id, contact_identity)
            steps["process"] = True
            logger.info("Interview processing completed successfully")
        except BackendError as e:
            steps["process"] = False
            logger.warning(f"Interview processing failed, but interview marked as completed: {e}")

        try:
            result = await self.backend.train_knowledge_base(account_id, contact_identity)
            steps["kb_training"] = True
            logger.info(f"KB training completed: {result}")
        except BackendError as e:
            steps["kb_training"] = False
            logger.warning(f"KB training failed, but interview was processed: {e}")

        return CompletionResult(
            success=True,
            message="Interview completed and processed successfully",
            data=data,
            steps=steps,
        )


class RelayCompletionClient:
    """Calls the completion relay over HTTP."""

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.relay_api_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=settings.http_timeout_seconds)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def complete(self, session_key: str, account_id: str, contact_identity: str) -> CompletionResult:
        """
        Raises:
            CompletionError: transport failure, a non-2xx relay answer, or a
                2xx answer that is not a completion result
        """
        body = {"session_id": session_key, "user_id": account_id, "email": contact_identity}
        try:
            response = await self._client.post("/api/complete-interview", json=body)
        except httpx.HTTPError as e:
            raise CompletionError(f"Failed to complete interview: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if not response.is_success:
            error = result.get("error") if isinstance(result, dict) else None
            raise CompletionError(
                error or "Failed to complete interview",
                status_code=response.status_code,
                detail=response.text,
            )
        try:
            return CompletionResult.model_validate(result)
        except ValidationError as e:
            raise CompletionError(
                "Invalid completion response",
                status_code=response.status_code,
                detail=response.text,
            ) from e
