"""
Backend relay client

Async HTTP client for the backend that fronts the agent platform: chat
history, the streaming send endpoint, interview completion and the
post-interview processing steps, and account lookup.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional
from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import BaseModel

from interview_chat.config.settings import settings
from interview_chat.session.models import AccountConfig, HistoryPayload
from interview_chat.utils.errors import BackendError, CompletionError, StreamRequestError


class StreamRequest(BaseModel):
    """Body of the streaming send endpoint"""
    user_id: str
    agent_id: str
    session_id: str
    message: str


def _key_path(session_key: str) -> str:
    # Keys carry '+' and '@' literally, as the backend expects
    return quote(session_key, safe="+@")


class BackendClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    Pass ``client`` to share a connection pool or to inject a mock transport;
    otherwise a client is created and closed by ``aclose()``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        stream_path: Optional[str] = None,
        timeout: Optional[float] = None,
        stream_timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.backend_api_url).rstrip("/")
        self.stream_path = stream_path or settings.stream_path
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.stream_timeout = stream_timeout if stream_timeout is not None else settings.stream_timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # History and accounts
    # ------------------------------------------------------------------

    async def get_history(self, session_key: str, agent_id: Optional[str] = None) -> Optional[HistoryPayload]:
        """
        Fetch chat history for a session.

        Returns None when the backend has no history for the key (any non-2xx
        answer); a brand new session is a valid state, not an error.

        Raises:
            BackendError: if the backend cannot be reached
        """
        params = {"agent_id": agent_id} if agent_id else None
        try:
            response = await self._client.get(f"/chat/history/{_key_path(session_key)}", params=params)
        except httpx.HTTPError as e:
            raise BackendError(f"Failed to load chat history: {e}") from e

        if response.status_code == 404:
            logger.debug(f"No history for session {session_key}, starting fresh")
            return None
        if not response.is_success:
            logger.warning(f"History request for {session_key} returned {response.status_code}, starting fresh")
            return None

        return HistoryPayload.model_validate(response.json())

    async def get_account(self, account_id: str) -> Optional[AccountConfig]:
        """Resolve account configuration (agent ids, knowledge base id)."""
        try:
            response = await self._client.get(f"/accounts/{quote(account_id, safe='')}")
        except httpx.HTTPError as e:
            raise BackendError(f"Failed to load account: {e}") from e

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise BackendError(
                f"Account lookup failed: {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )

        data = response.json()
        data.setdefault("user_id", account_id)
        return AccountConfig.model_validate(data)

    # ------------------------------------------------------------------
    # Streaming send
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def open_stream(
        self,
        session_key: str,
        account_id: str,
        agent_id: str,
        message: str,
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """
        Open the streaming send request and yield the body as a byte iterator.

        Failing to connect or a non-2xx status raises before anything is
        yielded, so callers can tell a request that never reached the agent
        from a stream that broke halfway. The response is closed on every
        exit path; a failure while closing is logged, not raised.

        Raises:
            StreamRequestError: transport failure or non-2xx response
        """
        body = StreamRequest(user_id=account_id, agent_id=agent_id, session_id=session_key, message=message)
        request = self._client.build_request(
            "POST",
            self.stream_path,
            json=body.model_dump(),
            timeout=httpx.Timeout(self.timeout, read=self.stream_timeout),
        )

        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise StreamRequestError(f"Failed to reach backend: {e}") from e

        try:
            if not response.is_success:
                detail = (await response.aread()).decode("utf-8", errors="replace")
                raise StreamRequestError(
                    f"HTTP error! status: {response.status_code}",
                    status_code=response.status_code,
                    detail=detail,
                )
            yield response.aiter_bytes()
        finally:
            try:
                await response.aclose()
            except Exception as e:
                logger.warning(f"Error releasing stream reader: {e}")

    # ------------------------------------------------------------------
    # Interview completion pipeline
    # ------------------------------------------------------------------

    async def complete_interview(self, session_key: str) -> Dict[str, Any]:
        """Mark the interview as completed on the backend."""
        try:
            response = await self._client.post(f"/chat/interview/complete/{_key_path(session_key)}")
        except httpx.HTTPError as e:
            raise CompletionError(f"Failed to complete interview: {e}") from e

        if not response.is_success:
            raise CompletionError(
                f"Failed to complete interview: {response.text}",
                status_code=response.status_code,
                detail=response.text,
            )
        return response.json()

    async def process_interview(self, account_id: str, contact_identity: str) -> Dict[str, Any]:
        """Turn the finished interview into a document."""
        return await self._post_step("/interview/process", account_id, contact_identity)

    async def train_knowledge_base(self, account_id: str, contact_identity: str) -> Dict[str, Any]:
        """Feed the processed interview to the knowledge base."""
        return await self._post_step("/interview/kb-training", account_id, contact_identity)

    async def _post_step(self, path: str, account_id: str, contact_identity: str) -> Dict[str, Any]:
        try:
            response = await self._client.post(path, json={"user_id": account_id, "email": contact_identity})
        except httpx.HTTPError as e:
            raise BackendError(f"{path} failed: {e}") from e

        if not response.is_success:
            raise BackendError(f"{path} failed: {response.status_code}", status_code=response.status_code, detail=response.text)
        try:
            return response.json()
        except ValueError:
            return {}
