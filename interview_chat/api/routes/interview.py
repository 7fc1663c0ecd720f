"""
Interview completion relay endpoints

Browsers call these routes once an interview has enough exchanges. The relay
marks the interview complete on the backend, then kicks off document
processing and knowledge-base training (best effort).
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from interview_chat.api.models import (
    CompleteInterviewRequest,
    CompleteInterviewResponse,
    ErrorResponse,
    ParsedSession,
)
from interview_chat.config.settings import settings
from interview_chat.services.completion import InterviewCompletionService
from interview_chat.session.keys import split
from interview_chat.utils.errors import BackendError, InvalidSessionKeyError


router = APIRouter(prefix="/api/complete-interview", tags=["interview"])


def get_completion_service(request: Request) -> InterviewCompletionService:
    """Completion pipeline bound to the app's shared backend client"""
    return InterviewCompletionService(request.app.state.backend)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post("", response_model=CompleteInterviewResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def complete_interview(
    body: CompleteInterviewRequest,
    service: InterviewCompletionService = Depends(get_completion_service),
):
    """
    Complete an interview identified by explicit fields.

    **Request:**
    ```json
    {"session_id": "user-456+jane@example.com", "user_id": "user-456", "email": "jane@example.com"}
    ```
    """
    if not body.session_id or not body.user_id or not body.email:
        return _error("Missing required parameters", 400)

    try:
        result = await service.complete(body.session_id, body.user_id, body.email)
    except BackendError as e:
        logger.error(f"Error in complete-interview API: {e}")
        return _error(str(e) or "Internal server error", 500)

    return CompleteInterviewResponse(
        message=result.message,
        data=result.data,
        steps=result.steps,
    )


@router.post("/{session_id:path}", response_model=CompleteInterviewResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def complete_interview_by_key(
    session_id: str,
    service: InterviewCompletionService = Depends(get_completion_service),
):
    """
    Complete an interview identified only by its session key
    (``user_id+email``, split at the last ``+``).
    """
    try:
        key = split(session_id, settings.session_key_delimiter)
    except InvalidSessionKeyError as e:
        return _error(str(e), 400)

    try:
        result = await service.complete(key.value, key.account_id, key.contact_identity)
    except BackendError as e:
        logger.error(f"Error in complete-interview API: {e}")
        return _error(str(e) or "Internal server error", 500)

    return CompleteInterviewResponse(
        message=result.message,
        data=result.data,
        steps=result.steps,
        parsed_data=ParsedSession(user_id=key.account_id, email=key.contact_identity, session_id=key.value),
    )
