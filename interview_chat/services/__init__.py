"""
Service layer - backend relay client and interview completion
"""

from interview_chat.services.backend import BackendClient, StreamRequest
from interview_chat.services.completion import (
    CompletionResult,
    InterviewCompletionService,
    RelayCompletionClient,
)

__all__ = [
    "BackendClient",
    "StreamRequest",
    "CompletionResult",
    "InterviewCompletionService",
    "RelayCompletionClient",
]
