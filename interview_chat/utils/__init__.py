"""
Shared utilities - logging setup and error types
"""

from interview_chat.utils.errors import (
    AgentNotConfiguredError,
    BackendError,
    ChatSessionError,
    CompletionError,
    ConfigurationError,
    InvalidSessionKeyError,
    LifecycleConflictError,
    StreamRequestError,
)
from interview_chat.utils.logger import setup_logger

__all__ = [
    "AgentNotConfiguredError",
    "BackendError",
    "ChatSessionError",
    "CompletionError",
    "ConfigurationError",
    "InvalidSessionKeyError",
    "LifecycleConflictError",
    "StreamRequestError",
    "setup_logger",
]
