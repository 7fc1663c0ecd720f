"""
Custom error classes for the chat session core
"""

from typing import Optional


class ChatSessionError(Exception):
    """Base exception for chat session errors"""
    pass


class InvalidSessionKeyError(ChatSessionError, ValueError):
    """Session key cannot be composed or split"""
    pass


class ConfigurationError(ChatSessionError):
    """A blocking precondition is missing (no session or no account config)"""
    pass


class AgentNotConfiguredError(ConfigurationError):
    """No agent is configured for the session's account"""
    pass


class LifecycleConflictError(ChatSessionError):
    """Session lifecycle transition is not allowed in the current state"""
    pass


class BackendError(ChatSessionError):
    """A backend collaborator call failed"""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class StreamRequestError(BackendError):
    """The streaming request never produced a readable stream"""
    pass


class CompletionError(BackendError):
    """Interview completion failed"""
    pass
