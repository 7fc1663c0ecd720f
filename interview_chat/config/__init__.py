"""
Configuration layer - Settings and constants
"""

from interview_chat.config.settings import settings, Settings, PROJECT_ROOT
from interview_chat.config.constants import (
    ASSISTANT_FAILURE_MESSAGE,
    COMPLETION_THRESHOLD,
    DATA_PREFIX,
    DONE_SENTINEL,
    SESSION_KEY_DELIMITER,
    STREAM_INTERRUPTED_SUFFIX,
)

__all__ = [
    "settings",
    "Settings",
    "PROJECT_ROOT",
    "ASSISTANT_FAILURE_MESSAGE",
    "COMPLETION_THRESHOLD",
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "SESSION_KEY_DELIMITER",
    "STREAM_INTERRUPTED_SUFFIX",
]
