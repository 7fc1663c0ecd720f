"""
Protocol constants

Centralized constants shared by the stream decoder, reducer and lifecycle.
"""

# ============================================================================
# Stream framing
# ============================================================================

# Every line of interest in the response body starts with this prefix
DATA_PREFIX = "data: "

# Terminal payload; nothing after it is read
DONE_SENTINEL = "[DONE]"

# Structured payload fields
CONTENT_FIELD = "content"
COUNT_FIELD = "message_count"
ERROR_FIELD = "error"


# ============================================================================
# Session lifecycle
# ============================================================================

COMPLETION_THRESHOLD = 5

SESSION_KEY_DELIMITER = "+"

# Contact identity prefix for knowledge-base chats started locally
AGENT_CHAT_PREFIX = "chat-"


# ============================================================================
# User-visible failure text
# ============================================================================

# Replaces the assistant bubble when the agent reports an error or a stream
# fails before any content arrived
ASSISTANT_FAILURE_MESSAGE = "Sorry, I encountered an error processing your request."

# Appended to partial content when a stream breaks mid-response
STREAM_INTERRUPTED_SUFFIX = "\n\n[Response interrupted. Please try again.]"
