"""
Session core - streaming chat/interview session protocol

Decoder (bytes -> frames), reducer (frames -> transcript), lifecycle
controller (counts, status, completion) and the send orchestrator tying
them together.
"""

from interview_chat.session.decoder import StreamFrameDecoder, iter_frames
from interview_chat.session.frames import ContentDelta, Done, ErrorFrame, Frame, Metadata, Unparsed
from interview_chat.session.keys import SessionKey, compose, parse_route_param, split
from interview_chat.session.lifecycle import SessionLifecycleController
from interview_chat.session.models import (
    AccountConfig,
    HistoryPayload,
    Message,
    Role,
    SessionContext,
    SessionMode,
    SessionStatus,
)
from interview_chat.session.orchestrator import SendOrchestrator, SendOutcome, SendState, SendStatus

__all__ = [
    "StreamFrameDecoder",
    "iter_frames",
    "ContentDelta",
    "Done",
    "ErrorFrame",
    "Frame",
    "Metadata",
    "Unparsed",
    "SessionKey",
    "compose",
    "parse_route_param",
    "split",
    "SessionLifecycleController",
    "AccountConfig",
    "HistoryPayload",
    "Message",
    "Role",
    "SessionContext",
    "SessionMode",
    "SessionStatus",
    "SendOrchestrator",
    "SendOutcome",
    "SendState",
    "SendStatus",
]
