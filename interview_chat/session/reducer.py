"""
Session Transcript Reducer

Pure functions folding frames into a transcript. Inputs are never mutated;
every call returns a new list (messages are frozen and copied on write).
"""

from typing import List

from interview_chat.config.constants import ASSISTANT_FAILURE_MESSAGE, STREAM_INTERRUPTED_SUFFIX
from interview_chat.session.frames import ContentDelta, ErrorFrame, Frame, Unparsed
from interview_chat.session.models import Message


def _replace(transcript: List[Message], target_id: str, content_fn) -> List[Message]:
    updated = []
    for message in transcript:
        if message.id == target_id:
            message = message.with_content(content_fn(message.content))
        updated.append(message)
    return updated


def reduce(transcript: List[Message], target_id: str, frame: Frame) -> List[Message]:
    """
    Apply one frame to the transcript.

    Content and non-empty unparsed text are appended to the target message so
    it always holds the cumulative response. An error frame replaces the
    content with the fixed failure text. Metadata and Done leave the
    transcript untouched (count bookkeeping belongs to the lifecycle).
    A missing target is a no-op.
    """
    if not any(message.id == target_id for message in transcript):
        return list(transcript)

    if isinstance(frame, ContentDelta):
        return _replace(transcript, target_id, lambda content: content + frame.text)

    if isinstance(frame, Unparsed):
        if not frame.raw_text.strip():
            return list(transcript)
        return _replace(transcript, target_id, lambda content: content + frame.raw_text)

    if isinstance(frame, ErrorFrame):
        return _replace(transcript, target_id, lambda content: ASSISTANT_FAILURE_MESSAGE)

    return list(transcript)


def interrupt(transcript: List[Message], target_id: str) -> List[Message]:
    """Mark a stream that broke after it started: keep partial text, flag the failure."""
    def _interrupted(content: str) -> str:
        if content:
            return content + STREAM_INTERRUPTED_SUFFIX
        return ASSISTANT_FAILURE_MESSAGE

    return _replace(transcript, target_id, _interrupted)


def rollback(transcript: List[Message], *message_ids: str) -> List[Message]:
    """Drop messages added for a send that never reached the server."""
    dropped = set(message_ids)
    return [message for message in transcript if message.id not in dropped]
