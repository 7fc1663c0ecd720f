"""
Stream frames - the logical events decoded from a streamed response body.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ContentDelta:
    """Text to append to the assistant message"""
    text: str


@dataclass(frozen=True)
class Metadata:
    """Absolute exchange count reported by the server"""
    message_count: int


@dataclass(frozen=True)
class Done:
    """Terminal frame; nothing after it is read"""
    pass


@dataclass(frozen=True)
class ErrorFrame:
    """Agent-side error reported inside the stream"""
    message: str


@dataclass(frozen=True)
class Unparsed:
    """Payload that was not structured data; its raw text counts as content"""
    raw_text: str


Frame = Union[ContentDelta, Metadata, Done, ErrorFrame, Unparsed]
