"""
Stream Frame Decoder

Turns the raw body of a streaming response into logical frames. The body is a
sequence of newline-terminated lines; lines of interest look like
``data: <payload>``. Payloads are ``[DONE]``, a JSON object with optional
``content`` / ``message_count`` / ``error`` fields, or opaque text.

Network reads split the body at arbitrary points, so every chunk is appended
to a residual buffer and only complete lines are decoded. The decoder never
raises on bad input: malformed payloads degrade to ``Unparsed`` and invalid
UTF-8 is replaced.
"""

import codecs
import json
from typing import AsyncIterator, List, Union

from loguru import logger

from interview_chat.config.constants import (
    CONTENT_FIELD,
    COUNT_FIELD,
    DATA_PREFIX,
    DONE_SENTINEL,
    ERROR_FIELD,
)
from interview_chat.session.frames import ContentDelta, Done, ErrorFrame, Frame, Metadata, Unparsed


class StreamFrameDecoder:
    """
    Incremental decoder for one streamed response.

    Create one instance per send; the only cross-chunk state is the residual
    (incomplete) line and the partially decoded UTF-8 sequence.
    """

    def __init__(self):
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.done = False

    def feed(self, chunk: Union[bytes, str]) -> List[Frame]:
        """
        Append a chunk and return the frames completed by it.

        Once ``[DONE]`` has been seen nothing else is emitted, including any
        lines that followed it in the same chunk.
        """
        if self.done:
            return []

        text = self._utf8.decode(chunk) if isinstance(chunk, (bytes, bytearray)) else chunk
        self._buffer += text

        *lines, self._buffer = self._buffer.split("\n")
        return self._decode_lines(lines)

    def flush(self) -> List[Frame]:
        """Decode whatever is left once the stream has physically ended."""
        if self.done:
            return []

        tail = self._buffer + self._utf8.decode(b"", final=True)
        self._buffer = ""
        if not tail:
            return []
        return self._decode_lines([tail])

    def _decode_lines(self, lines: List[str]) -> List[Frame]:
        frames: List[Frame] = []
        for line in lines:
            line = line.rstrip("\r")
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX):]
            if payload == DONE_SENTINEL:
                frames.append(Done())
                self.done = True
                self._buffer = ""
                break

            frames.extend(decode_payload(payload))
        return frames


def decode_payload(payload: str) -> List[Frame]:
    """
    Classify a single ``data:`` payload (other than ``[DONE]``).

    A JSON object may carry both content and a count; content comes first.
    """
    if not payload.strip():
        return []

    try:
        parsed = json.loads(payload)
    except ValueError:
        # Plain text chunk
        return [Unparsed(payload)]

    if isinstance(parsed, str):
        # JSON-encoded text chunk
        return [Unparsed(parsed)] if parsed.strip() else []
    if not isinstance(parsed, dict):
        return [Unparsed(payload)]

    frames: List[Frame] = []

    content = parsed.get(CONTENT_FIELD)
    if isinstance(content, str) and content:
        frames.append(ContentDelta(content))
    elif parsed.get(ERROR_FIELD):
        return [ErrorFrame(str(parsed[ERROR_FIELD]))]

    count = parsed.get(COUNT_FIELD)
    if isinstance(count, int) and not isinstance(count, bool):
        frames.append(Metadata(count))

    if not frames:
        logger.debug(f"Ignoring structured frame without content or count: {payload[:100]}")
    return frames


async def iter_frames(chunks: AsyncIterator[bytes]) -> AsyncIterator[Frame]:
    """
    Pull-based adapter: yield frames from an async byte iterator.

    Stops pulling as soon as ``[DONE]`` is decoded, without waiting for the
    physical end of the stream.
    """
    decoder = StreamFrameDecoder()
    async for chunk in chunks:
        for frame in decoder.feed(chunk):
            yield frame
        if decoder.done:
            return

    for frame in decoder.flush():
        yield frame
