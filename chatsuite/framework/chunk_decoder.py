"""Incremental decoder for ``text/event-stream`` chat completion streams.

Consecutive ``data:`` lines form one frame; their payloads (prefix and a
single following space removed) are concatenated and parsed as one JSON
chunk once the frame ends. Leading whitespace before ``data:`` is ignored.
A frame ends at any line that is not a ``data:`` line, at the ``[DONE]``
sentinel, or at the end of input. Only the frame in flight is kept in
memory.
"""

import codecs
import json
import logging
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, List, Union

import pydantic

from chatsuite.errors import StreamDecodeError
from chatsuite.framework.chat_completion_response import ChatCompletionChunk

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

Line = Union[str, bytes]


def parse_chunk(data: str) -> ChatCompletionChunk:
    """Parse the payload of one frame."""
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        raise StreamDecodeError(f"SSE frame is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise StreamDecodeError(f"SSE frame must be a JSON object, got {type(payload).__name__}")
    try:
        return ChatCompletionChunk.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise StreamDecodeError(f"SSE frame does not match the chunk shape: {exc}") from exc


class SseChunkDecoder:
    """Line-at-a-time state machine for one stream.

    Feed lines with ``feed`` and call ``finish`` when input ends. Once the
    ``[DONE]`` sentinel has been seen, ``done`` is true and further input is
    ignored.
    """

    def __init__(self):
        self._frame: List[str] = []
        self.done = False

    def feed(self, line: Line) -> List[ChatCompletionChunk]:
        """Consume one line and return the chunks it completed."""
        if self.done:
            return []
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise StreamDecodeError("SSE line is not valid UTF-8") from exc
        line = line.rstrip("\r\n").lstrip()

        if not line.startswith(DATA_PREFIX):
            # Blank separators, comments, and event:/id: fields all end the frame.
            return self._flush()

        data = line[len(DATA_PREFIX):]
        if data.startswith(" "):
            data = data[1:]

        if data.strip() == DONE_SENTINEL:
            chunks = self._flush()
            self.done = True
            logger.debug("SSE stream terminated by %s", DONE_SENTINEL)
            return chunks

        chunks = []
        if self._frame and data.lstrip().startswith("{") and self._frame_is_complete():
            # Provider sent back-to-back single-line frames without a blank separator.
            chunks = self._flush()
        self._frame.append(data)
        return chunks

    def finish(self) -> List[ChatCompletionChunk]:
        """Flush the frame in flight at end of input."""
        if self.done:
            return []
        return self._flush()

    def _frame_is_complete(self) -> bool:
        text = "".join(self._frame).strip()
        if not (text.startswith("{") and text.endswith("}")):
            return False
        try:
            return isinstance(json.loads(text), dict)
        except json.JSONDecodeError:
            return False

    def _flush(self) -> List[ChatCompletionChunk]:
        data = "".join(self._frame)
        line_count = len(self._frame)
        self._frame.clear()
        if not data.strip():
            return []
        logger.debug("SSE frame flushed (%d data lines)", line_count)
        return [parse_chunk(data)]


def decode_lines(lines: Iterable[Line]) -> Iterator[ChatCompletionChunk]:
    """Lazily decode chunks from an iterable of lines.

    No line is read after ``[DONE]``. A stream that ends without the
    sentinel ends the sequence normally.
    """
    decoder = SseChunkDecoder()
    for line in lines:
        yield from decoder.feed(line)
        if decoder.done:
            return
    yield from decoder.finish()


async def adecode_lines(lines: AsyncIterable[Line]) -> AsyncIterator[ChatCompletionChunk]:
    """Async counterpart of ``decode_lines``."""
    decoder = SseChunkDecoder()
    async for line in lines:
        for chunk in decoder.feed(line):
            yield chunk
        if decoder.done:
            return
    for chunk in decoder.finish():
        yield chunk


class _LineSplitter:
    """Reassembles lines from byte chunks that need not align with line breaks."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._pending = ""

    def push(self, data: bytes) -> List[str]:
        try:
            text = self._pending + self._decoder.decode(data)
        except UnicodeDecodeError as exc:
            raise StreamDecodeError("SSE stream is not valid UTF-8") from exc
        lines = text.split("\n")
        self._pending = lines.pop()
        return lines

    def close(self) -> List[str]:
        try:
            tail = self._pending + self._decoder.decode(b"", final=True)
        except UnicodeDecodeError as exc:
            raise StreamDecodeError("SSE stream ends inside a UTF-8 sequence") from exc
        self._pending = ""
        return [tail] if tail else []


def decode_bytes(chunks: Iterable[bytes]) -> Iterator[ChatCompletionChunk]:
    """Lazily decode chunks from raw byte blocks of an SSE body."""
    decoder = SseChunkDecoder()
    splitter = _LineSplitter()
    for data in chunks:
        for line in splitter.push(data):
            yield from decoder.feed(line)
            if decoder.done:
                return
    for line in splitter.close():
        yield from decoder.feed(line)
        if decoder.done:
            return
    yield from decoder.finish()


async def adecode_bytes(chunks: AsyncIterable[bytes]) -> AsyncIterator[ChatCompletionChunk]:
    """Async counterpart of ``decode_bytes``."""
    decoder = SseChunkDecoder()
    splitter = _LineSplitter()
    async for data in chunks:
        for line in splitter.push(data):
            for chunk in decoder.feed(line):
                yield chunk
            if decoder.done:
                return
    for line in splitter.close():
        for chunk in decoder.feed(line):
            yield chunk
        if decoder.done:
            return
    for chunk in decoder.finish():
        yield chunk
