import json
import logging

import pytest

from chatsuite.errors import StreamDecodeError
from chatsuite.framework.chunk_decoder import (
    SseChunkDecoder,
    adecode_bytes,
    adecode_lines,
    decode_bytes,
    decode_lines,
)


def chunk_json(chunk_id, content):
    return json.dumps(
        {
            "id": chunk_id,
            "object": "chat.completion.chunk",
            "created": 1,
            "model": "test",
            "choices": [{"index": 0, "delta": {"content": content}}],
        },
        ensure_ascii=False,
    )


def contents(chunks):
    return [chunk.choices[0].delta.content for chunk in chunks]


def test_single_line_frames():
    sse = f"data: {chunk_json('1', 'Hello')}\n\ndata: {chunk_json('2', ' World')}\n\ndata: [DONE]\n"
    chunks = list(decode_lines(sse.splitlines()))
    assert contents(chunks) == ["Hello", " World"]
    assert [c.id for c in chunks] == ["1", "2"]


def test_no_input_is_read_after_done():
    consumed = []

    def source():
        for line in [f"data: {chunk_json('1', 'A')}", "", f"data: {chunk_json('2', 'B')}", "", "data: [DONE]"]:
            consumed.append(line)
            yield line
        raise AssertionError("read past [DONE]")

    assert contents(decode_lines(source())) == ["A", "B"]
    assert consumed[-1] == "data: [DONE]"


def test_multi_line_json_frame():
    lines = [
        "data: {",
        'data:   "id": "1",',
        'data:   "choices": [',
        'data:     { "index": 0, "delta": { "content": "Line1" } }',
        "data:   ],",
        'data:   "object": "chat.completion.chunk",',
        'data:   "created": 1,',
        'data:   "model": "test"',
        "data: }",
        "",
        "data: [DONE]",
    ]
    chunks = list(decode_lines(lines))
    assert len(chunks) == 1
    assert chunks[0].id == "1"
    assert chunks[0].choices[0].delta.content == "Line1"


def test_empty_data_line_inside_frame_contributes_nothing():
    lines = ["data: {", 'data: "id": "1", "created": 1, "model": "m",', "data:", 'data: "choices": []', "data: }", ""]
    chunks = list(decode_lines(lines))
    assert len(chunks) == 1
    assert chunks[0].choices == ()


def test_stream_without_done_ends_normally():
    lines = [f"data: {chunk_json('1', 'A')}", "", f"data: {chunk_json('2', 'B')}"]
    assert contents(decode_lines(lines)) == ["A", "B"]


def test_non_data_lines_are_ignored():
    lines = [
        ": keep-alive",
        "event: message",
        f"data: {chunk_json('1', 'A')}",
        "id: 7",
        "",
        ": OPENROUTER PROCESSING",
        f"data: {chunk_json('2', 'B')}",
        "",
        "data: [DONE]",
    ]
    assert contents(decode_lines(lines)) == ["A", "B"]


def test_prefix_without_space():
    assert contents(decode_lines([f"data:{chunk_json('1', 'A')}", "data:[DONE]"])) == ["A"]


def test_back_to_back_frames_without_separator():
    lines = [f"data: {chunk_json('1', 'A')}", f"data: {chunk_json('2', 'B')}", "data: [DONE]"]
    assert contents(decode_lines(lines)) == ["A", "B"]


def test_crlf_and_byte_lines():
    lines = [f"data: {chunk_json('1', 'A')}\r\n".encode(), b"\r\n", b"data: [DONE]\r\n"]
    assert contents(decode_lines(lines)) == ["A"]


def test_invalid_json_terminates_the_stream():
    lines = [f"data: {chunk_json('1', 'A')}", "", "data: {not json}", "", f"data: {chunk_json('3', 'C')}"]
    stream = decode_lines(lines)
    assert next(stream).id == "1"
    with pytest.raises(StreamDecodeError):
        next(stream)
    with pytest.raises(StopIteration):
        next(stream)


@pytest.mark.parametrize("payload", ['{"id": "1"}', "[1, 2, 3]", '"text"'])
def test_payload_with_wrong_shape(payload):
    with pytest.raises(StreamDecodeError):
        list(decode_lines([f"data: {payload}", ""]))


def test_decoder_holds_only_the_frame_in_flight():
    decoder = SseChunkDecoder()
    assert decoder.feed("data: {") == []
    assert decoder.feed('data: "id": "1", "created": 1, "model": "m", "choices": []}') == []
    [chunk] = decoder.feed("")
    assert chunk.id == "1"
    assert decoder._frame == []


def test_done_flushes_pending_frame():
    decoder = SseChunkDecoder()
    decoder.feed(f"data: {chunk_json('1', 'A')}")
    assert contents(decoder.feed("data: [DONE]")) == ["A"]
    assert decoder.done
    assert decoder.feed(f"data: {chunk_json('2', 'B')}") == []
    assert decoder.finish() == []


def test_bytes_split_across_lines_and_characters():
    body = f"data: {chunk_json('1', 'héllo ✓')}\n\ndata: {chunk_json('2', 'B')}\n\ndata: [DONE]\n\n".encode()
    pieces = [body[i : i + 7] for i in range(0, len(body), 7)]
    assert contents(decode_bytes(pieces)) == ["héllo ✓", "B"]


def test_bytes_without_trailing_newline():
    body = f"data: {chunk_json('1', 'A')}".encode()
    assert contents(decode_bytes([body])) == ["A"]


def test_invalid_utf8_bytes():
    with pytest.raises(StreamDecodeError):
        list(decode_bytes([b"data: \xff\xfe\n\n"]))


async def agen(items):
    for item in items:
        yield item


@pytest.mark.asyncio
async def test_async_lines():
    lines = [f"data: {chunk_json('1', 'A')}", "", f"data: {chunk_json('2', 'B')}", "", "data: [DONE]", "data: junk"]
    chunks = [chunk async for chunk in adecode_lines(agen(lines))]
    assert contents(chunks) == ["A", "B"]


@pytest.mark.asyncio
async def test_async_bytes():
    body = f"data: {chunk_json('1', 'A')}\n\ndata: [DONE]\n\n".encode()
    pieces = [body[:10], body[10:31], body[31:]]
    chunks = [chunk async for chunk in adecode_bytes(agen(pieces))]
    assert contents(chunks) == ["A"]


def test_leading_whitespace_before_prefix():
    lines = [f"  data: {chunk_json('1', 'A')}", "", "\tdata: [DONE]"]
    assert contents(decode_lines(lines)) == ["A"]


def test_frame_flush_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="chatsuite.framework.chunk_decoder"):
        list(decode_lines([f"data: {chunk_json('1', 'A')}", "", "data: [DONE]"]))
    messages = [record.getMessage() for record in caplog.records]
    assert "SSE frame flushed (1 data lines)" in messages
    assert "SSE stream terminated by [DONE]" in messages


def test_continuation_lines_do_not_reparse_the_frame(monkeypatch):
    checks = []
    original = SseChunkDecoder._frame_is_complete

    def counting(self):
        checks.append(len(self._frame))
        return original(self)

    monkeypatch.setattr(SseChunkDecoder, "_frame_is_complete", counting)
    lines = ["data: {", 'data: "id": "1",', 'data: "created": 1,', 'data: "model": "m",', 'data: "choices": []', "data: }"]
    [chunk] = decode_lines(lines + [""])
    assert chunk.id == "1"
    assert checks == []
