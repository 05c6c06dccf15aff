"""Response-side wire types, full and streamed, plus the non-streaming decoder."""

import json
from typing import Any, Optional, Tuple, Union

import pydantic
from pydantic import BaseModel, ConfigDict

from chatsuite.errors import NoChoicesError, ResponseDecodeError
from chatsuite.framework.choice import Choice
from chatsuite.framework.message import Message


class Usage(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatResponse(BaseModel):
    """Standard response format for chat completions"""

    model_config = ConfigDict(frozen=True)

    id: str
    object: str = "chat.completion"
    created: int
    model: str
    choices: Tuple[Choice, ...]
    usage: Optional[Usage] = None
    system_fingerprint: Optional[str] = None

    def first_message(self) -> Message:
        """Return the first choice's message, or raise ``NoChoicesError``."""
        if not self.choices:
            raise NoChoicesError("No choices returned in API response")
        return self.choices[0].message


class ToolCallFunctionDelta(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    arguments: Optional[str] = None


class ToolCallDelta(BaseModel):
    """A fragment of a tool call, addressed by ``index`` across chunks."""

    model_config = ConfigDict(frozen=True)

    index: int
    id: Optional[str] = None
    type: Optional[str] = None
    function: Optional[ToolCallFunctionDelta] = None


class ChunkDelta(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Optional[str] = None
    content: Optional[str] = None
    reasoning_content: Optional[str] = None
    tool_calls: Optional[Tuple[ToolCallDelta, ...]] = None


class ChunkChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    delta: ChunkDelta
    finish_reason: Optional[str] = None


class ChatCompletionChunk(BaseModel):
    """One incremental unit of a streamed completion.

    Tool call fragments are not merged across chunks; callers that need whole
    calls can use ``chatsuite.utils.streaming_tool_calls``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    object: str = "chat.completion.chunk"
    created: int
    model: str
    choices: Tuple[ChunkChoice, ...]
    usage: Optional[Usage] = None


def decode_response(body: Union[str, bytes, dict]) -> ChatResponse:
    """Decode a non-streaming response body.

    Raises ``ResponseDecodeError`` when the body is not JSON or does not have
    the response shape, and ``MalformedContentError`` when a message's
    content is malformed.
    """
    payload: Any = body
    try:
        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode("utf-8")
        if isinstance(payload, str):
            payload = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ResponseDecodeError(f"response body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ResponseDecodeError(
            f"response body must be a JSON object, got {type(payload).__name__}"
        )
    try:
        return ChatResponse.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ResponseDecodeError(f"response body does not match the response shape: {exc}") from exc
