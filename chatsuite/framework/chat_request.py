"""Request-side wire types for ``POST /chat/completions``."""

from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from chatsuite.framework.message import Message


class FunctionDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    strict: Optional[bool] = None


class Tool(BaseModel):
    model_config = ConfigDict(frozen=True)

    function: FunctionDef
    type: str = "function"


class JsonSchema(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    schema_: Dict[str, Any] = Field(alias="schema")
    strict: Optional[bool] = None
    description: Optional[str] = None


class ResponseFormat(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    json_schema: Optional[JsonSchema] = None

    @classmethod
    def json_object(cls) -> "ResponseFormat":
        return cls(type="json_object")

    @classmethod
    def from_schema(
        cls,
        name: str,
        schema: Dict[str, Any],
        strict: bool = True,
        description: Optional[str] = None,
    ) -> "ResponseFormat":
        return cls(
            type="json_schema",
            json_schema=JsonSchema(name=name, schema=schema, strict=strict, description=description),
        )


class StreamOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    include_usage: bool


class ChatRequest(BaseModel):
    """An immutable chat completion request.

    Attribute names are the snake_case wire names; unset options are left
    out of the encoded body.
    """

    model_config = ConfigDict(frozen=True)

    model: str
    messages: Tuple[Message, ...]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    stop: Optional[Tuple[str, ...]] = None
    n: Optional[int] = None
    stream: Optional[bool] = None
    user: Optional[str] = None
    response_format: Optional[ResponseFormat] = None
    tools: Optional[Tuple[Tool, ...]] = None
    tool_choice: Optional[Union[str, Dict[str, Any]]] = None
    seed: Optional[int] = None
    stream_options: Optional[StreamOptions] = None
    parallel_tool_calls: Optional[bool] = None

    def with_stream(self) -> "ChatRequest":
        return self.model_copy(update={"stream": True})

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)
