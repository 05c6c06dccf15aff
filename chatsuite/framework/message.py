"""Chat messages and tool calls as they travel on the wire."""

from typing import Any, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator, model_validator

from chatsuite.framework.content import Content, as_content, encode_content, text_of

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"


class ToolCallFunction(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    arguments: str  # JSON-encoded, passed through unparsed


class ToolCall(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    function: ToolCallFunction
    type: Literal["function"] = "function"


class Message(BaseModel):
    """A single chat message.

    ``role`` is one of system/user/assistant/tool but is kept as a plain
    string so provider-specific roles survive a round trip. A tool message
    always carries ``tool_call_id``.
    """

    model_config = ConfigDict(frozen=True)

    role: str
    content: Optional[Content] = None
    name: Optional[str] = None
    tool_calls: Optional[Tuple[ToolCall, ...]] = None
    tool_call_id: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def _decode_content(cls, value: Any) -> Optional[Content]:
        return as_content(value)

    @field_serializer("content")
    def _encode_content(self, content: Optional[Content]):
        return None if content is None else encode_content(content)

    @model_validator(mode="after")
    def _check_tool_call_id(self) -> "Message":
        if self.role == ROLE_TOOL and not self.tool_call_id:
            raise ValueError("tool messages must carry a tool_call_id")
        return self

    @classmethod
    def system(cls, content: Any) -> "Message":
        return cls(role=ROLE_SYSTEM, content=content)

    @classmethod
    def user(cls, content: Any, name: Optional[str] = None) -> "Message":
        return cls(role=ROLE_USER, content=content, name=name)

    @classmethod
    def assistant(cls, content: Any = None, tool_calls=None) -> "Message":
        return cls(role=ROLE_ASSISTANT, content=content, tool_calls=tool_calls)

    @classmethod
    def tool(cls, tool_call_id: str, content: Any) -> "Message":
        return cls(role=ROLE_TOOL, content=content, tool_call_id=tool_call_id)

    @property
    def text_content(self) -> Optional[str]:
        """Plain text of the content; images are dropped."""
        return text_of(self.content)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
