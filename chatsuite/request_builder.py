"""Incremental construction of ``ChatRequest`` values.

Example::

    request = (
        ChatRequestBuilder("gpt-4o")
        .system("You are a helpful assistant.")
        .user("Describe this picture.", image_urls=["https://example.com/cat.png"])
        .build()
    )
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from chatsuite.errors import ValidationError
from chatsuite.framework.chat_request import ChatRequest, FunctionDef, ResponseFormat, StreamOptions, Tool
from chatsuite.framework.content import ImageDetail, ImagePart, PartsContent, TextPart
from chatsuite.framework.message import Message


class ChatRequestBuilder:
    """Accumulates messages and options, then produces a ``ChatRequest``.

    Options are plain attributes. ``end_user`` is the ``user`` field of the
    request; ``user()`` adds a user message. A builder is meant to be used
    once, from a single task.
    """

    def __init__(self, model: str = ""):
        self.model = model
        self.temperature: Optional[float] = None
        self.max_tokens: Optional[int] = None
        self.top_p: Optional[float] = None
        self.frequency_penalty: Optional[float] = None
        self.presence_penalty: Optional[float] = None
        self.stop: Optional[Sequence[str]] = None
        self.end_user: Optional[str] = None
        self.n: Optional[int] = None
        self.response_format: Optional[ResponseFormat] = None
        self.tools: Optional[List[Tool]] = None
        self.tool_choice: Optional[Union[str, Dict[str, Any]]] = None
        self.seed: Optional[int] = None
        self.stream_options: Optional[StreamOptions] = None
        self.parallel_tool_calls: Optional[bool] = None
        self._messages: List[Message] = []
        self._declared_tools: List[Tool] = []

    def messages(self, history: Iterable[Union[Message, dict]]) -> "ChatRequestBuilder":
        """Prepopulate from an existing history, e.g. a saved conversation."""
        for message in history:
            self._messages.append(message if isinstance(message, Message) else Message.model_validate(message))
        return self

    def system(self, content: Any) -> "ChatRequestBuilder":
        self._messages.append(Message.system(content))
        return self

    def user(
        self,
        content: Any,
        image_urls: Sequence[str] = (),
        detail: Optional[ImageDetail] = None,
    ) -> "ChatRequestBuilder":
        if image_urls:
            parts = [TextPart(text=content)]
            parts.extend(ImagePart(url=url, detail=detail) for url in image_urls)
            content = PartsContent(parts=tuple(parts))
        self._messages.append(Message.user(content))
        return self

    def assistant(self, content: Any) -> "ChatRequestBuilder":
        self._messages.append(Message.assistant(content))
        return self

    def message(self, role: str, content: Any = None, name: Optional[str] = None) -> "ChatRequestBuilder":
        self._messages.append(Message(role=role, content=content, name=name))
        return self

    def tool(
        self,
        name: str,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
        strict: Optional[bool] = None,
    ) -> "ChatRequestBuilder":
        """Declare a function tool; declared tools follow any set in ``tools``."""
        function = FunctionDef(name=name, description=description, parameters=parameters, strict=strict)
        self._declared_tools.append(Tool(function=function))
        return self

    def json_mode(self) -> "ChatRequestBuilder":
        self.response_format = ResponseFormat.json_object()
        return self

    def structured_output(
        self,
        name: str,
        schema: Dict[str, Any],
        strict: bool = True,
        description: Optional[str] = None,
    ) -> "ChatRequestBuilder":
        self.response_format = ResponseFormat.from_schema(name, schema, strict=strict, description=description)
        return self

    def build(self) -> ChatRequest:
        if not self.model:
            raise ValidationError("Model must be specified")
        if not self._messages:
            raise ValidationError("At least one message is required")

        tools = [*(self.tools or ()), *self._declared_tools]
        return ChatRequest(
            model=self.model,
            messages=tuple(self._messages),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            top_p=self.top_p,
            frequency_penalty=self.frequency_penalty,
            presence_penalty=self.presence_penalty,
            stop=tuple(self.stop) if self.stop is not None else None,
            n=self.n,
            user=self.end_user,
            response_format=self.response_format,
            tools=tuple(tools) if tools else None,
            tool_choice=self.tool_choice,
            seed=self.seed,
            stream_options=self.stream_options,
            parallel_tool_calls=self.parallel_tool_calls,
        )
