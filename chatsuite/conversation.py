"""Multi-turn conversation with managed, serialized message history."""

import asyncio
import logging
from typing import Any, Iterable, List, Optional, Tuple, Union

from chatsuite.framework.chat_completion_response import ChatResponse
from chatsuite.framework.chat_request import ChatRequest
from chatsuite.framework.message import ROLE_SYSTEM, Message
from chatsuite.framework.provider_interface import ProviderInterface

logger = logging.getLogger(__name__)


class Conversation:
    """Owns the message history of one conversation.

    Every operation, reads included, runs under one ``asyncio.Lock``, and the
    lock is held across the network call. A send appends the outgoing message,
    calls the transport, and either appends the reply or removes the message
    it appended before re-raising. Because nothing else can touch the history
    in between, removing the last element always removes that message. This
    also holds when the awaiting task is cancelled.

    If both ``system_prompt`` and ``initial_history`` are given, the prompt is
    prepended only when the history does not already start with a system
    message.
    """

    def __init__(
        self,
        transport: ProviderInterface,
        model: str,
        system_prompt: Optional[str] = None,
        initial_history: Optional[Iterable[Union[Message, dict]]] = None,
    ):
        self._transport = transport
        self._model = model
        self._system_prompt = system_prompt
        self._messages: List[Message] = []
        self._lock = asyncio.Lock()

        if initial_history is not None:
            history = [m if isinstance(m, Message) else Message.model_validate(m) for m in initial_history]
            if system_prompt is not None and (not history or history[0].role != ROLE_SYSTEM):
                self._messages.append(Message.system(system_prompt))
            self._messages.extend(history)
        elif system_prompt is not None:
            self._messages.append(Message.system(system_prompt))

    @property
    def model(self) -> str:
        return self._model

    @property
    def system_prompt(self) -> Optional[str]:
        """The prompt given at construction, whether or not it was used to seed the history."""
        return self._system_prompt

    async def send(self, text: Any) -> str:
        """Send a user message and return the reply text ("" if it has none)."""
        response = await self.send_full(text)
        return response.first_message().text_content or ""

    async def send_full(self, text: Any) -> ChatResponse:
        """Send a user message and return the full response."""
        return await self._exchange(Message.user(text))

    async def add_tool_result(self, tool_call_id: str, content: Any) -> str:
        """Answer a tool call and return the reply text ("" if it has none)."""
        response = await self.add_tool_result_full(tool_call_id, content)
        return response.first_message().text_content or ""

    async def add_tool_result_full(self, tool_call_id: str, content: Any) -> ChatResponse:
        """Answer a tool call and return the full response."""
        return await self._exchange(Message.tool(tool_call_id, content))

    async def add_message(
        self,
        message: Union[Message, str],
        content: Any = None,
        name: Optional[str] = None,
        tool_call_id: Optional[str] = None,
    ) -> None:
        """Append a message, or a role with content, without calling the API."""
        if not isinstance(message, Message):
            message = Message(role=message, content=content, name=name, tool_call_id=tool_call_id)
        async with self._lock:
            self._messages.append(message)

    async def clear_history(self) -> None:
        async with self._lock:
            self._messages.clear()

    async def get_history(self) -> Tuple[Message, ...]:
        """Return a snapshot of the history."""
        async with self._lock:
            return tuple(self._messages)

    async def _exchange(self, message: Message) -> ChatResponse:
        async with self._lock:
            self._messages.append(message)
            try:
                request = ChatRequest(model=self._model, messages=tuple(self._messages))
                response = await self._transport.chat(request)
                reply = response.first_message()
            except BaseException as exc:
                self._messages.pop()
                logger.warning("Rolled back %s message after %s", message.role, type(exc).__name__)
                raise
            self._messages.append(reply)
            return response
