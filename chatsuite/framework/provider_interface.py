"""The shared interface for chat completion transports."""

from typing import AsyncIterator

from chatsuite.framework.chat_completion_response import ChatCompletionChunk, ChatResponse
from chatsuite.framework.chat_request import ChatRequest


class ProviderInterface:
    """Defines the expected behavior for chat completion transports.

    ``Conversation`` only needs ``chat``; clients expose ``stream_chat`` as
    well.
    """

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Send a request and return the decoded response.

        Raises
        ------
            ApiError: The server answered with a non-success status.
            NotImplementedError: If this method has not been implemented by a subclass.

        """
        raise NotImplementedError("Provider Interface has not implemented chat()")

    def stream_chat(self, request: ChatRequest) -> AsyncIterator[ChatCompletionChunk]:
        """Send a streaming request and yield chunks as they are decoded."""
        raise NotImplementedError("Provider Interface has not implemented stream_chat()")

    async def aclose(self) -> None:
        """Release connections held by the transport."""
