from typing import AsyncIterator, Callable, Iterable, Optional, Union

from .config import ClientConfig
from .conversation import Conversation
from .framework.chat_completion_response import ChatCompletionChunk, ChatResponse
from .framework.chat_request import ChatRequest
from .framework.message import Message
from .framework.provider_interface import ProviderInterface
from .providers.openai_provider import OpenaiProvider
from .request_builder import ChatRequestBuilder


class Client(ProviderInterface):
    """Client for OpenAI-compatible chat completion APIs.

    Works with OpenAI, Ollama, OpenRouter, and any service that speaks the
    ``/chat/completions`` protocol. The client owns its HTTP connections;
    close it with ``aclose()`` or use it as an async context manager.
    """

    def __init__(self, config: ClientConfig, **provider_options):
        """
        Initialize the client with a service configuration.

        Args:
            config (ClientConfig): Where and how to reach the service.
            **provider_options: Extra arguments for the underlying
                ``AsyncOpenAI`` client, e.g. a custom ``http_client``. They
                override the values derived from ``config``.
        """
        self.config = config
        self.provider = OpenaiProvider(**{**config.to_provider_kwargs(), **provider_options})

    @classmethod
    def openai(cls, api_key: Optional[str] = None, **provider_options) -> "Client":
        return cls(ClientConfig.openai(api_key), **provider_options)

    @classmethod
    def ollama(cls, base_url: str = "http://localhost:11434/v1", **provider_options) -> "Client":
        return cls(ClientConfig.ollama(base_url), **provider_options)

    @classmethod
    def open_router(
        cls,
        api_key: str,
        app_url: Optional[str] = None,
        app_name: Optional[str] = None,
        **provider_options,
    ) -> "Client":
        return cls(ClientConfig.open_router(api_key, app_url, app_name), **provider_options)

    @classmethod
    def custom(cls, base_url: str, api_key: Optional[str] = None, **provider_options) -> "Client":
        return cls(ClientConfig.custom(base_url, api_key), **provider_options)

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Send a chat completion request and return the response."""
        return await self.provider.chat(request)

    def stream_chat(self, request: ChatRequest) -> AsyncIterator[ChatCompletionChunk]:
        """Stream a chat completion; the request is sent with ``stream`` enabled."""
        return self.provider.stream_chat(request)

    async def chat_completion(self, build: Callable[[ChatRequestBuilder], None]) -> ChatResponse:
        """
        Build a request with a callback and send it.

        Example:
            response = await client.chat_completion(
                lambda b: b.system("You are terse.").user("Hi!")
            )

        The builder's model must be set by the callback.
        """
        builder = ChatRequestBuilder()
        build(builder)
        return await self.chat(builder.build())

    def stream_chat_completion(
        self, build: Callable[[ChatRequestBuilder], None]
    ) -> AsyncIterator[ChatCompletionChunk]:
        builder = ChatRequestBuilder()
        build(builder)
        return self.stream_chat(builder.build())

    async def send_message(
        self,
        model: str,
        message: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatResponse:
        """One-shot completion of a single user message."""
        builder = ChatRequestBuilder(model)
        if system_prompt is not None:
            builder.system(system_prompt)
        builder.user(message)
        builder.temperature = temperature
        builder.max_tokens = max_tokens
        return await self.chat(builder.build())

    def conversation(
        self,
        model: str,
        system_prompt: Optional[str] = None,
        initial_history: Optional[Iterable[Union[Message, dict]]] = None,
    ) -> Conversation:
        """Start a conversation whose requests go through this client."""
        return Conversation(self, model, system_prompt=system_prompt, initial_history=initial_history)

    async def aclose(self) -> None:
        await self.provider.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
