import logging
import os
from typing import AsyncIterator

import openai

from chatsuite.errors import ApiError, ValidationError
from chatsuite.framework.chat_completion_response import ChatCompletionChunk, ChatResponse, decode_response
from chatsuite.framework.chat_request import ChatRequest
from chatsuite.framework.chunk_decoder import adecode_lines
from chatsuite.framework.provider_interface import ProviderInterface

logger = logging.getLogger(__name__)


class OpenaiProvider(ProviderInterface):
    def __init__(self, **config):
        """
        Initialize the provider with the given configuration.
        Pass the entire configuration dictionary to the AsyncOpenAI client constructor.
        """
        # Ensure API key is provided either in config or via environment variable
        config.setdefault("api_key", os.getenv("OPENAI_API_KEY"))
        if not config["api_key"]:
            raise ValidationError(
                "API key is missing. Please provide it in the config or set the OPENAI_API_KEY environment variable."
            )
        # Failures surface to the caller as-is; the SDK must not retry behind our back.
        config.setdefault("max_retries", 0)

        self.client = openai.AsyncOpenAI(**config)

    async def chat(self, request: ChatRequest) -> ChatResponse:
        payload = request.to_wire()
        logger.debug("POST chat/completions model=%s messages=%d", request.model, len(request.messages))
        # The raw response body is decoded here rather than by the SDK.
        try:
            async with self.client.chat.completions.with_streaming_response.create(**payload) as response:
                body = await response.read()
        except openai.APIStatusError as exc:
            raise _api_error(exc) from exc
        return decode_response(body)

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[ChatCompletionChunk]:
        payload = request.with_stream().to_wire()
        logger.debug("POST chat/completions (stream) model=%s messages=%d", request.model, len(request.messages))
        try:
            async with self.client.chat.completions.with_streaming_response.create(**payload) as response:
                async for chunk in adecode_lines(response.iter_lines()):
                    yield chunk
        except openai.APIStatusError as exc:
            raise _api_error(exc) from exc

    async def aclose(self) -> None:
        await self.client.close()


def _api_error(exc: openai.APIStatusError) -> ApiError:
    # The SDK reads the error body before raising, including for streamed requests.
    return ApiError(exc.status_code, exc.response.text)
