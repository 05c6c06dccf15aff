import json

import httpx
import openai
import pytest

from chatsuite.errors import ApiError, ResponseDecodeError, StreamDecodeError, ValidationError
from chatsuite.framework.chat_request import ChatRequest
from chatsuite.framework.message import Message
from chatsuite.providers.openai_provider import OpenaiProvider


@pytest.fixture(autouse=True)
def set_api_key_env_var(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-api-key")


def make_provider(handler, **config):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenaiProvider(base_url="http://testserver/v1", http_client=http_client, **config)


def weather_request():
    return ChatRequest(model="test-model", messages=[Message.user("What's the weather?")])


def test_api_key_from_environment():
    provider = OpenaiProvider()
    assert isinstance(provider.client, openai.AsyncOpenAI)
    assert provider.client.api_key == "test-api-key"
    assert provider.client.max_retries == 0


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY")
    with pytest.raises(ValidationError):
        OpenaiProvider()


@pytest.mark.asyncio
async def test_chat_decodes_tool_calls():
    body = {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {"name": "get_weather", "arguments": '{"city": "Paris"}'},
                        }
                    ],
                },
                "finish_reason": "tool_calls",
            }
        ],
    }
    provider = make_provider(lambda request: httpx.Response(200, json=body))

    response = await provider.chat(weather_request())
    await provider.aclose()

    message = response.first_message()
    assert message.content is None
    assert message.tool_calls[0].function.name == "get_weather"
    assert json.loads(message.tool_calls[0].function.arguments) == {"city": "Paris"}
    assert response.choices[0].finish_reason == "tool_calls"
    assert response.usage is None


@pytest.mark.asyncio
async def test_chat_with_invalid_body():
    provider = make_provider(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
    with pytest.raises(ResponseDecodeError):
        await provider.chat(weather_request())


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 404, 429, 503])
async def test_error_status_is_not_retried(status):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(status, content=b'{"error": {"message": "nope"}}')

    provider = make_provider(handler)
    with pytest.raises(ApiError) as exc_info:
        await provider.chat(weather_request())

    assert exc_info.value.status_code == status
    assert exc_info.value.body == '{"error": {"message": "nope"}}'
    assert len(requests) == 1


@pytest.mark.asyncio
async def test_stream_chat_requests_stream_and_stops_at_done():
    frames = [
        {"id": "c", "created": 1, "model": "m", "choices": [{"index": 0, "delta": {"role": "assistant"}}]},
        {"id": "c", "created": 1, "model": "m", "choices": [{"index": 0, "delta": {"content": "Sunny"}}]},
        {
            "id": "c",
            "created": 1,
            "model": "m",
            "choices": [{"index": 0, "delta": {}, "finish_reason": "stop"}],
        },
    ]
    body = "".join(f"data: {json.dumps(frame)}\n\n" for frame in frames) + "data: [DONE]\n\n"
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, content=body.encode(), headers={"content-type": "text/event-stream"})

    provider = make_provider(handler)
    chunks = [chunk async for chunk in provider.stream_chat(weather_request())]

    assert seen[0]["stream"] is True
    assert [c.choices[0].delta.content for c in chunks] == [None, "Sunny", None]
    assert chunks[0].choices[0].delta.role == "assistant"
    assert chunks[-1].choices[0].finish_reason == "stop"


@pytest.mark.asyncio
async def test_stream_chat_with_bad_frame():
    body = b"data: {broken\n\n"
    provider = make_provider(
        lambda request: httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})
    )
    with pytest.raises(StreamDecodeError):
        async for _ in provider.stream_chat(weather_request()):
            pass
