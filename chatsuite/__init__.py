from .client import Client
from .config import ClientConfig, Provider
from .conversation import Conversation
from .errors import (
    ApiError,
    ChatSuiteError,
    MalformedContentError,
    NoChoicesError,
    ResponseDecodeError,
    StreamDecodeError,
    ValidationError,
    WireFormatError,
)
from .framework.chat_completion_response import (
    ChatCompletionChunk,
    ChatResponse,
    ChunkChoice,
    ChunkDelta,
    ToolCallDelta,
    Usage,
    decode_response,
)
from .framework.chat_request import ChatRequest, FunctionDef, JsonSchema, ResponseFormat, StreamOptions, Tool
from .framework.choice import Choice
from .framework.chunk_decoder import adecode_bytes, adecode_lines, decode_bytes, decode_lines
from .framework.content import (
    ImagePart,
    PartsContent,
    TextContent,
    TextPart,
    decode_content,
    encode_content,
    text_of,
)
from .framework.message import Message, ToolCall, ToolCallFunction
from .request_builder import ChatRequestBuilder
