"""Exception hierarchy for chatsuite.

Every error raised by the package derives from ``ChatSuiteError``. None of
them is retried internally; they reach the caller as raised.
"""


class ChatSuiteError(Exception):
    """Base exception for all chatsuite errors."""


class ValidationError(ChatSuiteError, ValueError):
    """Invalid input supplied by the caller (e.g. an empty model name)."""


class ApiError(ChatSuiteError):
    """The API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"API returned HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class NoChoicesError(ChatSuiteError):
    """A structurally valid response contained zero choices."""


class WireFormatError(ChatSuiteError):
    """A wire payload does not match the expected shape."""


class MalformedContentError(WireFormatError):
    """Message content is neither a string nor a well-formed array of parts."""


class StreamDecodeError(WireFormatError):
    """An SSE frame could not be decoded into a completion chunk."""


class ResponseDecodeError(WireFormatError):
    """A non-streaming response body could not be decoded."""
