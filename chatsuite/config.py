"""Client configuration for OpenAI-compatible services."""

import os
from enum import Enum
from typing import Dict, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from chatsuite.errors import ValidationError

DEFAULT_TIMEOUT = 60.0

# Sent when a service needs no key; the SDK refuses to start without one.
NO_API_KEY = "sk-no-key-required"

# OpenRouter attribution when the caller names no app URL.
PROJECT_URL = "https://pypi.org/project/chatsuite/"


class Provider(str, Enum):
    OPENAI = "openai"
    OLLAMA = "ollama"
    OPENROUTER = "openrouter"
    CUSTOM = "custom"


class ClientConfig(BaseModel):
    """Where and how to reach a chat completion service.

    ``timeout`` is in seconds. ``headers`` are sent with every request and
    win over the headers derived from the other fields.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str
    api_key: Optional[str] = None
    provider: Provider = Provider.CUSTOM
    app_url: Optional[str] = None
    app_name: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    headers: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def openai(cls, api_key: Optional[str] = None) -> "ClientConfig":
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValidationError(
                "OpenAI API key is missing. Pass it explicitly or set the OPENAI_API_KEY environment variable."
            )
        return cls(base_url="https://api.openai.com/v1", api_key=api_key, provider=Provider.OPENAI)

    @classmethod
    def ollama(cls, base_url: str = "http://localhost:11434/v1") -> "ClientConfig":
        return cls(base_url=base_url, provider=Provider.OLLAMA)

    @classmethod
    def open_router(
        cls, api_key: str, app_url: Optional[str] = None, app_name: Optional[str] = None
    ) -> "ClientConfig":
        return cls(
            base_url="https://openrouter.ai/api/v1",
            api_key=api_key,
            provider=Provider.OPENROUTER,
            app_url=app_url,
            app_name=app_name,
        )

    @classmethod
    def custom(cls, base_url: str, api_key: Optional[str] = None) -> "ClientConfig":
        return cls(base_url=base_url, api_key=api_key, provider=Provider.CUSTOM)

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, os.PathLike]] = None) -> "ClientConfig":
        """Build a config from ``CHATSUITE_*`` environment variables.

        Variables already set in the environment take precedence over the
        ``.env`` file.
        """
        load_dotenv(dotenv_path)
        base_url = os.getenv("CHATSUITE_BASE_URL")
        if not base_url:
            raise ValidationError("CHATSUITE_BASE_URL is not set")
        provider_name = os.getenv("CHATSUITE_PROVIDER", Provider.CUSTOM.value).lower()
        try:
            provider = Provider(provider_name)
        except ValueError as exc:
            raise ValidationError(f"Unknown provider {provider_name!r}") from exc
        timeout = os.getenv("CHATSUITE_TIMEOUT")
        try:
            timeout_s = float(timeout) if timeout else DEFAULT_TIMEOUT
        except ValueError as exc:
            raise ValidationError(f"CHATSUITE_TIMEOUT must be a number, got {timeout!r}") from exc
        return cls(
            base_url=base_url,
            api_key=os.getenv("CHATSUITE_API_KEY") or None,
            provider=provider,
            timeout=timeout_s,
        )

    def default_headers(self) -> Dict[str, str]:
        headers = {}
        if self.provider is Provider.OPENROUTER:
            headers["HTTP-Referer"] = self.app_url or PROJECT_URL
            if self.app_name:
                headers["X-Title"] = self.app_name
        headers.update(self.headers)
        return headers

    def to_provider_kwargs(self) -> dict:
        """Constructor arguments for ``OpenaiProvider``."""
        return {
            "base_url": self.base_url.rstrip("/"),
            "api_key": self.api_key or NO_API_KEY,
            "timeout": self.timeout,
            "max_retries": 0,
            "default_headers": self.default_headers(),
        }
