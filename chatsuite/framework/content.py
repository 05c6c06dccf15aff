"""Message content and its two wire shapes.

Content is either plain text or an ordered list of typed parts. On the wire
the first is a bare JSON string and the second a JSON array of
``{"type": ...}`` objects. Decoding infers the variant from the JSON node
kind alone.
"""

from typing import Any, List, Literal, Optional, Tuple, Union

import pydantic
from pydantic import BaseModel, ConfigDict

from chatsuite.errors import MalformedContentError

ImageDetail = Literal["auto", "low", "high"]


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class ImagePart(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    detail: Optional[ImageDetail] = None


ContentPart = Union[TextPart, ImagePart]


class TextContent(BaseModel):
    """Plain text content, encoded as a JSON string."""

    model_config = ConfigDict(frozen=True)

    text: str


class PartsContent(BaseModel):
    """Multi-part content, encoded as a JSON array of typed objects."""

    model_config = ConfigDict(frozen=True)

    parts: Tuple[ContentPart, ...]


Content = Union[TextContent, PartsContent]


def encode_content(content: Content) -> Union[str, List[dict]]:
    """Encode content into its wire shape."""
    if isinstance(content, TextContent):
        return content.text
    encoded = []
    for part in content.parts:
        if isinstance(part, TextPart):
            encoded.append({"type": "text", "text": part.text})
        else:
            image_url = {"url": part.url}
            if part.detail is not None:
                image_url["detail"] = part.detail
            encoded.append({"type": "image_url", "image_url": image_url})
    return encoded


def decode_content(node: Any) -> Content:
    """Decode a JSON node into content.

    A string becomes ``TextContent`` and an array becomes ``PartsContent``.
    Anything else, or an array element without a recognized ``type`` or a
    required sub-field, raises ``MalformedContentError``.
    """
    if isinstance(node, str):
        return TextContent(text=node)
    if not isinstance(node, list):
        raise MalformedContentError(
            f"content must be a string or an array, got {type(node).__name__}"
        )
    return PartsContent(parts=tuple(_decode_part(i, item) for i, item in enumerate(node)))


def _decode_part(index: int, item: Any) -> ContentPart:
    if not isinstance(item, dict):
        raise MalformedContentError(f"content part {index} is not an object")
    kind = item.get("type")
    if kind == "text":
        text = item.get("text")
        if not isinstance(text, str):
            raise MalformedContentError(f"text part {index} is missing 'text'")
        return TextPart(text=text)
    if kind == "image_url":
        image_url = item.get("image_url")
        if not isinstance(image_url, dict) or not isinstance(image_url.get("url"), str):
            raise MalformedContentError(f"image part {index} is missing 'image_url.url'")
        try:
            return ImagePart(url=image_url["url"], detail=image_url.get("detail"))
        except pydantic.ValidationError as exc:
            raise MalformedContentError(f"image part {index} has an invalid detail") from exc
    raise MalformedContentError(f"content part {index} has unrecognized type {kind!r}")


def as_content(value: Any) -> Optional[Content]:
    """Accept content in any supported form: a variant, a string or a wire array."""
    if value is None or isinstance(value, (TextContent, PartsContent)):
        return value
    return decode_content(value)


def text_of(content: Optional[Content]) -> Optional[str]:
    """Flatten content to plain text.

    Parts content keeps only its text fragments, so images are dropped.
    Returns None when there is no text at all.
    """
    if content is None:
        return None
    if isinstance(content, TextContent):
        return content.text
    text = "".join(part.text for part in content.parts if isinstance(part, TextPart))
    return text or None
