"""
Unified result returned by every adapter.

A result is one of three variants. ``to_output()`` gives the string contract
callers receive: a bare URL or a ``data:<mime>;base64,<payload>`` URI.
"""

from dataclasses import dataclass
from typing import Union

from genmedia.core.encoding import decode_text, encode_text, is_data_uri, split_data_uri

TEXT_MIME_TYPE = "text/plain"


@dataclass(frozen=True)
class ImageURL:
    """A URL pointing at the generated media (image or video)."""

    url: str

    def to_output(self) -> str:
        return self.url


@dataclass(frozen=True)
class DataURI:
    """Inline base64 payload with its MIME type."""

    mime_type: str
    payload: str

    def to_output(self) -> str:
        return f"data:{self.mime_type};base64,{self.payload}"


@dataclass(frozen=True)
class TextAsDataURI:
    """Text result (analysis, captions) carried as base64 text/plain."""

    payload: str

    @classmethod
    def from_text(cls, text: str) -> "TextAsDataURI":
        return cls(payload=encode_text(text))

    @property
    def text(self) -> str:
        return decode_text(self.payload)

    def to_output(self) -> str:
        return f"data:{TEXT_MIME_TYPE};base64,{self.payload}"


UnifiedResult = Union[ImageURL, DataURI, TextAsDataURI]


def parse_output(value: str) -> UnifiedResult:
    """Recover a result variant from an output-contract string."""
    if is_data_uri(value):
        mime_type, payload = split_data_uri(value)
        if mime_type.lower() == TEXT_MIME_TYPE:
            return TextAsDataURI(payload=payload)
        return DataURI(mime_type=mime_type, payload=payload)
    return ImageURL(url=value)


__all__ = [
    "DataURI",
    "ImageURL",
    "TEXT_MIME_TYPE",
    "TextAsDataURI",
    "UnifiedResult",
    "parse_output",
]
