"""
Response probing.

Each provider returns its result under different keys. A probe table is an
ordered list of (path, kind) pairs; the first path holding a non-empty value
decides the unified result.
"""

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from genmedia.core.encoding import is_data_uri, split_data_uri
from genmedia.core.result import DataURI, ImageURL, TextAsDataURI, UnifiedResult
from genmedia.utils.exceptions import ResponseFormatError

_MARKDOWN_IMAGE_RE = re.compile(r"^!\[.*?\]\((.+?)\)$", re.DOTALL)
_INLINE_BASE64_RE = re.compile(r"base64,([A-Za-z0-9+/=]+)")
_IMAGE_URL_RE = re.compile(r"^https?://.*\.(png|jpg|jpeg|gif|webp|bmp)$", re.IGNORECASE)


class ProbeKind(str, Enum):
    URL = "url"  # value is a URL (or a data URI, passed through)
    BASE64 = "base64"  # bare base64 or data URI image payload
    TEXT = "text"  # plain text, wrapped as text/plain
    JSON = "json"  # any JSON value, dumped and wrapped as text/plain


@dataclass(frozen=True)
class Probe:
    path: str
    kind: ProbeKind
    mime_type: str = "image/png"


def dig(body: Any, path: str) -> Any:
    """
    Walk a dotted path through dicts and lists; return None on any miss.

    >>> dig({"data": [{"url": "x"}]}, "data.0.url")
    'x'
    """
    current = body
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def first_value(body: Any, paths: Sequence[str]) -> Any:
    """Value at the first path that yields something other than None or an empty string."""
    for path in paths:
        value = dig(body, path)
        if value is not None and value != "":
            return value
    return None


def _to_result(value: Any, probe: Probe) -> UnifiedResult:
    if probe.kind == ProbeKind.URL:
        text = str(value)
        if is_data_uri(text):
            mime_type, payload = split_data_uri(text)
            return DataURI(mime_type=mime_type, payload=payload)
        return ImageURL(url=text)
    if probe.kind == ProbeKind.BASE64:
        text = str(value)
        if is_data_uri(text):
            mime_type, payload = split_data_uri(text)
            return DataURI(mime_type=mime_type, payload=payload)
        return DataURI(mime_type=probe.mime_type, payload=text)
    if probe.kind == ProbeKind.JSON:
        return TextAsDataURI.from_text(json.dumps(value, ensure_ascii=False))
    return TextAsDataURI.from_text(str(value))


def probe_response(
    body: Any, probes: Sequence[Probe], *, provider: str = "Provider"
) -> UnifiedResult:
    """
    Return the unified result for the first probe that matches.

    Raises:
        ResponseFormatError: No probe matched; the raw body is attached
    """
    for probe in probes:
        value = dig(body, probe.path)
        if value is None or value == "":
            continue
        return _to_result(value, probe)
    raise ResponseFormatError(
        f"{provider} response format not supported: {json.dumps(body, default=str)[:500]}",
        response=body,
    )


def extract_image_from_text(text: str) -> UnifiedResult:
    """
    Interpret a chat reply from an image model.

    Recognizes a lone markdown image, an inline base64 payload and a bare
    image URL; anything else is returned as text.
    """
    stripped = text.strip()
    md = _MARKDOWN_IMAGE_RE.match(stripped)
    if md:
        target = md.group(1)
        if is_data_uri(target):
            mime_type, payload = split_data_uri(target)
            return DataURI(mime_type=mime_type, payload=payload)
        return ImageURL(url=target)
    inline = _INLINE_BASE64_RE.search(stripped)
    if inline:
        return DataURI(mime_type="image/jpeg", payload=inline.group(1))
    if _IMAGE_URL_RE.match(stripped):
        return ImageURL(url=stripped)
    return TextAsDataURI.from_text(text)


# Probe tables, in priority order

ZHIPU_IMAGE_PROBES = (Probe("data.0.url", ProbeKind.URL),)

MODELSCOPE_IMAGE_PROBES = (Probe("images.0.url", ProbeKind.URL),)

MODELSCOPE_INFERENCE_PROBES = (
    Probe("output.image_url", ProbeKind.URL),
    Probe("output.image_base64", ProbeKind.BASE64),
    Probe("output.text", ProbeKind.TEXT),
)

MODELSCOPE_VIDEO_ANALYSIS_PROBES = (
    Probe("output.text", ProbeKind.TEXT),
    Probe("output.video_url", ProbeKind.URL),
    Probe("output", ProbeKind.JSON),
)

OPENAI_IMAGE_PROBES = (
    Probe("data.0.b64_json", ProbeKind.BASE64),
    Probe("data.0.url", ProbeKind.URL),
)

CHAT_IMAGE_PROBES = (
    Probe("choices.0.message.images.0.image_url.url", ProbeKind.URL),
    Probe("choices.0.message.images.0.url", ProbeKind.URL),
)

CHAT_TEXT_PROBES = (Probe("choices.0.message.content", ProbeKind.TEXT),)


__all__ = [
    "CHAT_IMAGE_PROBES",
    "CHAT_TEXT_PROBES",
    "MODELSCOPE_IMAGE_PROBES",
    "MODELSCOPE_INFERENCE_PROBES",
    "MODELSCOPE_VIDEO_ANALYSIS_PROBES",
    "OPENAI_IMAGE_PROBES",
    "Probe",
    "ProbeKind",
    "ZHIPU_IMAGE_PROBES",
    "dig",
    "extract_image_from_text",
    "first_value",
    "probe_response",
]
