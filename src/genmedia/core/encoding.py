"""
Normalization helpers shared by every provider adapter.

API keys, base URLs and base64 payloads arrive in several shapes; these
helpers bring them to the form each provider body expects.
"""

import base64
import re

_BEARER_RE = re.compile(r"^Bearer\s+", re.IGNORECASE)
_IMAGE_DATA_URI_RE = re.compile(r"^data:image/[a-z0-9.+-]+;base64,", re.IGNORECASE)
_ANY_DATA_URI_RE = re.compile(r"^data:([^;,]+)?(;[^,]*)?;base64,", re.IGNORECASE)


def normalize_api_key(api_key: str) -> str:
    """Strip a leading 'Bearer ' (any case, any whitespace) and surrounding whitespace."""
    return _BEARER_RE.sub("", api_key.strip()).strip()


def bearer_header(api_key: str) -> dict[str, str]:
    """Authorization header for a (possibly already prefixed) API key."""
    return {"Authorization": f"Bearer {normalize_api_key(api_key)}"}


def normalize_base_url(base_url: str | None, default: str = "") -> str:
    """Trim whitespace and trailing slashes; fall back to default when empty."""
    url = (base_url or "").strip() or default
    return url.rstrip("/")


def is_data_uri(value: str) -> bool:
    return bool(_ANY_DATA_URI_RE.match(value))


def is_http_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def strip_data_uri_prefix(value: str) -> str:
    """Return the bare base64 payload of an image data URI (input returned unchanged otherwise)."""
    return _IMAGE_DATA_URI_RE.sub("", value)


def ensure_data_uri(value: str, mime_type: str = "image/jpeg") -> str:
    """Return value as a data URI, adding a prefix when it is bare base64."""
    if is_data_uri(value) or is_http_url(value):
        return value
    return make_data_uri(mime_type, value)


def make_data_uri(mime_type: str, payload: str) -> str:
    return f"data:{mime_type};base64,{payload}"


def split_data_uri(value: str) -> tuple[str, str]:
    """
    Split a data URI into (mime_type, payload).

    Raises:
        ValueError: If value is not a base64 data URI
    """
    match = _ANY_DATA_URI_RE.match(value)
    if not match:
        raise ValueError("Not a base64 data URI")
    mime_type = match.group(1) or "text/plain"
    return mime_type, value[match.end():]


def encode_text(text: str) -> str:
    """Base64-encode UTF-8 text."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_text(payload: str) -> str:
    """Decode a base64 payload back to UTF-8 text."""
    return base64.b64decode(payload).decode("utf-8")


__all__ = [
    "bearer_header",
    "decode_text",
    "encode_text",
    "ensure_data_uri",
    "is_data_uri",
    "is_http_url",
    "make_data_uri",
    "normalize_api_key",
    "normalize_base_url",
    "split_data_uri",
    "strip_data_uri_prefix",
]
