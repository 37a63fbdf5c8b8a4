"""
HTTP transport for provider adapters.

Wraps requests with bearer authorization, fixed per-call timeouts and a
single mapping from HTTP/network failures to genmedia exceptions.
"""

import base64
import json
import time
from typing import Any

import requests

from genmedia.core.encoding import bearer_header
from genmedia.core.result import DataURI
from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import (
    RequestTimeoutError,
    ResponseFormatError,
    TransportError,
)

logger = get_logger(__name__)

DEFAULT_DOWNLOAD_MIME_TYPE = "image/png"

_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"text", "message", "content", "error"})
_RESPONSE_TEXT_LOG_MAX = 2000


def _truncate_image_data_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long base64/data URL strings with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: _truncate_image_data_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_image_data_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS and not obj.startswith("data:"):
            return obj
        if obj.startswith("data:"):
            return f"<data URL, {len(obj)} chars>"
        return f"<string, {len(obj)} chars>"
    return obj


def _error_message_from_body(response: requests.Response) -> str:
    """Pull a human-readable message out of a provider error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    for key in ("message", "errorMessage", "msg"):
        if body.get(key):
            return str(body[key])
    return ""


def _raise_for_status(response: requests.Response, url: str, provider: str) -> None:
    """Map non-2xx status codes to TransportError."""
    status = response.status_code
    if 200 <= status < 300:
        return
    detail = _error_message_from_body(response)
    suffix = f": {detail}" if detail else ""
    if status == 401:
        message = f"{provider} authentication failed. Please check your API key{suffix}"
    elif status == 404:
        message = f"{provider} endpoint or model not found: {url}{suffix}"
    elif status == 429:
        message = f"{provider} rate limit exceeded. Please wait before making more requests{suffix}"
    elif status >= 500:
        message = f"{provider} service error: {status}{suffix}"
    else:
        message = f"{provider} request failed with status {status}{suffix or ': ' + response.text}"
    raise TransportError(message, status_code=status, response=response.text)


def _parse_json(response: requests.Response, provider: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ResponseFormatError(
            f"Failed to parse {provider} response as JSON: {str(e)}",
            response=response.text,
        ) from e


def _log_debug_payload(label: str, payload: Any) -> None:
    logger.info(
        "%s (image data truncated): %s",
        label,
        json.dumps(_truncate_image_data_for_log(payload), indent=2, default=str),
    )


def _send(
    method: str,
    url: str,
    *,
    provider: str,
    timeout: float,
    debug: bool = False,
    **kwargs: Any,
) -> requests.Response:
    """Issue one HTTP call and translate requests exceptions."""
    logger.debug("%s %s request url=%s timeout=%s", provider, method, url, timeout)
    if debug and "json" in kwargs:
        _log_debug_payload(f"{provider} request payload", kwargs["json"])
    start_time = time.time()
    try:
        if method == "POST":
            response = requests.post(url, timeout=timeout, **kwargs)
        else:
            response = requests.get(url, timeout=timeout, **kwargs)
    except requests.exceptions.Timeout as e:
        raise RequestTimeoutError(
            f"{provider} request timed out after {timeout} seconds.",
            original_error=e,
        ) from e
    except requests.exceptions.ConnectionError as e:
        raise TransportError(
            f"Failed to connect to {provider} at {url}: {str(e)}",
            original_error=e,
        ) from e
    except requests.exceptions.RequestException as e:
        raise TransportError(
            f"Network error during {provider} request: {str(e)}", original_error=e
        ) from e
    logger.debug(
        "%s response status=%s content_type=%s time=%.2fs",
        provider,
        response.status_code,
        response.headers.get("content-type", ""),
        time.time() - start_time,
    )
    if debug:
        text = response.text
        if len(text) > _RESPONSE_TEXT_LOG_MAX:
            text = text[:_RESPONSE_TEXT_LOG_MAX] + f"... <truncated, {len(response.text)} chars total>"
        logger.info("%s response (raw text): %s", provider, text)
    _raise_for_status(response, url, provider)
    return response


def post_json(
    url: str,
    payload: dict[str, Any],
    api_key: str,
    timeout: float,
    *,
    provider: str = "Provider",
    debug: bool = False,
) -> Any:
    """POST a JSON body with bearer auth and return the parsed JSON response."""
    headers = {**bearer_header(api_key), "Content-Type": "application/json"}
    response = _send(
        "POST", url, provider=provider, timeout=timeout, debug=debug, headers=headers, json=payload
    )
    return _parse_json(response, provider)


def post_multipart(
    url: str,
    data: dict[str, str],
    files: dict[str, tuple[str, Any, str]],
    api_key: str | None,
    timeout: float,
    *,
    provider: str = "Provider",
    debug: bool = False,
) -> Any:
    """POST a multipart/form-data body and return the parsed JSON response."""
    headers = bearer_header(api_key) if api_key else {}
    # Plain fields go in as (None, value) parts so the body is always multipart
    parts: dict[str, Any] = {name: (None, value) for name, value in data.items()}
    parts.update(files)
    if debug:
        _log_debug_payload(
            f"{provider} multipart fields",
            {"data": data, "files": {name: spec[0] for name, spec in files.items()}},
        )
    response = _send(
        "POST",
        url,
        provider=provider,
        timeout=timeout,
        debug=debug,
        headers=headers,
        files=parts,
    )
    return _parse_json(response, provider)


def get_json(
    url: str,
    api_key: str,
    timeout: float,
    *,
    provider: str = "Provider",
    debug: bool = False,
) -> Any:
    """GET a JSON resource with bearer auth."""
    response = _send(
        "GET", url, provider=provider, timeout=timeout, debug=debug, headers=bearer_header(api_key)
    )
    return _parse_json(response, provider)


def _mime_from_content_type(content_type: str) -> str:
    """'image/jpeg; charset=binary' -> 'image/jpeg'; empty -> default image/png."""
    mime = content_type.split(";")[0].strip().lower()
    return mime or DEFAULT_DOWNLOAD_MIME_TYPE


def download_as_data_uri(url: str, timeout: float = 120) -> DataURI:
    """
    Download a URL and return its body as a base64 data URI.

    The MIME type comes from the response Content-Type header, defaulting
    to image/png.
    """
    logger.debug("Downloading result url=%s", url)
    response = _send("GET", url, provider="Download", timeout=timeout)
    payload = base64.b64encode(response.content).decode("ascii")
    mime_type = _mime_from_content_type(response.headers.get("content-type", ""))
    logger.debug("Downloaded %s bytes mime=%s", len(response.content), mime_type)
    return DataURI(mime_type=mime_type, payload=payload)


def extract_frames(
    endpoint: str,
    video_file: str,
    frame_count: int,
    timeout: float = 60,
    frame_interval: int = 2,
) -> list[str]:
    """
    Ask the frame extraction service for base64 frames of a local video file.

    The service answers ``{"frames": [...]}``.
    """
    with open(video_file, "rb") as fh:
        body = post_multipart(
            endpoint,
            data={"frameCount": str(frame_count), "frameInterval": str(frame_interval)},
            files={"videoFile": (video_file.rsplit("/", 1)[-1], fh, "application/octet-stream")},
            api_key=None,
            timeout=timeout,
            provider="Frame extractor",
        )
    frames = body.get("frames") if isinstance(body, dict) else None
    if not isinstance(frames, list):
        raise ResponseFormatError("Frame extractor response has no frames list", response=body)
    return [str(f) for f in frames]


__all__ = [
    "DEFAULT_DOWNLOAD_MIME_TYPE",
    "download_as_data_uri",
    "extract_frames",
    "get_json",
    "post_json",
    "post_multipart",
]
