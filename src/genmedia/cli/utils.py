"""
Utility functions for the CLI.

This module contains helper functions used by CLI commands,
such as output path generation, result saving and exit code constants.
"""

import base64
from datetime import datetime
from pathlib import Path

from genmedia.core.result import DataURI, ImageURL, TextAsDataURI, UnifiedResult
from genmedia.core.transport import download_as_data_uri

# Exit codes (130 = common for SIGINT)
EXIT_SUCCESS = 0
EXIT_API_OR_NETWORK = 1
EXIT_VALIDATION_OR_CONFIG = 2
EXIT_CANCELLED = 130

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "video/mp4": "mp4",
    "text/plain": "txt",
}


def extension_for_mime(mime_type: str) -> str:
    """Map a MIME type to a file extension; unknown types fall back to the subtype."""
    mime = mime_type.lower()
    if mime in _EXTENSIONS:
        return _EXTENSIONS[mime]
    return mime.split("/")[-1] or "bin"


def default_output_path(ext: str) -> str:
    """Return default output path: genmedia_<YYYYMMDD>_<HHMMSS>.<ext> in current directory."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"genmedia_{timestamp}.{ext or 'png'}"


def save_result(result: UnifiedResult, out: Path | None, timeout: float = 120) -> Path:
    """
    Write a result to disk and return the path written.

    URL results are downloaded first. Text results are written as UTF-8.
    When ``out`` is None a timestamped name in the current directory is used.
    """
    if isinstance(result, ImageURL):
        result = download_as_data_uri(result.url, timeout=timeout)

    if isinstance(result, TextAsDataURI):
        path = out or Path(default_output_path("txt"))
        path.write_text(result.text, encoding="utf-8")
        return path

    assert isinstance(result, DataURI)
    path = out or Path(default_output_path(extension_for_mime(result.mime_type)))
    path.write_bytes(base64.b64decode(result.payload))
    return path


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_API_OR_NETWORK",
    "EXIT_VALIDATION_OR_CONFIG",
    "EXIT_CANCELLED",
    "default_output_path",
    "extension_for_mime",
    "save_result",
]
