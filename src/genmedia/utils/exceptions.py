"""
Custom exceptions for genmedia.

This module defines all custom exceptions used throughout the package.
Every adapter failure surfaces as one of these; nothing is retried apart
from the poller's repeated status checks.
"""

from typing import Any


class GenmediaError(Exception):
    """Base exception for all genmedia errors."""

    pass


class ConfigurationError(GenmediaError):
    """Raised when model, API key, base URL or another required setting is missing."""

    pass


class ValidationError(ConfigurationError):
    """Raised when a request is missing a required input (prompt, reference image)."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class UnsupportedModelError(GenmediaError):
    """Raised when a model is not in a provider's allow-list."""

    def __init__(self, message: str, model: str = "") -> None:
        self.model = model
        super().__init__(message)


class ResponseFormatError(GenmediaError):
    """Raised when a provider response has none of the known result fields."""

    def __init__(self, message: str, response: Any = None) -> None:
        """
        Initialize response format error.

        Args:
            message: Error message
            response: Raw response body, kept for diagnostics
        """
        self.response = response
        super().__init__(message)


class TaskFailedError(GenmediaError):
    """Raised when a provider reports that an asynchronous task failed."""

    def __init__(self, message: str, task_id: str = "") -> None:
        self.task_id = task_id
        super().__init__(message)


class PollTimeoutError(GenmediaError, TimeoutError):
    """Raised when polling a task exceeds its deadline."""

    pass


class TransportError(GenmediaError):
    """Raised when an HTTP call fails at the network or HTTP layer."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response: str = "",
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize transport error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw response text (if available)
            original_error: The underlying exception that caused this error
        """
        self.status_code = status_code
        self.response = response
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(TransportError):
    """Raised when a single HTTP request exceeds its fixed timeout."""

    pass


class ImageProcessingError(GenmediaError):
    """Raised when a reference image file cannot be read or decoded."""

    def __init__(self, message: str, image_path: str = "") -> None:
        """
        Initialize image processing error.

        Args:
            message: Error message
            image_path: Path to the image that caused the error
        """
        self.image_path = image_path
        super().__init__(message)
