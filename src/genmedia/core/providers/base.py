"""
Provider protocol and helpers shared by the adapters.

Defines the interface every provider adapter implements and the
post-processing applied to image results.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from genmedia.core.config import Config
from genmedia.core.request import GenerationRequest
from genmedia.core.result import ImageURL, UnifiedResult
from genmedia.core.transport import download_as_data_uri


class ProviderKind(str, Enum):
    """Closed set of provider families a model id can route to."""

    ZHIPU = "zhipu"
    MODELSCOPE = "modelscope"
    OPENAI_COMPATIBLE = "openai_compatible"


class MediaProvider(Protocol):
    """Protocol for provider adapters.

    Adapters build the provider body, call the API (polling when the
    provider is asynchronous) and return a UnifiedResult. ``config`` has
    already been validated and its api_key and base_url normalized.
    """

    kind: ProviderKind

    @property
    def supports_reference_image(self) -> bool:
        """Whether image generation accepts a reference image. Read-only."""
        ...

    def generate_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Generate an image. May raise any GenmediaError."""
        ...

    def generate_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Generate a video, polling until the task resolves."""
        ...

    def analyze_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Describe or transform a reference image."""
        ...

    def analyze_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Describe or process a video."""
        ...


def finalize_image(
    result: UnifiedResult, request: GenerationRequest, timeout: float
) -> UnifiedResult:
    """Download URL results when the caller asked for base64 output."""
    if request.wants_base64 and isinstance(result, ImageURL):
        return download_as_data_uri(result.url, timeout=timeout)
    return result
