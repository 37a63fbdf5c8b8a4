"""
Unified generation request.

One request shape is accepted by every adapter; each provider picks the
fields it understands and maps them onto its own body.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from genmedia.utils.exceptions import ValidationError


class OutputEncoding(str, Enum):
    """How the caller wants image results delivered."""

    URL = "url"
    BASE64 = "base64"


@dataclass
class GenerationRequest:
    """Unified input for image generation, video generation and analysis."""

    prompt: str = ""
    # Ordered base64 payloads, data URIs or http(s) URLs; most providers use the first
    reference_images: list[str] = field(default_factory=list)
    image_url: str | None = None
    size: str | None = None
    aspect_ratio: str | None = None
    seed: int | None = None
    quality: str | None = None
    duration: int | None = None
    output_encoding: OutputEncoding = OutputEncoding.URL
    system_prompt: str | None = None

    # Chat-style analysis parameters
    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: int = 1024

    # Merged into provider "parameters" objects where supported
    extra_params: dict[str, Any] = field(default_factory=dict)

    # Video inputs
    video_url: str | None = None
    video_file: str | None = None
    frames: list[str] = field(default_factory=list)
    frame_count: int = 5

    @property
    def wants_base64(self) -> bool:
        return self.output_encoding == OutputEncoding.BASE64

    def has_reference(self) -> bool:
        return bool(self.reference_images)

    def first_reference(self) -> str | None:
        """Return the first reference image, or None."""
        return self.reference_images[0] if self.reference_images else None

    def require_prompt(self) -> str:
        """Return the stripped prompt; raise ValidationError when it is empty."""
        if not self.prompt or not self.prompt.strip():
            raise ValidationError("Prompt cannot be empty", field="prompt")
        return self.prompt

    def require_reference(self) -> str:
        """Return the first reference image (or image_url); raise when neither is set."""
        ref = self.first_reference() or self.image_url
        if not ref:
            raise ValidationError(
                "A reference image is required (reference_images or image_url)",
                field="reference_images",
            )
        return ref

    def full_prompt(self) -> str:
        """Prompt with system_prompt prepended, separated by a blank line."""
        if self.system_prompt:
            return f"{self.system_prompt}\n\n{self.prompt}"
        return self.prompt


__all__ = ["GenerationRequest", "OutputEncoding"]
