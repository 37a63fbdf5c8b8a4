"""
Public entry points for image and video generation.

Each call routes the configured model to one provider adapter, runs it and
returns either a UnifiedResult or its output-contract string (a URL or a
``data:<mime>;base64,<payload>`` URI).
"""

import time

from genmedia.core.config import Config, get_config
from genmedia.core.providers.dispatch import route_image, route_video
from genmedia.core.request import GenerationRequest
from genmedia.core.result import UnifiedResult
from genmedia.logging_config import get_logger

logger = get_logger(__name__)


def generate_image_result(
    request: GenerationRequest, config: Config | None = None
) -> UnifiedResult:
    """
    Generate an image and return the unified result.

    Args:
        request: Unified request (prompt, reference images, size, ...)
        config: Optional config; if None, uses shared config from get_config()

    Raises:
        ConfigurationError: Missing model, API key, prompt or base URL
        UnsupportedModelError: Model not accepted by the routed provider
        ResponseFormatError: Provider response had no known result field
        TransportError: HTTP or network failure
    """
    provider, prepared = route_image(config or get_config())
    logger.info(
        "Generating image model=%s provider=%s has_reference=%s",
        prepared.model_id,
        provider.kind.value,
        request.has_reference(),
    )
    start_time = time.time()
    result = provider.generate_image(request, prepared)
    logger.info("Generated in %.1fs model=%s", time.time() - start_time, prepared.model_id)
    return result


def generate_video_result(
    request: GenerationRequest, config: Config | None = None
) -> UnifiedResult:
    """
    Generate (or, for vision models, analyse) a video and return the unified result.

    Asynchronous providers are polled until the task succeeds, fails
    (TaskFailedError) or the poll timeout elapses (PollTimeoutError).
    """
    provider, prepared = route_video(config or get_config())
    logger.info(
        "Generating video model=%s provider=%s has_reference=%s",
        prepared.model_id,
        provider.kind.value,
        request.has_reference(),
    )
    start_time = time.time()
    result = provider.generate_video(request, prepared)
    logger.info("Video finished in %.1fs model=%s", time.time() - start_time, prepared.model_id)
    return result


def analyze_image_result(
    request: GenerationRequest, config: Config | None = None
) -> UnifiedResult:
    """Run a reference image through the routed provider's analysis/inference endpoint."""
    provider, prepared = route_image(config or get_config())
    logger.info("Analysing image model=%s provider=%s", prepared.model_id, provider.kind.value)
    start_time = time.time()
    result = provider.analyze_image(request, prepared)
    logger.info("Analysis finished in %.1fs model=%s", time.time() - start_time, prepared.model_id)
    return result


def analyze_video_result(
    request: GenerationRequest, config: Config | None = None
) -> UnifiedResult:
    """Analyse a video (file, URL or pre-extracted frames) with the routed provider."""
    provider, prepared = route_video(config or get_config())
    logger.info("Analysing video model=%s provider=%s", prepared.model_id, provider.kind.value)
    start_time = time.time()
    result = provider.analyze_video(request, prepared)
    logger.info("Analysis finished in %.1fs model=%s", time.time() - start_time, prepared.model_id)
    return result


def generate_image(request: GenerationRequest, config: Config | None = None) -> str:
    """Generate an image; returns a URL or a data URI string."""
    return generate_image_result(request, config).to_output()


def generate_video(request: GenerationRequest, config: Config | None = None) -> str:
    """Generate a video; returns a URL (or a text/plain data URI for analysis)."""
    return generate_video_result(request, config).to_output()


def analyze_image(request: GenerationRequest, config: Config | None = None) -> str:
    """Analyse an image; returns a data URI (text/plain for descriptions) or a URL."""
    return analyze_image_result(request, config).to_output()


def analyze_video(request: GenerationRequest, config: Config | None = None) -> str:
    """Analyse a video; returns a text/plain data URI or a result URL."""
    return analyze_video_result(request, config).to_output()


__all__ = [
    "analyze_image",
    "analyze_image_result",
    "analyze_video",
    "analyze_video_result",
    "generate_image",
    "generate_image_result",
    "generate_video",
    "generate_video_result",
]
