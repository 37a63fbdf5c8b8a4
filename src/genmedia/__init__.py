"""
genmedia - unified image and video generation adapters

Translates one request shape into calls to Zhipu BigModel (CogView,
CogVideoX, GLM-4V), ModelScope and OpenAI-compatible endpoints, and
normalizes every answer into a URL or a ``data:<mime>;base64,`` URI.

Library usage:
- Configuration can be passed per call (generate_image(request, config=my_config))
  or via the shared config: use get_config() / set_config() and omit it.
- Logging: control verbosity with set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  GENMEDIA_VERBOSITY env (0/1/2) is read when the CLI runs.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("genmedia")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from genmedia.core.config import Config, get_config, set_config
from genmedia.core.generation import (
    analyze_image,
    analyze_image_result,
    analyze_video,
    analyze_video_result,
    generate_image,
    generate_image_result,
    generate_video,
    generate_video_result,
)
from genmedia.core.poller import TaskHandle, TaskStatus, poll_task
from genmedia.core.providers import ProviderKind
from genmedia.core.providers.dispatch import classify_image_model, classify_video_model
from genmedia.core.reference import load_reference_image
from genmedia.core.request import GenerationRequest, OutputEncoding
from genmedia.core.result import DataURI, ImageURL, TextAsDataURI, UnifiedResult, parse_output
from genmedia.logging_config import configure_logging, set_verbosity
from genmedia.utils.exceptions import (
    ConfigurationError,
    GenmediaError,
    ImageProcessingError,
    PollTimeoutError,
    RequestTimeoutError,
    ResponseFormatError,
    TaskFailedError,
    TransportError,
    UnsupportedModelError,
    ValidationError,
)

__all__ = [
    "Config",
    "ConfigurationError",
    "DataURI",
    "GenerationRequest",
    "GenmediaError",
    "ImageProcessingError",
    "ImageURL",
    "OutputEncoding",
    "PollTimeoutError",
    "ProviderKind",
    "RequestTimeoutError",
    "ResponseFormatError",
    "TaskFailedError",
    "TaskHandle",
    "TaskStatus",
    "TextAsDataURI",
    "TransportError",
    "UnifiedResult",
    "UnsupportedModelError",
    "ValidationError",
    "analyze_image",
    "analyze_image_result",
    "analyze_video",
    "analyze_video_result",
    "classify_image_model",
    "classify_video_model",
    "configure_logging",
    "generate_image",
    "generate_image_result",
    "generate_video",
    "generate_video_result",
    "get_config",
    "load_reference_image",
    "parse_output",
    "poll_task",
    "set_config",
    "set_verbosity",
]
