"""
Model routing.

Classification is a pure function of the model id (and, for video, the base
URL). Predicates are checked in order: Zhipu keywords, then ModelScope
keywords or a "/" in the id, then the OpenAI-compatible default. The first
match wins.
"""

from dataclasses import replace

from genmedia.core.config import Config
from genmedia.core.encoding import normalize_api_key
from genmedia.core.providers import get_registry
from genmedia.core.providers.base import MediaProvider, ProviderKind
from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

ZHIPU_IMAGE_KEYWORDS = ("cogview", "glm-image", "glm-4v")
ZHIPU_VIDEO_KEYWORDS = ("cogvideo", "glm-4v")
MODELSCOPE_KEYWORDS = ("modelscope", "z-image")


def classify_image_model(model_id: str) -> ProviderKind:
    """Pick the provider family for an image model id (case-insensitive)."""
    model = model_id.strip().lower()
    if any(keyword in model for keyword in ZHIPU_IMAGE_KEYWORDS):
        return ProviderKind.ZHIPU
    # ModelScope ids are usually namespaced, e.g. Tongyi-MAI/Z-Image-Turbo
    if "/" in model or any(keyword in model for keyword in MODELSCOPE_KEYWORDS):
        return ProviderKind.MODELSCOPE
    return ProviderKind.OPENAI_COMPATIBLE


def classify_video_model(model_id: str, base_url: str | None = None) -> ProviderKind:
    """Pick the provider family for a video model id.

    ModelScope video routing also requires "video" in the id, so namespaced
    OpenAI-compatible video models are not captured by the "/" rule.
    """
    model = model_id.strip().lower()
    if any(keyword in model for keyword in ZHIPU_VIDEO_KEYWORDS):
        return ProviderKind.ZHIPU
    on_modelscope = "modelscope" in model or "/" in model or "modelscope" in (base_url or "").lower()
    if "video" in model and on_modelscope:
        return ProviderKind.MODELSCOPE
    return ProviderKind.OPENAI_COMPATIBLE


def prepare_config(config: Config, kind: ProviderKind) -> Config:
    """
    Validate config for a provider call and return a normalized copy.

    The copy has the API key stripped of any "Bearer " prefix and the base
    URL trimmed. The OpenAI-compatible path has no default endpoint, so a
    base URL is required there.

    Raises:
        ConfigurationError: Missing model, API key or (OpenAI-compatible) base URL
    """
    config.validate()
    base_url = config.base_url.strip() if config.base_url else None
    if kind == ProviderKind.OPENAI_COMPATIBLE and not base_url:
        raise ConfigurationError(
            "Base URL is required for OpenAI-compatible models. Set GENMEDIA_BASE_URL."
        )
    return replace(
        config,
        model_id=config.model_id.strip(),
        api_key=normalize_api_key(config.api_key),
        base_url=base_url or None,
    )


def resolve_provider(kind: ProviderKind) -> MediaProvider:
    """Return the registered adapter for kind."""
    impl = get_registry().get(kind)
    if impl is None:
        raise ConfigurationError(f"No provider registered for {kind.value!r}")
    return impl


def route_image(config: Config) -> tuple[MediaProvider, Config]:
    """Classify config.model_id for images; return the adapter and the prepared config."""
    kind = classify_image_model(config.model_id or "")
    prepared = prepare_config(config, kind)
    logger.debug("Routed image model=%s to %s", prepared.model_id, kind.value)
    return resolve_provider(kind), prepared


def route_video(config: Config) -> tuple[MediaProvider, Config]:
    """Classify config.model_id for video; return the adapter and the prepared config."""
    kind = classify_video_model(config.model_id or "", config.base_url)
    prepared = prepare_config(config, kind)
    logger.debug("Routed video model=%s to %s", prepared.model_id, kind.value)
    return resolve_provider(kind), prepared


__all__ = [
    "classify_image_model",
    "classify_video_model",
    "prepare_config",
    "resolve_provider",
    "route_image",
    "route_video",
]
