"""
Generic OpenAI-compatible provider.

Used for any model that is neither Zhipu nor ModelScope. A base URL is
required. Gemini-style image models answer through chat completions; other
image models go through the images endpoint. Video generation uses a
multipart submission followed by task polling.
"""

import base64
import binascii
from typing import Any

from genmedia.core.config import Config
from genmedia.core.encoding import (
    ensure_data_uri,
    is_data_uri,
    is_http_url,
    normalize_base_url,
    split_data_uri,
)
from genmedia.core.poller import TaskHandle, poll_task, status_checker
from genmedia.core.probes import (
    CHAT_IMAGE_PROBES,
    CHAT_TEXT_PROBES,
    OPENAI_IMAGE_PROBES,
    dig,
    extract_image_from_text,
    first_value,
    probe_response,
)
from genmedia.core.providers.base import ProviderKind, finalize_image
from genmedia.core.request import GenerationRequest
from genmedia.core.result import ImageURL, TextAsDataURI, UnifiedResult
from genmedia.core.transport import download_as_data_uri, get_json, post_json, post_multipart
from genmedia.logging_config import get_logger, log_prompts
from genmedia.utils.exceptions import (
    ConfigurationError,
    ResponseFormatError,
    TaskFailedError,
    UnsupportedModelError,
    ValidationError,
)

logger = get_logger(__name__)

PROVIDER_NAME = "OpenAI-compatible"

IMAGE_SIZE_BY_PRESET = {
    "1K": "1024x1024",
    "2K": "2048x2048",
    "4K": "4096x4096",
}
DEFAULT_IMAGE_SIZE = "1024x1024"

VIDEO_SIZE_BY_ASPECT_RATIO = {
    "16:9": "1920x1080",
    "9:16": "1080x1920",
}
DEFAULT_VIDEO_SIZE = "1920x1080"

DIRECT_IMAGE_INSTRUCTION = "Output the image directly."

# gemini-2.5-flash-image rejects image_size
_ASPECT_ONLY_MODELS = frozenset({"gemini-2.5-flash-image"})

VIDEO_SUCCESS = ("SUCCESS",)
VIDEO_FAILURE = ("FAILED",)
VIDEO_PENDING = ("QUEUED", "RUNNING")


def is_chat_image_model(model: str) -> bool:
    """Gemini / nano-banana style models return images through chat completions."""
    return "gemini" in model or "nano" in model


def build_chat_image_payload(request: GenerationRequest, model: str) -> dict[str, Any]:
    prompt = request.full_prompt()
    messages: list[dict[str, Any]]
    if request.reference_images:
        messages = [
            {"role": "system", "content": f"{prompt}\n{DIRECT_IMAGE_INSTRUCTION}"},
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": ensure_data_uri(ref)}}
                    for ref in request.reference_images
                ],
            },
        ]
    else:
        messages = [{"role": "user", "content": f"{prompt}\n{DIRECT_IMAGE_INSTRUCTION}"}]
    image_config: dict[str, Any] = {}
    if request.aspect_ratio:
        image_config["aspect_ratio"] = request.aspect_ratio
    if request.size and model not in _ASPECT_ONLY_MODELS:
        image_config["image_size"] = request.size
    body: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "modalities": ["image", "text"],
    }
    if image_config:
        body["image_config"] = image_config
    return body


def build_image_payload(request: GenerationRequest, model: str) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": model,
        "prompt": request.full_prompt(),
        "n": 1,
        "size": IMAGE_SIZE_BY_PRESET.get(request.size or "", DEFAULT_IMAGE_SIZE),
    }
    if request.aspect_ratio:
        body["aspect_ratio"] = request.aspect_ratio
    if request.seed is not None:
        body["seed"] = request.seed
    if request.quality:
        body["quality"] = request.quality
    if request.reference_images:
        body["image"] = [ensure_data_uri(ref) for ref in request.reference_images]
    return body


def reference_image_file(ref: str, timeout: float = 120) -> tuple[str, bytes, str]:
    """
    Turn a reference image (URL, data URI or bare base64) into a multipart file part.

    Raises:
        ValidationError: If the reference is not valid base64
        TransportError: If a URL reference cannot be downloaded
    """
    if is_http_url(ref):
        downloaded = download_as_data_uri(ref, timeout=timeout)
        mime_type, payload = downloaded.mime_type, downloaded.payload
    elif is_data_uri(ref):
        mime_type, payload = split_data_uri(ref)
    else:
        mime_type, payload = "image/jpeg", ref
    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(
            "Reference image must be an http(s) URL, a data URI or base64 data",
            field="reference_images",
        ) from e
    subtype = mime_type.split("/", 1)[-1]
    ext = "jpg" if subtype == "jpeg" else subtype
    return f"image.{ext}", image_bytes, mime_type


def build_video_form(
    request: GenerationRequest, model: str, timeout: float = 120
) -> tuple[dict[str, str], dict[str, Any]]:
    """Multipart fields and files for a video submission; an explicit size wins over aspect_ratio."""
    fields = {
        "model": model,
        "prompt": request.prompt,
        "seconds": str(request.duration) if request.duration else "",
        "size": request.size
        or VIDEO_SIZE_BY_ASPECT_RATIO.get(request.aspect_ratio or "", DEFAULT_VIDEO_SIZE),
        "seed": str(request.seed) if request.seed is not None else "",
    }
    fields = {key: value for key, value in fields.items() if value}
    files: dict[str, Any] = {}
    ref = request.first_reference()
    if ref:
        files["input_reference"] = reference_image_file(ref, timeout=timeout)
    return fields, files


def video_endpoints(base_url: str) -> tuple[str, str]:
    """
    Return (submit_url, query_url_template) for video generation.

    A base URL of the form ``submit|query`` gives both URLs explicitly, the
    query URL containing an ``{id}`` placeholder.
    """
    if "|" in base_url:
        submit_url, query_url = (part.strip() for part in base_url.split("|", 1))
        return submit_url, query_url
    root = normalize_base_url(base_url)
    return f"{root}/videos/generations", f"{root}/videos/{{id}}"


class OpenAICompatibleProvider:
    """Adapter for OpenAI-compatible gateways."""

    kind = ProviderKind.OPENAI_COMPATIBLE
    supports_reference_image: bool = True

    def _require_base_url(self, config: Config) -> str:
        if not config.base_url or not config.base_url.strip():
            raise ConfigurationError(
                "Base URL is required for OpenAI-compatible models. Set GENMEDIA_BASE_URL."
            )
        return config.base_url.strip()

    def generate_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        request.require_prompt()
        base_url = normalize_base_url(self._require_base_url(config))
        model = config.model_id
        logger.info("OpenAI-compatible image request model=%s base_url=%s", model, base_url)
        if log_prompts():
            logger.info("Prompt (used): %s", request.full_prompt())
        if is_chat_image_model(model):
            return self._generate_via_chat(request, config, base_url)
        data = post_json(
            f"{base_url}/images/generations",
            build_image_payload(request, model),
            config.api_key,
            config.generation_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        result = probe_response(data, OPENAI_IMAGE_PROBES, provider=PROVIDER_NAME)
        return finalize_image(result, request, config.generation_timeout)

    def _generate_via_chat(
        self, request: GenerationRequest, config: Config, base_url: str
    ) -> UnifiedResult:
        data = post_json(
            f"{base_url}/chat/completions",
            build_chat_image_payload(request, config.model_id),
            config.api_key,
            config.generation_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        if first_value(data, [probe.path for probe in CHAT_IMAGE_PROBES]) is not None:
            result = probe_response(data, CHAT_IMAGE_PROBES, provider=PROVIDER_NAME)
        else:
            try:
                text_result = probe_response(data, CHAT_TEXT_PROBES, provider=PROVIDER_NAME)
            except ResponseFormatError as e:
                raise ResponseFormatError(
                    "Image generation failed: the model returned neither an image nor text",
                    response=data,
                ) from e
            assert isinstance(text_result, TextAsDataURI)
            result = extract_image_from_text(text_result.text)
        # Chat image models always deliver inline data
        if isinstance(result, ImageURL):
            return download_as_data_uri(result.url, timeout=config.generation_timeout)
        return result

    def analyze_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Describe the first reference image through chat completions."""
        ref = request.require_reference()
        base_url = normalize_base_url(self._require_base_url(config))
        body = {
            "model": config.model_id,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": request.prompt or "Describe this image."},
                        {"type": "image_url", "image_url": {"url": ensure_data_uri(ref)}},
                    ],
                }
            ],
            "temperature": request.temperature,
            "top_p": request.top_p,
            "max_tokens": request.max_tokens,
        }
        data = post_json(
            f"{base_url}/chat/completions",
            body,
            config.api_key,
            config.request_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        return probe_response(data, CHAT_TEXT_PROBES, provider=PROVIDER_NAME)

    def analyze_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        raise UnsupportedModelError(
            f"Video analysis is not available for OpenAI-compatible model {config.model_id!r}; "
            "use a Zhipu GLM-4V or ModelScope model",
            model=config.model_id,
        )

    def generate_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        request.require_prompt()
        submit_url, query_template = video_endpoints(self._require_base_url(config))
        logger.info("OpenAI-compatible video request model=%s url=%s", config.model_id, submit_url)
        fields, files = build_video_form(
            request, config.model_id, timeout=config.generation_timeout
        )
        data = post_multipart(
            submit_url,
            data=fields,
            files=files,
            api_key=config.api_key,
            timeout=config.submit_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        if dig(data, "status") in VIDEO_FAILURE:
            raise TaskFailedError(
                f"Task submission failed: {dig(data, 'errorMessage') or 'unknown error'}"
            )
        task_id = dig(data, "id")
        if not task_id:
            raise ResponseFormatError("Video submission returned no task id", response=data)
        handle = TaskHandle(
            task_id=str(task_id), status_url=query_template.replace("{id}", str(task_id))
        )
        check = status_checker(
            lambda: get_json(
                handle.status_url,
                config.api_key,
                config.request_timeout,
                provider=PROVIDER_NAME,
                debug=config.debug_api,
            ),
            status_paths=("status",),
            url_paths=("results.0.url",),
            error_paths=("errorMessage", "error"),
            success=VIDEO_SUCCESS,
            failure=VIDEO_FAILURE,
            pending=VIDEO_PENDING,
        )
        url = poll_task(check, config.poll_interval, config.poll_timeout, task_id=handle.task_id)
        return ImageURL(url=url)
