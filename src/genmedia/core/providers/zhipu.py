"""
Zhipu BigModel provider.

Covers CogView image generation, CogVideoX video generation (submit then
poll), and GLM-4V image/video analysis through chat completions.
"""

from typing import Any

from genmedia.core.config import DEFAULT_ZHIPU_BASE_URL, Config
from genmedia.core.encoding import (
    is_http_url,
    make_data_uri,
    normalize_base_url,
    strip_data_uri_prefix,
)
from genmedia.core.poller import TaskHandle, poll_task, status_checker
from genmedia.core.probes import CHAT_TEXT_PROBES, ZHIPU_IMAGE_PROBES, probe_response
from genmedia.core.providers.base import ProviderKind, finalize_image
from genmedia.core.request import GenerationRequest
from genmedia.core.result import ImageURL, TextAsDataURI, UnifiedResult
from genmedia.core.transport import extract_frames, get_json, post_json
from genmedia.logging_config import get_logger, log_prompts
from genmedia.utils.exceptions import (
    ConfigurationError,
    ResponseFormatError,
    UnsupportedModelError,
    ValidationError,
)

logger = get_logger(__name__)

PROVIDER_NAME = "Zhipu"

VISION_MODELS = ("glm-4v", "glm-4v-plus")

DEFAULT_IMAGE_ANALYSIS_PROMPT = "Describe the content of this image."
DEFAULT_FRAME_ANALYSIS_PROMPT = (
    "Describe this video frame, including the people, the scene and the actions."
)

VIDEO_SIZE_BY_ASPECT_RATIO = {
    "16:9": "1920x1080",
    "9:16": "1080x1920",
    "1:1": "1080x1080",
}
DEFAULT_VIDEO_SIZE = "1920x1080"

VIDEO_SUCCESS = ("SUCCESS",)
VIDEO_FAILURE = ("FAILED",)
VIDEO_PENDING = ("PROCESSING", "PENDING")


def is_vision_model(model: str) -> bool:
    return model.strip().lower() in VISION_MODELS


def _reject_unknown_vision_model(model: str) -> None:
    """glm-4v variants outside VISION_MODELS would otherwise be sent to CogView or CogVideoX."""
    if model.strip().lower().startswith("glm-4v") and not is_vision_model(model):
        raise UnsupportedModelError(
            f"Unsupported GLM-4V variant {model!r}; supported: {', '.join(VISION_MODELS)}",
            model=model,
        )


def build_image_payload(request: GenerationRequest, model: str) -> dict[str, Any]:
    """CogView /images/generations body; reference images are sent as bare base64."""
    body: dict[str, Any] = {"model": model, "prompt": request.prompt}
    if request.size:
        body["size"] = request.size
    if request.quality:
        body["quality"] = request.quality
    ref = request.first_reference()
    if ref:
        body["image"] = strip_data_uri_prefix(ref)
    return body


def build_video_payload(request: GenerationRequest, model: str) -> dict[str, Any]:
    """CogVideoX /videos/generations body; an explicit size wins over aspect_ratio."""
    body: dict[str, Any] = {"model": model, "prompt": request.prompt}
    if request.duration:
        body["duration"] = request.duration
    if request.size:
        body["size"] = request.size
    elif request.aspect_ratio:
        body["size"] = VIDEO_SIZE_BY_ASPECT_RATIO.get(request.aspect_ratio, DEFAULT_VIDEO_SIZE)
    if request.seed is not None:
        logger.warning("CogVideoX has no seed parameter; seed=%s is ignored", request.seed)
    ref = request.first_reference()
    if ref:
        body["image"] = strip_data_uri_prefix(ref)
    return body


def build_vision_payload(
    request: GenerationRequest, model: str, image_b64: str, default_prompt: str
) -> dict[str, Any]:
    """GLM-4V chat body with one text part and one JPEG data URI part."""
    return {
        "model": model,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": request.prompt or default_prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": make_data_uri("image/jpeg", image_b64)},
                    },
                ],
            }
        ],
        "temperature": request.temperature,
        "top_p": request.top_p,
        "max_tokens": request.max_tokens,
    }


class ZhipuProvider:
    """Adapter for the Zhipu BigModel open platform."""

    kind = ProviderKind.ZHIPU
    supports_reference_image: bool = True

    def _base_url(self, config: Config) -> str:
        return normalize_base_url(config.base_url, DEFAULT_ZHIPU_BASE_URL)

    def generate_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Generate an image with CogView; GLM-4V models are routed to analysis."""
        _reject_unknown_vision_model(config.model_id)
        if is_vision_model(config.model_id):
            return self.analyze_image(request, config)
        request.require_prompt()
        base_url = self._base_url(config)
        logger.info("Zhipu image request model=%s base_url=%s", config.model_id, base_url)
        if log_prompts():
            logger.info("Prompt (used): %s", request.prompt)
        data = post_json(
            f"{base_url}/images/generations",
            build_image_payload(request, config.model_id),
            config.api_key,
            config.generation_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        result = probe_response(data, ZHIPU_IMAGE_PROBES, provider=PROVIDER_NAME)
        return finalize_image(result, request, config.generation_timeout)

    def analyze_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Describe the first reference image with GLM-4V; returns text."""
        return TextAsDataURI.from_text(
            self._describe(request, config, DEFAULT_IMAGE_ANALYSIS_PROMPT)
        )

    def _describe(self, request: GenerationRequest, config: Config, default_prompt: str) -> str:
        model = config.model_id
        if not is_vision_model(model):
            raise UnsupportedModelError(
                f"Zhipu image analysis supports only {'/'.join(VISION_MODELS)}, got {model!r}",
                model=model,
            )
        ref = request.first_reference()
        if not ref:
            if request.image_url:
                raise ValidationError(
                    "Zhipu image analysis does not accept image_url; pass base64 reference_images",
                    field="image_url",
                )
            raise ValidationError(
                "Zhipu image analysis requires a base64 reference image",
                field="reference_images",
            )
        if is_http_url(ref):
            raise ValidationError(
                "Zhipu image analysis does not accept image URLs; pass base64 reference_images",
                field="reference_images",
            )
        base_url = self._base_url(config)
        logger.debug("Zhipu vision request model=%s", model)
        data = post_json(
            f"{base_url}/chat/completions",
            build_vision_payload(request, model, strip_data_uri_prefix(ref), default_prompt),
            config.api_key,
            config.request_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        result = probe_response(data, CHAT_TEXT_PROBES, provider=PROVIDER_NAME)
        assert isinstance(result, TextAsDataURI)
        return result.text

    def generate_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Generate a video with CogVideoX; GLM-4V models analyse frames instead."""
        _reject_unknown_vision_model(config.model_id)
        if is_vision_model(config.model_id):
            return self.analyze_video(request, config)
        request.require_prompt()
        base_url = self._base_url(config)
        logger.info("Zhipu video request model=%s base_url=%s", config.model_id, base_url)
        data = post_json(
            f"{base_url}/videos/generations",
            build_video_payload(request, config.model_id),
            config.api_key,
            config.submit_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        task_id = data.get("id") if isinstance(data, dict) else None
        if not task_id:
            raise ResponseFormatError(
                "Zhipu video task submission returned no task id", response=data
            )
        handle = TaskHandle(task_id=str(task_id), status_url=f"{base_url}/videos/{task_id}")
        return ImageURL(url=self._poll(handle, config))

    def _poll(self, handle: TaskHandle, config: Config) -> str:
        check = status_checker(
            lambda: get_json(
                handle.status_url,
                config.api_key,
                config.request_timeout,
                provider=PROVIDER_NAME,
                debug=config.debug_api,
            ),
            status_paths=("status",),
            url_paths=("video_result.url", "video_result.0.url"),
            error_paths=("error",),
            success=VIDEO_SUCCESS,
            failure=VIDEO_FAILURE,
            pending=VIDEO_PENDING,
        )
        return poll_task(
            check, config.poll_interval, config.poll_timeout, task_id=handle.task_id
        )

    def analyze_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """
        Analyse a video frame by frame with GLM-4V.

        Frames come from request.frames or, for request.video_file, from the
        frame extraction endpoint. Frames are analysed sequentially and the
        per-frame answers joined into one text summary.
        """
        if not is_vision_model(config.model_id):
            raise UnsupportedModelError(
                f"Zhipu video analysis supports only {'/'.join(VISION_MODELS)}, "
                f"got {config.model_id!r}",
                model=config.model_id,
            )
        if request.video_file:
            if not config.frame_extractor_url:
                raise ConfigurationError(
                    "Analysing a local video file needs a frame extraction service. "
                    "Set GENMEDIA_FRAME_EXTRACTOR_URL or pass pre-extracted frames."
                )
            frames = extract_frames(
                config.frame_extractor_url,
                request.video_file,
                request.frame_count,
                timeout=config.submit_timeout,
            )
        elif request.frames:
            frames = list(request.frames)
        else:
            raise ValidationError(
                "Zhipu video analysis requires video_file or pre-extracted frames",
                field="frames",
            )
        if not frames:
            raise ValidationError("Frame extraction returned no frames", field="frames")

        answers: list[str] = []
        for index, frame in enumerate(frames, start=1):
            logger.debug("Analysing frame %s/%s", index, len(frames))
            frame_request = GenerationRequest(
                prompt=request.prompt,
                reference_images=[frame],
                temperature=request.temperature,
                top_p=request.top_p,
                max_tokens=request.max_tokens,
            )
            answers.append(self._describe(frame_request, config, DEFAULT_FRAME_ANALYSIS_PROMPT))

        summary = (
            f"Extracted {len(answers)} frames, per-frame analysis:\n" + "\n---\n".join(answers)
        )
        return TextAsDataURI.from_text(summary)

