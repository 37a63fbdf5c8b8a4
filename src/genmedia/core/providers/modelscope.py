"""
ModelScope provider.

Two API generations are supported side by side:

- the OpenAI-style image endpoint (``/v1/images/generations``, result in
  ``images[0].url``) and the native video inference endpoint with task polling;
- the older inference endpoint (``/api/v1/models/{model}/inference``) used by
  ``infer_image`` / ``infer_video``, whose results live under ``output``.
"""

import os
from typing import Any

from genmedia.core.config import (
    DEFAULT_MODELSCOPE_API_BASE_URL,
    DEFAULT_MODELSCOPE_BASE_URL,
    DEFAULT_MODELSCOPE_INFERENCE_BASE_URL,
    Config,
)
from genmedia.core.encoding import normalize_base_url, strip_data_uri_prefix
from genmedia.core.poller import TaskHandle, poll_task, status_checker
from genmedia.core.probes import (
    MODELSCOPE_IMAGE_PROBES,
    MODELSCOPE_INFERENCE_PROBES,
    MODELSCOPE_VIDEO_ANALYSIS_PROBES,
    dig,
    first_value,
    probe_response,
)
from genmedia.core.providers.base import ProviderKind, finalize_image
from genmedia.core.request import GenerationRequest
from genmedia.core.result import ImageURL, UnifiedResult
from genmedia.core.transport import get_json, post_json, post_multipart
from genmedia.logging_config import get_logger, log_prompts
from genmedia.utils.exceptions import ResponseFormatError, ValidationError

logger = get_logger(__name__)

PROVIDER_NAME = "ModelScope"

TASK_SUCCESS = ("SUCCEEDED", "SUCCESS")
TASK_FAILURE = ("FAILED",)
TASK_PENDING = ("RUNNING", "PENDING", "QUEUED")

# Older inference endpoint polls on a shorter fixed schedule
INFERENCE_POLL_INTERVAL = 3.0
INFERENCE_POLL_TIMEOUT = 120.0

_TASK_ID_PATHS = ("output.task_id", "task_id", "id")
_VIDEO_URL_PATHS = ("output.video_url", "video_url", "results.0.url")
_STATUS_PATHS = ("status", "task_status", "output.status", "output.task_status")
_ERROR_PATHS = ("error", "message", "output.message")


def build_image_payload(request: GenerationRequest, model: str) -> dict[str, Any]:
    """OpenAI-style /images/generations body."""
    body: dict[str, Any] = {"model": model, "prompt": request.prompt, "n": 1}
    if request.size:
        body["size"] = request.size
    if request.seed is not None:
        body["seed"] = request.seed
    ref = request.first_reference()
    if ref:
        body["image"] = strip_data_uri_prefix(ref)
    return body


def build_inference_payload(request: GenerationRequest) -> dict[str, Any]:
    """Older inference body: the first reference (base64 as given, or image_url) under input.image."""
    return {
        "input": {"image": request.require_reference()},
        "parameters": dict(request.extra_params),
    }


def build_video_payload(request: GenerationRequest) -> dict[str, Any]:
    """Native video inference body."""
    body: dict[str, Any] = {"input": {"prompt": request.prompt}, "parameters": {}}
    if request.duration:
        body["parameters"]["duration"] = request.duration
    if request.aspect_ratio:
        body["parameters"]["aspect_ratio"] = request.aspect_ratio
    if request.size:
        body["parameters"]["size"] = request.size
    if request.seed is not None:
        body["parameters"]["seed"] = request.seed
    ref = request.first_reference()
    if ref:
        body["input"]["image"] = strip_data_uri_prefix(ref)
    return body


class ModelScopeProvider:
    """Adapter for ModelScope API-Inference."""

    kind = ProviderKind.MODELSCOPE
    supports_reference_image: bool = True

    def generate_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Generate an image through the OpenAI-style images endpoint."""
        request.require_prompt()
        base_url = normalize_base_url(config.base_url, DEFAULT_MODELSCOPE_BASE_URL)
        logger.info("ModelScope image request model=%s base_url=%s", config.model_id, base_url)
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
        result = probe_response(data, MODELSCOPE_IMAGE_PROBES, provider=PROVIDER_NAME)
        return finalize_image(result, request, config.generation_timeout)

    def analyze_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        return self.infer_image(request, config)

    def infer_image(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """
        Run a reference image through the older inference endpoint.

        Depending on the model the result is an image URL, a base64 image or
        text (image analysis models).
        """
        payload = build_inference_payload(request)
        base_url = normalize_base_url(config.base_url, DEFAULT_MODELSCOPE_INFERENCE_BASE_URL)
        logger.info("ModelScope inference request model=%s", config.model_id)
        data = post_json(
            f"{base_url}/models/{config.model_id}/inference",
            payload,
            config.api_key,
            config.request_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        result = probe_response(data, MODELSCOPE_INFERENCE_PROBES, provider=PROVIDER_NAME)
        return finalize_image(result, request, config.generation_timeout)

    def generate_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """Submit a native video task and poll /tasks/{id} until it resolves."""
        request.require_prompt()
        base_url = normalize_base_url(config.base_url, DEFAULT_MODELSCOPE_API_BASE_URL)
        logger.info("ModelScope video request model=%s base_url=%s", config.model_id, base_url)
        data = post_json(
            f"{base_url}/models/{config.model_id}/inference",
            build_video_payload(request),
            config.api_key,
            config.submit_timeout,
            provider=PROVIDER_NAME,
            debug=config.debug_api,
        )
        task_id = first_value(data, _TASK_ID_PATHS)
        if not task_id:
            # Some models answer synchronously
            video_url = first_value(data, ("output.video_url", "video_url"))
            if video_url:
                return ImageURL(url=str(video_url))
            raise ResponseFormatError(
                "ModelScope video submission returned neither a task id nor a result",
                response=data,
            )
        handle = TaskHandle(task_id=str(task_id), status_url=f"{base_url}/tasks/{task_id}")
        url = self._poll(handle, config, config.poll_interval, config.poll_timeout)
        return ImageURL(url=url)

    def _poll(
        self, handle: TaskHandle, config: Config, interval: float, timeout: float
    ) -> str:
        check = status_checker(
            lambda: get_json(
                handle.status_url,
                config.api_key,
                config.request_timeout,
                provider=PROVIDER_NAME,
                debug=config.debug_api,
            ),
            status_paths=_STATUS_PATHS,
            url_paths=_VIDEO_URL_PATHS,
            error_paths=_ERROR_PATHS,
            success=TASK_SUCCESS,
            failure=TASK_FAILURE,
            pending=TASK_PENDING,
        )
        return poll_task(check, interval, timeout, task_id=handle.task_id)

    def analyze_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        return self.infer_video(request, config)

    def infer_video(self, request: GenerationRequest, config: Config) -> UnifiedResult:
        """
        Run a video through the older inference endpoint (analysis or processing).

        A local video_file is uploaded as multipart form data; a video_url is
        sent as JSON. When the endpoint answers with a task id the task is
        polled and its body probed the same way as a direct answer.
        """
        base_url = normalize_base_url(config.base_url, DEFAULT_MODELSCOPE_INFERENCE_BASE_URL)
        url = f"{base_url}/models/{config.model_id}/inference"
        if request.video_file:
            fields = {key: str(value) for key, value in request.extra_params.items()}
            with open(request.video_file, "rb") as fh:
                data = post_multipart(
                    url,
                    data=fields,
                    files={"video": (os.path.basename(request.video_file), fh, "video/mp4")},
                    api_key=config.api_key,
                    timeout=config.submit_timeout,
                    provider=PROVIDER_NAME,
                    debug=config.debug_api,
                )
        elif request.video_url:
            data = post_json(
                url,
                {"input": {"video": request.video_url}, "parameters": dict(request.extra_params)},
                config.api_key,
                config.submit_timeout,
                provider=PROVIDER_NAME,
                debug=config.debug_api,
            )
        else:
            raise ValidationError(
                "ModelScope video inference requires video_file or video_url", field="video"
            )

        task_id = dig(data, "task_id")
        if task_id:
            handle = TaskHandle(task_id=str(task_id), status_url=f"{base_url}/tasks/{task_id}")
            data = self._fetch_finished_task(handle, config)
        return probe_response(data, MODELSCOPE_VIDEO_ANALYSIS_PROBES, provider=PROVIDER_NAME)

    def _fetch_finished_task(self, handle: TaskHandle, config: Config) -> Any:
        """Poll an inference task and return its final body."""
        final_body: dict[str, Any] = {}

        def fetch() -> Any:
            body = get_json(
                handle.status_url,
                config.api_key,
                config.request_timeout,
                provider=PROVIDER_NAME,
                debug=config.debug_api,
            )
            final_body["value"] = body
            return body

        check = status_checker(
            fetch,
            status_paths=_STATUS_PATHS,
            url_paths=("output.video_url", "video_url"),
            error_paths=_ERROR_PATHS,
            success=TASK_SUCCESS,
            failure=TASK_FAILURE,
            pending=TASK_PENDING,
            fallback_url=handle.status_url,
        )
        poll_task(check, INFERENCE_POLL_INTERVAL, INFERENCE_POLL_TIMEOUT, task_id=handle.task_id)
        return final_body["value"]
