"""Unit tests for the OpenAI-compatible provider."""

import base64
import re
from unittest.mock import MagicMock, patch

import pytest

from genmedia.core.config import Config
from genmedia.core.providers.openai_compatible import (
    OpenAICompatibleProvider,
    build_chat_image_payload,
    build_image_payload,
    build_video_form,
    video_endpoints,
)
from genmedia.core.request import GenerationRequest, OutputEncoding
from genmedia.core.result import DataURI, ImageURL, TextAsDataURI
from genmedia.utils.exceptions import (
    ConfigurationError,
    ResponseFormatError,
    TaskFailedError,
    UnsupportedModelError,
    ValidationError,
)

BASE = "https://gw.test/v1"


def _mock_response(json_body=None, status_code=200, content=b"", headers=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_body
    response.text = ""
    response.content = content
    response.headers = headers or {}
    return response


def _config(model="gpt-image-1", base_url=BASE, **kwargs):
    return Config(model_id=model, api_key="sk-1", base_url=base_url, poll_interval=0, **kwargs)


def _chat(message):
    return _mock_response({"choices": [{"message": message}]})


@pytest.mark.unit
class TestPayloads:
    def test_image_payload_size_preset(self):
        req = GenerationRequest(prompt="a cat", size="2K", seed=3, system_prompt="Be bold")
        body = build_image_payload(req, "gpt-image-1")
        assert body["size"] == "2048x2048"
        assert body["prompt"] == "Be bold\n\na cat"
        assert body["seed"] == 3
        assert body["n"] == 1

    def test_image_payload_unknown_size_defaults(self):
        body = build_image_payload(GenerationRequest(prompt="x", size="800x600"), "m")
        assert body["size"] == "1024x1024"

    def test_image_payload_references_are_data_uris(self):
        body = build_image_payload(GenerationRequest(prompt="x", reference_images=["AAAA"]), "m")
        assert body["image"] == ["data:image/jpeg;base64,AAAA"]

    def test_chat_payload_with_reference(self):
        req = GenerationRequest(prompt="make it blue", reference_images=["AAAA"], aspect_ratio="1:1")
        body = build_chat_image_payload(req, "gemini-3-pro-image")
        assert body["messages"][0]["role"] == "system"
        assert body["messages"][0]["content"].endswith("Output the image directly.")
        assert body["messages"][1]["content"][0]["image_url"]["url"].startswith("data:image/jpeg")
        assert body["modalities"] == ["image", "text"]
        assert body["image_config"] == {"aspect_ratio": "1:1"}

    def test_chat_payload_aspect_only_model_drops_size(self):
        req = GenerationRequest(prompt="x", size="2K", aspect_ratio="16:9")
        body = build_chat_image_payload(req, "gemini-2.5-flash-image")
        assert body["image_config"] == {"aspect_ratio": "16:9"}

    def test_video_form(self):
        jpeg = base64.b64encode(b"\xff\xd8").decode("ascii")
        req = GenerationRequest(prompt="x", duration=8, aspect_ratio="9:16", reference_images=[jpeg])
        fields, files = build_video_form(req, "sora-2")
        assert fields == {"model": "sora-2", "prompt": "x", "seconds": "8", "size": "1080x1920"}
        assert files["input_reference"] == ("image.jpg", b"\xff\xd8", "image/jpeg")

    def test_video_form_explicit_size_and_seed(self):
        req = GenerationRequest(prompt="x", size="720x1280", aspect_ratio="16:9", seed=42)
        fields, _ = build_video_form(req, "sora-2")
        assert fields["size"] == "720x1280"
        assert fields["seed"] == "42"

    def test_video_form_png_data_uri_reference(self):
        png = base64.b64encode(b"\x89PNG").decode("ascii")
        req = GenerationRequest(prompt="x", reference_images=[f"data:image/png;base64,{png}"])
        _, files = build_video_form(req, "sora-2")
        assert files["input_reference"] == ("image.png", b"\x89PNG", "image/png")

    def test_video_form_url_reference_is_downloaded(self):
        req = GenerationRequest(
            prompt="a cat", reference_images=["https://cdn.example.com/ref/first_frame.png"]
        )
        with patch(
            "genmedia.core.transport.requests.get",
            return_value=_mock_response(content=b"\x89PNG", headers={"content-type": "image/png"}),
        ) as mock_get:
            _, files = build_video_form(req, "sora-2", timeout=30)
        assert mock_get.call_args[0][0] == "https://cdn.example.com/ref/first_frame.png"
        assert mock_get.call_args[1]["timeout"] == 30
        assert files["input_reference"] == ("image.png", b"\x89PNG", "image/png")

    def test_video_form_invalid_base64_reference(self):
        req = GenerationRequest(prompt="x", reference_images=["not base64 at all!"])
        with pytest.raises(ValidationError) as exc_info:
            build_video_form(req, "sora-2")
        assert exc_info.value.field == "reference_images"

    def test_video_endpoints_default(self):
        assert video_endpoints("https://gw.test/v1/") == (
            "https://gw.test/v1/videos/generations",
            "https://gw.test/v1/videos/{id}",
        )

    def test_video_endpoints_explicit_pair(self):
        assert video_endpoints("https://a/submit | https://a/query/{id}") == (
            "https://a/submit",
            "https://a/query/{id}",
        )


@pytest.mark.unit
class TestGenerateImage:
    def test_requires_base_url(self):
        with pytest.raises(ConfigurationError):
            OpenAICompatibleProvider().generate_image(
                GenerationRequest(prompt="x"), _config(base_url=None)
            )

    def test_b64_json(self):
        with patch(
            "genmedia.core.transport.requests.post",
            return_value=_mock_response({"data": [{"b64_json": "AAAA"}]}),
        ) as mock_post:
            result = OpenAICompatibleProvider().generate_image(GenerationRequest(prompt="x"), _config())
        assert result == DataURI("image/png", "AAAA")
        assert mock_post.call_args[0][0] == f"{BASE}/images/generations"

    def test_url_with_base64_output(self):
        request = GenerationRequest(prompt="x", output_encoding=OutputEncoding.BASE64)
        with patch(
            "genmedia.core.transport.requests.post",
            return_value=_mock_response({"data": [{"url": "https://cdn.test/a.png"}]}),
        ), patch(
            "genmedia.core.transport.requests.get",
            return_value=_mock_response(content=b"\x89PNG", headers={}),
        ):
            output = OpenAICompatibleProvider().generate_image(request, _config()).to_output()
        assert re.match(r"^data:[a-z/]+;base64,", output)

    def test_url_kept_by_default(self):
        with patch(
            "genmedia.core.transport.requests.post",
            return_value=_mock_response({"data": [{"url": "https://cdn.test/a.png"}]}),
        ):
            result = OpenAICompatibleProvider().generate_image(GenerationRequest(prompt="x"), _config())
        assert result == ImageURL("https://cdn.test/a.png")


@pytest.mark.unit
class TestChatImage:
    def test_images_field(self):
        message = {"images": [{"image_url": {"url": "data:image/png;base64,AAAA"}}]}
        with patch(
            "genmedia.core.transport.requests.post", return_value=_chat(message)
        ) as mock_post:
            result = OpenAICompatibleProvider().generate_image(
                GenerationRequest(prompt="x"), _config("gemini-3-pro-image")
            )
        assert result == DataURI("image/png", "AAAA")
        assert mock_post.call_args[0][0] == f"{BASE}/chat/completions"

    def test_markdown_url_is_downloaded(self):
        message = {"content": "![image](https://cdn.test/b.png)"}
        with patch("genmedia.core.transport.requests.post", return_value=_chat(message)), patch(
            "genmedia.core.transport.requests.get",
            return_value=_mock_response(content=b"\x89PNG", headers={"content-type": "image/png"}),
        ) as mock_get:
            result = OpenAICompatibleProvider().generate_image(
                GenerationRequest(prompt="x"), _config("nano-banana")
            )
        assert isinstance(result, DataURI)
        assert mock_get.call_args[0][0] == "https://cdn.test/b.png"

    def test_text_only_reply(self):
        with patch(
            "genmedia.core.transport.requests.post",
            return_value=_chat({"content": "I can't help with that."}),
        ):
            result = OpenAICompatibleProvider().generate_image(
                GenerationRequest(prompt="x"), _config("gemini-3-pro-image")
            )
        assert isinstance(result, TextAsDataURI)

    def test_empty_reply(self):
        with patch("genmedia.core.transport.requests.post", return_value=_chat({})):
            with pytest.raises(ResponseFormatError):
                OpenAICompatibleProvider().generate_image(
                    GenerationRequest(prompt="x"), _config("gemini-3-pro-image")
                )


@pytest.mark.unit
class TestAnalyze:
    def test_analyze_image(self):
        with patch(
            "genmedia.core.transport.requests.post",
            return_value=_chat({"content": "a lighthouse"}),
        ) as mock_post:
            result = OpenAICompatibleProvider().analyze_image(
                GenerationRequest(image_url="https://x/a.png"), _config("gpt-4o")
            )
        assert result.text == "a lighthouse"
        parts = mock_post.call_args[1]["json"]["messages"][0]["content"]
        assert parts[1]["image_url"]["url"] == "https://x/a.png"

    def test_analyze_video_unsupported(self):
        with pytest.raises(UnsupportedModelError):
            OpenAICompatibleProvider().analyze_video(
                GenerationRequest(video_url="https://x/v.mp4"), _config("gpt-4o")
            )


@pytest.mark.unit
class TestGenerateVideo:
    def test_submit_and_poll(self):
        with patch(
            "genmedia.core.transport.requests.post",
            return_value=_mock_response({"id": "v1", "status": "QUEUED"}),
        ) as mock_post, patch(
            "genmedia.core.transport.requests.get",
            side_effect=[
                _mock_response({"status": "RUNNING"}),
                _mock_response({"status": "SUCCESS", "results": [{"url": "https://cdn.test/v.mp4"}]}),
            ],
        ) as mock_get:
            result = OpenAICompatibleProvider().generate_video(
                GenerationRequest(prompt="surf", duration=4), _config("sora-2")
            )
        assert result == ImageURL("https://cdn.test/v.mp4")
        assert mock_post.call_args[0][0] == f"{BASE}/videos/generations"
        assert mock_post.call_args[1]["files"]["seconds"] == (None, "4")
        assert mock_get.call_args[0][0] == f"{BASE}/videos/v1"

    def test_url_reference_uploaded_as_bytes(self):
        with patch(
            "genmedia.core.transport.requests.post",
            return_value=_mock_response({"id": "v2", "status": "QUEUED"}),
        ) as mock_post, patch(
            "genmedia.core.transport.requests.get",
            side_effect=[
                _mock_response(content=b"\xff\xd8\xff", headers={"content-type": "image/jpeg"}),
                _mock_response({"status": "SUCCESS", "results": [{"url": "https://cdn.test/v2.mp4"}]}),
            ],
        ):
            result = OpenAICompatibleProvider().generate_video(
                GenerationRequest(prompt="surf", reference_images=["https://cdn.example.com/a.png"]),
                _config("sora-2"),
            )
        assert result == ImageURL("https://cdn.test/v2.mp4")
        assert mock_post.call_args[1]["files"]["input_reference"] == (
            "image.jpg",
            b"\xff\xd8\xff",
            "image/jpeg",
        )

    def test_submission_failed(self):
        with patch(
            "genmedia.core.transport.requests.post",
            return_value=_mock_response({"status": "FAILED", "errorMessage": "bad size"}),
        ):
            with pytest.raises(TaskFailedError) as exc_info:
                OpenAICompatibleProvider().generate_video(
                    GenerationRequest(prompt="surf"), _config("sora-2")
                )
        assert "bad size" in str(exc_info.value)

    def test_poll_failure(self):
        with patch(
            "genmedia.core.transport.requests.post", return_value=_mock_response({"id": "v1"})
        ), patch(
            "genmedia.core.transport.requests.get",
            return_value=_mock_response({"status": "FAILED", "errorMessage": "moderation"}),
        ):
            with pytest.raises(TaskFailedError) as exc_info:
                OpenAICompatibleProvider().generate_video(
                    GenerationRequest(prompt="surf"), _config("sora-2")
                )
        assert "moderation" in str(exc_info.value)
