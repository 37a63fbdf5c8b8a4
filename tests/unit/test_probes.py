"""Unit tests for response probing."""

import pytest

from genmedia.core.probes import (
    CHAT_IMAGE_PROBES,
    MODELSCOPE_INFERENCE_PROBES,
    MODELSCOPE_VIDEO_ANALYSIS_PROBES,
    OPENAI_IMAGE_PROBES,
    ZHIPU_IMAGE_PROBES,
    dig,
    extract_image_from_text,
    first_value,
    probe_response,
)
from genmedia.core.result import DataURI, ImageURL, TextAsDataURI
from genmedia.utils.exceptions import ResponseFormatError


@pytest.mark.unit
class TestDig:
    def test_nested_dicts_and_lists(self):
        body = {"data": [{"url": "u"}]}
        assert dig(body, "data.0.url") == "u"

    def test_missing_index_returns_none(self):
        assert dig({"data": []}, "data.0.url") is None

    def test_wrong_type_returns_none(self):
        assert dig({"data": "x"}, "data.0") is None

    def test_first_value_skips_empty(self):
        body = {"a": "", "b": None, "c": "yes"}
        assert first_value(body, ["a", "b", "c"]) == "yes"
        assert first_value(body, ["a", "b"]) is None


@pytest.mark.unit
class TestProbeResponse:
    def test_zhipu_url(self):
        result = probe_response({"data": [{"url": "https://x/a.png"}]}, ZHIPU_IMAGE_PROBES)
        assert result == ImageURL("https://x/a.png")

    def test_openai_prefers_b64_json(self):
        body = {"data": [{"b64_json": "AAAA", "url": "https://x/a.png"}]}
        assert probe_response(body, OPENAI_IMAGE_PROBES) == DataURI("image/png", "AAAA")

    def test_openai_falls_back_to_url(self):
        body = {"data": [{"url": "https://x/a.png"}]}
        assert probe_response(body, OPENAI_IMAGE_PROBES) == ImageURL("https://x/a.png")

    def test_inference_order(self):
        body = {"output": {"image_base64": "BBBB", "text": "caption"}}
        assert probe_response(body, MODELSCOPE_INFERENCE_PROBES) == DataURI("image/png", "BBBB")

    def test_inference_text(self):
        result = probe_response({"output": {"text": "caption"}}, MODELSCOPE_INFERENCE_PROBES)
        assert isinstance(result, TextAsDataURI)
        assert result.text == "caption"

    def test_inference_data_uri_keeps_its_mime(self):
        body = {"output": {"image_base64": "data:image/webp;base64,CCCC"}}
        assert probe_response(body, MODELSCOPE_INFERENCE_PROBES) == DataURI("image/webp", "CCCC")

    def test_video_analysis_dumps_output_json(self):
        result = probe_response({"output": {"labels": ["cat"]}}, MODELSCOPE_VIDEO_ANALYSIS_PROBES)
        assert isinstance(result, TextAsDataURI)
        assert result.text == '{"labels": ["cat"]}'

    def test_chat_image_url(self):
        body = {
            "choices": [
                {"message": {"images": [{"image_url": {"url": "data:image/png;base64,AAAA"}}]}}
            ]
        }
        assert probe_response(body, CHAT_IMAGE_PROBES) == DataURI("image/png", "AAAA")

    def test_no_match_raises_with_body(self):
        body = {"foo": "bar"}
        with pytest.raises(ResponseFormatError) as exc_info:
            probe_response(body, ZHIPU_IMAGE_PROBES, provider="Zhipu")
        assert exc_info.value.response == body
        assert "Zhipu" in str(exc_info.value)


@pytest.mark.unit
class TestExtractImageFromText:
    def test_markdown_image_url(self):
        assert extract_image_from_text("![img](https://x/a.png)") == ImageURL("https://x/a.png")

    def test_markdown_data_uri(self):
        result = extract_image_from_text("![img](data:image/png;base64,AAAA)")
        assert result == DataURI("image/png", "AAAA")

    def test_inline_base64(self):
        result = extract_image_from_text("Here you go: data:image/png;base64,QUJD")
        assert result == DataURI("image/jpeg", "QUJD")

    def test_bare_image_url(self):
        assert extract_image_from_text(" https://x/a.webp ") == ImageURL("https://x/a.webp")

    def test_plain_text(self):
        result = extract_image_from_text("I cannot draw that.")
        assert isinstance(result, TextAsDataURI)
        assert result.text == "I cannot draw that."
