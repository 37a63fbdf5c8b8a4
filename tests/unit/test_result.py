"""Unit tests for the unified result variants."""

import re

import pytest

from genmedia.core.result import DataURI, ImageURL, TextAsDataURI, parse_output

DATA_URI_RE = re.compile(r"^data:[a-z/+.-]+;base64,")


@pytest.mark.unit
class TestToOutput:
    def test_url_passes_through(self):
        assert ImageURL("https://cdn.test/a.png").to_output() == "https://cdn.test/a.png"

    def test_data_uri(self):
        out = DataURI("image/png", "AAAA").to_output()
        assert out == "data:image/png;base64,AAAA"
        assert DATA_URI_RE.match(out)

    def test_text_is_plain_text_data_uri(self):
        result = TextAsDataURI.from_text("a cat on a mat")
        assert result.to_output().startswith("data:text/plain;base64,")
        assert result.text == "a cat on a mat"


@pytest.mark.unit
class TestParseOutput:
    def test_url(self):
        assert parse_output("https://cdn.test/v.mp4") == ImageURL("https://cdn.test/v.mp4")

    def test_image_data_uri(self):
        assert parse_output("data:image/jpeg;base64,AAAA") == DataURI("image/jpeg", "AAAA")

    def test_text_data_uri(self):
        original = TextAsDataURI.from_text("hello")
        parsed = parse_output(original.to_output())
        assert isinstance(parsed, TextAsDataURI)
        assert parsed.text == "hello"
