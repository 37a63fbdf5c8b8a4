"""Unit tests for the package version and public exports."""

import importlib.metadata
import re

import pytest
from click.testing import CliRunner

import genmedia
from genmedia.cli import cli


@pytest.mark.unit
class TestVersion:
    def test_matches_installed_metadata(self):
        try:
            installed = importlib.metadata.version("genmedia")
        except importlib.metadata.PackageNotFoundError:
            pytest.skip("genmedia is not installed")
        assert genmedia.__version__ == installed

    def test_looks_like_a_release_or_dev_marker(self):
        assert re.match(r"^\d+\.\d+(\.\d+)?([.\-+].*)?$", genmedia.__version__)

    def test_cli_reports_same_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert genmedia.__version__ in result.output


@pytest.mark.unit
class TestPublicApi:
    @pytest.mark.parametrize("name", genmedia.__all__)
    def test_every_export_resolves(self, name):
        assert getattr(genmedia, name) is not None

    def test_entry_points_exported(self):
        for name in (
            "generate_image",
            "generate_video",
            "analyze_image",
            "analyze_video",
            "classify_image_model",
            "classify_video_model",
            "poll_task",
        ):
            assert name in genmedia.__all__
