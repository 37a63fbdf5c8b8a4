"""Unit tests for genmedia logging setup."""

import logging

import pytest

from genmedia.core.config import Config
from genmedia.core.providers.zhipu import ZhipuProvider
from genmedia.core.request import GenerationRequest
from genmedia.logging_config import (
    clamp_verbosity,
    configure_logging,
    get_logger,
    get_verbosity_from_env,
    log_prompts,
    set_verbosity,
)


@pytest.fixture
def root_logger():
    root = logging.getLogger("genmedia")
    previous = root.level
    yield root
    root.setLevel(previous)
    set_verbosity(0)


@pytest.mark.unit
class TestVerbosityLevels:
    @pytest.mark.parametrize(
        "level,expected_level,expected_prompts",
        [
            (0, logging.INFO, False),
            (1, logging.INFO, True),
            (2, logging.DEBUG, True),
            (-3, logging.INFO, False),
            (7, logging.DEBUG, True),
        ],
    )
    def test_set_verbosity(self, root_logger, level, expected_level, expected_prompts):
        set_verbosity(level)
        assert root_logger.level == expected_level
        assert log_prompts() is expected_prompts

    def test_clamp(self):
        assert clamp_verbosity(-1) == 0
        assert clamp_verbosity(1) == 1
        assert clamp_verbosity(99) == 2

    def test_handler_added_once(self, root_logger):
        set_verbosity(1)
        set_verbosity(2)
        assert len(root_logger.handlers) == 1


@pytest.mark.unit
class TestConfigureLogging:
    def test_quiet_overrides_verbose(self, root_logger):
        set_verbosity(2)
        configure_logging(verbose_level=2, quiet=True)
        assert root_logger.level == logging.WARNING
        assert log_prompts() is False

    def test_verbose_level_applied(self, root_logger):
        configure_logging(verbose_level=1)
        assert root_logger.level == logging.INFO
        assert log_prompts() is True


@pytest.mark.unit
class TestVerbosityFromEnv:
    @pytest.mark.parametrize(
        "raw,expected",
        [("0", 0), ("1", 1), (" 2 ", 2), ("9", 2), ("-1", 0), ("loud", 0), ("", 0)],
    )
    def test_parsing(self, monkeypatch, raw, expected):
        monkeypatch.setenv("GENMEDIA_VERBOSITY", raw)
        assert get_verbosity_from_env() == expected

    def test_missing(self, monkeypatch):
        monkeypatch.delenv("GENMEDIA_VERBOSITY", raising=False)
        assert get_verbosity_from_env() == 0


@pytest.mark.unit
class TestGetLogger:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("core.poller", "genmedia.core.poller"),
            ("genmedia.core.transport", "genmedia.core.transport"),
            ("genmedia", "genmedia"),
            ("genmediax", "genmedia.genmediax"),
        ],
    )
    def test_names(self, name, expected):
        assert get_logger(name).name == expected


@pytest.mark.unit
class TestPromptLogging:
    """Adapters only log prompt text when verbosity allows it."""

    def _generate(self):
        config = Config(api_key="k", model_id="cogview-4")
        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(
                "genmedia.core.providers.zhipu.post_json",
                lambda *a, **kw: {"data": [{"url": "https://cdn.example/a.png"}]},
            )
            ZhipuProvider().generate_image(GenerationRequest(prompt="a red fox"), config)

    def test_prompt_hidden_at_default(self, root_logger, caplog):
        set_verbosity(0)
        with caplog.at_level(logging.INFO, logger="genmedia"):
            self._generate()
        assert "a red fox" not in caplog.text

    def test_prompt_logged_at_verbosity_one(self, root_logger, caplog):
        set_verbosity(1)
        with caplog.at_level(logging.INFO, logger="genmedia"):
            self._generate()
        assert "a red fox" in caplog.text
