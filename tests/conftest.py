"""
Pytest configuration.

Default runs most tests; use --run-slow to include slow (live API) tests.
Unit tests run with GENMEDIA_* variables cleared and a fresh shared config,
so a developer's .env never leaks into assertions.
"""

import os

import pytest

import genmedia.core.config as config_module


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (live provider APIs). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow", False):
        return
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def _isolated_environment(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch):
    if "integration" in request.keywords:
        yield
        return
    for name in list(os.environ):
        if name.startswith("GENMEDIA_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr(config_module, "_global_config", None)
    yield
