"""
Logging setup for genmedia.

Nothing is printed until set_verbosity() or configure_logging() is called, so
applications embedding the adapters keep full control of their own logging.

Verbosity:
    0  INFO, provider/model/timing lines only
    1  INFO, plus the prompt sent to the provider
    2  DEBUG, plus request URLs, poll attempts and truncated payloads

The CLI reads GENMEDIA_VERBOSITY and lets -v/-q override it.
"""

import logging
import os

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "genmedia"
MAX_VERBOSITY = 2

# verbosity -> (logger level, include prompt text)
_VERBOSITY_LEVELS: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_log_prompts = False


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


def clamp_verbosity(level: int) -> int:
    """Clamp any integer into the supported 0..MAX_VERBOSITY range."""
    return max(0, min(level, MAX_VERBOSITY))


def set_verbosity(level: int) -> None:
    """Apply a verbosity level (see module docstring); out-of-range values are clamped."""
    global _log_prompts
    log_level, _log_prompts = _VERBOSITY_LEVELS[clamp_verbosity(level)]
    _root_logger().setLevel(log_level)


def log_prompts() -> bool:
    """Whether adapters should log the prompt they send."""
    return _log_prompts


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """
    Configure genmedia logging for the CLI or an embedding application.

    quiet wins over verbose_level: only warnings and errors are shown and
    prompts are never logged.
    """
    global _log_prompts
    if quiet:
        _root_logger().setLevel(logging.WARNING)
        _log_prompts = False
        return
    set_verbosity(verbose_level)


def get_verbosity_from_env() -> int:
    """Read GENMEDIA_VERBOSITY; non-numeric values mean 0, large ones are clamped."""
    raw = os.environ.get("GENMEDIA_VERBOSITY", "").strip()
    try:
        return clamp_verbosity(int(raw))
    except ValueError:
        return 0


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the genmedia root (``core.poller`` -> ``genmedia.core.poller``)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "clamp_verbosity",
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "log_prompts",
    "set_verbosity",
]
