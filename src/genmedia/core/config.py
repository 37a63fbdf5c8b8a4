"""
Configuration management for genmedia.

This module holds the provider configuration (model, API key, base URL) and
the timeouts used by the transport and the poller.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

# Default provider endpoints
DEFAULT_ZHIPU_BASE_URL = "https://open.bigmodel.cn/api/paas/v4"
DEFAULT_MODELSCOPE_BASE_URL = "https://api-inference.modelscope.cn/v1"
DEFAULT_MODELSCOPE_API_BASE_URL = "https://api-inference.modelscope.cn/api/v1"
DEFAULT_MODELSCOPE_INFERENCE_BASE_URL = "https://inference.modelscope.cn/api/v1"

# Timeouts (seconds)
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_GENERATION_TIMEOUT = 120
DEFAULT_SUBMIT_TIMEOUT = 60
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_POLL_TIMEOUT = 600.0


@dataclass
class Config:
    """Provider configuration for a single adapter call."""

    model_id: str = ""
    # Excluded from repr to avoid leaking secrets
    api_key: str = field(default="", repr=False)
    base_url: str | None = None

    # Timeout Configuration (seconds)
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT  # chat calls and task queries
    generation_timeout: int = DEFAULT_GENERATION_TIMEOUT  # synchronous image generation
    submit_timeout: int = DEFAULT_SUBMIT_TIMEOUT  # video task submission
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: float = DEFAULT_POLL_TIMEOUT

    # Absolute URL of the frame extraction service; needed to analyse a local video file
    frame_extractor_url: str | None = None

    # Debug: log raw API payload/response with image data truncated
    debug_api: bool = False

    _validated: bool = field(default=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            GENMEDIA_MODEL: Model identifier used for routing
            GENMEDIA_API_KEY: Provider API key (a leading "Bearer " is tolerated)
            GENMEDIA_BASE_URL: Optional base URL; required for OpenAI-compatible models
            GENMEDIA_REQUEST_TIMEOUT / GENMEDIA_GENERATION_TIMEOUT / GENMEDIA_SUBMIT_TIMEOUT
            GENMEDIA_POLL_INTERVAL / GENMEDIA_POLL_TIMEOUT
            GENMEDIA_FRAME_EXTRACTOR_URL: Frame extraction endpoint
            GENMEDIA_DEBUG_API: 1/true/yes to log truncated payloads

        Returns:
            Config instance populated from environment
        """

        def _int_env(name: str, default: int) -> int:
            val = os.getenv(name)
            if val is None or val == "":
                return default
            return int(val)

        def _float_env(name: str, default: float) -> float:
            val = os.getenv(name)
            if val is None or val == "":
                return default
            return float(val)

        debug_api = os.getenv("GENMEDIA_DEBUG_API", "").strip().lower() in ("1", "true", "yes")

        return cls(
            model_id=os.getenv("GENMEDIA_MODEL", ""),
            api_key=os.getenv("GENMEDIA_API_KEY", ""),
            base_url=os.getenv("GENMEDIA_BASE_URL") or None,
            request_timeout=_int_env("GENMEDIA_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            generation_timeout=_int_env("GENMEDIA_GENERATION_TIMEOUT", DEFAULT_GENERATION_TIMEOUT),
            submit_timeout=_int_env("GENMEDIA_SUBMIT_TIMEOUT", DEFAULT_SUBMIT_TIMEOUT),
            poll_interval=_float_env("GENMEDIA_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            poll_timeout=_float_env("GENMEDIA_POLL_TIMEOUT", DEFAULT_POLL_TIMEOUT),
            frame_extractor_url=os.getenv("GENMEDIA_FRAME_EXTRACTOR_URL") or None,
            debug_api=debug_api,
        )

    def validate(self) -> None:
        """
        Validate the configuration.

        Base URL presence is checked by the dispatcher, since only the
        OpenAI-compatible path requires it.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger.debug("Validating config")

        if not self.model_id or not self.model_id.strip():
            raise ConfigurationError(
                "Model is required. Set GENMEDIA_MODEL or provide it explicitly."
            )
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError(
                "API key is required. Set GENMEDIA_API_KEY or provide it explicitly."
            )
        if self.poll_interval < 0:
            raise ConfigurationError(
                f"poll_interval must not be negative, got {self.poll_interval}."
            )
        if self.poll_timeout <= 0:
            raise ConfigurationError(f"poll_timeout must be positive, got {self.poll_timeout}.")

        self._validated = True

    def is_valid(self) -> bool:
        """Return True if validate() has been called successfully."""
        return self._validated

    def set_api_key(self, api_key: str) -> None:
        """
        Set the API key.

        Raises:
            ConfigurationError: If API key is empty
        """
        if not api_key:
            raise ConfigurationError("API key cannot be empty")
        self.api_key = api_key
        self._validated = False

    def set_model(self, model_id: str) -> None:
        """
        Set the model identifier.

        Raises:
            ConfigurationError: If model is empty
        """
        if not model_id:
            raise ConfigurationError("Model ID cannot be empty")
        self.model_id = model_id
        self._validated = False


# Global configuration instance
_global_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance, creating it from the environment on first use."""
    global _global_config
    if _global_config is None:
        _global_config = Config.from_env()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config
