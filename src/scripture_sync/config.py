"""Configuration entrypoint (re-exported from split modules)."""

from .config_loader import get_config, load_config, reset_config, set_config
from .config_models import RateLimitConfig, RetryConfig
from .config_settings import DEFAULT_MIN_TEXT_LENGTH, Config

__all__ = [
    "DEFAULT_MIN_TEXT_LENGTH",
    "Config",
    "RateLimitConfig",
    "RetryConfig",
    "get_config",
    "load_config",
    "reset_config",
    "set_config",
]
