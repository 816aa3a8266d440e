"""Config loader utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from .config_settings import Config
from .error_codes import ErrorCode
from .exceptions import ConfigurationError
from .utils.logging import get_logger

CONFIG_ENV_VAR = "SCRIPTURE_SYNC_CONFIG"

_config: Config | None = None


def _candidate_paths(config_path: Path | None) -> list[Path]:
    if config_path:
        return [config_path.expanduser()]
    candidates: list[Path] = []
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.append(Path.cwd() / "config.yaml")
    return candidates


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from environment, .env and an optional config.yaml.

    Values in config.yaml take precedence over environment variables.

    Raises:
        ConfigurationError: If the YAML file is malformed or validation fails
    """
    logger = get_logger(__name__)

    candidates = _candidate_paths(config_path)
    resolved_config_path = next((p for p in candidates if p.exists()), None)

    if config_path and resolved_config_path is None:
        msg = f"Config file not found: {config_path}"
        raise ConfigurationError(msg, error_code=ErrorCode.CFG_INVALID.value)

    yaml_data: dict[str, Any] = {}
    if resolved_config_path:
        logger.info("config_file_found", config_path=str(resolved_config_path))
        try:
            with open(resolved_config_path, encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            msg = f"Failed to parse config file: {resolved_config_path}"
            raise ConfigurationError(
                msg,
                suggestion=(
                    "Check YAML syntax (indentation, colons, quotes). "
                    f"Original error: {e}"
                ),
                error_code=ErrorCode.CFG_INVALID.value,
            ) from e
        if not isinstance(yaml_data, dict):
            msg = f"Config file must contain a mapping: {resolved_config_path}"
            raise ConfigurationError(msg, error_code=ErrorCode.CFG_INVALID.value)
    else:
        logger.debug(
            "config_file_not_found", searched_paths=[str(p) for p in candidates]
        )

    known_fields = set(Config.model_fields)
    unknown = sorted(set(yaml_data) - known_fields)
    if unknown:
        logger.warning("config_warning", unknown_keys=unknown)

    config_kwargs = {k: v for k, v in yaml_data.items() if k in known_fields}

    try:
        config = Config(**config_kwargs)
    except ValueError as e:
        # pydantic.ValidationError subclasses ValueError
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg, error_code=ErrorCode.CFG_INVALID.value) from e

    config.validate_config()
    logger.debug(
        "config_loaded",
        base_translation=config.base_translation,
        source_base_url=config.source_base_url,
        max_workers=config.max_workers,
    )
    return config


def get_config() -> Config:
    """Get singleton config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    """Set singleton config instance (for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset global config instance (for testing only)."""
    global _config
    _config = None


__all__ = ["Config", "get_config", "load_config", "reset_config", "set_config"]
