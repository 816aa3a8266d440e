"""Settings model for scripture-sync."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config_models import RateLimitConfig, RetryConfig
from .error_codes import ErrorCode
from .exceptions import ConfigurationError
from .translations import BASE_TRANSLATION, default_overlay_codes

# Stripped text at or below this many characters counts as "not populated".
# Placeholder and near-empty text cannot be told apart from a missing fetch.
DEFAULT_MIN_TEXT_LENGTH = 5


class Config(BaseSettings):
    """Service configuration using pydantic-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Store
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017/jevah-app",
        description="MongoDB connection string",
    )
    mongodb_database: str | None = Field(
        default=None,
        description="Database name (defaults to the one named in the URI)",
    )
    mongodb_server_selection_timeout_ms: int = Field(default=5000, ge=100)

    # Remote source
    source_base_url: str = Field(
        default="https://bible-api.com", description="Verse text provider base URL"
    )
    source_user_agent: str = Field(default="Jevah-Bible-App/1.0")
    source_timeout: float = Field(
        default=15.0, gt=0.0, description="Request timeout in seconds"
    )

    retry: RetryConfig = Field(default_factory=RetryConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)

    # Reconciliation
    base_translation: str = Field(default=BASE_TRANSLATION)
    overlay_translations: list[str] = Field(
        default_factory=default_overlay_codes,
        description="Overlay codes built by reconcile --overlays (default: served non-base codes)",
    )
    min_text_length: int = Field(default=DEFAULT_MIN_TEXT_LENGTH, ge=0)
    max_workers: int = Field(
        default=1, description="Cells processed concurrently (shared rate limiter)"
    )

    # Coverage
    coverage_alert_threshold: float = Field(default=0.8, ge=0.0, le=1.0)

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_dir: Path = Field(default=Path("logs"))

    @model_validator(mode="before")
    @classmethod
    def default_overlays_from_base(cls, data: Any) -> Any:
        """Derive the overlay default from the configured base, not the built-in one."""
        if isinstance(data, dict) and data.get("overlay_translations") is None:
            base = str(data.get("base_translation") or BASE_TRANSLATION).strip()
            data = {**data, "overlay_translations": default_overlay_codes(base)}
        return data

    @field_validator("base_translation", mode="before")
    @classmethod
    def upper_base(cls, v: Any) -> str:
        return str(v or "").strip().upper()

    @field_validator("overlay_translations", mode="before")
    @classmethod
    def parse_overlay_translations(cls, v: Any) -> list[str]:
        """Accept a comma-separated string or a list of codes."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, (list, tuple)):
            return [str(code).strip().upper() for code in v if str(code).strip()]
        msg = f"overlay_translations must be string or list, got {type(v).__name__}"
        raise ValueError(msg)

    @field_validator("log_dir", mode="before")
    @classmethod
    def parse_path(cls, v: Any) -> Path:
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v
        msg = f"Path field must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)

    def validate_config(self) -> Config:
        """Check cross-field rules that pydantic constraints cannot express.

        Raises:
            ConfigurationError: If a value is unusable
        """
        code = ErrorCode.CFG_INVALID.value

        if not self.base_translation:
            msg = "base_translation cannot be empty"
            raise ConfigurationError(
                msg, suggestion="Set base_translation, e.g. WEB", error_code=code
            )

        if self.base_translation in self.overlay_translations:
            msg = (
                f"Base translation {self.base_translation} cannot also be an "
                "overlay translation"
            )
            raise ConfigurationError(
                msg,
                suggestion="Remove the base code from overlay_translations",
                error_code=code,
            )

        if not 1 <= self.max_workers <= 32:
            msg = f"max_workers must be 1-32: {self.max_workers}"
            raise ConfigurationError(
                msg, suggestion="Set max_workers between 1 and 32.", error_code=code
            )

        if not self.source_base_url.startswith(("http://", "https://")):
            msg = f"Invalid source_base_url: {self.source_base_url}"
            raise ConfigurationError(
                msg,
                suggestion="Use an http:// or https:// URL for source_base_url",
                error_code=code,
            )

        if not self.mongodb_uri.startswith(("mongodb://", "mongodb+srv://")):
            msg = "mongodb_uri must start with mongodb:// or mongodb+srv://"
            raise ConfigurationError(
                msg, suggestion="Set MONGODB_URI to a MongoDB URI", error_code=code
            )

        return self

    def get_log_dir(self) -> Path:
        """Get absolute path to log directory."""
        if self.log_dir.is_absolute():
            return self.log_dir
        return (Path.cwd() / self.log_dir).resolve()


__all__ = ["DEFAULT_MIN_TEXT_LENGTH", "Config"]
