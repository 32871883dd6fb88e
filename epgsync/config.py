import logging
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from epgsync.utils.http_client import DEFAULT_USER_AGENT


logger = logging.getLogger(__name__)


class EPGSyncSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    log_level: str = "INFO"
    enabled_providers: Annotated[list[str], NoDecode] = ["hebei"]
    http_timeout_sec: float = 15.0  # Per-fetch timeout
    http_max_attempts: int = 1
    http_backoff_factor: float = 2.0
    batch_max_concurrency: int = 4
    batch_timeout_sec: float = 0  # 0 disables the batch deadline
    user_agent: str = DEFAULT_USER_AGENT

    hebei_base_url: str = "https://api.cmc.hebtv.com"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("enabled_providers", mode="before")
    @classmethod
    def parse_enabled_providers(cls, value):
        """Parse comma-separated provider names or list."""
        if value is None:
            return []
        if isinstance(value, str):
            return [name.strip().lower() for name in value.split(",") if name.strip()]
        if isinstance(value, list):
            return [str(name).strip().lower() for name in value if str(name).strip()]
        return []

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @field_validator("hebei_base_url")
    @classmethod
    def validate_base_urls(cls, value: str) -> str:
        """Validate provider base URLs are HTTP/HTTPS."""
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"Provider base URL must be HTTP/HTTPS: {value}")
        return value.rstrip("/")

    @field_validator("http_timeout_sec", "http_backoff_factor")
    @classmethod
    def validate_positive_floats(cls, value: float, info) -> float:
        """Ensure floating-point HTTP settings are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("http_max_attempts", "batch_max_concurrency")
    @classmethod
    def validate_positive_ints(cls, value: int, info) -> int:
        """Ensure integer settings are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("batch_timeout_sec")
    @classmethod
    def validate_batch_timeout(cls, value: float) -> float:
        """Validate batch deadline (seconds)."""
        if value < 0:
            raise ValueError("batch_timeout_sec must be >= 0")
        return value

    @model_validator(mode="after")
    def validate_provider_configuration(self):
        """Validate cross-field configuration."""
        if not self.enabled_providers:
            logger.warning(
                "No providers enabled - EPG fetch will not retrieve any data"
            )

        if self.batch_timeout_sec and self.batch_timeout_sec < self.http_timeout_sec:
            logger.warning(
                "batch_timeout_sec (%ss) is shorter than http_timeout_sec (%ss)",
                self.batch_timeout_sec,
                self.http_timeout_sec,
            )

        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Enabled Providers: %s", ", ".join(self.enabled_providers or []) or "none")
        logger.info("  HTTP Timeout: %ss", self.http_timeout_sec)
        logger.info(
            "  HTTP Attempts: %s (backoff factor %.1f)",
            self.http_max_attempts,
            self.http_backoff_factor,
        )
        logger.info("  Batch Concurrency: %s", self.batch_max_concurrency)
        logger.info(
            "  Batch Timeout: %s",
            f"{self.batch_timeout_sec}s" if self.batch_timeout_sec else "disabled",
        )

    def batch_timeout(self) -> float | None:
        return self.batch_timeout_sec or None


settings = EPGSyncSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
