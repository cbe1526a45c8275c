"""Configuration management for the tag compliance engine.

This module handles loading configuration from environment variables with
sensible defaults.
"""

from typing import Optional
from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.policy import DEFAULT_AWS_REGION, DEFAULT_BATCH_SIZE

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local use. They can be set via
    environment variables or a .env file.
    """

    policy_path: str = Field(
        default="policies/tag-compliance.yaml",
        description="Path to the tagging policy YAML file",
        validation_alias=AliasChoices("TAG_POLICY_PATH", "POLICY_PATH")
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="LOG_LEVEL"
    )
    default_region: str = Field(
        default=DEFAULT_AWS_REGION,
        description="Region used when a policy lists no specific regions",
        validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION")
    )
    default_batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        description="Batch size used when the policy sets none",
        validation_alias="DEFAULT_BATCH_SIZE",
        gt=0
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize the level name and reject names logging does not know."""
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level {value!r}. Must be one of {list(LOG_LEVELS)}")
        return level

    model_config = SettingsConfigDict(
        env_prefix="",  # No prefix for environment variables
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """
    Get application settings.

    Loads settings from environment variables and .env file.

    Returns:
        Settings instance with all configuration values
    """
    return Settings()


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def settings() -> Settings:
    """
    Get the global settings instance.

    Creates the settings instance on first call and caches it.

    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings
