"""
Configuration for localhost_ca.

Settings are loaded with pydantic-settings from:
1. .env file
2. Environment variables prefixed with LOCALHOST_ (have priority)
3. Default values

The state directory is deliberately not part of these settings:
``State.path`` receives the environment mapping explicitly.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Tool configuration.

    Example:
        # In .env or as environment variable:
        LOCALHOST_LOG_LEVEL=DEBUG
        LOCALHOST_USE_SUDO=false
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCALHOST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================================================
    # LOGGING SETTINGS
    # ============================================================================
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",  # noqa: E501
        description="Log format",
    )
    logger_enqueue: bool = Field(
        default=False, description="Enqueue logs using multiprocessing"
    )

    # ============================================================================
    # CERTIFICATE DEFAULTS
    # ============================================================================
    issuer_name: str = Field(
        default="development", description="Common name of the default issuer"
    )
    hostname: str = Field(
        default="localhost", description="Hostname used when none is given"
    )

    # ============================================================================
    # TRUST STORE INSTALLATION
    # ============================================================================
    use_sudo: bool = Field(
        default=True,
        description="Prefix trust store commands with sudo",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get tool settings (LRU cached).

    To refresh the configuration, clear the cache:
        get_settings.cache_clear()

    Returns:
        Settings: Configuration instance.
    """
    return Settings()
