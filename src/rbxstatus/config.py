"""Configuration management using Pydantic Settings.

Loads configuration from multiple sources with the following priority (highest first):
1. Environment variables (RBXSTATUS_* prefix)
2. .env file
3. config.local.yaml (if exists)
4. config.yaml
5. Default values
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATUS_URL = "https://status.roblox.com/"
DEFAULT_USER_AGENT = "Roblox-Status-API/2.0"


class CorsSettings(BaseModel):
    """CORS configuration."""

    allowed_origins: list[str] = ["*"]
    allowed_methods: list[str] = ["GET", "OPTIONS"]
    allowed_headers: list[str] = ["Content-Type", "X-Request-ID"]
    allow_credentials: bool = False


class ServerSettings(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 3000
    workers: int = 1
    cors: CorsSettings = Field(default_factory=CorsSettings)


class CacheSettings(BaseModel):
    """Result cache configuration."""

    ttl_ms: int = Field(default=60000, ge=0, description="Cache entry lifetime in milliseconds")
    redis_enabled: bool = False
    redis_url: str | None = None
    single_flight: bool = Field(
        default=False,
        description="Share one upstream fetch between concurrent cache misses",
    )


class ScraperSettings(BaseModel):
    """Upstream status source configuration."""

    url: str = DEFAULT_STATUS_URL
    source_format: Literal["auto", "json", "html"] = "auto"
    timeout_ms: int = Field(default=10000, ge=100)
    retries: int = Field(default=3, ge=0, le=10)
    retry_delay_ms: int = Field(default=1000, ge=0)
    user_agent: str = DEFAULT_USER_AGENT


class RateLimitSettings(BaseModel):
    """Per-client request rate limiting."""

    enabled: bool = True
    window_ms: int = Field(default=60000, ge=1)
    max_requests: int = Field(default=100, ge=1)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


def _load_yaml_config(config_dir: Path) -> dict:
    """Load configuration from YAML files.

    Loads config.yaml and optionally overlays config.local.yaml.
    """
    config = {}

    config_file = config_dir / "config.yaml"
    if config_file.exists():
        with open(config_file) as f:
            config = yaml.safe_load(f) or {}

    local_config_file = config_dir / "config.local.yaml"
    if local_config_file.exists():
        with open(local_config_file) as f:
            local_config = yaml.safe_load(f) or {}
            config = _deep_merge(config, local_config)

    return config


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment, .env, and config files."""

    model_config = SettingsConfigDict(
        env_prefix="RBXSTATUS_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"
    server: ServerSettings = Field(default_factory=ServerSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    scraper: ScraperSettings = Field(default_factory=ScraperSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Conventional REDIS_URL wins over an unset cache.redis_url
    redis_url: str | None = Field(default=None, validation_alias="REDIS_URL")

    def __init__(self, config_dir: Path | None = None, **data):
        """Initialize settings, loading from YAML if config_dir provided."""
        if config_dir is not None:
            yaml_config = _load_yaml_config(config_dir)
            # Merge YAML config with any explicit data (explicit data wins)
            merged = _deep_merge(yaml_config, data)
            super().__init__(**merged)
        else:
            super().__init__(**data)

        if self.redis_url and not self.cache.redis_url:
            self.cache.redis_url = self.redis_url

    def validate_required(self) -> None:
        """Validate that required settings are present.

        Raises:
            ValueError: If required settings are missing.
        """
        if self.cache.redis_enabled and not self.cache.redis_url:
            raise ValueError(
                "REDIS_URL environment variable or cache.redis_url config is required "
                "when cache.redis_enabled is true"
            )


@lru_cache
def get_settings(config_dir: Path | None = None) -> Settings:
    """Get cached settings instance.

    Args:
        config_dir: Optional path to config directory. If None, only environment
                   variables and .env file are used.

    Returns:
        Settings instance.
    """
    if config_dir is None:
        # Try to find config directory relative to project root
        project_root = Path(__file__).parent.parent.parent
        default_config_dir = project_root / "config"
        if default_config_dir.exists():
            config_dir = default_config_dir

    return Settings(config_dir=config_dir)
