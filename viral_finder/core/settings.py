"""Application settings and configuration management"""

import os
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment-specific .env file
environment = os.getenv('ENVIRONMENT', 'development')
env_file = f'.env.{environment}'
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    load_dotenv()  # Fallback to .env


class Settings(BaseSettings):
    """
    Application configuration settings using Pydantic Settings.

    Environment variables will automatically override default values.
    """

    # YouTube Data API Settings
    youtube_api_key: str = Field(
        default="",
        alias="YOUTUBE_API_KEY",
        description="YouTube Data API key, used when no key has been saved locally"
    )
    youtube_api_base_url: str = Field(
        default="https://www.googleapis.com/youtube/v3",
        alias="YOUTUBE_API_BASE_URL",
        description="Base URL of the YouTube Data API v3"
    )
    request_timeout: float = Field(
        default=30.0,
        alias="REQUEST_TIMEOUT",
        description="HTTP request timeout in seconds"
    )

    # Search defaults
    default_min_views: int = Field(
        default=10000,
        ge=0,
        alias="DEFAULT_MIN_VIEWS",
        description="Default minimum view count"
    )
    max_search_pages: int = Field(
        default=10,
        ge=1,
        le=10,
        alias="MAX_SEARCH_PAGES",
        description="Maximum number of search result pages per search (50 results each)"
    )
    shorts_max_duration_seconds: int = Field(
        default=120,
        ge=0,
        alias="SHORTS_MAX_DURATION_SECONDS",
        description="Videos at or below this duration are classified as shorts"
    )

    # Local state
    key_store_path: Optional[str] = Field(
        default=None,
        alias="KEY_STORE_PATH",
        description="Path of the JSON file holding the saved API key"
    )

    # Development Settings
    debug: bool = Field(
        default=False,
        description="Log at DEBUG level regardless of LOG_LEVEL"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_to_file: bool = Field(
        default=False,
        alias="LOG_TO_FILE",
        description="Also write rotating log files under logs/"
    )

    # Environment and Runtime Settings
    environment: str = Field(
        default="development",
        description="Runtime environment (development, staging, production)"
    )

    @field_validator('log_level')
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of {valid_levels}')
        return v.upper()

    @field_validator('environment')
    def validate_environment(cls, v):
        """Validate environment is recognized"""
        valid_envs = ['development', 'staging', 'production']
        if v not in valid_envs:
            raise ValueError(f'environment must be one of {valid_envs}')
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == 'development'

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == 'production'

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "",
        "extra": "ignore",
        "populate_by_name": True
    }


# Global settings instance
_settings = None


def get_settings() -> Settings:
    """
    Get application settings instance.

    Returns:
        Settings: Application configuration settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

def reload_settings() -> Settings:
    """
    Force reload of settings from environment variables.

    Returns:
        Settings: Fresh application configuration settings
    """
    global _settings
    _settings = None
    return get_settings()
