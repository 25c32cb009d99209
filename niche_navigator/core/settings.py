"""Application settings and configuration management"""

import os
from typing import Dict
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


NICHE_NAMES = ['Entertainment', 'Sports', 'Business', 'AI', 'Science']


class Settings(BaseSettings):
    """
    Application configuration settings using Pydantic Settings.

    Environment variables will automatically override default values.
    """

    # YouTube Data API Settings
    youtube_api_key: str = Field(
        default="",
        alias="YOUTUBE_API_KEY",
        description="YouTube Data API key from Google Cloud Console"
    )
    youtube_api_base_url: str = Field(
        default="https://www.googleapis.com/youtube/v3",
        alias="YOUTUBE_API_BASE_URL",
        description="Base URL of the YouTube Data API"
    )
    suggest_api_url: str = Field(
        default="https://suggestqueries.google.com/complete/search",
        alias="SUGGEST_API_URL",
        description="Unofficial autocomplete endpoint used for search suggestions"
    )
    avatar_base_url: str = Field(
        default="https://api.dicebear.com/7.x/avataaars/svg",
        alias="AVATAR_BASE_URL",
        description="Generated avatar service, seeded by channel name"
    )
    request_timeout: float = Field(
        default=30.0,
        alias="REQUEST_TIMEOUT",
        description="HTTP timeout in seconds for outbound requests"
    )
    max_daily_quota: int = Field(
        default=8000,
        alias="MAX_DAILY_QUOTA",
        description="Maximum YouTube API quota to use per session"
    )

    # Discovery Settings
    default_niche: str = Field(
        default="Entertainment",
        alias="DEFAULT_NICHE",
        description="Niche used when a category cannot be mapped"
    )
    search_page_size: int = Field(
        default=20,
        alias="SEARCH_PAGE_SIZE",
        description="Results per page for query searches and load-more"
    )
    discovery_per_niche: int = Field(
        default=5,
        alias="DISCOVERY_PER_NICHE",
        description="Videos fetched per niche for the discovery feed"
    )
    analytics_per_niche: int = Field(
        default=10,
        alias="ANALYTICS_PER_NICHE",
        description="Videos fetched per niche for analytics"
    )
    analytics_top_n: int = Field(
        default=5,
        alias="ANALYTICS_TOP_N",
        description="Length of each analytics ranking"
    )
    ideas_per_niche: int = Field(
        default=5,
        alias="IDEAS_PER_NICHE",
        description="Inspiration videos fetched per generated idea"
    )

    # Category mapping policy (YouTube category id <-> niche)
    category_niche_map: Dict[str, str] = Field(
        default={
            "17": "Sports",
            "20": "Entertainment",
            "24": "Entertainment",
            "28": "Science",
            "22": "AI",
            "27": "AI",
            "19": "Business",
            "25": "Business",
        },
        alias="CATEGORY_NICHE_MAP",
        description="YouTube category id to niche lookup (JSON object)"
    )
    niche_category_map: Dict[str, str] = Field(
        default={
            "Sports": "17",
            "Entertainment": "24",
            "Science": "28",
            "AI": "27",
            "Business": "25",
        },
        alias="NICHE_CATEGORY_MAP",
        description="Niche to YouTube search category id (JSON object)"
    )

    # Development Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    environment: str = Field(
        default="development",
        description="Runtime environment (development, staging, production)"
    )
    log_dir: str = Field(
        default="logs",
        alias="LOG_DIR",
        description="Directory for rotating log files (empty disables file logging)"
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

    @field_validator('default_niche')
    def validate_default_niche(cls, v):
        if v not in NICHE_NAMES:
            raise ValueError(f'default_niche must be one of {NICHE_NAMES}')
        return v

    @field_validator('category_niche_map')
    def validate_category_niche_map(cls, v):
        """Every mapped category must land on a known niche"""
        unknown = sorted(set(v.values()) - set(NICHE_NAMES))
        if unknown:
            raise ValueError(f'category_niche_map has unknown niches: {unknown}')
        return v

    @field_validator('niche_category_map')
    def validate_niche_category_map(cls, v):
        unknown = sorted(set(v.keys()) - set(NICHE_NAMES))
        if unknown:
            raise ValueError(f'niche_category_map has unknown niches: {unknown}')
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
