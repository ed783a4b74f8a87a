"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class TellerConfig(BaseSettings):
    """Teller banking demo configuration"""

    model_config = SettingsConfigDict(
        env_prefix="TELLER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Storage configuration
    storage_backend: str = "json"  # json or memory
    data_dir: str = "data"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    api_prefix: str = "/api"
    cors_origins: List[str] = ["*"]

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Request log (debugging aid for the frontend)
    request_log_enabled: bool = False
    request_log_size: int = 50

    # Business rules configuration
    account_number_attempts: int = 20


# Global configuration instance
config = TellerConfig()


def get_config() -> TellerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> TellerConfig:
    """Reload configuration from environment"""
    global config
    config = TellerConfig()
    return config
