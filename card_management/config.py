"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import List


class CardAppConfig(BaseSettings):
    """Card management service configuration"""

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_allow_origins: List[str] = ["*"]

    # Session configuration
    token_expiry_hours: int = 24  # Recorded on login, not enforced on resolve

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Demo data
    seed_demo_data: bool = True

    # Card issuance
    virtual_card_prefix: str = "4532"
    addon_delivery_days: int = 14

    # Transaction listing
    default_page: int = 1
    default_page_size: int = 20

    class Config:
        env_prefix = "CARDAPP_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = CardAppConfig()


def get_config() -> CardAppConfig:
    """Get global configuration instance"""
    return config
