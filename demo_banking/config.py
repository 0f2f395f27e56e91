"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
Secrets have no usable defaults and must be supplied through the environment or a .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class DemoBankConfig(BaseSettings):
    """Demo banking ledger configuration"""
    
    # Storage configuration
    storage_backend: str = "json"  # json or memory
    data_dir: str = "data"
    
    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    
    # Security configuration
    jwt_secret: str = ""
    jwt_expiry_hours: int = 24
    jwt_algorithm: str = "HS256"
    password_min_length: int = 1
    
    # Operator credentials for the admin console
    admin_key: str = ""
    admin_email: str = ""
    admin_password: str = ""
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout
    
    # Business rules configuration
    card_support_message: str = "CONTACT SUPPORT TO COMPLETE DEPOSIT"
    block_banned_accounts: bool = True
    
    class Config:
        env_prefix = "DEMO_BANK_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = DemoBankConfig()


def get_config() -> DemoBankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> DemoBankConfig:
    """Reload configuration from environment"""
    global config
    config = DemoBankConfig()
    return config
