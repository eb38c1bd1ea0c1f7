"""
Configuration settings for the LLM resilience layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # === Application ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    
    # === Provider ===
    LLM_PROVIDER: str = "openai"
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com"
    OPENAI_MODEL: str = "gpt-4-turbo"
    OPENAI_TIMEOUT: int = 60  # seconds
    
    # === LLM Generation Parameters ===
    LLM_TEMPERATURE: float = 0.1
    LLM_MAX_TOKENS: Optional[int] = None  # Output reserve, falls back to 2048 when unset
    
    # === Retry ===
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_INITIAL_DELAY_MS: int = 1000
    RETRY_MAX_DELAY_MS: int = 30000
    RETRY_FACTOR: float = 2.0


# Global settings instance
settings = Settings()
