"""
Configuration settings for the Smart Contract Assistant.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development (see .env.example).
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
    APP_NAME: str = "Smart Contract Assistant"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # === Completion Provider (OpenAI-compatible) ===
    OPENAI_API_KEY: Optional[str] = None  # Missing key leaves the client provider in FAILED
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TOP_P: float = 0.95
    LLM_TEMPERATURE_BY_PHASE: dict[str, float] = {
        "phase1": 0.7,
        "phase2": 0.2,
        "summary": 0.3,
        "discussion": 0.7,
    }
    LLM_MAX_TOKENS_BY_PHASE: dict[str, int] = {
        "phase1": 500,
        "phase2": 1500,
        "summary": 1500,
        "discussion": 800,
    }

    # === Retry & Timeouts ===
    MAX_RETRIES: int = 3
    RETRY_BASE_DELAY_MS: int = 2000
    RETRY_JITTER_FRACTION: float = 0.2  # Additive jitter, fraction of computed delay
    RETRY_MAX_DELAY_MS: Optional[int] = 30000  # None disables the cap
    LLM_ATTEMPT_TIMEOUT_MS: int = 60000  # Per raw call
    CHAT_REQUEST_TIMEOUT_MS: int = 180000  # Whole /api/chat request
    CODEGEN_TIMEOUT_MS: int = 30000

    # === Sessions ===
    SESSION_BACKEND: str = "memory"  # "memory" or "redis"
    SESSION_IDLE_TIMEOUT_SECONDS: int = 86400  # 24 hours
    SESSION_SWEEP_INTERVAL_SECONDS: int = 3600  # 1 hour
    SESSION_MAX_HISTORY: int = 40  # Conversation turns sent to the provider
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50

    # === Contracts ===
    DEFAULT_CONTRACT_LANGUAGE: str = "solidity"

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
