# ==================================================================================
# core/config.py — Settings for both services (Identity + Project Management)
# ==================================================================================
from functools import lru_cache
from typing import List, Optional

from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ------------------------
    # DATABASE CONFIG
    # ------------------------
    DATABASE_URL: str = "sqlite:///./taskpilot.db"

    # ------------------------
    # SECURITY CONFIG
    # ------------------------
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ACTIVATION_TOKEN_EXPIRE_MINUTES: int = 15
    ACTIVATION_CODE_LENGTH: int = 6
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # ------------------------
    # SENDGRID EMAIL CONFIG
    # ------------------------
    SENDGRID_API_KEY: Optional[str] = None
    MAIL_FROM: Optional[EmailStr] = None

    # ------------------------
    # FRONTEND & IDENTITY SERVICE
    # ------------------------
    FRONTEND_URL: str = "http://localhost:5173"
    USER_AUTH_URL: str = "http://localhost:8080"
    USER_EXISTS_FALLBACK: str = "assume_exists"  # 'assume_exists' | 'strict'
    REMOTE_TIMEOUT_SECONDS: float = 10.0

    # ------------------------
    # AI TASK ASSISTANT (OpenAI-compatible endpoint)
    # ------------------------
    LLM_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai"
    LLM_COMPLETIONS_PATH: str = "/chat/completions"
    LLM_API_KEY: Optional[str] = None
    LLM_MODEL: str = "gemini-2.0-flash"

    # ------------------------
    # ENVIRONMENT SETTINGS
    # ------------------------
    ENVIRONMENT: str = "development"  # 'development' | 'production'
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    @property
    def IS_PRODUCTION(self) -> bool:
        """Convenience helper to check if running in production"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Settings provider; override in tests through FastAPI dependency_overrides."""
    return Settings()
