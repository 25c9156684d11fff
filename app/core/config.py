# app/core/config.py
from typing import List, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./data.db"

    # 세션 쿠키 (JWT)
    SESSION_SECRET: str = ""
    SESSION_ALG: str = "HS256"
    SESSION_COOKIE_NAME: str = "kanban_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24
    MFA_PENDING_TTL_SECONDS: int = 300
    MFA_ISSUER: str = "Kanban Board"

    # 관리자 승인
    ADMIN_APPROVAL_SECRET: str = ""
    ADMIN_EMAIL: str = "admin@example.com"

    APP_URL: str = "http://localhost:5173"
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # 메일은 안 쓰면 빈값
    FROM_EMAIL: str = "noreply@example.com"
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True

    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_TIMEOUT_SECONDS: float = 30.0

    RECAPTCHA_SECRET_KEY: str = ""

    EMAIL_TOKEN_EXPIRE_HOURS: int = 24
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60
    MAGIC_LINK_EXPIRE_MINUTES: int = 15

    # (max requests, window seconds)
    RATE_LIMIT_AUTH: Tuple[int, int] = (5, 15 * 60)
    RATE_LIMIT_EMAIL: Tuple[int, int] = (5, 60 * 60)
    RATE_LIMIT_OPENAI: Tuple[int, int] = (10, 60)
    RATE_LIMIT_SWEEP_SECONDS: int = 5 * 60

    REGISTER_MIN_DURATION_SECONDS: float = 0.5

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def approval_secret(self) -> str:
        return self.ADMIN_APPROVAL_SECRET or self.SESSION_SECRET


settings = Settings()
