"""Configuration management using Pydantic Settings"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Remote loan service (also honours the mobile app's API_URL variable)
    loan_api_base: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("LOAN_API_BASE", "API_URL"),
    )

    # Service
    service_name: str = "emi-pay"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Presenter sessions
    session_header: str = "X-Session-ID"
    default_session_id: str = "default"
    max_sessions: int = 1000
    session_ttl_seconds: float = 1800.0


settings = Settings()
