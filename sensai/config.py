"""
Configuration management for SENSAI
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "SENSAI Career Coach"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_to_file: bool = True

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4

    # Database
    database_url: str = "sqlite:///./sensai.db"

    # LLM Configuration
    anthropic_api_key: Optional[str] = None
    llm_model: str = "claude-sonnet-4-20250514"
    enable_llm: bool = True
    llm_max_tokens: int = 4000

    # AI retry policy (seconds)
    ai_max_attempts: int = 5
    ai_initial_delay_seconds: float = 1.0
    ai_max_jitter_seconds: float = 1.2
    ai_quiz_max_jitter_seconds: float = 1.2

    # Industry insights
    insight_refresh_days: int = 7
    profile_transaction_timeout_seconds: float = 10.0

    # Scheduler
    enable_scheduler: bool = True
    insight_refresh_day_of_week: str = "sun"
    insight_refresh_hour: int = 0
    insight_refresh_minute: int = 0
    cron_timezone: str = "UTC"

    # Identity provider (upstream auth proxy headers)
    identity_user_id_header: str = "X-Auth-User-Id"
    identity_email_header: str = "X-Auth-User-Email"
    identity_name_header: str = "X-Auth-User-Name"
    identity_image_header: str = "X-Auth-User-Image"

    # Identity ids allowed to trigger jobs manually (JSON list in env)
    admin_user_ids: List[str] = []

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
