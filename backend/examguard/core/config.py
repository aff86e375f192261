import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Application
    port: int = 8000
    environment: str = "development"

    # Database
    postgres_user: str = os.getenv("POSTGRES_USER", "user")
    postgres_password: str = os.getenv("POSTGRES_PASSWORD", "password")
    postgres_db: str = os.getenv("POSTGRES_DB", "examguard_db")
    postgres_host: str = os.getenv("POSTGRES_HOST", "db")
    postgres_port: int = 5432
    database_url_override: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    # Bearer tokens
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 120

    # CORS
    cors_origins_str: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins_str.split(",")]

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    cache_enabled: bool = True
    cache_default_ttl: int = 600

    slow_request_threshold: float = 1.0

    # Timezone used for display headers; storage is always UTC
    default_timezone: str = "Asia/Kolkata"

    # Session store
    store_read_retries: int = 3
    store_retry_delay: float = 0.2

    # Clients re-read their session this often while awaiting a decision
    approval_poll_interval_seconds: int = 5

    # Session policy
    allow_submit_while_locked: bool = True
    violation_reopens_blocked: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
