"""Backend settings."""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Service
    service_name: str = "foi-portal-backend"
    debug: bool = False

    # Supabase project (auth + edge functions)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""

    # Upload edge function
    upload_function_path: str = "/functions/v1/upload-image"
    upload_bucket: str = "foi-attachments"

    http_timeout_seconds: float = 10.0

    # Stamped on audit entries when the caller sends no User-Agent
    default_user_agent: str = "foi-portal-backend"

    # Audit trail drain
    audit_queue_size: int = 1000
    audit_max_attempts: int = 3
    audit_retry_delay_seconds: float = 0.5

    # Activity log listing limits
    own_logs_limit: int = 100
    all_logs_limit: int = 200

    allowed_origins: List[str] = [
        *[f"http://localhost:{port}" for port in range(3000, 3007)],
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
