"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "https://adaptiveedge.uk",
    ]

    # Database (SQLAlchemy async URL)
    database_url: str = "sqlite+aiosqlite:///./cms.db"
    create_tables_on_startup: bool = True

    # Uploaded images live under {public_dir}/blog-images and
    # {public_dir}/case-study-images
    public_dir: str = "public"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Admin session (protects every mutating endpoint)
    admin_password: str = ""
    session_secret: str = ""
    session_ttl_minutes: int = 720

    # Transactional email (contact form)
    email_api_url: str = "https://api.resend.com/emails"
    email_api_key: str = ""
    email_from: str = "Adaptive Edge <noreply@adaptiveedge.uk>"
    notification_email: str = "hello@adaptiveedge.uk"

    # Contact form submissions allowed per client IP per hour
    contact_rate_limit: int = 5

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
