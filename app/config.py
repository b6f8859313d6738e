from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Conference
    conf_name: str = "Conference"

    # Database
    conf_db_url: str = "sqlite+aiosqlite:///data/conference.db"

    # Logging
    conf_log_level: str = "info"

    # CORS
    conf_cors_origins: str = "http://localhost:3000"

    # Activity feed
    conf_feed_default_limit: int = 20
    conf_feed_max_limit: int = 200
    conf_feed_batch_size: int = 0  # 0 = fetch `limit` rows per refill
    conf_feed_max_batch_size: int = 1000
    conf_feed_deadline_seconds: float = 0.0  # 0 = no deadline

    model_config = {"env_prefix": "", "case_sensitive": False, "env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
