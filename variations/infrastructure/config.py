"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Authentication
    admin_api_key: str = "dev-admin-key-change-in-production"
    customer_api_key: str | None = None

    # Store
    store_url: str = "http://localhost:8000"
    seed_demo_catalog: bool = False

    # Variations
    batch_limit: int = 100
    default_per_page: int = 10

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "VARIATIONS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
