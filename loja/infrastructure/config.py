"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./loja.db"
    create_schema_on_startup: bool = True

    # Authentication
    secret_key: str = "dev-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_ttl_minutes: int = 120
    reseller_api_key: str = "dev-reseller-key-change-in-production"
    api_key_header: str = "X-API-Key"

    # Images
    image_storage_dir: str = "wwwroot/images"
    public_base_url: str = "https://localhost:7037"
    image_url_path: str = "/images"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
