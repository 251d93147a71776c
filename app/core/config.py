import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    APP_NAME: str = "Scan Inventory"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    MONGODB_URL: str
    DATABASE_NAME: str

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Web product lookup
    WEB_LOOKUP_URL: str = "http://localhost:3000/api"
    WEB_LOOKUP_TIMEOUT: float = 10.0

    # Scan history
    HISTORY_DIR: str = ".history"
    HISTORY_MAX_ENTRIES: int = 50

    # Batch resolution
    BATCH_MAX_BARCODES: int = 100
    BATCH_CONCURRENCY: int = 5

    # Change feed (requires a replica set)
    CHANGE_FEED_ENABLED: bool = False

    # Email
    MAIL_USERNAME: str | None = None
    MAIL_PASSWORD: str | None = None
    MAIL_FROM: str | None = None
    MAIL_PORT: int = 587
    MAIL_SERVER: str | None = None
    STOCK_ALERT_EMAIL: str | None = None

    # Admin
    ADMIN_EMAIL: str | None = None
    ADMIN_PASSWORD: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()


def setup_logging():
    """Configure logging once for the whole process."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
