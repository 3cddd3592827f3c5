"""Application configuration"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./pricetrack.db"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30
    RATE_LIMIT_PER_HOUR: int = 200

    # Demo catalog on an empty database
    SEED_DEMO_DATA: bool = True

    # Price feed window
    FEED_DEFAULT_LIMIT: int = 120
    FEED_MIN_LIMIT: int = 20
    FEED_MAX_LIMIT: int = 300

    class Config:
        env_file = ".env"


settings = Settings()
