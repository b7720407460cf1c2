# app/core/config.py
from typing import List, Optional
from pydantic import AnyUrl
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    SECRET_KEY: str = "change-me"  # override in .env / secrets
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    LOG_LEVEL: str = "INFO"

    # MongoDB (portfolio documents)
    MONGODB_URI: str = "mongodb://localhost:27017/experfolio"
    MONGODB_DB: str = "experfolio"
    PORTFOLIO_COLLECTION: str = "portfolios"

    # Relational store (job seeker profiles)
    DATABASE_URL: str = "sqlite:///./experfolio.db"

    # S3 / R2
    S3_BUCKET: Optional[str] = None
    S3_ENDPOINT: Optional[AnyUrl] = None
    S3_REGION: Optional[str] = None
    S3_ACCESS_KEY: Optional[str] = None
    S3_SECRET_KEY: Optional[str] = None
    # public base url of the bucket, used to build attachment links
    S3_PUBLIC_URL: Optional[str] = None

    # Upload limits, enforced by the HTTP layer
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    ALLOWED_UPLOAD_EXTENSIONS: List[str] = [
        "jpg", "jpeg", "png", "gif", "pdf", "doc", "docx", "txt", "hwp",
    ]

    # AI search server
    AI_SERVER_URL: str = "http://localhost:8001"
    AI_SEARCH_ENDPOINT: str = "/ai/search"
    AI_TIMEOUT_SEC: float = 30.0

    # Redis stream used to wake the embedding worker
    REDIS_URL: str = "redis://localhost:6379/0"
    EMBEDDING_NOTIFY_ENABLED: bool = False

    # Pydantic v2 settings: read from .env file
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

# single shared settings instance
settings = Settings()
