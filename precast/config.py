"""
Configuration management for the BWL Precast catalog backend
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "BWL Precast Construction"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database (record store)
    DATABASE_URL: str = "sqlite:///./precast.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 5

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:8080", "http://127.0.0.1:5173"]

    # Object storage
    STORAGE_BACKEND: str = "local"  # "local" or "supabase"
    STORAGE_BUCKET: str = "images"
    UPLOAD_DIR: str = "uploads"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""
    STORAGE_TIMEOUT_SECONDS: float = 30.0
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10 MB

    # Landing page
    FEATURED_PRODUCT_COUNT: int = 3
    WHATSAPP_NUMBER: str = "254799994758"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
