from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_MAX_AGE_SECONDS: int = 600
    CATALOG_PAGE_SIZE: int = 5
    PLACEHOLDER_IMAGE: str = "/images/placeholder.jpg"
    ADMIN_TOKEN: str = "change-this-admin-token"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
