from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path

# Find .env file - check app/ directory first, then project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
APP_ENV = BASE_DIR / "app" / ".env"
ROOT_ENV = BASE_DIR / ".env"

# Use app/.env if it exists, otherwise try root .env
env_file = str(APP_ENV) if APP_ENV.exists() else (str(ROOT_ENV) if ROOT_ENV.exists() else ".env")


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str

    # JWT (shared secret of the hosted auth provider)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Program requirements
    MEALS_REQUIRED: int = 4
    MINUTES_REQUIRED: int = 720
    SHABBATON_DEFAULT_MEALS: int = 3
    SHABBATON_DEFAULT_MINUTES: int = 180
    PROGRAM_TIMEZONE: str = "America/New_York"

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    AUDIT_LOG_DIR: Optional[str] = None

    class Config:
        env_file = env_file
        case_sensitive = True


settings = Settings()

# Derived paths
LOGS_DIR = Path(settings.AUDIT_LOG_DIR) if settings.AUDIT_LOG_DIR else BASE_DIR / "logs"
