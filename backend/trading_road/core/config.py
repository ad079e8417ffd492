from typing import List, Union
import logging

from pydantic import AnyHttpUrl, Field, validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    PROJECT_NAME: str = "Siargao Trading Road"
    API_PREFIX: str = "/api"
    # Must be overridden through .env or the environment outside development
    SECRET_KEY: str = Field(
        default="change-this-secret",
        description="JWT signing key"
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8081",
    ]

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    DATABASE_URL: str = "sqlite:///./trading_road.db"

    # Business rules
    BUSINESS_UTC_OFFSET_HOURS: int = 8  # Asia/Manila
    MINIMUM_ORDER_AMOUNT: float = 5000.0
    MESSAGING_WINDOW_HOURS: int = 12
    MESSAGE_MAX_LENGTH: int = 5000

    # Request audit trail
    AUDIT_LOG_ENABLED: bool = True
    AUDIT_LOG_BODY_LIMIT: int = 10000
    AUDIT_LOG_RETENTION_DAYS: int = 90  # 0 keeps logs forever

    # Daily housekeeping job
    HOUSEKEEPING_ENABLED: bool = True
    HOUSEKEEPING_HOUR: int = 3
    HOUSEKEEPING_MINUTE: int = 0

    # Seeded on first start when no admin exists
    FIRST_ADMIN_EMAIL: str = "admin@siargaotradingroad.com"
    FIRST_ADMIN_PASSWORD: str = "admin123"
    FIRST_ADMIN_NAME: str = "Platform Admin"

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL.startswith("sqlite:///"):
            return self.DATABASE_URL.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return self.DATABASE_URL

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
logger.info(f"Loaded settings: API_PREFIX={settings.API_PREFIX}, CORS={settings.BACKEND_CORS_ORIGINS}")
