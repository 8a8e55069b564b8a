import os
import secrets
from typing import List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    API_PREFIX: str = "/api"
    SECRET_KEY: str = os.getenv("SECRET_KEY", secrets.token_hex(32))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        return []

    # Project Information
    PROJECT_NAME: str = "Driver's License Portal"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Public base URL embedded in QR verification links
    APP_URL: str = "http://localhost:3000"

    # Database
    DATABASE_URL: str = "sqlite:///./license_portal.db"

    # Uploaded documents and photos
    STORAGE_DIR: str = "storage"

    # OTP
    OTP_EXPIRE_MINUTES: int = 10
    OTP_MAX_ATTEMPTS: int = 3
    PERMISSIVE_OTP: bool = False
    EXPOSE_OTP_IN_RESPONSE: bool = False

    # Login lockout
    LOGIN_MAX_FAILED_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_MINUTES: int = 15

    # Mail
    MAIL_ENABLED: bool = False
    MAIL_HOST: str = "localhost"
    MAIL_PORT: int = 587
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_ENCRYPTION: str = "tls"
    MAIL_FROM_ADDRESS: str = "noreply@license-portal.local"
    MAIL_FROM_NAME: str = "Driver's License Portal"
    EMAIL_BATCH_DELAY_SECONDS: float = 1.0

    # Mock payment processors sleep to imitate provider latency
    SIMULATE_PAYMENT_LATENCY: bool = True

    # Pickup confirmation retries
    PICKUP_RETRY_ATTEMPTS: int = 3
    PICKUP_RETRY_BASE_DELAY_MS: int = 1000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
