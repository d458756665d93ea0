"""
Application configuration settings
"""

from pydantic_settings import BaseSettings
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Roof Tracker"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Public base URL used in customer links (e.g. https://status.example.com)
    APP_URL: str = "http://localhost:8000"

    # Company details shown in messages and documents
    COMPANY_NAME: str = "Euro Metal Roofing"
    COMPANY_PHONE: str = "613-297-8822"
    COMPANY_EMAIL: str = "info@eurometalroofing.ca"
    GOOGLE_REVIEW_URL: str = "https://maps.app.goo.gl/MwXB3nS5dTtNuyjX7"

    # Business time zone used when showing dates of stored UTC timestamps
    TIMEZONE: str = "America/Toronto"

    # Dispatcher authentication (shared password)
    ADMIN_PASSWORD: Optional[str] = None

    # Twilio SMS
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None
    TWILIO_API_URL: str = "https://api.twilio.com/2010-04-01"

    # File storage ("local" keeps files under LOCAL_STORAGE_PATH)
    FILE_STORE_BUCKET: str = "local"
    FILE_STORE_PREFIX: str = "jobs"
    LOCAL_STORAGE_PATH: str = "./storage"
    AWS_REGION: Optional[str] = None
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    FILE_LINK_EXPIRY_SECONDS: int = 3600

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # Database
    DATABASE_URL: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
