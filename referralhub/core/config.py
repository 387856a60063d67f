"""
Application configuration management using Pydantic Settings
Handles all environment variables and application settings
"""

from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    """Main application settings"""

    # Application Settings
    APP_NAME: str = "ReferralHub API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    # Storage backend: "firebase" or "memory"
    STORAGE_BACKEND: str = "firebase"

    # Firebase Configuration
    FIREBASE_CREDENTIALS_JSON: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_WEB_API_KEY: Optional[str] = None
    FIREBASE_STORAGE_BUCKET: Optional[str] = None
    FIREBASE_AUTH_URL: str = "https://identitytoolkit.googleapis.com/v1"
    FIREBASE_AUTH_TIMEOUT: float = 10.0

    # Collections
    USERS_COLLECTION: str = "users"
    REFERRALS_COLLECTION: str = "referrals"
    REFERRAL_REQUESTS_COLLECTION: str = "referralRequests"
    REFERRAL_OFFERS_COLLECTION: str = "referralOffers"
    ANALYTICS_COLLECTION: str = "analyticsEvents"

    # File Upload Settings
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB
    ALLOWED_IMAGE_EXTENSIONS: List[str] = [".jpg", ".jpeg", ".png", ".webp"]
    PROFILE_IMAGE_FOLDER: str = "profile_images"

    # Business Logic Settings
    REFERRAL_CODE_PREFIX: str = "DEVGNAN"
    PAYMENT_SIMULATION_DELAY: float = 2.0
    PAYMENT_CURRENCY: str = "INR"
    DIRECTORY_LIMIT: int = 50
    ID_ALLOCATION_ATTEMPTS: int = 10

    # Analytics
    ANALYTICS_ENABLED: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def use_memory_backend(self) -> bool:
        return self.STORAGE_BACKEND.lower() == "memory"

@lru_cache()
def get_settings() -> Settings:
    """
    Create cached settings instance
    This ensures settings are loaded only once
    """
    return Settings()

# Global settings instance
settings = get_settings()
