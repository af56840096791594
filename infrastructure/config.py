"""Application settings read from the environment"""
import os


class Settings:
    APP_NAME = os.getenv("APP_NAME", "Travel Booking API")
    # "development" exposes error details in 500 responses
    APP_ENV = os.getenv("APP_ENV", "production")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Auth tokens
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

    # Listing
    DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "10"))
    ADMIN_PAGE_LIMIT = int(os.getenv("ADMIN_PAGE_LIMIT", "20"))
    MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))

    # Booking references
    REFERENCE_PREFIX = os.getenv("REFERENCE_PREFIX", "YTR")
    REFERENCE_MAX_ATTEMPTS = int(os.getenv("REFERENCE_MAX_ATTEMPTS", "5"))

    @property
    def debug(self) -> bool:
        return self.APP_ENV.lower() == "development"


settings = Settings()
