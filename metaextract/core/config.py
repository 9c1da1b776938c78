"""
Meta Extract Configuration
Load settings from environment variables
"""
from functools import lru_cache
from typing import Optional, List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ============================================
    # Application Settings
    # ============================================
    APP_NAME: str = "Meta Extract"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # ============================================
    # Database Settings
    # ============================================
    POSTGRES_USER: str = "postgres"
    POSTGRES_PWD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "metaextract"
    DATABASE_URL: Optional[str] = None

    @property
    def database_url(self) -> str:
        """Get database URL, construct from parts if not provided"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+psycopg://{self.POSTGRES_USER}:{self.POSTGRES_PWD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # ============================================
    # CORS Settings
    # ============================================
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # ============================================
    # Facebook/Meta API Settings
    # ============================================
    FACEBOOK_ACCESS_TOKEN: Optional[str] = None
    FACEBOOK_API_VERSION: str = "v19.0"
    FACEBOOK_API_BASE_URL: str = "https://graph.facebook.com"
    FACEBOOK_HTTP_TIMEOUT: float = 30.0

    @property
    def facebook_api_url(self) -> str:
        return f"{self.FACEBOOK_API_BASE_URL}/{self.FACEBOOK_API_VERSION}"

    # ============================================
    # Extraction Settings
    # ============================================
    EXTRACTION_REQUEST_DELAY_SECONDS: float = 0.5
    EXTRACTION_MAX_RETRIES: int = 3
    EXTRACTION_RETRY_DELAY_SECONDS: float = 2.0
    # Graph API throttling codes (app, user, account level)
    EXTRACTION_RATE_LIMIT_CODES: List[int] = [4, 17, 32, 613]
    EXTRACTION_MAX_BREAKDOWNS: int = 2
    # Insights history is capped at 37 months upstream
    EXTRACTION_LIFETIME_MONTHS: int = 36
    EXTRACTION_PREVIEW_ROWS: int = 20

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from .env


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
