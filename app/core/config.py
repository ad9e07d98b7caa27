"""
Application configuration management
"""
from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Gemini
    GEMINI_API_KEY: Optional[str] = None

    # Supabase
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None

    # Pexels (stock photos for generated recipes)
    PEXELS_API_KEY: Optional[str] = None
    PEXELS_API_URL: str = "https://api.pexels.com/v1/search"

    # Sentry
    SENTRY_DSN: Optional[str] = None

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "ChefMind API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True

    # CORS
    CORS_ORIGINS: str = "*"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Uvicorn Workers (0 = auto-calculate based on CPU cores)
    UVICORN_WORKERS: int = 0

    # Logging
    LOG_LEVEL: str = "INFO"

    # Models
    MODEL_STANDARD: str = "gemini-2.0-flash-exp"
    MODEL_EXECUTIVE: str = "gemini-2.5-flash"
    MODEL_GENERATION: str = "gemini-2.0-flash"
    MODEL_VISION: str = "gemini-2.5-flash"

    # Tier policies: "capability" (model per tier) or "queue" (delay standard tier)
    IMPORT_TIER_POLICY: str = "capability"
    GENERATION_TIER_POLICY: str = "queue"
    STANDARD_TIER_DELAY_SECONDS: float = 4.0

    # Model retries (503 overload / transport failures)
    MODEL_MAX_ATTEMPTS: int = 3
    MODEL_RETRY_DELAY_SECONDS: float = 1.0

    # Metadata scraping
    METADATA_TIMEOUT_SECONDS: float = 5.0

    # Media extraction
    COBALT_API_URL: str = "https://api.cobalt.tools/api/json"
    MEDIA_EXTRACTION_TIMEOUT_SECONDS: float = 15.0
    MEDIA_DOWNLOAD_TIMEOUT_SECONDS: float = 30.0
    MAX_MEDIA_BYTES: int = 20 * 1024 * 1024

    # Image resolution
    IMAGE_FETCH_TIMEOUT_SECONDS: float = 15.0
    INLINE_IMAGE_MAX_BYTES: int = 0  # 0 = no ceiling
    STORAGE_BUCKET: str = "images"
    STORAGE_PREFIX: str = "recipes"
    IMAGE_PROXY_URL: str = "https://wsrv.nl/"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.APP_ENV == "production"

    @property
    def storage_configured(self) -> bool:
        """Check if object storage credentials are present"""
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
