from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Property Lister"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    JWT_SECRET: str = "your-secret-key"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./property_lister.db"

    # Redis; an empty URL selects the in-memory backend
    REDIS_URL: str = ""
    REDIS_USERNAME: Optional[str] = None
    REDIS_PASSWORD: Optional[str] = None

    # Cache
    CACHE_ENABLED: bool = True
    CACHE_TTL: int = 600  # 10 minutes

    # Background cache refresh
    REFRESH_WORKERS: int = 4
    REFRESH_QUEUE_SIZE: int = 1000
    REFRESH_EAGER: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = "logs"

    class Config:
        env_file = ".env"

settings = Settings()
