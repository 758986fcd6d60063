from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Learnify API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    PLATFORM_NAME: str = "Learnify"
    SECRET_KEY: str = "learnify-dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 2  # 2 days

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: Optional[str] = None
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_NAME: Optional[str] = None

    DATABASE_URL: str = ""
    TEST_DATABASE_URL: Optional[str] = None

    # Cache
    CACHE_ENABLED: bool = True
    CACHE_TTL: int = 300
    REDIS_URL: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Learning pipeline
    COMPLETION_IS_STICKY: bool = True
    DEFAULT_MAX_LEARNERS: int = 50

    def __init__(self, **data):
        super().__init__(**data)
        if not self.DATABASE_URL:
            if self.DATABASE_HOST and self.DATABASE_NAME:
                self.DATABASE_URL = (
                    f'postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
                    f'@{self.DATABASE_HOST}:{self.DATABASE_PORT or "5432"}/{self.DATABASE_NAME}'
                )
            else:
                self.DATABASE_URL = "sqlite:///./learnify.db"

    class Config:
        env_file = ".env"

settings = Settings()
