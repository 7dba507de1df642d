from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    APP_NAME: str = "userform"
    APP_VERSION: str = "0.1.0"

    # Backend
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000
    APP_DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)
    SLOW_REQUEST_MS: float = 1000.0

    # Form intake
    SYMMETRIC_TIMESTAMPS: bool = False  # Construct updatedAt like createdAt instead of passing it raw
    MAX_VALIDATION_ERRORS: int = Field(50, ge=1)

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
