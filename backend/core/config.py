from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Backend
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000
    APP_DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    # Validation
    DEFAULT_LOCALE: str = "en_US"
    DEFAULT_FAILURE_TYPE: str = "core.validation.failures.InvalidInputError"
    EAGER_FAILURE_TYPE_CHECK: bool = False  # resolve failure_type before the rule runs

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
