from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    # App
    APP_NAME: str = "Pet Gateway"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 1323
    SHUTDOWN_TIMEOUT_SECONDS: int = 10

    # Contract
    CONTRACT_PATH: str = ""

    # Security
    BEARER_TOKEN: str = "token"
    SESSION_COOKIE_NAME: str = "SESSION"

    # Handlers
    REDIRECT_LOCATION: str = "https://example.com"
    PAGINATION_CURSOR: str = "next"

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

@lru_cache()
def get_settings() -> Settings:
    return Settings()
