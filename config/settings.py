from functools import lru_cache
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_USER_AGENT = "Keevo-Link-Preview/1.0"


class Settings(BaseSettings):
    port: int = 3000
    host: str = "0.0.0.0"
    environment: str = "production"

    fetch_timeout_ms: int = 5000
    fetch_max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT

    rate_limit_max: int = 100
    rate_limit_window_seconds: int = 15 * 60

    # Empty list keeps CORS disabled
    cors_origins: Annotated[List[str], NoDecode] = []

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        """Accept CORS_ORIGINS as a comma-separated string"""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def fetch_timeout_seconds(self) -> float:
        return self.fetch_timeout_ms / 1000


@lru_cache()
def get_settings() -> Settings:
    return Settings()
