"""Configuration settings for the Policy Quote API."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Policy Quote API"
    log_level: str = Field(default="INFO", description="Root logging level")
    json_logs: bool = Field(default=False, description="Emit one JSON object per log line")

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: str = Field(default="*", description="Allowed CORS origins (comma-separated)")

    # Chat hand-off
    chat_base_url: str = "https://wa.me"
    agent_number: str = "917095394483"

    seed_demo_data: bool = Field(default=True, description="Load demo policies into an empty catalog at startup")

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
