"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrisnap.domain.parameters import ModelParameters

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    fatsecret_client_id: str
    fatsecret_client_secret: str
    fatsecret_token_url: str = "https://oauth.fatsecret.com/connect/token"
    fatsecret_api_url: str = "https://platform.fatsecret.com/rest/server.api"
    food_search_ttl_seconds: int = 3600
    food_details_ttl_seconds: int = 86400
    baseline_glucose: int = Field(default=83, gt=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def build_model_parameters(settings: Settings) -> ModelParameters:
    """Build the engine's model parameters once at startup."""
    return ModelParameters(baseline_glucose=settings.baseline_glucose)
