"""Application configuration."""

import os
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    photo_bucket: str = "photos"
    photo_retention_days: int = 7
    cart_ttl_days: int = 14
    estimate_tax_rate: Decimal = Decimal("0.0625")
    max_line_quantity: int = 1000
    sequence_retry_attempts: int = 3
    sequence_retry_delay_seconds: float = 0.2
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
