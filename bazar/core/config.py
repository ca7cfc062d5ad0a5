"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here; no scattered magic strings.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_heavy: Rate limit for the AI description endpoint.
        supabase_url: Base URL of the Supabase project.
        supabase_anon_key: Public anon key sent with every request.
        storage_bucket: Storage bucket holding logos, product images and proofs.
        http_timeout_seconds: Timeout for calls to the backing service.
        gemini_api_key: API key for the generative-text provider.
        description_model: LiteLLM model identifier for descriptions.
        bcv_rate: Fixed USD to VES rate used for display.
        delivery_fee_usd: Flat delivery fee charged per seller order.
        profile_lookup_attempts: Attempts when waiting for a new profile row.
        profile_lookup_delay_seconds: Wait between profile lookup attempts.
        placeholder_image_url: Image used when a product has no upload.
        session_idle_timeout_seconds: Close sessions unused for this long.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Bazar"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "120/minute"
    rate_limit_heavy: str = "10/minute"

    # Supabase project
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""
    storage_bucket: str = "images"
    http_timeout_seconds: float = 15.0

    # Generative text
    gemini_api_key: str = ""
    description_model: str = "gemini/gemini-2.5-flash"
    description_max_tokens: int = 200
    description_temperature: float = 0.7

    # Pricing
    bcv_rate: Decimal = Decimal("45.00")
    delivery_fee_usd: Decimal = Decimal("5")

    # Profile bootstrap
    profile_lookup_attempts: int = 3
    profile_lookup_delay_seconds: float = 2.0

    # Sessions
    session_idle_timeout_seconds: float = 43200.0

    placeholder_image_url: str = "https://picsum.photos/400/400"


settings = Settings()
