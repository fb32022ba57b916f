from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_DID_KEY = "your_did_api_key_here"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with validation."""

    model_config = SettingsConfigDict(
        env_file=(str(Path(__file__).resolve().parents[1] / ".env"), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="ProductDescriptions.io API", alias="APP_NAME")
    app_env: Literal["development", "staging", "production", "test"] = Field(
        default="production",
        alias="APP_ENV",
    )
    app_url: str = Field(default="https://productdescriptions.io", alias="APP_URL")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")
    database_url: str = Field(default="sqlite://", alias="DATABASE_URL")

    jwt_secret: SecretStr = Field(
        default=SecretStr("your-jwt-secret-key-change-in-production"),
        alias="JWT_SECRET",
    )

    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_vision_model: str = Field(default="gpt-4o-mini", alias="OPENAI_VISION_MODEL")

    gemini_api_key: SecretStr | None = Field(default=None, alias="GEMINI_API_KEY")
    google_gemini_api_key: SecretStr | None = Field(default=None, alias="GOOGLE_GEMINI_API_KEY")
    gemini_vision_model: str = Field(default="gemini-1.5-flash", alias="GEMINI_VISION_MODEL")
    gemini_text_model: str = Field(default="gemini-pro", alias="GEMINI_TEXT_MODEL")
    gemini_bulk_model: str = Field(default="gemini-2.0-flash-exp", alias="GEMINI_BULK_MODEL")
    bulk_generate_delay_seconds: float = Field(default=0.5, ge=0, alias="BULK_GENERATE_DELAY_SECONDS")

    stripe_secret_key: SecretStr | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_publishable_key: str | None = Field(default=None, alias="STRIPE_PUBLISHABLE_KEY")
    stripe_webhook_secret: SecretStr | None = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")
    stripe_price_starter: str | None = Field(default=None, alias="STRIPE_PRICE_STARTER")
    stripe_price_starter_annual: str | None = Field(default=None, alias="STRIPE_PRICE_STARTER_ANNUAL")
    stripe_price_professional: str | None = Field(default=None, alias="STRIPE_PRICE_PROFESSIONAL")
    stripe_price_professional_annual: str | None = Field(
        default=None, alias="STRIPE_PRICE_PROFESSIONAL_ANNUAL"
    )
    stripe_price_enterprise: str | None = Field(default=None, alias="STRIPE_PRICE_ENTERPRISE")
    stripe_price_enterprise_annual: str | None = Field(
        default=None, alias="STRIPE_PRICE_ENTERPRISE_ANNUAL"
    )
    stripe_price_video_single: str = Field(
        default="price_1S4X3ERrVb92Q7hgEGJQNVDh", alias="STRIPE_PRICE_VIDEO_SINGLE"
    )
    stripe_price_video_triple: str = Field(
        default="price_1S4X4BRrVb92Q7hg460AjSu4", alias="STRIPE_PRICE_VIDEO_TRIPLE"
    )
    stripe_price_bulk_video: str = Field(
        default="price_1S4akoRrVb92Q7hgOLGjeHiH", alias="STRIPE_PRICE_BULK_VIDEO"
    )

    cloudinary_cloud_name: str | None = Field(default=None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = Field(default=None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: SecretStr | None = Field(default=None, alias="CLOUDINARY_API_SECRET")

    d_id_api_key: SecretStr | None = Field(default=None, alias="D_ID_API_KEY")
    d_id_poll_interval_seconds: float = Field(default=2.0, ge=0, alias="D_ID_POLL_INTERVAL_SECONDS")
    d_id_max_poll_attempts: int = Field(default=30, ge=1, le=300, alias="D_ID_MAX_POLL_ATTEMPTS")

    azure_speech_key: SecretStr | None = Field(default=None, alias="AZURE_SPEECH_KEY")
    azure_speech_region: str = Field(default="eastus", alias="AZURE_SPEECH_REGION")

    google_cloud_project: str | None = Field(default=None, alias="GOOGLE_CLOUD_PROJECT")
    google_cloud_location: str = Field(default="us-central1", alias="GOOGLE_CLOUD_LOCATION")
    google_application_credentials_json: SecretStr | None = Field(
        default=None, alias="GOOGLE_APPLICATION_CREDENTIALS_JSON"
    )

    posthog_api_key: str | None = Field(default=None, alias="POSTHOG_API_KEY")
    google_client_id: str | None = Field(default=None, alias="GOOGLE_CLIENT_ID")

    shopify_api_key: str = Field(default="your_shopify_api_key", alias="SHOPIFY_API_KEY")
    shopify_api_secret: SecretStr = Field(
        default=SecretStr("your_shopify_api_secret"), alias="SHOPIFY_API_SECRET"
    )

    @field_validator("app_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def cors_origin_list(self) -> list[str]:
        """Support comma-separated CORS origins from environment variables."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def gemini_key(self) -> str | None:
        """GEMINI_API_KEY wins over the legacy GOOGLE_GEMINI_API_KEY."""
        for secret in (self.gemini_api_key, self.google_gemini_api_key):
            if secret is not None and secret.get_secret_value():
                return secret.get_secret_value()
        return None

    @property
    def gemini_key_env(self) -> str:
        if self.gemini_api_key is not None and self.gemini_api_key.get_secret_value():
            return "GEMINI_API_KEY"
        if self.google_gemini_api_key is not None and self.google_gemini_api_key.get_secret_value():
            return "GOOGLE_GEMINI_API_KEY"
        return "none"

    @property
    def openai_key(self) -> str | None:
        if self.openai_api_key is None:
            return None
        return self.openai_api_key.get_secret_value() or None

    @property
    def stripe_key(self) -> str | None:
        if self.stripe_secret_key is None:
            return None
        return self.stripe_secret_key.get_secret_value() or None

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret is not None
            and self.cloudinary_api_secret.get_secret_value()
        )

    @property
    def did_key(self) -> str | None:
        if self.d_id_api_key is None:
            return None
        return self.d_id_api_key.get_secret_value() or None

    @property
    def did_key_usable(self) -> bool:
        key = self.did_key
        return bool(key) and key != PLACEHOLDER_DID_KEY and len(key) > 20

    @property
    def azure_key(self) -> str | None:
        if self.azure_speech_key is None:
            return None
        return self.azure_speech_key.get_secret_value() or None


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()
