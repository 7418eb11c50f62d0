"""Configuration management for the OCR Pro service.

Loads and validates YAML configuration with sensible defaults, then
overlays secrets and deployment-specific values from the environment.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class OCRConfig(BaseModel):
    """Configuration for the Azure Computer Vision Read API."""

    endpoint: str | None = None
    api_key: str | None = None
    api_path: str = "/vision/v3.2/read/analyze"
    max_poll_attempts: int = 120
    poll_interval_seconds: float = 1.0
    submit_timeout_seconds: float = 60.0
    poll_timeout_seconds: float = 30.0
    max_upload_bytes: int = 300 * 1024 * 1024

    @property
    def configured(self) -> bool:
        return bool(self.endpoint and self.api_key)


class AccessConfig(BaseModel):
    """Configuration for the paid-access gate."""

    allow_anonymous: bool = True


class BillingConfig(BaseModel):
    """Configuration for Stripe checkout and webhooks."""

    secret_key: str | None = None
    webhook_secret: str | None = None
    price_id: str | None = None
    grant_period_hours: int = 24
    default_origin: str = "https://ocrpro.xyz"
    signature_tolerance_seconds: int = 300


class AuthConfig(BaseModel):
    """Configuration for Google sign-in and cookie sessions."""

    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str | None = None
    session_secret: str | None = None
    session_max_age_seconds: int = 7 * 24 * 60 * 60
    secure_cookies: bool = True

    @property
    def google_configured(self) -> bool:
        return bool(
            self.google_client_id
            and self.google_client_secret
            and self.google_redirect_uri
        )


class DatabaseConfig(BaseModel):
    """Configuration for the relational store."""

    url: str = "sqlite:///./ocrpro.db"
    echo: bool = False


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    access: AccessConfig = Field(default_factory=AccessConfig)
    billing: BillingConfig = Field(default_factory=BillingConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    log_level: str = "INFO"


# (section, field) pairs filled from environment variables when set.
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "AZURE_COGNITIVE_ENDPOINT": ("ocr", "endpoint"),
    "AZURE_COGNITIVE_KEY": ("ocr", "api_key"),
    "STRIPE_SECRET_KEY": ("billing", "secret_key"),
    "STRIPE_WEBHOOK_SECRET": ("billing", "webhook_secret"),
    "STRIPE_PRICE_ID": ("billing", "price_id"),
    "GOOGLE_CLIENT_ID": ("auth", "google_client_id"),
    "GOOGLE_CLIENT_SECRET": ("auth", "google_client_secret"),
    "GOOGLE_REDIRECT_URI": ("auth", "google_redirect_uri"),
    "SESSION_SECRET": ("auth", "session_secret"),
    "DATABASE_URL": ("database", "url"),
    "LOG_LEVEL": ("", "log_level"),
}


def _apply_env_overrides(raw: dict, environ: dict[str, str]) -> dict:
    """Overlay environment values onto the raw YAML mapping."""
    for var, (section, field) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        if section:
            raw.setdefault(section, {})[field] = value
        else:
            raw[field] = value
    return raw


def load_config(
    path: Path | None = None, environ: dict[str, str] | None = None
) -> AppConfig:
    """Load configuration from a YAML file and the environment.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")
    if environ is None:
        environ = dict(os.environ)

    raw: dict = {}
    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    else:
        logger.info("No config file found at %s, using defaults", path)

    return AppConfig(**_apply_env_overrides(raw, environ))
