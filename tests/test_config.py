"""Tests for configuration loading and validation."""

from pathlib import Path

import yaml

from ocrpro.utils.config import (
    AccessConfig,
    AppConfig,
    AuthConfig,
    BillingConfig,
    DatabaseConfig,
    OCRConfig,
    load_config,
)


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.max_poll_attempts == 120
        assert cfg.poll_interval_seconds == 1.0
        assert cfg.max_upload_bytes == 300 * 1024 * 1024
        assert cfg.api_path == "/vision/v3.2/read/analyze"
        assert cfg.configured is False

    def test_configured_needs_endpoint_and_key(self) -> None:
        assert OCRConfig(endpoint="https://x").configured is False
        assert OCRConfig(endpoint="https://x", api_key="k").configured is True


class TestBillingConfig:
    """Tests for BillingConfig defaults."""

    def test_defaults(self) -> None:
        cfg = BillingConfig()
        assert cfg.grant_period_hours == 24
        assert cfg.price_id is None
        assert cfg.default_origin == "https://ocrpro.xyz"


class TestAuthConfig:
    """Tests for AuthConfig defaults."""

    def test_session_lifetime_is_one_week(self) -> None:
        assert AuthConfig().session_max_age_seconds == 7 * 24 * 60 * 60

    def test_sessions_need_a_secret_and_secure_transport(self) -> None:
        cfg = AuthConfig()
        assert cfg.session_secret is None
        assert cfg.secure_cookies is True

    def test_google_configured(self) -> None:
        assert AuthConfig().google_configured is False
        cfg = AuthConfig(
            google_client_id="id",
            google_client_secret="s",
            google_redirect_uri="https://x/cb",
        )
        assert cfg.google_configured is True


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.access, AccessConfig)
        assert isinstance(cfg.billing, BillingConfig)
        assert isinstance(cfg.auth, AuthConfig)
        assert isinstance(cfg.database, DatabaseConfig)
        assert cfg.access.allow_anonymous is True
        assert cfg.log_level == "INFO"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_repository_config(self, project_root: Path) -> None:
        cfg = load_config(project_root / "configs" / "config.yaml", environ={})
        assert cfg.ocr.max_poll_attempts == 120
        assert cfg.billing.grant_period_hours == 24
        assert cfg.auth.secure_cookies is True

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"), environ={})
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "ocr": {"max_poll_attempts": 10, "poll_interval_seconds": 0.5},
            "access": {"allow_anonymous": False},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file, environ={})
        assert cfg.ocr.max_poll_attempts == 10
        assert cfg.ocr.poll_interval_seconds == 0.5
        assert cfg.access.allow_anonymous is False
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file, environ={})
        assert isinstance(cfg, AppConfig)

    def test_environment_overrides(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"database": {"url": "sqlite:///a.db"}}))
        cfg = load_config(
            config_file,
            environ={
                "AZURE_COGNITIVE_ENDPOINT": "https://vision.example",
                "AZURE_COGNITIVE_KEY": "k",
                "STRIPE_WEBHOOK_SECRET": "whsec",
                "GOOGLE_CLIENT_ID": "gid",
                "DATABASE_URL": "postgresql+psycopg://db/ocr",
                "LOG_LEVEL": "WARNING",
            },
        )
        assert cfg.ocr.endpoint == "https://vision.example"
        assert cfg.ocr.configured is True
        assert cfg.billing.webhook_secret == "whsec"
        assert cfg.auth.google_client_id == "gid"
        assert cfg.database.url == "postgresql+psycopg://db/ocr"
        assert cfg.log_level == "WARNING"

    def test_empty_environment_values_are_ignored(self) -> None:
        cfg = load_config(Path("/nonexistent.yaml"), environ={"STRIPE_PRICE_ID": ""})
        assert cfg.billing.price_id is None
