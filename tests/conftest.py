"""Shared test fixtures for the OCR Pro test suite."""

import hashlib
import hmac
import io
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from PIL import Image

from fakes import ENDPOINT, WEBHOOK_SECRET
from ocrpro.database.connection import Database
from ocrpro.utils.config import (
    AppConfig,
    AuthConfig,
    BillingConfig,
    DatabaseConfig,
    OCRConfig,
)


@pytest.fixture
def ocr_config() -> OCRConfig:
    return OCRConfig(
        endpoint=ENDPOINT + "/",
        api_key="test-key",
        max_poll_attempts=5,
        poll_interval_seconds=0.0,
    )


@pytest.fixture
def app_config(ocr_config: OCRConfig) -> AppConfig:
    return AppConfig(
        ocr=ocr_config,
        billing=BillingConfig(
            secret_key="sk_test",
            webhook_secret=WEBHOOK_SECRET,
            price_id="price_123",
        ),
        auth=AuthConfig(session_secret="test-secret"),
        database=DatabaseConfig(url="sqlite://"),
    )


@pytest.fixture
def database() -> Iterator[Database]:
    """A fresh in-memory database with all tables created."""
    db = Database.from_config(DatabaseConfig(url="sqlite://"))
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def png_bytes() -> bytes:
    """A minimal PNG image as bytes."""
    img = Image.new("RGB", (200, 100), color=(255, 255, 255))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def sign() -> Callable[..., str]:
    """Return a function producing a valid ``Stripe-Signature`` header."""

    def _sign(
        payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None
    ) -> str:
        ts = int(time.time()) if timestamp is None else timestamp
        signed = f"{ts}.{payload.decode('utf-8')}".encode()
        digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
        return f"t={ts},v1={digest}"

    return _sign


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
