"""Pydantic request/response schemas for the FastAPI endpoints.

Field names are snake_case in Python; the browser client reads the
camelCase aliases.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class OCRResponse(BaseModel):
    """Text extracted from one upload."""

    text: str
    pages: int


class DocxResponse(BaseModel):
    """Text extracted from a Word document."""

    text: str
    messages: list[str] = Field(default_factory=list)


class AccessStatusResponse(BaseModel):
    has_access: bool = Field(serialization_alias="hasAccess")
    expires_at: datetime | None = Field(default=None, serialization_alias="expiresAt")


class CheckoutSessionResponse(BaseModel):
    url: str


class WebhookAck(BaseModel):
    received: bool = True


class UserResponse(BaseModel):
    """The signed-in user's public profile."""

    id: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None


class ErrorResponse(BaseModel):
    message: str
    code: str


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    ocr_configured: bool
    billing_configured: bool
    google_configured: bool
