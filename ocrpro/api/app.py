"""FastAPI application for the OCR Pro service.

Provides the upload endpoint, paid-access status and checkout, the Stripe
webhook, Google sign-in and a health check.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.sessions import SessionMiddleware

from ocrpro.auth.google import SESSION_USER_KEY, SignInError
from ocrpro.errors import ConfigurationError, InvalidInput, OCRProError
from ocrpro.ocr.dispatcher import Upload
from ocrpro.ocr.docx_extractor import extract_docx_text
from ocrpro.utils.config import AppConfig, load_config
from ocrpro.utils.logger import get_logger

from .dependencies import (
    CurrentUser,
    Services,
    ServicesDep,
    SignedInUser,
    build_services,
)
from .schemas import (
    AccessStatusResponse,
    CheckoutSessionResponse,
    DocxResponse,
    ErrorResponse,
    HealthResponse,
    OCRResponse,
    UserResponse,
    WebhookAck,
)

logger = get_logger(__name__)

VERSION = "1.0.0"


def _errors(*statuses: int) -> dict[int | str, dict]:
    """OpenAPI entries documenting the error body for ``statuses``."""
    return {status: {"model": ErrorResponse} for status in statuses}


async def handle_service_error(request: Request, exc: OCRProError) -> JSONResponse:
    """Render service errors as ``{"message", "code"}`` with their status."""
    if exc.http_status >= 500:
        logger.error("%s failed: %s", request.url.path, exc.message)
    else:
        logger.warning("%s rejected: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def create_app(
    config: AppConfig | None = None, services: Services | None = None
) -> FastAPI:
    """Build the application.

    Args:
        config: Configuration; loaded from disk and environment if omitted.
        services: Pre-built service graph; built from ``config`` if omitted.
    """
    config = config or (services.config if services else load_config())
    if not config.auth.session_secret:
        raise ConfigurationError("SESSION_SECRET must be set to sign session cookies")
    services = services or build_services(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        services.db.create_all()
        yield
        services.dispatcher.client.close()
        services.db.dispose()

    app = FastAPI(
        title="OCR Pro",
        description="Extract text from scanned PDFs and images",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.services = services
    app.add_middleware(
        SessionMiddleware,
        secret_key=config.auth.session_secret,
        session_cookie="ocrpro_session",
        max_age=config.auth.session_max_age_seconds,
        https_only=config.auth.secure_cookies,
        same_site="lax",
    )
    app.add_exception_handler(OCRProError, handle_service_error)

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse)
    async def health_check(services: ServicesDep) -> HealthResponse:
        """Return service status and which integrations are configured."""
        billing = services.config.billing
        return HealthResponse(
            status="healthy",
            version=VERSION,
            ocr_configured=services.config.ocr.configured,
            billing_configured=bool(billing.secret_key and billing.webhook_secret),
            google_configured=services.sign_in.configured,
        )

    @app.post(
        "/api/ocr", response_model=OCRResponse, responses=_errors(400, 403, 500)
    )
    async def extract_text(
        services: ServicesDep,
        user: CurrentUser,
        file: Annotated[UploadFile | None, File()] = None,
    ) -> OCRResponse:
        """Extract text from an uploaded PDF, PNG, JPEG or plain-text file.

        Signed-in users need a live paid entitlement. Anonymous callers are
        let through while ``access.allow_anonymous`` is set.
        """
        await run_in_threadpool(services.gate.require, user.id if user else None)

        if file is None:
            raise InvalidInput("No file uploaded")

        upload = Upload(
            data=await file.read(),
            media_type=file.content_type,
            filename=file.filename or "document",
        )
        result = await run_in_threadpool(services.dispatcher.process, upload)
        return OCRResponse(text=result.text, pages=result.pages)

    @app.post(
        "/api/extract-docx", response_model=DocxResponse, responses=_errors(400)
    )
    async def extract_docx(
        file: Annotated[UploadFile | None, File()] = None,
    ) -> DocxResponse:
        """Extract the raw text of a Word document."""
        if file is None:
            raise InvalidInput("No file uploaded")
        data = await file.read()
        result = await run_in_threadpool(extract_docx_text, data)
        return DocxResponse(text=result.text, messages=result.messages)

    @app.get(
        "/api/access-status",
        response_model=AccessStatusResponse,
        responses=_errors(401),
    )
    async def access_status(
        services: ServicesDep, user: SignedInUser
    ) -> AccessStatusResponse:
        """Report whether the signed-in user holds live paid access."""
        decision = await run_in_threadpool(services.gate.check, user.id)
        return AccessStatusResponse(
            has_access=decision.expires_at is not None,
            expires_at=decision.expires_at,
        )

    @app.post(
        "/api/create-checkout-session",
        response_model=CheckoutSessionResponse,
        responses=_errors(401, 500),
    )
    async def create_checkout_session(
        request: Request, services: ServicesDep, user: SignedInUser
    ) -> CheckoutSessionResponse:
        """Start a Stripe Checkout payment for one access period."""
        url = await run_in_threadpool(
            services.checkout.create_session,
            user.id,
            user.email,
            request.headers.get("origin"),
        )
        return CheckoutSessionResponse(url=url)

    @app.post(
        "/api/stripe-webhook", response_model=WebhookAck, responses=_errors(400)
    )
    async def stripe_webhook(request: Request, services: ServicesDep) -> WebhookAck:
        """Receive Stripe events; grants access on completed checkouts."""
        payload = await request.body()
        signature = request.headers.get("stripe-signature")
        outcome = await run_in_threadpool(
            services.grantor.handle, payload, signature
        )
        logger.debug("Webhook %s: %s", outcome.event_type, outcome.status)
        return WebhookAck()

    @app.get("/api/login")
    @app.get("/auth/google")
    async def login(request: Request, services: ServicesDep):
        return await services.sign_in.login_redirect(request)

    @app.get("/api/callback")
    @app.get("/auth/google/callback")
    async def auth_callback(request: Request, services: ServicesDep):
        """Finish Google sign-in and start a session."""
        try:
            profile = await services.sign_in.complete(request)
        except SignInError as exc:
            logger.warning("Google sign-in failed: %s", exc)
            return RedirectResponse("/api/login", status_code=302)

        user = await run_in_threadpool(services.users.upsert, profile)
        request.session[SESSION_USER_KEY] = user.id
        logger.info("User %s signed in", user.id)
        return RedirectResponse("/", status_code=302)

    @app.get("/api/logout")
    async def logout(request: Request):
        request.session.clear()
        return RedirectResponse("/", status_code=302)

    @app.get(
        "/api/auth/user", response_model=UserResponse, responses=_errors(401)
    )
    async def current_user(user: SignedInUser) -> UserResponse:
        return UserResponse(
            id=user.id, email=user.email, name=user.name, picture=user.picture
        )
