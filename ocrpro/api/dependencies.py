"""Service wiring and request-scoped dependencies for the API."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Request
from starlette.concurrency import run_in_threadpool

from ocrpro.access.gate import AccessGate
from ocrpro.auth.google import SESSION_USER_KEY, GoogleSignIn
from ocrpro.billing.checkout import CheckoutService
from ocrpro.billing.grantor import EntitlementGrantor
from ocrpro.database.connection import Database
from ocrpro.database.models import User
from ocrpro.database.repositories import PaymentRepository, UserRepository
from ocrpro.errors import AuthenticationRequired
from ocrpro.ocr.dispatcher import SubmissionDispatcher
from ocrpro.utils.config import AppConfig


@dataclass
class Services:
    """Everything the routes need, built once per application."""

    config: AppConfig
    db: Database
    users: UserRepository
    payments: PaymentRepository
    gate: AccessGate
    dispatcher: SubmissionDispatcher
    grantor: EntitlementGrantor
    checkout: CheckoutService
    sign_in: GoogleSignIn


def build_services(
    config: AppConfig,
    db: Database | None = None,
    dispatcher: SubmissionDispatcher | None = None,
    sign_in: GoogleSignIn | None = None,
) -> Services:
    """Assemble the service graph from configuration.

    Args:
        config: Application configuration.
        db: Database to use instead of one built from ``config.database``.
        dispatcher: OCR dispatcher to use instead of the Azure-backed one.
        sign_in: Identity provider handshake to use instead of Google's.
    """
    db = db or Database.from_config(config.database)
    payments = PaymentRepository(db)
    return Services(
        config=config,
        db=db,
        users=UserRepository(db),
        payments=payments,
        gate=AccessGate(
            payments.active_expiry, allow_anonymous=config.access.allow_anonymous
        ),
        dispatcher=dispatcher or SubmissionDispatcher(config.ocr),
        grantor=EntitlementGrantor(
            payments,
            config.billing.webhook_secret,
            grant_period=timedelta(hours=config.billing.grant_period_hours),
            tolerance=config.billing.signature_tolerance_seconds,
        ),
        checkout=CheckoutService(config.billing),
        sign_in=sign_in or GoogleSignIn(config.auth),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


async def get_current_user(request: Request, services: ServicesDep) -> User | None:
    """The signed-in user, or ``None`` without a valid session."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None
    user = await run_in_threadpool(services.users.get, user_id)
    if user is None:
        request.session.pop(SESSION_USER_KEY, None)
    return user


CurrentUser = Annotated[User | None, Depends(get_current_user)]


def require_user(user: CurrentUser) -> User:
    if user is None:
        raise AuthenticationRequired()
    return user


SignedInUser = Annotated[User, Depends(require_user)]
