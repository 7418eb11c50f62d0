"""Grants time-bounded access when Stripe reports a completed checkout.

Events are authenticated with Stripe's webhook signing scheme before
their contents are trusted. Granting is idempotent per checkout session:
the session id is unique in the payments table, and a replayed event
finds the existing row and stops.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Any

import stripe
from sqlalchemy.exc import IntegrityError

from ocrpro.database.repositories import PaymentRepository
from ocrpro.errors import InvalidSignature
from ocrpro.utils.logger import get_logger

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class GrantStatus(StrEnum):
    GRANTED = "granted"
    ALREADY_PROCESSED = "already_processed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class GrantOutcome:
    status: GrantStatus
    event_type: str
    user_id: str | None = None
    session_id: str | None = None
    expires_at: datetime | None = None


def verify_event(
    payload: bytes,
    signature: str | None,
    secret: str | None,
    tolerance: int = 300,
) -> dict[str, Any]:
    """Authenticate a webhook body and decode it.

    Raises:
        InvalidSignature: Missing header or secret, a signature that does
            not match, a stale timestamp, or a body that is not JSON.
    """
    if not signature or not secret:
        raise InvalidSignature("Missing signature or webhook secret")

    body = payload.decode("utf-8", errors="replace")
    try:
        stripe.WebhookSignature.verify_header(body, signature, secret, tolerance)
    except stripe.SignatureVerificationError as exc:
        raise InvalidSignature(f"Webhook Error: {exc}") from exc

    try:
        event = json.loads(body)
    except ValueError as exc:
        raise InvalidSignature("Webhook Error: payload is not valid JSON") from exc
    if not isinstance(event, dict):
        raise InvalidSignature("Webhook Error: payload is not a JSON object")
    return event


class EntitlementGrantor:
    """Turns verified payment events into payment rows.

    Args:
        payments: Repository for the payments table.
        webhook_secret: Signing secret of the Stripe webhook endpoint.
        grant_period: How long a payment unlocks OCR.
        clock: Returns the current aware UTC time.
    """

    def __init__(
        self,
        payments: PaymentRepository,
        webhook_secret: str | None,
        grant_period: timedelta = timedelta(days=1),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        tolerance: int = 300,
    ) -> None:
        if grant_period <= timedelta(0):
            raise ValueError("grant_period must be positive")
        self._payments = payments
        self._secret = webhook_secret
        self.grant_period = grant_period
        self._clock = clock
        self._tolerance = tolerance

    def handle(self, payload: bytes, signature: str | None) -> GrantOutcome:
        """Verify and apply one webhook delivery."""
        event = verify_event(payload, signature, self._secret, self._tolerance)
        return self.apply(event)

    def apply(self, event: dict[str, Any]) -> GrantOutcome:
        """Apply an already-verified event."""
        event_type = str(event.get("type") or "")
        if event_type != CHECKOUT_COMPLETED:
            logger.debug("Ignoring webhook event %s", event_type)
            return GrantOutcome(GrantStatus.IGNORED, event_type)

        data = event.get("data")
        session = data.get("object") if isinstance(data, dict) else None
        if not isinstance(session, dict):
            logger.warning("Ignoring %s event without a session object", event_type)
            return GrantOutcome(GrantStatus.IGNORED, event_type)

        session_id = session.get("id")
        metadata = session.get("metadata")
        user_id = metadata.get("userId") if isinstance(metadata, dict) else None
        if not user_id or not session_id:
            logger.warning("Checkout session %s has no userId metadata", session_id)
            return GrantOutcome(GrantStatus.IGNORED, event_type, session_id=session_id)

        if self._payments.find_by_session(session_id) is not None:
            logger.info("Payment already processed for session %s", session_id)
            return GrantOutcome(
                GrantStatus.ALREADY_PROCESSED, event_type, user_id, session_id
            )

        expires_at = self._clock() + self.grant_period
        try:
            self._payments.create(
                user_id=user_id,
                stripe_session_id=session_id,
                stripe_customer_id=session.get("customer") or None,
                expires_at=expires_at,
            )
        except IntegrityError:
            existing = self._payments.find_by_session(session_id)
            if existing is None:
                raise
            logger.info("Payment already processed for session %s", session_id)
            return GrantOutcome(
                GrantStatus.ALREADY_PROCESSED, event_type, user_id, session_id
            )

        logger.info(
            "Access granted to user %s until %s", user_id, expires_at.isoformat()
        )
        return GrantOutcome(
            GrantStatus.GRANTED, event_type, user_id, session_id, expires_at
        )
