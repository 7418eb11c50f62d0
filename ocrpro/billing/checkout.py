"""Stripe Checkout session creation for one-time access purchases."""

import stripe

from ocrpro.errors import ConfigurationError, UpstreamProtocolError
from ocrpro.utils.config import BillingConfig
from ocrpro.utils.logger import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """Creates hosted checkout pages that grant access on completion.

    The signed-in user's id travels in the session metadata so the webhook
    can attribute the payment.
    """

    def __init__(self, config: BillingConfig) -> None:
        self.config = config

    def create_session(
        self, user_id: str, email: str | None, origin: str | None = None
    ) -> str:
        """Return the URL of a new checkout page.

        Args:
            user_id: Id of the signed-in user.
            email: Pre-filled customer email.
            origin: Site origin for the success and cancel redirects.

        Raises:
            ConfigurationError: Stripe key or price id missing.
            UpstreamProtocolError: Stripe rejected the request.
        """
        if not self.config.price_id:
            raise ConfigurationError("Stripe price ID not configured")
        if not self.config.secret_key:
            raise ConfigurationError("Stripe secret key not configured")

        base = (origin or self.config.default_origin).rstrip("/")
        params = {
            "payment_method_types": ["card"],
            "line_items": [{"price": self.config.price_id, "quantity": 1}],
            "mode": "payment",
            "success_url": f"{base}?payment=success",
            "cancel_url": f"{base}?payment=cancelled",
            "metadata": {"userId": user_id},
        }
        if email:
            params["customer_email"] = email

        try:
            session = stripe.checkout.Session.create(
                api_key=self.config.secret_key, **params
            )
        except stripe.StripeError as exc:
            logger.error("Stripe error: %s", exc)
            raise UpstreamProtocolError("Failed to create checkout session") from exc

        logger.info("Created checkout session %s for user %s", session.id, user_id)
        return session.url
