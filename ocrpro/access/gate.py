"""Paid-access checks for the OCR endpoint.

The gate knows nothing about sessions or storage: callers pass the
signed-in user id (or ``None``) and the gate asks an injected lookup for
the latest expiry still in the future.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from ocrpro.errors import AccessDenied
from ocrpro.utils.logger import get_logger

logger = get_logger(__name__)

EntitlementLookup = Callable[[str, datetime], datetime | None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    authenticated: bool
    expires_at: datetime | None = None


class AccessGate:
    """Decides whether a caller may run OCR.

    Args:
        entitlement_lookup: ``(user_id, now) -> expiry`` returning the
            governing expiry of a live entitlement, or ``None``.
        allow_anonymous: Let callers without a session through. This is
            the long-standing default; see DESIGN.md.
        clock: Returns the current aware UTC time.
    """

    def __init__(
        self,
        entitlement_lookup: EntitlementLookup,
        allow_anonymous: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._lookup = entitlement_lookup
        self.allow_anonymous = allow_anonymous
        self._clock = clock

    def check(self, user_id: str | None) -> AccessDecision:
        if user_id is None:
            return AccessDecision(allowed=self.allow_anonymous, authenticated=False)

        expires_at = self._lookup(user_id, self._clock())
        return AccessDecision(
            allowed=expires_at is not None,
            authenticated=True,
            expires_at=expires_at,
        )

    def require(self, user_id: str | None) -> AccessDecision:
        """Like :meth:`check`, but raise when access is not allowed.

        Raises:
            AccessDenied: No live entitlement, or anonymous access disabled.
        """
        decision = self.check(user_id)
        if decision.allowed:
            return decision
        if not decision.authenticated:
            raise AccessDenied("Please sign in to use the OCR feature")
        logger.info("Denied OCR access for user %s", user_id)
        raise AccessDenied()
