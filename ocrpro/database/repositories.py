"""Database operations for the users and payments tables."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from .connection import Database
from .models import Payment, User


@dataclass
class GoogleProfile:
    """Identity fields taken from a Google sign-in."""

    google_id: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None


class UserRepository:
    """Database operations for the users table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def upsert(self, profile: GoogleProfile) -> User:
        """Insert a user for ``profile.google_id`` or refresh its profile."""
        try:
            return self._upsert(profile)
        except IntegrityError:
            # A concurrent sign-in inserted the row first; update it instead.
            return self._upsert(profile)

    def _upsert(self, profile: GoogleProfile) -> User:
        with self._db.session() as session:
            user = session.scalars(
                select(User).where(User.google_id == profile.google_id)
            ).one_or_none()
            if user is None:
                user = User(google_id=profile.google_id)
                session.add(user)
            user.email = profile.email
            user.name = profile.name
            user.picture = profile.picture
            session.flush()
            return user

    def get(self, user_id: str) -> User | None:
        with self._db.session() as session:
            return session.get(User, user_id)


class PaymentRepository:
    """Database operations for the payments table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def active_expiry(self, user_id: str, now: datetime) -> datetime | None:
        """Latest ``expires_at`` strictly after ``now`` for the user, if any."""
        with self._db.session() as session:
            return session.scalar(
                select(func.max(Payment.expires_at)).where(
                    Payment.user_id == user_id,
                    Payment.expires_at > now,
                )
            )

    def find_by_session(self, stripe_session_id: str) -> Payment | None:
        with self._db.session() as session:
            return session.scalars(
                select(Payment).where(Payment.stripe_session_id == stripe_session_id)
            ).one_or_none()

    def create(
        self,
        user_id: str,
        stripe_session_id: str,
        stripe_customer_id: str | None,
        expires_at: datetime,
    ) -> Payment:
        """Insert a payment row.

        Raises:
            IntegrityError: When a row for ``stripe_session_id`` already exists.
        """
        with self._db.session() as session:
            payment = Payment(
                user_id=user_id,
                stripe_session_id=stripe_session_id,
                stripe_customer_id=stripe_customer_id,
                expires_at=expires_at,
            )
            session.add(payment)
            session.flush()
            return payment

    def list_for_user(self, user_id: str) -> list[Payment]:
        with self._db.session() as session:
            return list(
                session.scalars(
                    select(Payment)
                    .where(Payment.user_id == user_id)
                    .order_by(Payment.created_at)
                )
            )
