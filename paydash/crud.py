"""Database access helpers."""
from __future__ import annotations

import secrets
from datetime import date, datetime, timedelta
from typing import Dict, Sequence

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from paydash.auth import User
from paydash.core.schedule import InvalidStatus, PaymentStatus, ScheduleConfig
from paydash.models import Payment, UserSession


def get_user_by_username(db: Session, username: str) -> User | None:
    stmt = select(User).where(User.username == username)
    return db.execute(stmt).scalars().first()


def ensure_admin_user(db: Session, username: str, password: str) -> bool:
    """Create the admin account if missing. Returns True when a user was created."""

    if get_user_by_username(db, username) is not None:
        return False
    db.add(User.create_user(username, password, role="admin"))
    db.commit()
    return True


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    user = get_user_by_username(db, username)
    if user is None or not user.verify_password(password):
        return None
    return user


# --- Sessions ------------------------------------------------------------


def create_session(db: Session, user: User, ttl_hours: int, now: datetime | None = None) -> UserSession:
    now = now or datetime.now()
    record = UserSession(
        session_id=secrets.token_urlsafe(32),
        user_id=user.id,
        created_at=now,
        expires_at=now + timedelta(hours=ttl_hours),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def get_active_session(db: Session, session_id: str, now: datetime | None = None) -> UserSession | None:
    stmt = select(UserSession).where(
        UserSession.session_id == session_id,
        UserSession.expires_at > (now or datetime.now()),
    )
    return db.execute(stmt).scalars().first()


def delete_session(db: Session, session_id: str) -> bool:
    result = db.execute(delete(UserSession).where(UserSession.session_id == session_id))
    db.commit()
    return result.rowcount > 0


def purge_expired_sessions(db: Session, now: datetime | None = None) -> int:
    result = db.execute(delete(UserSession).where(UserSession.expires_at <= (now or datetime.now())))
    db.commit()
    return result.rowcount


# --- Payments ------------------------------------------------------------


def seed_payments(db: Session, config: ScheduleConfig) -> int:
    """Insert a row for every scheduled date that is not stored yet."""

    existing = set(db.execute(select(Payment.date)).scalars().all())
    now = datetime.now()
    inserted = 0
    for record in config.generate():
        if record.key in existing:
            continue
        db.add(
            Payment(
                date=record.key,
                amount=record.amount,
                status=PaymentStatus.NOTHING.value,
                created_at=now,
                updated_at=now,
            )
        )
        inserted += 1
    if inserted:
        db.commit()
    return inserted


def list_payments(db: Session) -> Sequence[Payment]:
    stmt = select(Payment).order_by(Payment.date)
    return db.execute(stmt).scalars().all()


def get_payment(db: Session, payment_date: str | date) -> Payment | None:
    key = payment_date.isoformat() if isinstance(payment_date, date) else payment_date
    stmt = select(Payment).where(Payment.date == key)
    return db.execute(stmt).scalars().first()


def load_override_map(db: Session) -> Dict[str, str]:
    """Statuses set by an admin, keyed by ISO date.

    Seeded rows keep ``updated_at == created_at`` and the default status until
    someone changes them, so untouched rows are left out of the map.
    """
    stmt = select(Payment.date, Payment.status).where(
        or_(Payment.status != PaymentStatus.NOTHING.value, Payment.updated_at > Payment.created_at)
    )
    return {row.date: row.status for row in db.execute(stmt).all()}


def update_payment_status(db: Session, payment_date: str | date, status: str | PaymentStatus) -> Payment | None:
    """Set the status of a stored payment.

    Raises InvalidStatus before touching the database; returns None when no
    payment exists for the date.
    """
    parsed = PaymentStatus.parse(status)
    if parsed is None:
        raise InvalidStatus(status)

    payment = get_payment(db, payment_date)
    if payment is None:
        return None
    payment.status = parsed.value
    payment.updated_at = datetime.now()
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment


def reset_application_data(db: Session, config: ScheduleConfig) -> None:
    """Drop all sessions and payment statuses, then reseed the schedule."""

    db.execute(delete(UserSession))
    db.execute(delete(Payment))
    db.commit()
    seed_payments(db, config)
