"""
User, session, credit and usage storage.

Backed by SQLAlchemy; with the default ``sqlite://`` URL the data lives in
process memory and is gone after a restart.
"""
from __future__ import annotations

import logging
import secrets
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from app.core.security import TOKEN_TTL, hash_password, verify_password
from app.models import AuthSession, UsageRecord, User, UserCredits

logger = logging.getLogger(__name__)

CREDIT_KINDS = ("descriptions", "images", "videos", "bulk")
CREDIT_PERIOD = timedelta(days=30)

PLAN_CREDITS: Dict[str, Dict[str, int]] = {
    "free": {"descriptions": 3, "images": 0, "videos": 0, "bulk": 0},
    "starter": {"descriptions": 100, "images": 50, "videos": 10, "bulk": 10},
    "professional": {"descriptions": 500, "images": 200, "videos": 50, "bulk": 50},
}
UNLIMITED_CREDITS = {kind: 10000 for kind in CREDIT_KINDS}


def allowance_for_plan(plan: str | None) -> Dict[str, int]:
    return dict(PLAN_CREDITS.get(plan or "free", UNLIMITED_CREDITS))


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class UserStore:
    """Repository over the user tables for a single request session."""

    def __init__(self, db: Session):
        self.db = db

    # -- users -------------------------------------------------------------

    def create_user(self, email: str, password: str, name: str | None = None, plan: str = "free") -> User:
        normalized = email.strip().lower()
        if self.get_user_by_email(normalized) is not None:
            raise ConflictError("User already exists")

        user = User(
            id=secrets.token_hex(16),
            email=normalized,
            name=name or normalized.split("@")[0],
            password_hash=hash_password(password),
            plan=plan,
            stripe_customer_id=None,
            email_verified=False,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(user)
        self.db.add(self._fresh_credits(user.id, plan))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User already exists")
        self.db.refresh(user)
        logger.info("Created user %s (plan=%s)", user.id, plan)
        return user

    def get_user_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def get_user_by_id(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def update_user(self, user_id: str, **updates: Any) -> User:
        user = self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        for field, value in updates.items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user

    # -- sessions ----------------------------------------------------------

    def create_session(self, user_id: str, token: str) -> str:
        self.db.add(
            AuthSession(
                token=token,
                user_id=user_id,
                expires_at=datetime.now(timezone.utc) + TOKEN_TTL,
            )
        )
        self.db.commit()
        return token

    def get_session(self, token: str) -> str | None:
        row = self.db.get(AuthSession, token)
        if row is None:
            return None
        if _utc(row.expires_at) <= datetime.now(timezone.utc):
            self.db.delete(row)
            self.db.commit()
            return None
        return row.user_id

    def delete_session(self, token: str) -> None:
        row = self.db.get(AuthSession, token)
        if row is not None:
            self.db.delete(row)
            self.db.commit()

    # -- credits -----------------------------------------------------------

    def _fresh_credits(self, user_id: str, plan: str | None) -> UserCredits:
        return UserCredits(
            user_id=user_id,
            reset_date=datetime.now(timezone.utc) + CREDIT_PERIOD,
            **allowance_for_plan(plan),
        )

    def get_credits(self, user_id: str) -> Dict[str, Any]:
        """Return the user's credits, granting or resetting them when due."""
        user = self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        row = self.db.get(UserCredits, user_id)
        if row is None:
            row = self._fresh_credits(user_id, user.plan)
            self.db.add(row)
            self.db.commit()
        elif _utc(row.reset_date) < datetime.now(timezone.utc):
            for kind, amount in allowance_for_plan(user.plan).items():
                setattr(row, kind, amount)
            row.reset_date = datetime.now(timezone.utc) + CREDIT_PERIOD
            self.db.commit()
            logger.info("Reset monthly credits for user %s", user_id)

        self.db.refresh(row)
        return self._credits_payload(row)

    def deduct_credits(self, user_id: str, kind: str, amount: int = 1) -> Dict[str, Any]:
        self._check_kind(kind)
        credits = self.get_credits(user_id)
        current = int(credits[kind])
        if current < amount:
            return {"success": False, "error": "Insufficient credits", "remaining": current}

        row = self.db.get(UserCredits, user_id)
        setattr(row, kind, current - amount)
        self.db.commit()
        self.track_usage(user_id, kind, amount)
        return {"success": True, "remaining": current - amount}

    def add_credits(self, user_id: str, kind: str, amount: int) -> Dict[str, Any]:
        self._check_kind(kind)
        credits = self.get_credits(user_id)
        new_amount = int(credits[kind]) + amount
        row = self.db.get(UserCredits, user_id)
        setattr(row, kind, new_amount)
        self.db.commit()
        return {"success": True, "remaining": new_amount}

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in CREDIT_KINDS:
            raise ValidationError(
                "Invalid credit type",
                {"details": f"Type must be one of: {', '.join(CREDIT_KINDS)}"},
            )

    @staticmethod
    def _credits_payload(row: UserCredits) -> Dict[str, Any]:
        payload: Dict[str, Any] = {kind: getattr(row, kind) for kind in CREDIT_KINDS}
        payload["resetDate"] = _utc(row.reset_date).isoformat()
        return payload

    # -- usage -------------------------------------------------------------

    def track_usage(self, user_id: str, kind: str, amount: int = 1) -> None:
        today = datetime.now(timezone.utc).date()
        record = (
            self.db.query(UsageRecord)
            .filter(UsageRecord.user_id == user_id, UsageRecord.day == today, UsageRecord.kind == kind)
            .first()
        )
        if record is None:
            record = UsageRecord(user_id=user_id, day=today, kind=kind, amount=0)
            self.db.add(record)
        record.amount = (record.amount or 0) + amount
        self.db.commit()

    def get_usage_history(self, user_id: str, days: int = 30) -> Dict[str, Dict[str, int]]:
        today = datetime.now(timezone.utc).date()
        since: date = today - timedelta(days=days - 1)
        rows = (
            self.db.query(UsageRecord)
            .filter(UsageRecord.user_id == user_id, UsageRecord.day >= since)
            .order_by(UsageRecord.day.desc())
            .all()
        )
        history: Dict[str, Dict[str, int]] = {}
        for row in rows:
            history.setdefault(row.day.isoformat(), {})[row.kind] = row.amount
        return history
