from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.exceptions import PaymentRequiredError, ValidationError
from app.core.security import bearer_token, create_access_token, decode_token, get_current_user
from app.database import get_db
from app.models import User
from app.schemas.auth import DeductCreditsRequest, LoginRequest, RegisterRequest, UserOut
from app.services.billing import BillingService
from app.services.user_store import CREDIT_KINDS, UserStore

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def _user_out(user: User) -> dict:
    return UserOut(id=user.id, email=user.email, name=user.name, plan=user.plan).model_dump()


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> dict:
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 8 characters")
    if not EMAIL_PATTERN.match(payload.email):
        raise ValidationError("Invalid email format")

    store = UserStore(db)
    user = store.create_user(payload.email, payload.password, payload.name)
    token = create_access_token(user.id)
    store.create_session(user.id, token)
    return {"success": True, "token": token, "user": _user_out(user)}


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> dict:
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")

    store = UserStore(db)
    user = store.authenticate(payload.email, payload.password)
    token = create_access_token(user.id)
    store.create_session(user.id, token)

    subscription = BillingService().subscription_plan(user.email)
    return {
        "success": True,
        "token": token,
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "subscription": subscription,
            "usage": store.get_usage_history(user.id, 30),
        },
    }


@router.get("/verify")
def verify(request: Request) -> dict:
    claims = decode_token(bearer_token(request))
    return {
        "valid": True,
        "userId": claims.get("userId"),
        "expiresAt": datetime.fromtimestamp(claims["exp"], tz=timezone.utc).isoformat(),
    }


@router.get("/credits")
def credits(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    store = UserStore(db)
    return {
        "success": True,
        "credits": store.get_credits(user.id),
        "usage": store.get_usage_history(user.id, 7),
        "user": _user_out(user),
    }


@router.post("/credits/deduct")
def deduct_credits(
    payload: DeductCreditsRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    if payload.credit_type not in CREDIT_KINDS:
        raise ValidationError(
            "Invalid credit type",
            {"details": f"Type must be one of: {', '.join(CREDIT_KINDS)}"},
        )
    result = UserStore(db).deduct_credits(user.id, payload.credit_type, payload.amount)
    if not result["success"]:
        raise PaymentRequiredError("Insufficient credits", {"remaining": result["remaining"]})
    return {"success": True, "remaining": result["remaining"]}


@router.post("/logout")
def logout(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    UserStore(db).delete_session(request.state.token)
    logger.info("User %s logged out", user.id)
    return {"success": True}
