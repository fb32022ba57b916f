"""Security and authentication helpers: password hashing and bearer JWTs."""
from __future__ import annotations

import binascii
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.exceptions import AuthenticationError
from app.database import get_db
from app.models import User

ALGORITHM = "HS256"
TOKEN_TTL = timedelta(days=7)
PBKDF2_ITERATIONS = 210000


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _secret_key() -> str:
    return get_settings().jwt_secret.get_secret_value()


def hash_password(password: str, salt_hex: str | None = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Create pbkdf2_sha256 hash string."""
    salt_hex = salt_hex or secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), iterations
    )
    digest_hex = binascii.hexlify(dk).decode("ascii")
    return f"pbkdf2_sha256${iterations}${salt_hex}${digest_hex}"


def verify_password(password: str, encoded_hash: str) -> bool:
    """Verify pbkdf2_sha256 hash format: pbkdf2_sha256$iters$salt_hex$digest_hex."""
    try:
        algorithm, iter_str, salt_hex, _digest_hex = encoded_hash.split("$", 3)
        if algorithm != "pbkdf2_sha256":
            return False
        expected = hash_password(password, salt_hex=salt_hex, iterations=int(iter_str))
    except ValueError:
        return False
    return hmac.compare_digest(expected, encoded_hash)


def create_access_token(user_id: str, extra: Dict[str, Any] | None = None) -> str:
    issued = now_utc()
    payload: Dict[str, Any] = {
        "userId": user_id,
        "sub": user_id,
        "iat": int(issued.timestamp()),
        "exp": int((issued + TOKEN_TTL).timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, _secret_key(), algorithm=ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, _secret_key(), algorithms=[ALGORITHM], options={"require": ["exp"]})
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid token")


def bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer ") or not header[7:].strip():
        raise AuthenticationError("No token provided")
    return header[7:].strip()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    from app.services.user_store import UserStore

    token = bearer_token(request)
    payload = decode_token(token)
    user_id = payload.get("userId")

    store = UserStore(db)
    if not user_id or store.get_session(token) != user_id:
        raise AuthenticationError("Invalid session")
    user = store.get_user_by_id(user_id)
    if user is None:
        raise AuthenticationError("User not found")
    request.state.token = token
    return user
