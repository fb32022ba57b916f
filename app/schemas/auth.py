from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class DeductCreditsRequest(CamelModel):
    credit_type: Optional[str] = Field(default=None, alias="type")
    amount: int = Field(default=1, ge=1)


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    plan: str
