"""
SQLAlchemy models for ProductDescriptions.io.
"""
from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    password_hash = Column(Text, nullable=False)
    plan = Column(Text, nullable=False, default="free")
    stripe_customer_id = Column(Text)
    email_verified = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    credits = relationship("UserCredits", uselist=False, cascade="all, delete-orphan")


class UserCredits(Base):
    __tablename__ = "credits"

    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    descriptions = Column(Integer, nullable=False, default=0)
    images = Column(Integer, nullable=False, default=0)
    videos = Column(Integer, nullable=False, default=0)
    bulk = Column(Integer, nullable=False, default=0)
    reset_date = Column(DateTime(timezone=True), nullable=False)


class UsageRecord(Base):
    __tablename__ = "usage_records"
    __table_args__ = (UniqueConstraint("user_id", "day", "kind", name="uq_usage_user_day_kind"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(Date, nullable=False)
    kind = Column(Text, nullable=False)
    amount = Column(Integer, nullable=False, default=0)


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    token = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
