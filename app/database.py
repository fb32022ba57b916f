"""
Database connection and session management.
"""
from __future__ import annotations

from typing import Any, Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings


def _build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        # In-memory SQLite lives in one connection; share it across request threads.
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=False,
    )


engine: Engine = _build_engine(get_settings().database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting a database session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Create tables for all registered models.
    """
    from app.models import Base

    Base.metadata.create_all(bind=engine)


def reset_db() -> None:
    """
    Drop and recreate every table. Used by tests to get an empty store.
    """
    from app.models import Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def database_health() -> dict[str, Any]:
    """
    Return structured database health details.
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return {"ok": True, "dialect": engine.dialect.name}
    except SQLAlchemyError as exc:
        return {"ok": False, "error": str(exc)}
