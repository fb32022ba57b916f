import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

VENDOR_ENV = (
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_GEMINI_API_KEY",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "STRIPE_PRICE_STARTER",
    "STRIPE_PRICE_STARTER_ANNUAL",
    "STRIPE_PRICE_PROFESSIONAL",
    "STRIPE_PRICE_PROFESSIONAL_ANNUAL",
    "STRIPE_PRICE_ENTERPRISE",
    "STRIPE_PRICE_ENTERPRISE_ANNUAL",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
    "D_ID_API_KEY",
    "AZURE_SPEECH_KEY",
    "GOOGLE_APPLICATION_CREDENTIALS_JSON",
    "SHOPIFY_API_KEY",
    "SHOPIFY_API_SECRET",
)


@pytest.fixture
def env(monkeypatch):
    """Start from no vendor credentials; ``env(KEY="value")`` sets some."""
    from app.config import get_settings

    for name in VENDOR_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("D_ID_POLL_INTERVAL_SECONDS", "0")
    monkeypatch.setenv("BULK_GENERATE_DELAY_SECONDS", "0")
    get_settings.cache_clear()

    def apply(**values):
        for name, value in values.items():
            monkeypatch.setenv(name, value)
        get_settings.cache_clear()
        return get_settings()

    yield apply
    get_settings.cache_clear()


@pytest.fixture
def db_session():
    from app.database import SessionLocal, reset_db

    reset_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(env):
    from fastapi.testclient import TestClient

    from app.database import reset_db
    from app.main import app

    reset_db()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def transport(monkeypatch):
    """Route every ``httpx.AsyncClient`` through a handler the test installs."""
    import httpx

    real_async_client = httpx.AsyncClient
    routes = {}

    def handler(request):
        return routes["handler"](request)

    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_async_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)

    def install(fn):
        routes["handler"] = fn

    return install
