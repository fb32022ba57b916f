"""
Health and diagnostics routes
"""
from __future__ import annotations

import platform
from datetime import datetime, timezone

from fastapi import APIRouter

from app.config import get_settings
from app.database import database_health

router = APIRouter()


def _secret_present(secret) -> bool:
    return secret is not None and bool(secret.get_secret_value())


@router.get("/health")
async def health_check() -> dict:
    """Configured vendor APIs; key values are never returned."""
    settings = get_settings()
    return {
        "status": "healthy",
        "message": "API is running",
        "apis": {
            "openai": bool(settings.openai_key),
            "gemini": bool(settings.gemini_key),
            "cloudinary": bool(settings.cloudinary_cloud_name),
            "did": bool(settings.did_key),
            "stripe": bool(settings.stripe_key),
        },
        "keyInfo": {
            "gemini_key": "GEMINI_API_KEY set" if _secret_present(settings.gemini_api_key) else "not set",
            "google_gemini_key": (
                "GOOGLE_GEMINI_API_KEY set" if _secret_present(settings.google_gemini_api_key) else "not set"
            ),
        },
        "database": database_health(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/debug")
async def debug() -> dict:
    settings = get_settings()
    gemini_key = settings.gemini_key or ""
    openai_key = settings.openai_key or ""
    return {
        "environment": {
            "python_version": platform.python_version(),
            "platform": platform.platform(),
            "app_env": settings.app_env,
        },
        "apis": {
            "gemini": {
                "configured": bool(gemini_key),
                "key_env": settings.gemini_key_env,
                "key_length": len(gemini_key),
            },
            "openai": {
                "configured": bool(openai_key),
                "key_length": len(openai_key),
            },
        },
    }
