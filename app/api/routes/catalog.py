from __future__ import annotations

from fastapi import APIRouter, Response

from app.config import get_settings
from app.services.catalog import (
    AVATARS,
    DEFAULT_AVATAR,
    DEFAULT_VOICE,
    VIDEO_PRICING,
    VOICES,
    avatars_by_category,
    pricing_table,
)

router = APIRouter()


@router.get("/get-avatars")
async def get_avatars() -> dict:
    return {
        "success": True,
        "avatars": AVATARS,
        "avatarsByCategory": avatars_by_category(),
        "voices": VOICES,
        "defaultAvatar": DEFAULT_AVATAR,
        "defaultVoice": DEFAULT_VOICE,
    }


@router.get("/get-pricing")
async def get_pricing() -> dict:
    return {
        "success": True,
        "pricing": pricing_table(get_settings()),
        "currency": "USD",
        "billingCycle": "monthly",
    }


@router.get("/config")
async def public_config(response: Response) -> dict:
    """Public, non-secret configuration for the frontend."""
    settings = get_settings()
    response.headers["Cache-Control"] = "s-maxage=3600, stale-while-revalidate"
    return {
        "posthogKey": settings.posthog_api_key,
        "googleClientId": settings.google_client_id,
        "stripePublishableKey": settings.stripe_publishable_key,
        "features": {
            "videoUpsell": True,
            "bulkUpload": True,
            "imageAnalysis": True,
            "googleAuth": True,
            "guestMode": True,
        },
        "pricing": {"singleVideo": VIDEO_PRICING["single"], "tripleVideo": VIDEO_PRICING["triple"]},
        "environment": settings.app_env,
    }
