"""
Static catalogue data: video avatars, neural voices, plans and pricing.
"""
from __future__ import annotations

from typing import Any, Dict, List

from app.config import Settings

DEFAULT_AVATAR = "professional-female"
DEFAULT_VOICE = "en-US-JennyNeural"

_DICEBEAR = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}&backgroundColor={bg}"

AVATARS: List[Dict[str, str]] = [
    {"id": avatar_id, "name": name, "imageUrl": _DICEBEAR.format(seed=name, bg=bg), "description": description, "category": category}
    for avatar_id, name, bg, description, category in (
        ("professional-male", "Alex", "b6e3f4", "Professional male presenter", "Professional"),
        ("professional-female", "Sarah", "c0aede", "Professional female presenter", "Professional"),
        ("casual-male", "Mike", "ffd5dc", "Friendly casual male", "Casual"),
        ("casual-female", "Emma", "ffc9a9", "Friendly casual female", "Casual"),
        ("young-male", "Tyler", "a8e6cf", "Young energetic male", "Young & Energetic"),
        ("young-female", "Zoe", "ffd3b6", "Young energetic female", "Young & Energetic"),
        ("mature-male", "Robert", "d5d5d5", "Mature professional male", "Mature"),
        ("mature-female", "Diana", "ffaaa5", "Mature professional female", "Mature"),
    )
]

VOICES: List[Dict[str, str]] = [
    {"id": "en-US-JennyNeural", "name": "Jenny", "accent": "US", "gender": "Female", "description": "Clear American female voice"},
    {"id": "en-US-GuyNeural", "name": "Guy", "accent": "US", "gender": "Male", "description": "Professional American male voice"},
    {"id": "en-US-AriaNeural", "name": "Aria", "accent": "US", "gender": "Female", "description": "Friendly American female voice"},
    {"id": "en-US-DavisNeural", "name": "Davis", "accent": "US", "gender": "Male", "description": "Casual American male voice"},
    {"id": "en-GB-SoniaNeural", "name": "Sonia", "accent": "UK", "gender": "Female", "description": "British female voice"},
    {"id": "en-GB-RyanNeural", "name": "Ryan", "accent": "UK", "gender": "Male", "description": "British male voice"},
    {"id": "en-AU-NatashaNeural", "name": "Natasha", "accent": "Australian", "gender": "Female", "description": "Australian female voice"},
    {"id": "en-AU-WilliamNeural", "name": "William", "accent": "Australian", "gender": "Male", "description": "Australian male voice"},
]

# -1 means unlimited.
PLAN_FEATURES: Dict[str, Dict[str, Any]] = {
    "free": {
        "descriptionsPerMonth": 5,
        "imagesPerProduct": 1,
        "videosPerMonth": 0,
        "bulkUpload": False,
        "apiAccess": False,
        "prioritySupport": False,
    },
    "starter": {
        "descriptionsPerMonth": 100,
        "imagesPerProduct": 3,
        "videosPerMonth": 10,
        "bulkUpload": False,
        "apiAccess": False,
        "prioritySupport": False,
    },
    "professional": {
        "descriptionsPerMonth": 500,
        "imagesPerProduct": -1,
        "videosPerMonth": 50,
        "bulkUpload": True,
        "apiAccess": True,
        "prioritySupport": True,
    },
    "enterprise": {
        "descriptionsPerMonth": -1,
        "imagesPerProduct": -1,
        "videosPerMonth": -1,
        "bulkUpload": True,
        "apiAccess": True,
        "prioritySupport": True,
        "customIntegrations": True,
        "sla": True,
    },
}

VIDEO_PRICING = {"single": 29, "triple": 69}
BULK_VIDEO_PRICE = 199


def avatars_by_category() -> Dict[str, List[Dict[str, str]]]:
    grouped: Dict[str, List[Dict[str, str]]] = {}
    for avatar in AVATARS:
        grouped.setdefault(avatar["category"], []).append(avatar)
    return grouped


def pricing_table(settings: Settings) -> Dict[str, Dict[str, Any]]:
    return {
        "free": {
            "name": "Free",
            "price": 0,
            "features": [
                "5 product descriptions per month",
                "Basic AI descriptions",
                "Standard templates",
                "Community support",
            ],
            "limits": {"descriptionsPerMonth": 5, "imagesPerProduct": 1, "videosPerMonth": 0},
        },
        "starter": {
            "name": "Starter",
            "price": 19,
            "priceId": settings.stripe_price_starter or "price_starter_placeholder",
            "features": [
                "100 product descriptions per month",
                "Advanced AI descriptions",
                "Custom tone & style",
                "Image generation",
                "10 AI videos per month",
                "Email support",
            ],
            "limits": {"descriptionsPerMonth": 100, "imagesPerProduct": 3, "videosPerMonth": 10},
        },
        "professional": {
            "name": "Professional",
            "price": 49,
            "priceId": settings.stripe_price_professional or "price_professional_placeholder",
            "features": [
                "500 product descriptions per month",
                "Premium AI descriptions",
                "Multiple languages",
                "Unlimited image generation",
                "50 AI videos per month",
                "Bulk upload",
                "Priority support",
            ],
            "limits": {"descriptionsPerMonth": 500, "imagesPerProduct": 10, "videosPerMonth": 50},
            "popular": True,
        },
        "enterprise": {
            "name": "Enterprise",
            "price": 149,
            "priceId": settings.stripe_price_enterprise or "price_enterprise_placeholder",
            "features": [
                "Unlimited product descriptions",
                "Custom AI training",
                "API access",
                "Unlimited image generation",
                "Unlimited AI videos",
                "Custom integrations",
                "Dedicated support",
                "SLA guarantee",
            ],
            "limits": {"descriptionsPerMonth": -1, "imagesPerProduct": -1, "videosPerMonth": -1},
        },
    }
