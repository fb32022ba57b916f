from __future__ import annotations

from typing import Any, List, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel, join_list
from app.services.video_generator import DEFAULT_AVATAR, DEFAULT_VOICE


class ProductImageRequest(CamelModel):
    product_name: Optional[str] = None
    key_features: Optional[str] = None
    product_category: Optional[str] = None
    target_audience: Optional[str] = None

    @field_validator("key_features", mode="before")
    @classmethod
    def join_features(cls, value: Any) -> Any:
        return join_list(value)


class VideoRequest(CamelModel):
    product_name: Optional[str] = None
    product_description: Optional[str] = None
    features: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    avatar: str = DEFAULT_AVATAR
    voice: str = DEFAULT_VOICE
    generate_product_showcase: bool = False

    @field_validator("features", mode="before")
    @classmethod
    def join_features(cls, value: Any) -> Any:
        return join_list(value)


class SimpleVideoRequest(CamelModel):
    product_name: str = "Product"
    product_description: str = "Amazing product description"
    images: List[str] = Field(default_factory=list)


class VoiceSampleRequest(CamelModel):
    text: Optional[str] = None
    voice_id: Optional[str] = None
