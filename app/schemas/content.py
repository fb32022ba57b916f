from __future__ import annotations

from typing import Any, Optional

from pydantic import field_validator

from app.schemas.common import CamelModel, join_list


class AnalyzeImageRequest(CamelModel):
    image_base64: Optional[str] = None
    preferred_api: Optional[str] = "openai"


class DescriptionRequest(CamelModel):
    product_name: Optional[str] = None
    product_category: Optional[str] = None
    target_audience: Optional[str] = None
    key_features: Optional[str] = None
    tone: Optional[str] = None
    generate_images: bool = False

    @field_validator("key_features", mode="before")
    @classmethod
    def join_features(cls, value: Any) -> Any:
        return join_list(value)


class BulkGenerateRequest(CamelModel):
    # Left untyped so a non-list reaches the handler and gets the API's own 400.
    products: Any = None
