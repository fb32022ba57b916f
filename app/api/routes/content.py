from __future__ import annotations

import logging

from fastapi import APIRouter

from app.core.exceptions import AppError, ConfigurationError, IntegrationError, ValidationError
from app.schemas.content import AnalyzeImageRequest, BulkGenerateRequest, DescriptionRequest
from app.services.description_generator import DescriptionGenerator
from app.services.image_analysis import ImageAnalysisService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analyze-image")
async def analyze_image(payload: AnalyzeImageRequest) -> dict:
    if not payload.image_base64:
        raise ValidationError("No image provided")
    try:
        return await ImageAnalysisService().analyze(payload.image_base64, payload.preferred_api)
    except ConfigurationError:
        raise
    except Exception as exc:
        logger.exception("Image analysis error")
        details = exc.details.get("details", exc.message) if isinstance(exc, AppError) else str(exc)
        raise IntegrationError("Failed to analyze image", {"details": details})


@router.post("/generate-description")
async def generate_description(payload: DescriptionRequest) -> dict:
    if not payload.product_name:
        raise ValidationError("Product name is required")
    return await DescriptionGenerator().generate(
        payload.product_name,
        category=payload.product_category,
        audience=payload.target_audience,
        features=payload.key_features,
        tone=payload.tone,
        generate_images=payload.generate_images,
    )


@router.post("/bulk-generate")
async def bulk_generate(payload: BulkGenerateRequest) -> dict:
    return await DescriptionGenerator().bulk_generate(payload.products)
