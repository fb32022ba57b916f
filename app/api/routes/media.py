from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from app.core.exceptions import IntegrationError, ValidationError
from app.integrations.vertex import ADC_LOGIN_HINT, ENABLE_API_HINT, VertexAuthError
from app.prompts.product_prompts import quick_shot_prompts, studio_shot_prompts
from app.schemas.media import ProductImageRequest, SimpleVideoRequest, VideoRequest, VoiceSampleRequest
from app.services.product_images import ProductImageService, oauth_image_service
from app.services.video_generator import VideoGenerator
from app.services.voice import VoiceSampleService

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/generate-image-vertex")
async def generate_image_vertex(payload: ProductImageRequest) -> dict:
    if not payload.product_name:
        raise ValidationError("Product name is required")

    logger.info("Generating product images with Vertex AI Imagen for %s", payload.product_name)
    try:
        images = await ProductImageService().generate(
            payload.product_name,
            payload.key_features,
            payload.product_category,
            payload.target_audience,
            prompt_builder=studio_shot_prompts,
        )
    except VertexAuthError as exc:
        raise IntegrationError("Image generation failed", {"message": exc.message, **exc.details})

    if not images:
        raise IntegrationError(
            "Failed to generate images",
            {"message": "The image generation service is temporarily unavailable. Please try again."},
        )
    return {
        "success": True,
        "product": payload.product_name,
        "images": images,
        "model": "Vertex AI Imagen",
        "timestamp": _now(),
    }


@router.post("/generate-image-vertex-oauth")
async def generate_image_vertex_oauth(payload: ProductImageRequest) -> dict:
    if not payload.product_name:
        raise ValidationError("Product name is required")

    logger.info("Generating product images with Vertex AI (OAuth) for %s", payload.product_name)
    try:
        images = await oauth_image_service().generate(
            payload.product_name,
            payload.key_features,
            payload.product_category,
            payload.target_audience,
            prompt_builder=quick_shot_prompts,
        )
    except VertexAuthError as exc:
        suggestion = ADC_LOGIN_HINT
        if "not enabled" in str(exc.details.get("details", "")).lower():
            suggestion = ENABLE_API_HINT
        raise IntegrationError(
            "Image generation failed",
            {
                "message": exc.message,
                "suggestion": suggestion,
                "authMethod": "Attempted OAuth/ADC authentication",
            },
        )

    if not images:
        raise IntegrationError(
            "Failed to generate images",
            {
                "message": (
                    "The image generation service could not create images. "
                    "This might be due to authentication or API availability."
                ),
                "suggestion": ADC_LOGIN_HINT,
            },
        )
    return {
        "success": True,
        "product": payload.product_name,
        "images": images,
        "model": "Vertex AI Imagen (OAuth)",
        "authMethod": "Application Default Credentials",
        "timestamp": _now(),
    }


@router.post("/generate-video")
async def generate_video(payload: VideoRequest) -> dict:
    if not payload.product_name or not payload.product_description:
        raise ValidationError("Product name and description are required")
    return await VideoGenerator().generate(
        payload.product_name,
        payload.product_description,
        features=payload.features,
        images=payload.images,
        avatar=payload.avatar,
        voice=payload.voice,
        product_showcase=payload.generate_product_showcase,
    )


@router.post("/generate-video-simple")
async def generate_video_simple(payload: SimpleVideoRequest) -> dict:
    return await VideoGenerator().generate_simple(payload.product_name, payload.images)


@router.post("/generate-voice-sample")
async def generate_voice_sample(payload: VoiceSampleRequest) -> dict:
    if not payload.text or not payload.voice_id:
        raise ValidationError("Text and voiceId are required")
    return await VoiceSampleService().synthesize(payload.text, payload.voice_id)
