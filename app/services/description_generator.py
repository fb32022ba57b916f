from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.config import Settings, get_settings
from app.core.exceptions import ConfigurationError, ValidationError
from app.integrations.gemini import GeminiClient
from app.integrations.openai import OpenAIClient
from app.prompts.product_prompts import (
    bulk_description_prompt,
    dalle_prompt,
    description_prompts,
    fallback_description,
)

logger = logging.getLogger(__name__)


class DescriptionGenerator:
    """Three product descriptions per request, plus an optional DALL-E image."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    async def generate(
        self,
        product_name: str,
        category: Optional[str] = None,
        audience: Optional[str] = None,
        features: Optional[str] = None,
        tone: Optional[str] = None,
        generate_images: bool = False,
    ) -> Dict[str, Any]:
        descriptions = await self._descriptions(product_name, category, audience, features, tone)
        images: List[str] = []
        if generate_images and self.settings.openai_key:
            try:
                image = await OpenAIClient(self.settings.openai_key).generate_image(
                    dalle_prompt(product_name, features)
                )
                images.append(image["url"])
            except Exception as exc:
                logger.error("DALL-E generation error: %s", exc)

        return {
            "success": True,
            "product": product_name,
            "descriptions": descriptions,
            "images": images,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def _descriptions(
        self,
        name: str,
        category: Optional[str],
        audience: Optional[str],
        features: Optional[str],
        tone: Optional[str],
    ) -> List[str]:
        if not self.settings.gemini_key:
            return [
                f"Introducing {name} - The perfect {category or 'solution'} for {audience or 'you'}.",
                f"Experience the quality of {name}. {features or 'Premium design and exceptional performance'}.",
                f"{name} - Where {tone or 'innovation'} meets excellence.",
            ]

        client = GeminiClient(self.settings.gemini_key)
        results: List[str] = []
        for prompt in description_prompts(name, category, audience, features, tone):
            try:
                results.append(await client.generate_text(prompt, model=self.settings.gemini_text_model))
            except Exception as exc:
                logger.error("Gemini generation error: %s", exc)
                results.append(fallback_description(name, category, audience))
        return results

    async def bulk_generate(self, products: Any) -> Dict[str, Any]:
        """One description per product; a failed product is reported, not raised."""
        if not isinstance(products, list):
            raise ValidationError("Invalid products data")
        if not self.settings.gemini_key:
            raise ConfigurationError(
                "Gemini API key not configured",
                {"message": "Please configure GEMINI_API_KEY in environment variables"},
            )

        client = GeminiClient(self.settings.gemini_key)
        results: List[Dict[str, Any]] = []
        for index, product in enumerate(products):
            if not isinstance(product, dict):
                product = {"product_name": str(product)}
            name = product.get("product_name")
            try:
                text = await client.generate_text(
                    bulk_description_prompt(product), model=self.settings.gemini_bulk_model
                )
                results.append({"product_name": name, "description": text.strip(), "success": True})
            except Exception as exc:
                logger.error("Bulk description failed for %s: %s", name, exc)
                results.append({"product_name": name, "description": "", "success": False, "error": str(exc)})
            if index < len(products) - 1 and self.settings.bulk_generate_delay_seconds:
                await asyncio.sleep(self.settings.bulk_generate_delay_seconds)

        return {
            "success": True,
            "results": results,
            "processed": len(results),
            "successful": sum(1 for result in results if result["success"]),
        }
