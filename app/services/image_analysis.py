"""
Product image analysis with a static provider fallback order.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from app.config import Settings, get_settings
from app.core.exceptions import ConfigurationError, IntegrationError
from app.integrations.gemini import GeminiClient
from app.integrations.openai import OpenAIClient
from app.prompts.product_prompts import GEMINI_IMAGE_ANALYSIS_PROMPT, IMAGE_ANALYSIS_PROMPT

logger = logging.getLogger(__name__)

JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def select_provider(preferred_api: Optional[str], settings: Settings) -> str:
    """Gemini when asked for and configured, else OpenAI, else Gemini."""
    if preferred_api == "gemini" and settings.gemini_key:
        return "gemini"
    if settings.openai_key:
        return "openai"
    if settings.gemini_key:
        return "gemini"
    raise ConfigurationError("No AI API keys configured")


def parse_attributes(text: str) -> Dict[str, Any]:
    match = JSON_BLOCK.search(text)
    try:
        return json.loads(match.group(0) if match else text)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse AI response: %s", exc)
        raise IntegrationError("Failed to parse AI response")


class ImageAnalysisService:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    async def analyze(self, image_base64: str, preferred_api: Optional[str] = "openai") -> Dict[str, Any]:
        provider = select_provider(preferred_api, self.settings)
        logger.info("Analyzing product image with %s", provider)
        if provider == "gemini":
            client = GeminiClient(self.settings.gemini_key)
            text = await client.analyze_image(
                GEMINI_IMAGE_ANALYSIS_PROMPT, image_base64, model=self.settings.gemini_vision_model
            )
        else:
            client = OpenAIClient(self.settings.openai_key)
            text = await client.analyze_image(
                IMAGE_ANALYSIS_PROMPT, image_base64, model=self.settings.openai_vision_model
            )
        return parse_attributes(text)
