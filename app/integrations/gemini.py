from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from app.config import get_settings
from app.core.exceptions import ConfigurationError, IntegrationError


class GeminiClient:
    """Google Generative Language (Gemini) REST client."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 60.0):
        key = api_key or get_settings().gemini_key
        if not key:
            raise ConfigurationError("GEMINI_API_KEY not configured")
        self.api_key = key
        self.timeout = timeout

    async def generate_content(self, parts: List[Dict[str, Any]], model: str) -> str:
        url = f"{self.BASE_URL}/models/{model}:generateContent"
        payload = {"contents": [{"parts": parts}]}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(url, json=payload, params={"key": self.api_key})

        if response.status_code != 200:
            raise IntegrationError("Gemini API error", {"details": response.text})
        try:
            data = response.json()
        except ValueError:
            raise IntegrationError("Gemini API error", {"details": "Response was not JSON"})
        return self.extract_text(data)

    async def generate_text(self, prompt: str, model: str = "gemini-pro") -> str:
        return await self.generate_content([{"text": prompt}], model=model)

    async def analyze_image(self, prompt: str, image_base64: str, model: str = "gemini-1.5-flash") -> str:
        parts = [
            {"text": prompt},
            {"inline_data": {"mime_type": "image/jpeg", "data": image_base64}},
        ]
        return await self.generate_content(parts, model=model)

    @staticmethod
    def extract_text(data: Any) -> str:
        if not isinstance(data, dict):
            raise IntegrationError("Gemini API error", {"details": "Unexpected response shape"})
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            raise IntegrationError(
                "Gemini returned no candidates",
                {"details": feedback.get("blockReason", "empty response")},
            )
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
