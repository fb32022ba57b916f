from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import get_settings
from app.core.exceptions import ConfigurationError, IntegrationError

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Thin OpenAI REST client for vision chat and DALL-E images."""

    BASE_URL = "https://api.openai.com/v1"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 60.0):
        key = api_key or get_settings().openai_key
        if not key:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        self.api_key = key
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        model: str = "gpt-4o-mini",
        max_tokens: int = 1000,
        temperature: float = 0.3,
    ) -> str:
        payload = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(f"{self.BASE_URL}/chat/completions", json=payload, headers=self._headers())

        if response.status_code != 200:
            raise IntegrationError("OpenAI API error", {"details": response.text})
        try:
            return response.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, LookupError, TypeError):
            logger.error("Unexpected OpenAI chat response: %s", response.text[:500])
            raise IntegrationError("OpenAI API error", {"details": "Malformed chat completion response"})

    async def analyze_image(self, prompt: str, image_base64: str, model: str = "gpt-4o-mini") -> str:
        """Send a text prompt plus a base64 JPEG to a vision-capable chat model."""
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:image/jpeg;base64,{image_base64}", "detail": "high"},
                    },
                ],
            }
        ]
        return await self.chat_completion(messages, model=model, max_tokens=1000, temperature=0.3)

    async def generate_image(self, prompt: str, size: str = "1024x1024") -> Dict[str, Any]:
        payload = {"model": "dall-e-3", "prompt": prompt, "n": 1, "size": size}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(f"{self.BASE_URL}/images/generations", json=payload, headers=self._headers())

        if response.status_code != 200:
            raise IntegrationError("DALL-E API error", {"details": response.text})
        try:
            image = response.json()["data"][0]
            return {"url": image["url"], "revised_prompt": image.get("revised_prompt")}
        except (ValueError, LookupError, TypeError, AttributeError):
            logger.error("Unexpected DALL-E response: %s", response.text[:500])
            raise IntegrationError("DALL-E API error", {"details": "Malformed image generation response"})
