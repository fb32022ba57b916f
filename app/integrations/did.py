from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from app.config import get_settings
from app.core.exceptions import ConfigurationError, IntegrationError

logger = logging.getLogger(__name__)


class DIDClient:
    """D-ID talking-avatar API client."""

    BASE_URL = "https://api.d-id.com"
    AVATAR_IMAGE_URL = "https://create-images-results.d-id.com/api/images/{avatar}/image.jpeg"

    def __init__(
        self,
        api_key: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
    ):
        settings = get_settings()
        key = api_key or settings.did_key
        if not key:
            raise ConfigurationError("D_ID_API_KEY not configured")
        self.api_key = key
        self.poll_interval = settings.d_id_poll_interval_seconds if poll_interval is None else poll_interval
        self.max_attempts = max_attempts or settings.d_id_max_poll_attempts

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Basic {self.api_key}",
            "Content-Type": "application/json",
            "accept": "application/json",
        }

    async def create_talk(self, script: str, avatar: str, voice: str) -> str:
        payload = {
            "source_url": self.AVATAR_IMAGE_URL.format(avatar=avatar),
            "script": {
                "type": "text",
                "input": script,
                "provider": {"type": "microsoft", "voice_id": voice},
            },
            "config": {"fluent": True, "pad_audio": 0.0},
        }
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(f"{self.BASE_URL}/talks", json=payload, headers=self._headers())

        data = _json_body(response)
        if not response.is_success:
            message = data.get("message") or data.get("error") or response.reason_phrase or "Unknown error"
            raise IntegrationError(f"D-ID API Error: {message}", {"details": data or response.text})
        talk_id = data.get("id")
        if not talk_id:
            raise IntegrationError("D-ID API Error: no talk id returned", {"details": data})
        logger.info("D-ID talk %s created", talk_id)
        return talk_id

    async def get_talk(self, talk_id: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.get(f"{self.BASE_URL}/talks/{talk_id}", headers=self._headers())
        response.raise_for_status()
        data = _json_body(response)
        if not data:
            raise IntegrationError("D-ID API Error: unreadable talk status", {"details": response.text})
        return data

    async def wait_for_result(self, talk_id: str) -> str:
        """Poll the talk until it is done and return its ``result_url``."""
        for attempt in range(self.max_attempts):
            await asyncio.sleep(self.poll_interval)
            status = await self.get_talk(talk_id)
            if status.get("status") == "done" and status.get("result_url"):
                return status["result_url"]
            if status.get("status") == "error":
                raise IntegrationError("D-ID video generation failed", {"details": status.get("error")})
            logger.debug("D-ID talk %s still %s (attempt %d)", talk_id, status.get("status"), attempt + 1)
        raise IntegrationError("D-ID video generation timed out", {"details": talk_id})

    async def create_video(self, script: str, avatar: str, voice: str) -> str:
        talk_id = await self.create_talk(script, avatar, voice)
        return await self.wait_for_result(talk_id)

    @staticmethod
    async def download(url: str) -> bytes:
        async with httpx.AsyncClient(timeout=120.0, follow_redirects=True) as client:
            response = await client.get(url)
        response.raise_for_status()
        return response.content


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    """Parsed JSON object, or an empty dict for HTML error pages and other non-JSON bodies."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
