from __future__ import annotations

import logging
from typing import Optional
from xml.sax.saxutils import escape, quoteattr

import httpx

from app.config import get_settings
from app.core.exceptions import ConfigurationError, IntegrationError

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "audio-16khz-32kbitrate-mono-mp3"


class SpeechSynthesisError(IntegrationError):
    """Azure accepted the connection but refused to synthesize."""


def build_ssml(text: str, voice: str) -> str:
    lang = "-".join(voice.split("-")[:2]) or "en-US"
    return (
        f"<speak version='1.0' xml:lang={quoteattr(lang)}>"
        f"<voice name={quoteattr(voice)}>{escape(text)}</voice>"
        "</speak>"
    )


class AzureSpeechClient:
    """Azure Cognitive Services text-to-speech over REST."""

    def __init__(self, api_key: Optional[str] = None, region: Optional[str] = None, timeout: float = 30.0):
        settings = get_settings()
        key = api_key or settings.azure_key
        if not key:
            raise ConfigurationError("AZURE_SPEECH_KEY not configured")
        self.api_key = key
        self.region = region or settings.azure_speech_region
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"https://{self.region}.tts.speech.microsoft.com/cognitiveservices/v1"

    async def synthesize(self, text: str, voice: str) -> bytes:
        """Return MP3 bytes; transport failures propagate as ``httpx.HTTPError``."""
        headers = {
            "Ocp-Apim-Subscription-Key": self.api_key,
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": OUTPUT_FORMAT,
            "User-Agent": "productdescriptions-api",
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.endpoint, content=build_ssml(text, voice).encode("utf-8"), headers=headers)

        if response.status_code != 200:
            details = response.text or response.reason_phrase
            logger.error("Speech synthesis failed (%s): %s", response.status_code, details)
            raise SpeechSynthesisError("Failed to generate speech", {"details": details})
        return response.content
