from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple

import google.auth
import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from app.config import get_settings
from app.core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]
IMAGEN_MODEL = "imagegeneration@006"
DEFAULT_PROJECT = "rare-result-471417-k0"

ADC_LOGIN_HINT = "Run: gcloud auth application-default login"
ENABLE_API_HINT = "Run: gcloud services enable aiplatform.googleapis.com"


class VertexAuthError(IntegrationError):
    """No usable Google credentials could be obtained."""


class VertexImagenClient:
    """Vertex AI Imagen ``:predict`` over REST with google-auth bearer tokens."""

    def __init__(self, use_service_account: bool = True):
        settings = get_settings()
        self.project = settings.google_cloud_project
        self.location = settings.google_cloud_location
        secret = settings.google_application_credentials_json
        self.service_account_info = secret.get_secret_value() if (use_service_account and secret) else None

    def _load_credentials(self) -> Tuple[Any, Optional[str]]:
        if self.service_account_info:
            info = json.loads(self.service_account_info)
            creds = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
            return creds, info.get("project_id")
        return google.auth.default(scopes=SCOPES)

    def _access_token(self) -> Tuple[str, str]:
        try:
            creds, detected_project = self._load_credentials()
            if not creds.valid:
                creds.refresh(GoogleAuthRequest())
        except (GoogleAuthError, ValueError) as exc:
            logger.error("Vertex AI credential lookup failed: %s", exc)
            raise VertexAuthError(
                "Could not obtain access token",
                {"details": str(exc), "suggestion": ADC_LOGIN_HINT},
            )
        if not creds.token:
            raise VertexAuthError("Could not obtain access token", {"suggestion": ADC_LOGIN_HINT})
        return creds.token, self.project or detected_project or DEFAULT_PROJECT

    def endpoint(self, project: str) -> str:
        return (
            f"https://{self.location}-aiplatform.googleapis.com/v1/projects/{project}"
            f"/locations/{self.location}/publishers/google/models/{IMAGEN_MODEL}:predict"
        )

    async def generate_image(self, prompt: str) -> str:
        """Return the base64 PNG of a single generated image."""
        token, project = await asyncio.to_thread(self._access_token)
        payload: Dict[str, Any] = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": "1:1",
                "safetyFilterLevel": "block_some",
                "personGeneration": "allow_adult",
            },
        }
        async with httpx.AsyncClient(timeout=120.0) as client:
            response = await client.post(
                self.endpoint(project),
                json=payload,
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
            )

        if response.status_code != 200:
            details: Dict[str, Any] = {"details": response.text}
            if response.status_code == 403:
                details["suggestion"] = ENABLE_API_HINT
            elif response.status_code == 404:
                details["suggestion"] = "The Imagen model might not be available in this region"
            raise IntegrationError(f"Vertex AI error ({response.status_code})", details)

        predictions = response.json().get("predictions") or []
        if not predictions or not predictions[0].get("bytesBase64Encoded"):
            raise IntegrationError("Vertex AI returned no image")
        return predictions[0]["bytesBase64Encoded"]
