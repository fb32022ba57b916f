from __future__ import annotations

import hashlib
import logging
import re
import time
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import quote

import httpx

from app.config import get_settings
from app.core.exceptions import ConfigurationError, IntegrationError

logger = logging.getLogger(__name__)

DELIVERY_HOST = "https://res.cloudinary.com"
PUBLIC_ID_PATTERN = re.compile(r"upload/(?:v\d+/)?(.+)\.(jpg|png|jpeg|webp)", re.IGNORECASE)

# Parameters Cloudinary leaves out of the upload signature.
UNSIGNED_PARAMS = {"file", "api_key", "resource_type", "cloud_name"}


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """SHA-1 over the sorted ``key=value`` pairs followed by the API secret."""
    to_sign = "&".join(
        f"{key}={value}"
        for key, value in sorted(params.items())
        if key not in UNSIGNED_PARAMS and value not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def text_overlay(
    text: str,
    font_family: str = "Arial",
    font_size: int = 40,
    font_weight: Optional[str] = None,
    color: str = "white",
    gravity: str = "center",
    y: Optional[int] = None,
    background: Optional[str] = None,
    width: Optional[int] = None,
) -> str:
    """Build a ``l_text:`` overlay transformation component."""
    style = f"{font_family}_{font_size}"
    if font_weight:
        style += f"_{font_weight}"
    parts = [f"l_text:{style}:{_overlay_text(text)}", f"co_{_color(color)}"]
    if background:
        parts.append(f"b_{_color(background)}")
    if width:
        parts.extend([f"w_{width}", "c_fit"])
    parts.append(f"g_{gravity}")
    if y is not None:
        parts.append(f"y_{y}")
    return ",".join(parts)


def _overlay_text(text: str) -> str:
    # Commas and slashes separate transformations, so they stay escaped after URL decoding.
    return quote(text, safe="").replace("%2C", "%252C").replace("%2F", "%252F")


def _color(value: str) -> str:
    if value.startswith("#"):
        return f"rgb:{value[1:]}"
    return value


def extract_public_id(url: str) -> Optional[str]:
    """Return the public id of a Cloudinary image delivery URL, if it is one."""
    if "cloudinary.com" not in url:
        return None
    match = PUBLIC_ID_PATTERN.search(url)
    return match.group(1) if match else None


def slugify(value: str, pattern: str = r"\s+") -> str:
    return re.sub(pattern, "_", value)


class CloudinaryClient:
    """Signed Cloudinary upload API plus delivery URL helpers."""

    API_BASE = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        timeout: float = 120.0,
    ):
        settings = get_settings()
        secret = settings.cloudinary_api_secret.get_secret_value() if settings.cloudinary_api_secret else None
        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        self.api_key = api_key or settings.cloudinary_api_key
        self.api_secret = api_secret or secret
        if not (self.cloud_name and self.api_key and self.api_secret):
            raise ConfigurationError("Cloudinary is not configured")
        self.timeout = timeout

    def url(
        self,
        public_id: str,
        resource_type: str = "image",
        transformations: Iterable[str] = (),
        fmt: Optional[str] = None,
    ) -> str:
        return build_url(self.cloud_name, public_id, resource_type, transformations, fmt)

    async def upload(
        self,
        file: Union[str, bytes],
        resource_type: str = "image",
        folder: Optional[str] = None,
        public_id: Optional[str] = None,
        tags: Optional[List[str]] = None,
        **options: Any,
    ) -> Dict[str, Any]:
        """Upload a remote URL, data URI or raw bytes and return Cloudinary's JSON."""
        params: Dict[str, Any] = {"timestamp": int(time.time()), **options}
        if folder:
            params["folder"] = folder
        if public_id:
            params["public_id"] = public_id
        if tags:
            params["tags"] = ",".join(tags)
        params["signature"] = sign_params(params, self.api_secret)
        params["api_key"] = self.api_key

        endpoint = f"{self.API_BASE}/{self.cloud_name}/{resource_type}/upload"
        data = {key: str(value) for key, value in params.items()}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            if isinstance(file, bytes):
                response = await client.post(endpoint, data=data, files={"file": ("upload", file)})
            else:
                response = await client.post(endpoint, data={**data, "file": file})

        if response.status_code != 200:
            logger.error("Cloudinary upload failed (%s): %s", response.status_code, response.text)
            raise IntegrationError("Cloudinary upload failed", {"details": response.text})
        result = response.json()
        logger.info("Uploaded %s to Cloudinary as %s", resource_type, result.get("public_id"))
        return result


def build_url(
    cloud_name: Optional[str],
    public_id: str,
    resource_type: str = "image",
    transformations: Iterable[str] = (),
    fmt: Optional[str] = None,
) -> str:
    path = "/".join(t for t in transformations if t)
    suffix = f".{fmt}" if fmt else ""
    segments = [f"{DELIVERY_HOST}/{cloud_name}/{resource_type}/upload"]
    if path:
        segments.append(path)
    segments.append(f"{public_id}{suffix}")
    return "/".join(segments)
