from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

import httpx

from app.config import get_settings
from app.core.exceptions import IntegrationError

SCOPES = "read_products,write_products"
ADMIN_API_VERSION = "2024-01"
SHOP_DOMAIN = re.compile(r"^[a-zA-Z0-9-]+\.myshopify\.com$")


def valid_shop_domain(shop: Optional[str]) -> bool:
    return bool(shop) and SHOP_DOMAIN.match(shop) is not None


def compute_hmac(query: Mapping[str, str], secret: str) -> str:
    message = "&".join(
        f"{key}={query[key]}" for key in sorted(query) if key not in ("hmac", "signature")
    )
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


class ShopifyOAuthClient:
    """Shopify app install flow: authorize redirect, HMAC check, token exchange."""

    def __init__(self, api_key: Optional[str] = None, api_secret: Optional[str] = None):
        settings = get_settings()
        self.api_key = api_key or settings.shopify_api_key
        self.api_secret = api_secret or settings.shopify_api_secret.get_secret_value()
        self.app_url = settings.app_url

    @property
    def redirect_uri(self) -> str:
        return f"{self.app_url}/api/shopify/callback"

    def authorize_url(self, shop: str, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.api_key,
            "scope": SCOPES,
            "redirect_uri": self.redirect_uri,
            "state": state or secrets.token_hex(16),
        }
        return f"https://{shop}/admin/oauth/authorize?{urlencode(params, safe=',:/')}"

    def verify_hmac(self, query: Mapping[str, str]) -> bool:
        provided = query.get("hmac") or ""
        return hmac.compare_digest(compute_hmac(query, self.api_secret).encode("utf-8"), provided.encode("utf-8"))

    async def exchange_code(self, shop: str, code: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                f"https://{shop}/admin/oauth/access_token",
                json={"client_id": self.api_key, "client_secret": self.api_secret, "code": code},
            )
        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        if response.status_code != 200 or not isinstance(data, dict) or not data.get("access_token"):
            raise IntegrationError("Failed to get access token", {"details": data or response.text})
        return data

    async def get_shop(self, shop: str, access_token: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.get(
                f"https://{shop}/admin/api/{ADMIN_API_VERSION}/shop.json",
                headers={"X-Shopify-Access-Token": access_token},
            )
        if response.status_code != 200:
            raise IntegrationError("Failed to fetch shop information", {"details": response.text})
        return response.json().get("shop") or {}

    def embed_url(self, shop: str) -> str:
        return f"https://{shop}/admin/apps/{self.api_key}"
