from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

from app.core.exceptions import AppError, AuthenticationError, IntegrationError, ValidationError
from app.integrations.shopify import ShopifyOAuthClient, valid_shop_domain

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/auth")
async def shopify_auth(request: Request):
    query = dict(request.query_params)
    shop = query.get("shop")
    if not shop:
        raise ValidationError("Missing shop parameter")
    if not valid_shop_domain(shop):
        raise ValidationError("Invalid shop domain")

    client = ShopifyOAuthClient()
    code = query.get("code")
    if not code:
        return RedirectResponse(client.authorize_url(shop), status_code=status.HTTP_302_FOUND)

    if not client.verify_hmac(query):
        raise AuthenticationError("Invalid HMAC signature")

    try:
        token = await client.exchange_code(shop, code)
        shop_data = await client.get_shop(shop, token["access_token"])
    except Exception as exc:
        logger.error("Shopify installation failed for %s: %s", shop, exc)
        details = exc.message if isinstance(exc, AppError) else str(exc)
        raise IntegrationError("Installation failed", {"details": details})

    logger.info("Shopify store %s installed the app", shop)
    return {
        "success": True,
        "shop": shop,
        "shopName": shop_data.get("name"),
        "scope": token.get("scope"),
        "embedUrl": client.embed_url(shop),
    }


@router.get("/callback")
async def shopify_callback(request: Request) -> RedirectResponse:
    target = "/api/shopify/auth"
    if request.query_params:
        target = f"{target}?{urlencode(list(request.query_params.multi_items()))}"
    return RedirectResponse(target, status_code=status.HTTP_302_FOUND)
