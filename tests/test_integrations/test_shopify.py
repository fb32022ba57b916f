from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest

from app.integrations.shopify import ShopifyOAuthClient, compute_hmac, valid_shop_domain


@pytest.mark.parametrize(
    "shop, ok",
    [
        ("my-store.myshopify.com", True),
        ("MyStore42.myshopify.com", True),
        ("evil.com", False),
        ("my-store.myshopify.com.evil.com", False),
        ("", False),
        (None, False),
    ],
)
def test_valid_shop_domain(shop, ok):
    assert valid_shop_domain(shop) is ok


def test_hmac_ignores_signature_fields_and_sorts_keys(env):
    env(SHOPIFY_API_SECRET="shh")
    query = {"shop": "s.myshopify.com", "code": "abc", "timestamp": "1"}
    query["hmac"] = compute_hmac(query, "shh")
    client = ShopifyOAuthClient()

    assert client.verify_hmac(query)
    assert not client.verify_hmac({**query, "code": "tampered"})
    assert not client.verify_hmac({k: v for k, v in query.items() if k != "hmac"})


def test_authorize_url(env):
    env(SHOPIFY_API_KEY="app-key", APP_URL="https://productdescriptions.io/")
    url = ShopifyOAuthClient().authorize_url("s.myshopify.com", state="nonce")
    parsed = urlparse(url)
    params = parse_qs(parsed.query)

    assert parsed.netloc == "s.myshopify.com"
    assert parsed.path == "/admin/oauth/authorize"
    assert params["client_id"] == ["app-key"]
    assert params["scope"] == ["read_products,write_products"]
    assert params["redirect_uri"] == ["https://productdescriptions.io/api/shopify/callback"]
    assert params["state"] == ["nonce"]


def test_hmac_with_non_ascii_value_is_rejected(env):
    env(SHOPIFY_API_SECRET="shh")
    query = {"shop": "s.myshopify.com", "code": "abc", "hmac": "ünïcode"}
    assert ShopifyOAuthClient().verify_hmac(query) is False
