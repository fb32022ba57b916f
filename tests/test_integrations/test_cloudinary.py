from __future__ import annotations

import hashlib

import pytest

from app.core.exceptions import ConfigurationError
from app.integrations.cloudinary import (
    CloudinaryClient,
    build_url,
    extract_public_id,
    sign_params,
    slugify,
    text_overlay,
)


def test_sign_params_skips_unsigned_and_empty_values():
    params = {
        "timestamp": 1700000000,
        "folder": "product-images",
        "public_id": "",
        "api_key": "key",
        "file": "data:image/png;base64,AAAA",
    }
    expected = hashlib.sha1(b"folder=product-images&timestamp=1700000000secret").hexdigest()
    assert sign_params(params, "secret") == expected


def test_text_overlay_builds_cloudinary_layer():
    overlay = text_overlay("Smart Mug", font_size=80, font_weight="bold", background="#000000AA", y=-200)
    assert overlay == "l_text:Arial_80_bold:Smart%20Mug,co_white,b_rgb:000000AA,g_center,y_-200"


def test_text_overlay_with_width_fits_text():
    overlay = text_overlay("Long copy", width=1000, color="#667eea")
    assert overlay == "l_text:Arial_40:Long%20copy,co_rgb:667eea,w_1000,c_fit,g_center"


@pytest.mark.parametrize(
    "url, public_id",
    [
        ("https://res.cloudinary.com/demo/image/upload/v1712/product-images/mug_1.jpg", "product-images/mug_1"),
        ("https://res.cloudinary.com/demo/image/upload/shoes.webp", "shoes"),
        ("https://example.com/image/upload/v1/shoes.jpg", None),
        ("https://res.cloudinary.com/demo/video/upload/clip.mp4", None),
    ],
)
def test_extract_public_id(url, public_id):
    assert extract_public_id(url) == public_id


def test_build_url_joins_transformations():
    url = build_url("demo", "product-images/mug", "video", ["w_1280,h_720,c_fill,q_auto,f_auto"], "mp4")
    assert url == (
        "https://res.cloudinary.com/demo/video/upload/w_1280,h_720,c_fill,q_auto,f_auto/product-images/mug.mp4"
    )
    assert build_url("demo", "sample") == "https://res.cloudinary.com/demo/image/upload/sample"


def test_slugify_replaces_whitespace():
    assert slugify("Smart  Coffee Mug") == "Smart_Coffee_Mug"


def test_client_requires_configuration(env):
    env(CLOUDINARY_CLOUD_NAME="demo")
    with pytest.raises(ConfigurationError):
        CloudinaryClient()


@pytest.mark.asyncio
async def test_upload_posts_signed_form(env, monkeypatch):
    env(CLOUDINARY_CLOUD_NAME="demo", CLOUDINARY_API_KEY="key", CLOUDINARY_API_SECRET="secret")
    captured = {}

    class FakeResponse:
        status_code = 200
        text = ""

        def json(self):
            return {"public_id": "product-images/mug", "secure_url": "https://res.cloudinary.com/x.png"}

    class FakeClient:
        def __init__(self, *args, **kwargs):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

        async def post(self, url, data=None, files=None):
            captured["url"] = url
            captured["data"] = data
            return FakeResponse()

    monkeypatch.setattr("app.integrations.cloudinary.httpx.AsyncClient", FakeClient)
    monkeypatch.setattr("app.integrations.cloudinary.time.time", lambda: 1700000000)

    result = await CloudinaryClient().upload("https://example.com/mug.jpg", folder="product-images")

    assert result["public_id"] == "product-images/mug"
    assert captured["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert captured["data"]["file"] == "https://example.com/mug.jpg"
    assert captured["data"]["api_key"] == "key"
    assert captured["data"]["signature"] == sign_params(
        {"timestamp": 1700000000, "folder": "product-images"}, "secret"
    )


def test_text_overlay_double_escapes_separators():
    overlay = text_overlay("Hot, durable, 12oz/350ml")
    assert overlay.startswith("l_text:Arial_40:Hot%252C%20durable%252C%2012oz%252F350ml,co_white")
