from __future__ import annotations

import pytest

from app.core.exceptions import IntegrationError
from app.services import video_generator
from app.services.video_generator import DEMO_VIDEO_URL, VideoGenerator

CLOUDINARY = {
    "CLOUDINARY_CLOUD_NAME": "demo",
    "CLOUDINARY_API_KEY": "key",
    "CLOUDINARY_API_SECRET": "secret",
}


@pytest.mark.asyncio
async def test_demo_mode_returns_script_without_video(env):
    result = await VideoGenerator(env()).generate("Smart Mug", "Keeps coffee hot.", features="app control")

    assert result["demoMode"] is True
    assert result["videoUrl"] is None
    assert result["script"] == (
        "Hey everyone! Let me tell you about the amazing Smart Mug. Keeps coffee hot. "
        "Key features include: app control This is definitely worth checking out!"
    )


@pytest.mark.asyncio
async def test_placeholder_did_key_is_ignored(env):
    settings = env(D_ID_API_KEY="your_did_api_key_here")
    result = await VideoGenerator(settings).generate("Smart Mug", "Keeps coffee hot.")
    assert result["demoMode"] is True


@pytest.mark.asyncio
async def test_text_video_when_only_cloudinary_is_configured(env):
    result = await VideoGenerator(env(**CLOUDINARY)).generate("Smart Mug", "Keeps coffee hot.")

    assert result["textMode"] is True
    assert result["videoUrl"].startswith("https://res.cloudinary.com/demo/video/upload/b_black,du_5,h_720,w_1280/")
    assert result["videoUrl"].endswith("/sample.mp4")
    assert "l_text:Arial_100_bold:Smart%20Mug" in result["videoUrl"]


@pytest.mark.asyncio
async def test_did_failure_falls_back_to_cloudinary(env, monkeypatch):
    settings = env(D_ID_API_KEY="a-real-looking-key-with-length", **CLOUDINARY)

    async def failing_create_video(self, script, avatar, voice):
        raise IntegrationError("D-ID API Error: quota exceeded")

    monkeypatch.setattr(video_generator.DIDClient, "create_video", failing_create_video)

    result = await VideoGenerator(settings).generate("Smart Mug", "Keeps coffee hot.")
    assert result["textMode"] is True


@pytest.mark.asyncio
async def test_avatar_video_with_showcase_overlay(env, monkeypatch):
    settings = env(D_ID_API_KEY="a-real-looking-key-with-length", **CLOUDINARY)

    async def fake_create_video(self, script, avatar, voice):
        assert avatar == "amy-Aq6OmGZpMt"
        return "https://d-id.example/result.mp4"

    async def fake_download(url):
        return b"mp4-bytes"

    async def fake_upload(self, file, resource_type="image", folder=None, public_id=None, tags=None, **options):
        assert file == b"mp4-bytes"
        assert resource_type == "video"
        return {"public_id": "product-videos/Smart_Mug_1", "secure_url": "https://res.cloudinary.com/demo/v.mp4"}

    monkeypatch.setattr(video_generator.DIDClient, "create_video", fake_create_video)
    monkeypatch.setattr(video_generator.DIDClient, "download", staticmethod(fake_download))
    monkeypatch.setattr(video_generator.CloudinaryClient, "upload", fake_upload)

    result = await VideoGenerator(settings).generate(
        "Smart Mug",
        "Keeps coffee hot.",
        images=["https://res.cloudinary.com/demo/image/upload/mug.png"],
        product_showcase=True,
    )

    assert result["originalVideoUrl"] == "https://res.cloudinary.com/demo/v.mp4"
    assert "l_mug" in result["videoUrl"]
    assert result["cloudinaryVideo"] is True


@pytest.mark.asyncio
async def test_simple_video_from_cloudinary_image(env):
    result = await VideoGenerator(env(**CLOUDINARY)).generate_simple(
        "Mug", ["https://res.cloudinary.com/demo/image/upload/v123/product-images/mug.jpg"]
    )
    assert result["mode"] == "image_to_video"
    assert result["videoUrl"] == (
        "https://res.cloudinary.com/demo/video/upload/w_1280,h_720,c_fill,q_auto,f_auto/product-images/mug.mp4"
    )


@pytest.mark.asyncio
async def test_simple_video_demo_without_images(env):
    result = await VideoGenerator(env()).generate_simple("Mug")
    assert result["mode"] == "demo"
    assert result["videoUrl"] == DEMO_VIDEO_URL


@pytest.mark.asyncio
async def test_simple_video_demo_when_upload_unavailable(env):
    result = await VideoGenerator(env()).generate_simple("Mug", ["data:image/png;base64,AAAA"])
    assert result["mode"] == "demo"


@pytest.mark.asyncio
async def test_did_gateway_error_page_falls_back_to_demo(env, transport):
    import httpx

    settings = env(D_ID_API_KEY="a-real-looking-key-with-length")
    transport(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))

    result = await VideoGenerator(settings).generate("Smart Mug", "Keeps coffee hot.")
    assert result["demoMode"] is True
    assert result["productName"] == "Smart Mug"
