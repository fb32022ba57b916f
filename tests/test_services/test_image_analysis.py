from __future__ import annotations

import pytest

from app.core.exceptions import ConfigurationError, IntegrationError
from app.services import image_analysis
from app.services.image_analysis import ImageAnalysisService, parse_attributes, select_provider


def test_select_provider_prefers_gemini_only_when_asked(env):
    settings = env(OPENAI_API_KEY="sk-test", GEMINI_API_KEY="g-test")
    assert select_provider("gemini", settings) == "gemini"
    assert select_provider("openai", settings) == "openai"
    assert select_provider(None, settings) == "openai"


def test_select_provider_falls_back_to_whatever_is_configured(env):
    assert select_provider("openai", env(GOOGLE_GEMINI_API_KEY="g-legacy")) == "gemini"


def test_select_provider_without_keys(env):
    with pytest.raises(ConfigurationError) as excinfo:
        select_provider("openai", env())
    assert excinfo.value.message == "No AI API keys configured"


def test_parse_attributes_extracts_embedded_json():
    text = 'Sure! Here you go:\n```json\n{"productName": "Mug", "keyFeatures": ["ceramic"]}\n```'
    assert parse_attributes(text) == {"productName": "Mug", "keyFeatures": ["ceramic"]}


def test_parse_attributes_rejects_prose():
    with pytest.raises(IntegrationError) as excinfo:
        parse_attributes("I could not see a product in this image.")
    assert excinfo.value.message == "Failed to parse AI response"


@pytest.mark.asyncio
async def test_analyze_routes_to_gemini(env, monkeypatch):
    settings = env(GEMINI_API_KEY="g-test")
    calls = {}

    async def fake_analyze(self, prompt, image_base64, model=None):
        calls["image"] = image_base64
        calls["model"] = model
        return '{"category": "Kitchen"}'

    monkeypatch.setattr(image_analysis.GeminiClient, "analyze_image", fake_analyze)

    result = await ImageAnalysisService(settings).analyze("AAAA", preferred_api="gemini")

    assert result == {"category": "Kitchen"}
    assert calls == {"image": "AAAA", "model": settings.gemini_vision_model}
