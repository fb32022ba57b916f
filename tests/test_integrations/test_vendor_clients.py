from __future__ import annotations

import json

import httpx
import pytest
from google.auth.exceptions import DefaultCredentialsError

from app.core.exceptions import IntegrationError
from app.integrations.azure_speech import AzureSpeechClient, SpeechSynthesisError, build_ssml
from app.integrations.did import DIDClient
from app.integrations.gemini import GeminiClient
from app.integrations.openai import OpenAIClient
from app.integrations.vertex import ENABLE_API_HINT, VertexAuthError, VertexImagenClient


def test_gemini_extract_text_joins_parts():
    data = {"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "world"}]}}]}
    assert GeminiClient.extract_text(data) == "Hello world"


def test_gemini_extract_text_reports_blocked_prompt():
    with pytest.raises(IntegrationError) as excinfo:
        GeminiClient.extract_text({"promptFeedback": {"blockReason": "SAFETY"}})
    assert excinfo.value.details == {"details": "SAFETY"}


@pytest.mark.asyncio
async def test_gemini_sends_key_as_query_param(env, transport):
    env(GEMINI_API_KEY="g-test")
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "ok"}]}}]})

    transport(handler)
    assert await GeminiClient().generate_text("hi") == "ok"
    assert seen["url"].endswith("/models/gemini-pro:generateContent?key=g-test")


@pytest.mark.asyncio
async def test_did_polls_until_done(env, transport):
    env(D_ID_API_KEY="did-test-key-that-is-long-enough")
    statuses = iter(["created", "started", "done"])

    def handler(request):
        if request.method == "POST":
            body = json.loads(request.content)
            assert body["source_url"].endswith("/amy-Aq6OmGZpMt/image.jpeg")
            assert body["script"]["provider"] == {"type": "microsoft", "voice_id": "en-US-JennyNeural"}
            return httpx.Response(201, json={"id": "tlk_1"})
        status = next(statuses)
        payload = {"status": status}
        if status == "done":
            payload["result_url"] = "https://d-id.example/tlk_1.mp4"
        return httpx.Response(200, json=payload)

    transport(handler)
    url = await DIDClient().create_video("Hello", "amy-Aq6OmGZpMt", "en-US-JennyNeural")
    assert url == "https://d-id.example/tlk_1.mp4"


@pytest.mark.asyncio
async def test_did_surfaces_vendor_message(env, transport):
    env(D_ID_API_KEY="did-test-key-that-is-long-enough")
    transport(lambda request: httpx.Response(402, json={"message": "Insufficient credits"}))
    with pytest.raises(IntegrationError) as excinfo:
        await DIDClient().create_talk("Hello", "amy", "en-US-JennyNeural")
    assert excinfo.value.message == "D-ID API Error: Insufficient credits"


@pytest.mark.asyncio
async def test_did_gives_up_after_max_attempts(env, transport):
    env(D_ID_API_KEY="did-test-key-that-is-long-enough")
    transport(lambda request: httpx.Response(200, json={"status": "started"}))
    with pytest.raises(IntegrationError) as excinfo:
        await DIDClient(max_attempts=3).wait_for_result("tlk_1")
    assert excinfo.value.message == "D-ID video generation timed out"


def test_ssml_escapes_text():
    ssml = build_ssml("Fish & <chips>", "en-GB-RyanNeural")
    assert "xml:lang='en-GB'" in ssml
    assert "Fish &amp; &lt;chips&gt;" in ssml


@pytest.mark.asyncio
async def test_azure_refusal_raises_speech_error(env, transport):
    env(AZURE_SPEECH_KEY="azure-test")
    transport(lambda request: httpx.Response(400, text="Unsupported voice"))
    with pytest.raises(SpeechSynthesisError) as excinfo:
        await AzureSpeechClient().synthesize("Hello", "xx-XX-Nobody")
    assert excinfo.value.details == {"details": "Unsupported voice"}


def test_vertex_without_credentials(env, monkeypatch):
    env()

    def no_adc(scopes=None):
        raise DefaultCredentialsError("Could not automatically determine credentials")

    monkeypatch.setattr("app.integrations.vertex.google.auth.default", no_adc)
    with pytest.raises(VertexAuthError) as excinfo:
        VertexImagenClient(use_service_account=False)._access_token()
    assert excinfo.value.message == "Could not obtain access token"
    assert "determine credentials" in excinfo.value.details["details"]


@pytest.mark.asyncio
async def test_vertex_forbidden_suggests_enabling_api(env, transport, monkeypatch):
    env()
    monkeypatch.setattr(VertexImagenClient, "_access_token", lambda self: ("ya29.token", "demo-project"))
    transport(lambda request: httpx.Response(403, text="API not enabled"))
    with pytest.raises(IntegrationError) as excinfo:
        await VertexImagenClient().generate_image("a mug")
    assert excinfo.value.details["suggestion"] == ENABLE_API_HINT


@pytest.mark.asyncio
async def test_vertex_returns_base64_prediction(env, transport, monkeypatch):
    env(GOOGLE_CLOUD_PROJECT="my-project")
    monkeypatch.setattr(VertexImagenClient, "_access_token", lambda self: ("ya29.token", "my-project"))
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json={"predictions": [{"bytesBase64Encoded": "aW1n"}]})

    transport(handler)
    assert await VertexImagenClient().generate_image("a mug") == "aW1n"
    assert seen["auth"] == "Bearer ya29.token"
    assert "/projects/my-project/locations/us-central1/" in seen["url"]


@pytest.mark.asyncio
async def test_did_html_error_page_is_an_integration_error(env, transport):
    env(D_ID_API_KEY="did-test-key-that-is-long-enough")
    transport(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))
    with pytest.raises(IntegrationError) as excinfo:
        await DIDClient().create_talk("Hello", "amy", "en-US-JennyNeural")
    assert excinfo.value.message == "D-ID API Error: Bad Gateway"
    assert excinfo.value.details == {"details": "<html>Bad Gateway</html>"}


@pytest.mark.asyncio
async def test_did_unreadable_status_is_an_integration_error(env, transport):
    env(D_ID_API_KEY="did-test-key-that-is-long-enough")
    transport(lambda request: httpx.Response(200, text="not json"))
    with pytest.raises(IntegrationError) as excinfo:
        await DIDClient().get_talk("tlk_1")
    assert excinfo.value.message == "D-ID API Error: unreadable talk status"


@pytest.mark.asyncio
async def test_openai_chat_without_choices(env, transport):
    transport(lambda request: httpx.Response(200, json={"choices": []}))
    with pytest.raises(IntegrationError) as excinfo:
        await OpenAIClient("sk-test").chat_completion([{"role": "user", "content": "hi"}])
    assert excinfo.value.details == {"details": "Malformed chat completion response"}


@pytest.mark.asyncio
async def test_openai_image_without_data(env, transport):
    transport(lambda request: httpx.Response(200, json={"created": 1}))
    with pytest.raises(IntegrationError) as excinfo:
        await OpenAIClient("sk-test").generate_image("a mug")
    assert excinfo.value.message == "DALL-E API error"


@pytest.mark.asyncio
async def test_gemini_non_json_body(env, transport):
    transport(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(IntegrationError) as excinfo:
        await GeminiClient("g-test").generate_text("hi")
    assert excinfo.value.details == {"details": "Response was not JSON"}


def test_gemini_extract_text_rejects_non_object():
    with pytest.raises(IntegrationError) as excinfo:
        GeminiClient.extract_text(["unexpected"])
    assert excinfo.value.details == {"details": "Unexpected response shape"}
