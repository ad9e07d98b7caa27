"""
End-to-end tests for recipe import (service and HTTP endpoint)
"""
import json

import httpx
import pytest
from fastapi.testclient import TestClient
from google.api_core import exceptions as google_exceptions

from app.core.app import create_app
from app.core.config import get_settings
from app.domain.enums import CallerTier, ImportStatus
from app.domain.exceptions import ModelInvocationError
from app.domain.models import ImportMetadata, ImportRequest, ImportResult
from app.services.image_resolver import ImageResolver
from app.services.media_extractor import MediaExtractor
from app.services.metadata_scraper import MetadataScraper
from app.services.recipe_import_service import RecipeImportService
from app.services.tier_policy import build_tier_policy
from conftest import gemini_reply, make_gemini, make_settings


COBALT_URL = "https://cobalt.example.com/api/json"

PASTA_PAGE = """
<html><head>
  <meta property="og:title" content="Pasta Primavera">
  <meta property="og:description" content="fresh veggies and pasta">
  <meta property="og:image" content="https://cdn.example.com/pasta.jpg">
</head></html>
"""

PASTA_REPLY = json.dumps({
    "description": "Spring vegetables tossed with penne",
    "time": "25 mins",
    "calories": "520",
    "macros": {"protein": "18g", "carbs": "70g", "fat": "16g"},
    "ingredients": [
        {"name": "Penne", "amount": "300g"},
        {"name": "Zucchini", "amount": "1"},
        {"name": "Peas", "amount": "1 cup"},
        {"name": "Parmesan", "amount": "50g"},
    ],
    "instructions": ["Boil pasta", "Slice zucchini", "Saute vegetables", "Toss with pasta", "Top with parmesan"],
    "equipment": ["Pot", "Pan"],
})

EMPTY_REPLY = json.dumps({
    "title": "", "description": "", "time": "", "calories": "",
    "macros": {"protein": "", "carbs": "", "fat": ""},
    "ingredients": [], "instructions": [], "equipment": [],
})


def web(request):
    """Routes for the fake internet"""
    if request.url.host == "example.com":
        return httpx.Response(200, html=PASTA_PAGE)
    if request.url.host == "cdn.example.com":
        return httpx.Response(200, content=b"\xff\xd8\xffjpeg", headers={"content-type": "image/jpeg"})
    if str(request.url) == COBALT_URL:
        return httpx.Response(404, json={"status": "error"})
    if request.url.host == "www.tiktok.com":
        return httpx.Response(200, html="<html><head><title>TikTok - Make Your Day</title></head></html>")
    return httpx.Response(404)


def build_service(*outcomes, default=None, handler=web, **overrides):
    settings = make_settings(COBALT_API_URL=COBALT_URL, **overrides)
    transport = httpx.MockTransport(handler)
    gemini, fake = make_gemini(settings, *outcomes, default=default)
    service = RecipeImportService(
        gemini=gemini,
        tier_policy=build_tier_policy(settings.IMPORT_TIER_POLICY, settings, settings.MODEL_STANDARD),
        scraper=MetadataScraper(settings, transport=transport),
        media_extractor=MediaExtractor(settings, transport=transport),
        image_resolver=ImageResolver(settings, transport=transport),
    )
    return service, fake


@pytest.mark.asyncio
async def test_pasta_blog_is_found():
    service, fake = build_service(gemini_reply(PASTA_REPLY))

    result = await service.import_recipe(ImportRequest(source_url="https://example.com/blog/pasta"))

    assert result.status == ImportStatus.FOUND
    assert len(result.recipe.ingredients) >= 2
    assert len(result.recipe.instructions) >= 1
    assert result.metadata.title == "Pasta Primavera"
    # Model omitted the title, so the scraped one fills in
    assert result.recipe.title == "Pasta Primavera"
    assert result.recipe.thumbnail.startswith("data:image/jpeg;base64,")
    assert result.metadata.thumbnail == result.recipe.thumbnail

    prompt = fake.calls[0]["parts"][0]
    assert 'Title: "Pasta Primavera"' in prompt
    assert 'Caption: "fresh veggies and pasta"' in prompt
    assert len(fake.calls[0]["parts"]) == 1
    assert fake.calls[0]["model"] == "gemini-2.0-flash-exp"
    assert "Classification: found" in result.diagnostics


@pytest.mark.asyncio
async def test_model_title_wins():
    reply = json.loads(PASTA_REPLY)
    reply["title"] = "Weeknight Primavera"
    service, _ = build_service(gemini_reply(json.dumps(reply)))

    result = await service.import_recipe(ImportRequest(source_url="https://example.com/blog/pasta"))

    assert result.recipe.title == "Weeknight Primavera"
    assert result.metadata.title == "Pasta Primavera"


@pytest.mark.asyncio
async def test_incomplete_reply_is_empty():
    reply = json.loads(PASTA_REPLY)
    reply["ingredients"] = reply["ingredients"][:1]
    service, _ = build_service(gemini_reply(json.dumps(reply)))

    result = await service.import_recipe(ImportRequest(source_url="https://example.com/blog/pasta"))

    assert result.status == ImportStatus.EMPTY
    assert result.recipe is None
    assert result.metadata.title == "Pasta Primavera"
    # Scraped preview is still resolved for display
    assert result.metadata.thumbnail.startswith("data:image/jpeg;base64,")


@pytest.mark.asyncio
async def test_video_extraction_404_proceeds_text_only():
    service, fake = build_service(gemini_reply(EMPTY_REPLY))

    result = await service.import_recipe(
        ImportRequest(source_url="https://www.tiktok.com/@chef/video/7312345678901234567")
    )

    assert result.status == ImportStatus.EMPTY
    assert len(fake.calls[0]["parts"]) == 1
    assert "Video site detected. Attempting media extraction..." in result.diagnostics
    assert "Media extraction failed: extraction service returned HTTP 404" in result.diagnostics
    assert "Prompt: text only" in result.diagnostics
    assert result.metadata.title == "TikTok - Make Your Day"


@pytest.mark.asyncio
async def test_unreachable_page_falls_back_to_shared_link():
    service, _ = build_service(gemini_reply("Sorry, no recipe here"))

    result = await service.import_recipe(ImportRequest(source_url="https://nowhere.example.org/"))

    assert result.status == ImportStatus.EMPTY
    assert result.metadata == ImportMetadata(title="Shared Link", thumbnail=None)
    assert "Metadata fetch failed: HTTP 404" in result.diagnostics


@pytest.mark.asyncio
async def test_executive_callers_get_the_capable_model():
    service, fake = build_service(gemini_reply(PASTA_REPLY))

    await service.import_recipe(
        ImportRequest(source_url="https://example.com/blog/pasta", tier=CallerTier.EXECUTIVE)
    )

    assert fake.calls[0]["model"] == "gemini-2.5-flash"


@pytest.mark.asyncio
async def test_model_outage_is_fatal(recorded_sleeps):
    overloaded = google_exceptions.ServiceUnavailable("overloaded")
    service, fake = build_service(overloaded, overloaded, overloaded)

    with pytest.raises(ModelInvocationError):
        await service.import_recipe(ImportRequest(source_url="https://example.com/blog/pasta"))

    assert len(fake.calls) == 3


TOFU_PAGE = """
<html><head>
  <meta property="og:title" content="Crispy Tofu Bowl">
  <meta property="og:description" content="Full recipe in the video!">
  <meta property="og:image" content="https://cdn.example.com/tofu.jpg">
</head></html>
"""

AUDIO_BYTES = b"ID3" + b"\x00" * 61


def video_web(request):
    """A TikTok page whose extraction succeeds"""
    if request.url.host == "www.tiktok.com":
        return httpx.Response(200, html=TOFU_PAGE)
    if str(request.url) == COBALT_URL:
        return httpx.Response(200, json={
            "status": "stream",
            "url": "https://media.example.com/tofu.mp3",
            "title": "tofu bowl #recipe #vegan",
            "picker": [{"thumb": "https://media.example.com/tofu-thumb.jpg"}],
        })
    if request.url.host == "media.example.com":
        return httpx.Response(200, content=AUDIO_BYTES, headers={"content-type": "audio/mpeg"})
    return web(request)


@pytest.mark.asyncio
async def test_extracted_audio_is_attached_and_scraped_values_win():
    service, fake = build_service(gemini_reply(PASTA_REPLY), handler=video_web)

    result = await service.import_recipe(
        ImportRequest(source_url="https://www.tiktok.com/@chef/video/7312345678901234567")
    )

    parts = fake.calls[0]["parts"]
    assert len(parts) == 2
    assert parts[1] == {"mime_type": "audio/mpeg", "data": AUDIO_BYTES}
    assert 'Title: "Crispy Tofu Bowl"' in parts[0]
    assert "Prompt: text + media" in result.diagnostics
    assert f"Media downloaded. Size: {len(AUDIO_BYTES)}" in result.diagnostics

    assert result.status == ImportStatus.FOUND
    assert result.metadata.title == "Crispy Tofu Bowl"
    # og:image was resolved, not the extraction service's picker thumbnail
    assert "Processing thumbnail: https://cdn.example.com/tofu.j" in result.diagnostics
    assert result.metadata.thumbnail.startswith("data:image/jpeg;base64,")


@pytest.mark.asyncio
async def test_extraction_fills_gaps_the_page_left():
    def bare_page(request):
        if request.url.host == "www.tiktok.com":
            return httpx.Response(200, html="<html><head></head></html>")
        if request.url.host == "media.example.com" and request.url.path.endswith(".jpg"):
            return httpx.Response(200, content=b"\xff\xd8\xffthumb", headers={"content-type": "image/jpeg"})
        return video_web(request)

    service, _ = build_service(gemini_reply(EMPTY_REPLY), handler=bare_page)

    result = await service.import_recipe(ImportRequest(source_url="https://www.tiktok.com/@chef/video/1"))

    assert result.metadata.title == "tofu bowl #recipe #vegan"
    assert "Processing thumbnail: https://media.example.com/tofu" in result.diagnostics
    assert result.metadata.thumbnail.startswith("data:image/jpeg;base64,")


@pytest.mark.asyncio
async def test_page_image_wins_over_model_thumbnail():
    reply = json.loads(PASTA_REPLY)
    reply["thumbnail"] = "https://model.example.com/guess.jpg"
    service, _ = build_service(gemini_reply(json.dumps(reply)))

    result = await service.import_recipe(ImportRequest(source_url="https://example.com/blog/pasta"))

    assert "Processing thumbnail: https://cdn.example.com/pasta." in result.diagnostics
    assert result.metadata.thumbnail.startswith("data:image/jpeg;base64,")
    assert result.recipe.thumbnail == result.metadata.thumbnail


@pytest.mark.asyncio
async def test_model_thumbnail_used_when_page_has_none():
    reply = json.loads(PASTA_REPLY)
    reply["thumbnail"] = "https://model.example.com/guess.jpg"
    service, _ = build_service(gemini_reply(json.dumps(reply)))

    result = await service.import_recipe(ImportRequest(source_url="https://nowhere.example.org/"))

    assert result.status == ImportStatus.FOUND
    # Unreachable image host falls through to the proxy
    assert result.metadata.thumbnail.startswith("https://wsrv.nl/?url=https%3A%2F%2Fmodel.example.com")
    assert result.recipe.thumbnail == result.metadata.thumbnail


def test_import_request_rejects_blank_url():
    with pytest.raises(ValueError):
        ImportRequest(source_url="   ")


# ============= HTTP endpoint =============

@pytest.fixture
def client():
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: make_settings()
    return TestClient(app)


def test_missing_url_returns_500(client):
    response = client.post("/api/v1/recipes/import", json={})

    assert response.status_code == 500
    assert response.json() == {"status": "error", "error": "URL is required"}


def test_blank_url_returns_500(client):
    response = client.post("/api/v1/recipes/import", json={"url": "  ", "is_executive": True})

    assert response.status_code == 500
    assert response.json()["error"] == "URL is required"


def test_missing_gemini_key_returns_500():
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: make_settings(GEMINI_API_KEY=None)

    response = TestClient(app).post("/api/v1/recipes/import", json={"url": "https://example.com/blog/pasta"})

    assert response.status_code == 500
    assert response.json() == {"status": "error", "error": "GEMINI_API_KEY not found"}


def test_import_endpoint_returns_result(client, monkeypatch):
    captured = {}

    class StubService:
        async def import_recipe(self, request):
            captured["request"] = request
            return ImportResult(
                status=ImportStatus.EMPTY,
                metadata=ImportMetadata(title="Shared Link"),
                diagnostics=["Classification: empty"],
            )

    monkeypatch.setattr(
        RecipeImportService, "from_settings",
        classmethod(lambda cls, settings, storage_client=None: StubService())
    )

    response = client.post("/api/v1/recipes/import", json={"url": " https://example.com/x ", "is_executive": True})

    assert response.status_code == 200
    assert response.json() == {
        "status": "empty",
        "recipe": None,
        "metadata": {"title": "Shared Link", "thumbnail": None},
        "diagnostics": ["Classification: empty"],
    }
    assert captured["request"].source_url == "https://example.com/x"
    assert captured["request"].tier == CallerTier.EXECUTIVE


def test_cors_preflight(client):
    response = client.options(
        "/api/v1/recipes/import",
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, x-client-info, apikey, content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
