"""
Shared fixtures: settings, a fake Gemini SDK and a fake Supabase client
"""
import asyncio
from types import SimpleNamespace

import pytest

from app.core.config import Settings
from app.services.gemini_service import GeminiService


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's .env and credentials"""
    values = {
        "GEMINI_API_KEY": "test-gemini-key",
        "SUPABASE_URL": None,
        "SUPABASE_SERVICE_ROLE_KEY": None,
        "SUPABASE_ANON_KEY": None,
        "PEXELS_API_KEY": None,
        "SENTRY_DSN": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def gemini_reply(text):
    """Response envelope shaped like the SDK's GenerateContentResponse"""
    part = SimpleNamespace(text=text)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


class FakeGenerativeModel:
    def __init__(self, sdk, model_name, generation_config=None):
        self.sdk = sdk
        self.model_name = model_name
        self.generation_config = generation_config

    def generate_content(self, parts):
        self.sdk.calls.append({"model": self.model_name, "parts": parts})
        outcome = self.sdk.outcomes.pop(0) if self.sdk.outcomes else self.sdk.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeGenAI:
    """
    Stand-in for the google.generativeai module.

    Outcomes are consumed one per generate_content call; an Exception
    outcome is raised, anything else is returned as the response.
    """

    def __init__(self, *outcomes, default=None):
        self.outcomes = list(outcomes)
        self.default = default
        self.calls = []

    def GenerativeModel(self, model_name, generation_config=None):
        return FakeGenerativeModel(self, model_name, generation_config)

    def GenerationConfig(self, **kwargs):
        return kwargs


def make_gemini(settings, *outcomes, default=None):
    """GeminiService wired to a FakeGenAI; returns (service, fake)"""
    service = GeminiService(settings)
    fake = FakeGenAI(*outcomes, default=default)
    service._genai = fake
    return service, fake


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.fail_with:
            raise self.storage.fail_with
        self.storage.uploads.append({
            "bucket": self.name,
            "path": path,
            "size": len(file),
            "file_options": file_options,
        })

    def get_public_url(self, path):
        return f"https://project.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self, fail_with=None):
        self.uploads = []
        self.fail_with = fail_with

    def from_(self, name):
        return FakeBucket(self, name)


class FakeSupabase:
    """Covers the storage calls the image resolver makes"""

    def __init__(self, fail_with=None):
        self.storage = FakeStorage(fail_with)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def recorded_sleeps(monkeypatch):
    """Replace asyncio.sleep with a recorder so retry and queue delays are instant"""
    sleeps = []

    async def fake_sleep(delay, *args, **kwargs):
        sleeps.append(delay)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return sleeps
