"""Tests for search provider factory."""

import pytest

from fact_gate.domain.errors import ConfigurationError
from fact_gate.infrastructure.search.factory import SearchProviderFactory, gemini_api_key


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "GEMINI_MODEL"):
        monkeypatch.delenv(name, raising=False)


def test_api_key_fallback(clean_env, monkeypatch):
    assert gemini_api_key() == ""

    monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
    assert gemini_api_key() == "google-key"

    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
    assert gemini_api_key() == "gemini-key"


@pytest.mark.asyncio
async def test_create_without_key_fails(clean_env):
    factory = SearchProviderFactory()

    with pytest.raises(ConfigurationError):
        await factory.create_provider("gemini")
    assert factory.available_providers == {"gemini": False}


@pytest.mark.asyncio
async def test_create_and_reuse(clean_env, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-flash")
    factory = SearchProviderFactory()

    provider = await factory.create_provider("gemini")

    assert provider.is_available
    assert provider._config.model == "gemini-2.5-flash"
    assert await factory.create_provider("gemini") is provider
    assert factory.get_provider("gemini") is provider

    await factory.shutdown()
    assert factory.get_provider("gemini") is None


@pytest.mark.asyncio
async def test_unknown_provider():
    with pytest.raises(ValueError):
        await SearchProviderFactory().create_provider("bing")
