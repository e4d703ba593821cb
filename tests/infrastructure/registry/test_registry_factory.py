"""Tests for registry provider factory."""

import pytest

from fact_gate.domain.models.claim import ClaimType
from fact_gate.infrastructure.registry.factory import RegistryProviderFactory
from fact_gate.infrastructure.registry.korea_tourism_adapter import KoreaTourismRegistryAdapter


@pytest.fixture
def no_keys(monkeypatch):
    monkeypatch.delenv("DATA_GO_KR_API_KEY", raising=False)
    monkeypatch.delenv("CULTURE_API_KEY", raising=False)


def test_factory_initialization():
    factory = RegistryProviderFactory()

    assert factory.available_providers == {"korea_tourism": False}


def test_duplicate_registration_fails():
    factory = RegistryProviderFactory()

    with pytest.raises(ValueError):
        factory.register_provider("korea_tourism", KoreaTourismRegistryAdapter)


@pytest.mark.asyncio
async def test_unknown_provider():
    with pytest.raises(ValueError):
        await RegistryProviderFactory().create_provider("nowhere")


@pytest.mark.asyncio
async def test_no_keys_disables_registry(no_keys):
    factory = RegistryProviderFactory()

    assert await factory.create_provider("korea_tourism") is None
    assert factory.get_provider("korea_tourism") is None


@pytest.mark.asyncio
async def test_create_from_environment(no_keys, monkeypatch):
    monkeypatch.setenv("DATA_GO_KR_API_KEY", "tour-key")
    factory = RegistryProviderFactory()

    provider = await factory.create_provider("korea_tourism")

    assert provider.is_available
    assert provider.supports(ClaimType.VENUE_EXISTS)
    assert not provider.supports(ClaimType.EVENT_PERIOD)
    assert factory.available_providers == {"korea_tourism": True}

    await factory.shutdown_all()
    assert factory.get_provider("korea_tourism") is None
    assert provider.is_available is False
