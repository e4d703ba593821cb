"""Factory for creating and managing grounded search providers."""

import os
from typing import Any, Dict, Optional, Type

from ...domain.ports.search_provider import SearchProvider
from .gemini_grounding_adapter import GeminiConfig, GeminiGroundingAdapter


def gemini_api_key() -> str:
    """API key from ``GEMINI_API_KEY``, falling back to ``GOOGLE_API_KEY``."""
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or ""


def gemini_config(**overrides: Any) -> GeminiConfig:
    """Gemini settings from the environment, with explicit overrides on top."""
    settings: Dict[str, Any] = {"api_key": gemini_api_key()}
    model = os.getenv("GEMINI_MODEL")
    if model:
        settings["model"] = model
    settings.update({k: v for k, v in overrides.items() if v is not None})
    return GeminiConfig(**settings)


class SearchProviderFactory:
    """Factory for creating and managing grounded search providers.

    One instance is kept per registered name; asking again returns it.
    """

    def __init__(self):
        self._providers: Dict[str, Type[SearchProvider]] = {"gemini": GeminiGroundingAdapter}
        self._instances: Dict[str, SearchProvider] = {}

    def register_provider(self, name: str, provider_class: Type[SearchProvider]) -> None:
        """Register a provider class under ``name``."""
        self._providers[name] = provider_class

    async def create_provider(self, name: str, **kwargs) -> SearchProvider:
        """Create and initialize a provider instance, or return the live one.

        Raises:
            ValueError: If provider not found
            ConfigurationError: If the provider has no credentials
        """
        if name not in self._providers:
            raise ValueError(f"Provider '{name}' not found")

        existing = self._instances.get(name)
        if existing is not None:
            return existing

        provider_class = self._providers[name]
        if provider_class is GeminiGroundingAdapter:
            provider = provider_class(config=gemini_config(**kwargs))
        else:
            provider = provider_class(**kwargs)

        await provider.initialize()
        self._instances[name] = provider
        return provider

    def get_provider(self, name: str) -> Optional[SearchProvider]:
        return self._instances.get(name)

    @property
    def available_providers(self) -> Dict[str, bool]:
        """Registered provider names and whether an instance is live."""
        return {name: name in self._instances for name in self._providers}

    async def shutdown(self) -> None:
        """Shutdown all provider instances."""
        for provider in self._instances.values():
            await provider.shutdown()
        self._instances.clear()
