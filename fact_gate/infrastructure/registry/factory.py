"""Factory for creating and managing registry providers."""

import logging
import os
from typing import Dict, Optional, Type

from ...domain.ports.registry_provider import RegistryProvider
from .korea_tourism_adapter import KoreaTourismConfig, KoreaTourismRegistryAdapter

logger = logging.getLogger(__name__)


class RegistryProviderFactory:
    """Factory for creating and managing registry providers.

    Keeps a registry of provider classes and the lifecycle of the active
    instances.
    """

    def __init__(self):
        """Initialize the factory."""
        self._provider_registry: Dict[str, Type[RegistryProvider]] = {}
        self._active_providers: Dict[str, RegistryProvider] = {}

        # Register default providers
        self.register_provider("korea_tourism", KoreaTourismRegistryAdapter)

    def register_provider(
        self, name: str, provider_class: Type[RegistryProvider]
    ) -> None:
        """Register a new registry provider class.

        Args:
            name: Unique identifier for the provider
            provider_class: The provider class to register
        """
        if name in self._provider_registry:
            raise ValueError(f"Provider {name} already registered")
        self._provider_registry[name] = provider_class

    async def create_provider(self, name: str, **config) -> Optional[RegistryProvider]:
        """Create and initialize a registry provider.

        The Korea tourism provider reads ``DATA_GO_KR_API_KEY`` and
        ``CULTURE_API_KEY`` unless a config is passed. Without either key
        there is nothing to look up and None is returned.

        Raises:
            ValueError: If provider not found
            RuntimeError: If initialization fails
        """
        if name not in self._provider_registry:
            raise ValueError(f"Provider {name} not registered")

        provider_class = self._provider_registry[name]
        if name == "korea_tourism" and "config" not in config:
            tourism_config = KoreaTourismConfig(
                service_key=os.getenv("DATA_GO_KR_API_KEY", ""),
                culture_api_key=os.getenv("CULTURE_API_KEY") or None,
            )
            if not tourism_config.service_key and not tourism_config.culture_api_key:
                logger.warning("⚠️ No registry API keys set, official registry lookups disabled")
                return None
            provider = provider_class(config=tourism_config, **config)
        else:
            provider = provider_class(**config)

        try:
            await provider.initialize()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize provider {name}: {e}")
        self._active_providers[name] = provider
        return provider

    def get_provider(self, name: str) -> Optional[RegistryProvider]:
        """Get an active provider instance by name."""
        return self._active_providers.get(name)

    async def shutdown_provider(self, name: str) -> None:
        """Shutdown a specific provider."""
        provider = self._active_providers.pop(name, None)
        if provider:
            await provider.shutdown()

    async def shutdown_all(self) -> None:
        """Shutdown all active providers."""
        for name in list(self._active_providers.keys()):
            await self.shutdown_provider(name)

    @property
    def available_providers(self) -> Dict[str, bool]:
        """Get dictionary of registered providers and their availability."""
        return {
            name: bool(self.get_provider(name))
            for name in self._provider_registry
        }
