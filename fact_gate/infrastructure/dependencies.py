"""Dependency injection configuration for hexagonal architecture."""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from ..domain.errors import ConfigurationError
from ..domain.models.config import QualityGatesConfig
from ..domain.ports.registry_provider import RegistryProvider
from ..domain.ports.review_store import ReviewQueueStore
from ..domain.ports.search_provider import SearchProvider
from ..domain.services.fact_checking_service import FactCheckingService
from ..domain.services.review_queue import HumanReviewQueue
from ..domain.services.verification_cache import VerificationCache
from ..domain.services.verification_engine import VerificationEngine
from .config_loader import load_config, load_environment
from .registry.factory import RegistryProviderFactory
from .review.json_file_store import JsonFileReviewStore
from .search.factory import SearchProviderFactory

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection.

    Configuration and the review queue are built eagerly; source providers
    need network clients and are created on first use.
    """

    def __init__(
        self,
        config: Optional[QualityGatesConfig] = None,
        search: Optional[SearchProvider] = None,
        registry: Optional[RegistryProvider] = None,
        review_store: Optional[ReviewQueueStore] = None,
    ):
        """Initialize service container.

        Args:
            config: Configuration; loaded from disk when omitted
            search: Grounded search provider override
            registry: Registry provider override
            review_store: Review store override
        """
        self._config = config
        self._search = search
        self._registry = registry
        self._review_store = review_store
        self._providers_ready = search is not None
        self._search_factory = SearchProviderFactory()
        self._registry_factory = RegistryProviderFactory()
        self._services: Dict[str, Any] = {}
        self._setup_services()

    def _setup_services(self):
        """Setup configuration, cache and review queue."""
        logger.info("🔧 Setting up service container...")
        if self._config is None:
            load_environment()
            self._config = load_config()

        store = self._review_store or JsonFileReviewStore(self._config.human_review.queue_path)
        factcheck = self._config.factcheck
        self._services = {
            'config': self._config,
            'verification_cache': VerificationCache(
                ttl_seconds=factcheck.cache_ttl_hours * 3600,
                maxsize=factcheck.cache_maxsize,
            ),
            'review_queue': HumanReviewQueue(
                store, retention_days=self._config.human_review.retention_days
            ),
            # Created lazily once providers are up
            'fact_checking_service': None,
        }
        logger.info("✅ Service container setup completed")

    async def _setup_providers(self) -> None:
        """Create the grounded search and registry providers."""
        if self._search is None:
            try:
                logger.info("🔎 Setting up grounded search provider...")
                self._search = await self._search_factory.create_provider("gemini")
                logger.info("✅ Grounded search provider ready")
            except ConfigurationError as e:
                logger.warning(f"⚠️ Grounded search unavailable: {e}")

        if self._registry is None:
            try:
                logger.info("🏛️ Setting up registry provider...")
                self._registry = await self._registry_factory.create_provider("korea_tourism")
            except RuntimeError as e:
                logger.warning(f"⚠️ Registry unavailable: {e}")
        self._providers_ready = True

    async def _ensure_fact_checking_service(self) -> FactCheckingService:
        """Ensure fact checking service is created with providers."""
        if self._services['fact_checking_service'] is None:
            if not self._providers_ready:
                await self._setup_providers()
            engine = VerificationEngine(
                search=self._search,
                registry=self._registry,
                cache=self._services['verification_cache'],
                config=self._config.factcheck,
            )
            self._services['fact_checking_service'] = FactCheckingService(
                engine, self._config, self._services['review_queue']
            )
            logger.info("✅ FactCheckingService created with providers")

        return self._services['fact_checking_service']

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_config(self) -> QualityGatesConfig:
        return self.get('config')

    def get_review_queue(self) -> HumanReviewQueue:
        return self.get('review_queue')

    async def get_fact_checking_service(self) -> FactCheckingService:
        """Get fact checking service with providers."""
        return await self._ensure_fact_checking_service()

    def provider_status(self) -> Dict[str, bool]:
        return {
            "grounded_search": bool(self._search and self._search.is_available),
            "registry": bool(self._registry and self._registry.is_available),
        }

    async def shutdown(self) -> None:
        """Close provider HTTP clients."""
        await self._search_factory.shutdown()
        await self._registry_factory.shutdown_all()


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance."""
    return ServiceContainer()


# Convenience functions for FastAPI dependency injection
def get_review_queue() -> HumanReviewQueue:
    """FastAPI dependency for the human-review queue."""
    return get_service_container().get_review_queue()


async def get_fact_checking_service() -> FactCheckingService:
    """FastAPI dependency for fact checking service."""
    container = get_service_container()
    return await container.get_fact_checking_service()
