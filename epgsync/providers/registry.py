"""
Provider Registry

Maps provider names to factories. Provider modules register themselves at
import time; the rest of the system only depends on the Provider contract.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from epgsync.errors import ProviderNotRegistered
from epgsync.models import ProviderConfig
from epgsync.utils.http_client import HTTPTransport

if TYPE_CHECKING:
    from epgsync.config import EPGSyncSettings
    from epgsync.providers.base import BaseProvider


logger = logging.getLogger(__name__)

ProviderFactory = Callable[..., "BaseProvider"]


class ProviderRegistry:
    """
    Registry of provider factories keyed by provider name.

    A factory is called as factory(config, **kwargs) and returns a new provider.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        """
        Register a provider factory.

        Args:
            name: Provider name (case-insensitive)
            factory: Callable creating provider instances
        """
        key = name.lower()
        if key in self._factories and self._factories[key] is not factory:
            logger.warning("Replacing provider factory for '%s'", key)
        self._factories[key] = factory
        logger.debug(f"Registered provider: {key}")

    def get(self, name: str) -> ProviderFactory:
        """
        Get the factory registered under a name.

        Raises:
            ProviderNotRegistered: If no factory is registered
        """
        try:
            return self._factories[name.lower()]
        except KeyError:
            raise ProviderNotRegistered(name) from None

    def create(self, config: ProviderConfig, **kwargs: Any) -> "BaseProvider":
        """Create a provider instance from its configuration."""
        return self.get(config.id)(config, **kwargs)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._factories


# Global registry instance
_registry: ProviderRegistry | None = None


def get_registry() -> ProviderRegistry:
    """
    Get or create the global provider registry.

    Returns:
        The global ProviderRegistry
    """
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def reset_registry() -> None:
    """
    Reset the provider registry (mainly for testing).

    WARNING: Providers registered at import time are not re-registered!
    """
    global _registry
    _registry = None


def register(name: str, factory: ProviderFactory) -> None:
    """Register a provider factory in the global registry."""
    get_registry().register(name, factory)


def provider_config_from_settings(name: str, settings: "EPGSyncSettings") -> ProviderConfig:
    """
    Build the configuration of a provider from application settings.

    Raises:
        ProviderNotRegistered: If the provider is unknown
    """
    registry = get_registry()
    factory = registry.get(name)
    base_url = getattr(settings, f"{name.lower()}_base_url", None)
    if not base_url:
        raise ValueError(f"No base URL configured for provider '{name}'")

    return ProviderConfig(
        id=name.lower(),
        name=getattr(factory, "display_name", name),
        base_url=base_url,
        timeout_sec=settings.http_timeout_sec,
        max_concurrency=settings.batch_max_concurrency,
    )


def create_enabled_providers(settings: "EPGSyncSettings") -> list["BaseProvider"]:
    """
    Instantiate every enabled provider with its own transport.

    Args:
        settings: Application settings

    Returns:
        Provider instances in configuration order
    """
    registry = get_registry()
    providers = []
    for name in settings.enabled_providers:
        config = provider_config_from_settings(name, settings)
        transport = HTTPTransport(
            config.id,
            config.base_url,
            timeout=settings.http_timeout_sec,
            max_attempts=settings.http_max_attempts,
            backoff_factor=settings.http_backoff_factor,
        )
        providers.append(registry.create(config, transport=transport, user_agent=settings.user_agent))
        logger.info("Provider '%s' ready (%s)", config.id, config.base_url)
    return providers
