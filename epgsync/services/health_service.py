"""
Provider health checks

Runs every provider's health check concurrently.
"""
import asyncio
import logging
from collections.abc import Sequence

from epgsync.models import ProviderHealth
from epgsync.providers.base import Provider


logger = logging.getLogger(__name__)


async def check_providers_health(providers: Sequence[Provider]) -> dict[str, ProviderHealth]:
    """
    Check the health of several providers at once

    Args:
        providers: Providers to probe

    Returns:
        Mapping of provider id to its health verdict
    """
    results = await asyncio.gather(*(provider.health_check() for provider in providers))
    health = {provider.id: verdict for provider, verdict in zip(providers, results)}

    unhealthy = [provider_id for provider_id, verdict in health.items() if not verdict.healthy]
    if unhealthy:
        logger.warning("Unhealthy providers: %s", ", ".join(unhealthy))
    else:
        logger.info("All %s provider(s) healthy", len(health))
    return health
