from datetime import datetime, timezone
from typing import Annotated
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from epgsync.config import settings
from epgsync.models import ChannelMappingInfo
from epgsync.providers.base import BaseProvider
from epgsync.schemas import FetchRequest, FetchResponse, ProviderInfoResponse
from epgsync.services import (
    EPGSyncPipeline,
    SyncJob,
    check_providers_health,
    default_mappings,
)


logger = logging.getLogger(__name__)

main_router = APIRouter()


def get_providers(request: Request) -> dict[str, BaseProvider]:
    """Providers created during application startup"""
    return request.app.state.providers


Providers = Annotated[dict[str, BaseProvider], Depends(get_providers)]


@main_router.get("/")
async def root(providers: Providers) -> dict:
    """Root endpoint with service information"""
    return {
        "service": "EPG Sync",
        "version": "0.1.0",
        "providers": sorted(providers),
        "endpoints": {
            "health": "/health - Provider health checks",
            "providers": "/providers - Enabled providers and channel catalogs",
            "fetch": "/epg/fetch - Fetch EPG for one provider and day (POST)",
            "sync": "/sync - Fetch every enabled provider (POST)",
        }
    }


@main_router.get("/health")
async def health_check(providers: Providers) -> dict:
    """Health check endpoint"""
    health = await check_providers_health(list(providers.values()))
    return {
        "status": "ok" if all(verdict.healthy for verdict in health.values()) else "degraded",
        "providers": {provider_id: verdict.to_dict() for provider_id, verdict in health.items()},
    }


@main_router.get("/providers", response_model=list[ProviderInfoResponse])
async def list_providers(providers: Providers) -> list[ProviderInfoResponse]:
    """List enabled providers with their channel catalogs"""
    return [
        ProviderInfoResponse(
            id=provider.id,
            name=provider.name,
            source_timezone=provider.source_timezone,
            channels=[{"name": channel.name, "id": channel.id} for channel in provider.channels],
        )
        for provider in providers.values()
    ]


@main_router.post("/epg/fetch", response_model=FetchResponse)
async def fetch_epg(request: FetchRequest, providers: Providers) -> FetchResponse:
    """
    Fetch EPG for several channels of one provider

    Channels that fail are reported in `failures`; programs of the
    other channels are still returned.
    """
    provider = providers.get(request.provider)
    if provider is None:
        raise HTTPException(status_code=404, detail=f"Provider '{request.provider}' is not enabled")

    if request.channels:
        mappings = [
            ChannelMappingInfo(provider_channel_id=channel.provider_channel_id, channel_id=channel.channel_id)
            for channel in request.channels
        ]
    else:
        mappings = default_mappings(provider)

    logger.info("Manual EPG fetch: %s, %s channel(s), %s", provider.id, len(mappings), request.date)
    result = await provider.fetch_epg_batch(
        mappings,
        request.date,
        timeout=request.timeout or settings.batch_timeout(),
    )
    payload = result.to_dict()

    return FetchResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        provider_id=result.provider_id,
        date=payload["date"],
        channels_requested=len(mappings),
        channels_succeeded=len(result.succeeded_channels),
        total_programs=len(result.programs),
        programs=payload["programs"],
        failures=payload["failures"],
    )


@main_router.post("/sync")
async def sync_all(
    providers: Providers,
    days: Annotated[int, Query(ge=1, le=14)] = 1,
) -> dict:
    """Fetch every catalog channel of every enabled provider"""
    jobs = [SyncJob(provider=provider, mappings=default_mappings(provider)) for provider in providers.values()]
    pipeline = EPGSyncPipeline(jobs, days=days, batch_timeout=settings.batch_timeout())
    summary, _ = await pipeline.run()
    return summary
