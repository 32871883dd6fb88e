"""
Services package for EPG Sync

This package contains the orchestration built on top of the providers.
"""
from epgsync.services.health_service import check_providers_health
from epgsync.services.sync_service import EPGSyncPipeline, SyncJob, default_mappings

__all__ = [
    'check_providers_health',
    'EPGSyncPipeline',
    'SyncJob',
    'default_mappings',
]
