"""
Providers package for EPG Sync

Importing this package registers every bundled provider.
"""
from epgsync.providers.base import BaseProvider, Provider
from epgsync.providers.registry import (
    ProviderRegistry,
    create_enabled_providers,
    get_registry,
    register,
)
from epgsync.providers import hebei  # noqa: F401

__all__ = [
    'Provider',
    'BaseProvider',
    'ProviderRegistry',
    'create_enabled_providers',
    'get_registry',
    'register',
]
