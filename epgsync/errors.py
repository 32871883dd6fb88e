"""
Error taxonomy for EPG providers

Per-call errors (transport, parse, upstream rejection, timezone configuration)
propagate to the caller. Per-entry errors are raised and recovered inside the
response parsers and never escape them.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from epgsync.models import ChannelFailure


class EPGSyncError(Exception):
    """Base class for all EPG sync errors"""
    pass


class ProviderError(EPGSyncError):
    """Error attributed to a specific provider"""

    def __init__(self, provider_id: str, message: str):
        self.provider_id = provider_id
        super().__init__(f"[{provider_id}] {message}")


class TransportError(ProviderError):
    """Network or HTTP failure reaching the upstream"""

    def __init__(self, provider_id: str, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(provider_id, message)


class FetchTimeout(TransportError):
    """Fetch did not complete before the batch deadline"""

    def __init__(self, provider_id: str, channel_id: str, timeout: float):
        self.channel_id = channel_id
        self.timeout = timeout
        super().__init__(
            provider_id,
            f"fetch for channel {channel_id} cancelled after batch deadline of {timeout}s",
        )


class ParseFailed(ProviderError):
    """Response body does not match the provider's schema"""

    def __init__(self, provider_id: str, cause: Exception | str):
        self.cause = cause
        super().__init__(provider_id, f"failed to parse response: {cause}")


class ProviderAPIError(ProviderError):
    """Upstream explicitly rejected the request"""

    def __init__(self, provider_id: str, code: str, upstream_message: str):
        self.code = code
        self.upstream_message = upstream_message
        super().__init__(provider_id, f"upstream error {code}: {upstream_message}")


class ProviderNotRegistered(EPGSyncError):
    """No provider factory registered under the given name"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"provider '{name}' is not registered")


class EntryDateRangeError(EPGSyncError):
    """A single schedule entry has unusable start/end timestamps"""

    def __init__(self, channel_id: str, date: str, detail: str):
        self.channel_id = channel_id
        self.date = date
        self.detail = detail
        super().__init__(f"invalid program time range for channel {channel_id} on {date}: {detail}")


class TimezoneConfigError(EPGSyncError):
    """Declared source timezone cannot be resolved"""

    def __init__(self, timezone_name: str, cause: Exception | None = None):
        self.timezone_name = timezone_name
        self.cause = cause
        super().__init__(f"cannot load timezone '{timezone_name}': {cause}")


class BatchFetchError(EPGSyncError):
    """One or more channels of a batch failed"""

    def __init__(self, provider_id: str, failures: list[ChannelFailure]):
        self.provider_id = provider_id
        self.failures = failures
        channels = ", ".join(failure.channel_id for failure in failures)
        super().__init__(f"[{provider_id}] {len(failures)} channel(s) failed: {channels}")
