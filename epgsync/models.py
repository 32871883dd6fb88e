"""
Shared dataclasses used across the EPG provider pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as date_type, datetime

from epgsync.errors import BatchFetchError
from epgsync.utils.timezone import to_utc


@dataclass(slots=True, frozen=True)
class Program:
    """Canonical, provider-independent program record."""
    channel_id: str
    title: str
    start_time: datetime
    end_time: datetime
    original_timezone: str
    provider_id: str

    def to_dict(self) -> dict:
        return {
            "channel_id": self.channel_id,
            "title": self.title,
            "start_time": to_utc(self.start_time).isoformat(),
            "end_time": to_utc(self.end_time).isoformat(),
            "original_timezone": self.original_timezone,
            "provider_id": self.provider_id,
        }


@dataclass(slots=True, frozen=True)
class ProviderChannel:
    """Static catalog entry; id is the provider-local channel identifier."""
    name: str
    id: str


@dataclass(slots=True, frozen=True)
class ChannelMappingInfo:
    """Maps a provider-local channel id to the canonical channel id."""
    provider_channel_id: str
    channel_id: str


@dataclass(slots=True, frozen=True)
class ProviderHealth:
    healthy: bool
    message: str

    def to_dict(self) -> dict:
        return {"healthy": self.healthy, "message": self.message}


@dataclass(slots=True)
class ProviderConfig:
    """Runtime configuration of a single provider instance."""
    id: str
    name: str
    base_url: str
    timeout_sec: float = 15.0
    max_concurrency: int = 4
    enabled: bool = True


@dataclass(slots=True)
class ChannelFailure:
    provider_channel_id: str
    channel_id: str
    error: Exception

    def to_dict(self) -> dict:
        return {
            "provider_channel_id": self.provider_channel_id,
            "channel_id": self.channel_id,
            "error_type": type(self.error).__name__,
            "error": str(self.error),
        }


@dataclass(slots=True)
class BatchResult:
    """Best-effort outcome of a batch fetch: merged programs plus per-channel failures."""
    provider_id: str
    date: date_type
    programs: list[Program] = field(default_factory=list)
    failures: list[ChannelFailure] = field(default_factory=list)
    succeeded_channels: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_channels(self) -> list[str]:
        return [failure.channel_id for failure in self.failures]

    def raise_for_failures(self) -> None:
        if self.failures:
            raise BatchFetchError(self.provider_id, list(self.failures))

    def to_dict(self) -> dict:
        return {
            "provider_id": self.provider_id,
            "date": self.date.isoformat(),
            "programs": [program.to_dict() for program in self.programs],
            "succeeded_channels": list(self.succeeded_channels),
            "failures": [failure.to_dict() for failure in self.failures],
        }


__all__ = [
    "Program",
    "ProviderChannel",
    "ChannelMappingInfo",
    "ProviderHealth",
    "ProviderConfig",
    "ChannelFailure",
    "BatchResult",
]
