"""
Provider contract and shared base implementation

Every upstream EPG source implements Provider. BaseProvider supplies the parts
that are identical across sources: the transport hookup, the fixed source
timezone, the health check and the concurrent batch fetch.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo

from epgsync.errors import FetchTimeout, TimezoneConfigError
from epgsync.models import (
    BatchResult,
    ChannelFailure,
    ChannelMappingInfo,
    Program,
    ProviderChannel,
    ProviderConfig,
    ProviderHealth,
)
from epgsync.utils.http_client import DEFAULT_USER_AGENT, HTTPTransport
from epgsync.utils.logging_helpers import log_batch_end, log_batch_start, log_channel_failure
from epgsync.utils.timezone import resolve_timezone, today_in


logger = logging.getLogger(__name__)


class Provider(ABC):
    """Uniform surface the rest of the system relies on."""

    @property
    @abstractmethod
    def id(self) -> str: ...

    @abstractmethod
    async def health_check(self) -> ProviderHealth: ...

    @abstractmethod
    async def fetch_epg(self, provider_channel_id: str, channel_id: str, day: date) -> list[Program]: ...

    @abstractmethod
    async def fetch_epg_batch(
        self,
        mappings: Sequence[ChannelMappingInfo],
        day: date,
        *,
        timeout: float | None = None,
    ) -> BatchResult: ...

    @abstractmethod
    def parse_epg_response(
        self,
        data: bytes,
        provider_channel_id: str,
        channel_id: str,
        day: str,
    ) -> list[Program]: ...


class BaseProvider(Provider):
    """
    Shared implementation for HTTP-backed providers.

    Subclasses declare SOURCE_TIMEZONE and implement fetch_epg and
    parse_epg_response. The timezone is resolved once here, so a misconfigured
    provider fails at construction.
    """

    SOURCE_TIMEZONE: str = "UTC"

    def __init__(
        self,
        config: ProviderConfig,
        channels: Sequence[ProviderChannel],
        *,
        transport: HTTPTransport | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.config = config
        self._channels = tuple(channels)
        self._location: ZoneInfo = resolve_timezone(self.SOURCE_TIMEZONE)
        self.transport = transport or HTTPTransport(
            config.id,
            config.base_url,
            timeout=config.timeout_sec,
        )
        self.user_agent = user_agent
        self.max_concurrency = max(1, config.max_concurrency)
        self._semaphore = asyncio.Semaphore(self.max_concurrency)

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def channels(self) -> tuple[ProviderChannel, ...]:
        return self._channels

    @property
    def source_timezone(self) -> str:
        return self.SOURCE_TIMEZONE

    @property
    def location(self) -> ZoneInfo:
        return self._location

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def post_with_headers(self, path: str, body: bytes, headers: dict[str, str]) -> bytes:
        return await self.transport.post_with_headers(path, body, headers)

    def health_channel(self) -> ProviderChannel | None:
        """Known-stable channel used by the health check"""
        return self._channels[0] if self._channels else None

    async def health_check(self) -> ProviderHealth:
        """
        Fetch today's schedule for the health channel.

        Never raises for fetch errors; they are reported as an unhealthy verdict.
        """
        channel = self.health_channel()
        if channel is None:
            return ProviderHealth(healthy=False, message="no channels configured")

        try:
            await self.fetch_epg(channel.id, channel.name, today_in(self._location))
        except Exception as exc:
            logger.warning("[%s] Health check failed: %s", self.id, exc)
            return ProviderHealth(healthy=False, message=f"fetch_epg failed: {exc}")

        return ProviderHealth(healthy=True, message="OK")

    async def fetch_epg_batch(
        self,
        mappings: Sequence[ChannelMappingInfo],
        day: date,
        *,
        timeout: float | None = None,
    ) -> BatchResult:
        """
        Fetch several channels for one day with per-channel isolation.

        Args:
            mappings: Provider-local to canonical channel mappings
            day: Requested calendar day
            timeout: Optional deadline for the whole batch in seconds

        Returns:
            BatchResult with the programs of every successful channel and a
            ChannelFailure for every failed or timed-out one

        Raises:
            TimezoneConfigError: If any channel reports a timezone misconfiguration
        """
        if isinstance(day, datetime):
            day = day.date()

        result = BatchResult(provider_id=self.id, date=day)
        if not mappings:
            return result

        log_batch_start(logger, self.id, len(mappings), day)

        tasks = [
            asyncio.create_task(self._fetch_channel(mapping, day))
            for mapping in mappings
        ]

        try:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if pending:
            logger.warning(
                "[%s] Batch deadline of %ss reached, cancelling %s fetch(es)",
                self.id,
                timeout,
                len(pending),
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        fatal: BaseException | None = None
        for mapping, task in zip(mappings, tasks):
            # a pending task may still have finished before cancel() took effect
            if task.cancelled():
                error: BaseException | None = FetchTimeout(self.id, mapping.channel_id, timeout or 0)
            else:
                error = task.exception()

            if error is None:
                result.programs.extend(task.result())
                result.succeeded_channels.append(mapping.channel_id)
                continue

            if isinstance(error, TimezoneConfigError) or not isinstance(error, Exception):
                fatal = fatal or error
                continue

            log_channel_failure(logger, self.id, mapping.channel_id, error)
            result.failures.append(
                ChannelFailure(
                    provider_channel_id=mapping.provider_channel_id,
                    channel_id=mapping.channel_id,
                    error=error,
                )
            )

        if fatal is not None:
            raise fatal

        log_batch_end(
            logger,
            self.id,
            len(result.succeeded_channels),
            len(result.failures),
            len(result.programs),
        )
        return result

    async def _fetch_channel(self, mapping: ChannelMappingInfo, day: date) -> list[Program]:
        async with self._semaphore:
            return await self.fetch_epg(mapping.provider_channel_id, mapping.channel_id, day)
