"""
EPG Sync Service

Runs batch fetches across several providers and days and summarizes the outcome.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Literal, Sequence

from epgsync.models import BatchResult, ChannelMappingInfo, Program
from epgsync.providers.base import Provider
from epgsync.utils.logging_helpers import log_sync_end, log_sync_start


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncJob:
    provider: Provider
    mappings: list[ChannelMappingInfo]


@dataclass(slots=True)
class ProviderSummary:
    index: int
    provider_id: str
    started_at: datetime
    completed_at: datetime
    status: Literal["success", "partial", "failed"]
    days: list[date] = field(default_factory=list)
    channels_requested: int = 0
    channels_failed: int = 0
    programs_fetched: int = 0
    error: str | None = None
    batches: list[BatchResult] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        return max(0.0, (self.completed_at - self.started_at).total_seconds())

    def to_dict(self) -> dict:
        payload = {
            "provider_index": self.index,
            "provider_id": self.provider_id,
            "status": self.status,
            "days": [day.isoformat() for day in self.days],
            "channels_requested": self.channels_requested,
            "channels_failed": self.channels_failed,
            "programs_fetched": self.programs_fetched,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "failures": [
                {"date": batch.date.isoformat(), **failure.to_dict()}
                for batch in self.batches
                for failure in batch.failures
            ],
        }
        if self.error:
            payload["error"] = self.error
        return payload


class EPGSyncPipeline:
    """Fetches every job for a run of consecutive days, one provider failure never aborting the others."""

    def __init__(
        self,
        jobs: Sequence[SyncJob],
        *,
        days: int = 1,
        max_concurrency: int | None = None,
        batch_timeout: float | None = None,
    ) -> None:
        if days <= 0:
            raise ValueError("days must be > 0")
        self.jobs = [job for job in jobs if job.mappings]
        self.total_jobs = len(self.jobs)
        self.days = days
        self._concurrency = max(1, max_concurrency or min(4, self.total_jobs or 1))
        self._semaphore = asyncio.Semaphore(self._concurrency)
        self._batch_timeout = batch_timeout

    async def run(self, start: date | None = None) -> tuple[dict, list[Program]]:
        """
        Run every job for `days` days beginning at `start` (today, UTC, by default).

        Returns:
            Tuple of (summary dict, merged programs)
        """
        started_at = datetime.now(timezone.utc)
        start = start or started_at.date()
        day_list = [start + timedelta(days=offset) for offset in range(self.days)]

        log_sync_start(logger, self.total_jobs)
        logger.info(
            "Target days: %s -> %s (%s provider(s), concurrency %s)",
            day_list[0].isoformat(),
            day_list[-1].isoformat(),
            self.total_jobs,
            self._concurrency,
        )

        summaries = await self._collect(day_list)
        programs = [
            program
            for summary in summaries
            for batch in summary.batches
            for program in batch.programs
        ]
        log_sync_end(logger)

        return self._build_result(started_at, day_list, summaries, programs), programs

    async def _collect(self, day_list: list[date]) -> list[ProviderSummary]:
        if not self.jobs:
            logger.warning("No sync jobs with channel mappings - skipping sync cycle")
            return []

        tasks = [
            asyncio.create_task(self._process_job(index, job, day_list))
            for index, job in enumerate(self.jobs, start=1)
        ]
        summaries = await asyncio.gather(*tasks)
        summaries.sort(key=lambda summary: summary.index)
        return summaries

    async def _process_job(self, index: int, job: SyncJob, day_list: list[date]) -> ProviderSummary:
        provider_id = job.provider.id
        started_at = datetime.now(timezone.utc)
        logger.info(
            "[Provider %s/%s] Queued: %s (%s channels)",
            index,
            self.total_jobs,
            provider_id,
            len(job.mappings),
        )

        batches: list[BatchResult] = []
        async with self._semaphore:
            try:
                for day in day_list:
                    batch = await job.provider.fetch_epg_batch(job.mappings, day, timeout=self._batch_timeout)
                    batches.append(batch)
            except Exception as exc:
                logger.error(
                    "[Provider %s] Failed to sync %s: %s",
                    index,
                    provider_id,
                    exc,
                    exc_info=True,
                )
                return ProviderSummary(
                    index=index,
                    provider_id=provider_id,
                    started_at=started_at,
                    completed_at=datetime.now(timezone.utc),
                    status="failed",
                    days=day_list,
                    channels_requested=len(job.mappings),
                    programs_fetched=sum(len(batch.programs) for batch in batches),
                    error=str(exc),
                    batches=batches,
                )

        channels_failed = sum(len(batch.failures) for batch in batches)
        programs_fetched = sum(len(batch.programs) for batch in batches)
        status = "success" if channels_failed == 0 else "partial"

        logger.info(
            "[Provider %s/%s] Completed %s: %s programs, %s failed channel fetch(es)",
            index,
            self.total_jobs,
            provider_id,
            programs_fetched,
            channels_failed,
        )

        return ProviderSummary(
            index=index,
            provider_id=provider_id,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            status=status,
            days=day_list,
            channels_requested=len(job.mappings),
            channels_failed=channels_failed,
            programs_fetched=programs_fetched,
            batches=batches,
        )

    def _build_result(
        self,
        started_at: datetime,
        day_list: list[date],
        summaries: list[ProviderSummary],
        programs: list[Program],
    ) -> dict:
        succeeded = sum(1 for summary in summaries if summary.status == "success")
        partial = sum(1 for summary in summaries if summary.status == "partial")
        failed = sum(1 for summary in summaries if summary.status == "failed")

        return {
            "status": "success" if failed == 0 and partial == 0 else "partial",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "providers_processed": len(summaries),
            "providers_succeeded": succeeded,
            "providers_partial": partial,
            "providers_failed": failed,
            "programs_fetched": len(programs),
            "provider_details": [summary.to_dict() for summary in summaries],
            "started_at": started_at.isoformat(),
            "first_day": day_list[0].isoformat(),
            "last_day": day_list[-1].isoformat(),
        }


def default_mappings(provider) -> list[ChannelMappingInfo]:
    """Identity mapping for every catalog channel of a provider"""
    return [
        ChannelMappingInfo(provider_channel_id=channel.id, channel_id=f"{provider.id}:{channel.id}")
        for channel in provider.channels
    ]
