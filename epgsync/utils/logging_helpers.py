"""
Structured logging helpers for consistent log formatting.

Provides utilities for structured, clean logging of fetch batches and sync runs.
"""
import logging
from datetime import date, datetime, timezone


def log_batch_start(logger: logging.Logger, provider_id: str, channels: int, day: date) -> None:
    """
    Log the start of a provider batch fetch.

    Args:
        logger: Logger instance
        provider_id: Provider identifier
        channels: Number of channels in the batch
        day: Requested calendar day
    """
    logger.info(f"[{provider_id}] Fetching {channels} channel(s) for {day.isoformat()}")


def log_batch_end(
    logger: logging.Logger,
    provider_id: str,
    succeeded: int,
    failed: int,
    programs: int
) -> None:
    """
    Log a provider batch summary.

    Args:
        logger: Logger instance
        provider_id: Provider identifier
        succeeded: Number of channels fetched successfully
        failed: Number of channels that failed
        programs: Number of programs collected
    """
    if failed:
        logger.warning(
            f"[{provider_id}] Batch finished with failures - Channels ok: {succeeded}, "
            f"failed: {failed}, Programs: {programs}"
        )
    else:
        logger.info(f"[{provider_id}] Batch finished - Channels: {succeeded}, Programs: {programs}")


def log_channel_failure(
    logger: logging.Logger,
    provider_id: str,
    channel_id: str,
    error: BaseException
) -> None:
    """Log a single channel failure inside a batch."""
    logger.error(f"[{provider_id}] Channel {channel_id} failed: {type(error).__name__}: {error}")


def log_sync_start(logger: logging.Logger, providers: int) -> None:
    """Log EPG sync operation start."""
    logger.info(f"EPG sync started at {datetime.now(timezone.utc).isoformat()} ({providers} provider(s))")


def log_sync_end(logger: logging.Logger) -> None:
    """Log EPG sync operation end."""
    logger.info(f"EPG sync completed at {datetime.now(timezone.utc).isoformat()}")
