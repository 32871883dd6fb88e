"""
Date and Time utilities

This module resolves provider source timezones and parses provider-local
timestamps into timezone-aware datetimes.
Centralizes all date parsing logic to maintain consistency across providers.
"""
from datetime import date, datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import re

from epgsync.errors import TimezoneConfigError

logger = logging.getLogger(__name__)

UTC8_LOCATION = "Asia/Shanghai"
LOCAL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DAY_FORMAT = "%Y-%m-%d"

_LOCAL_DATETIME_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", re.ASCII)


@lru_cache(maxsize=None)
def resolve_timezone(name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name

    Args:
        name: Timezone identifier (e.g., 'Asia/Shanghai')

    Returns:
        ZoneInfo for the name

    Raises:
        TimezoneConfigError: If the name cannot be resolved
    """
    if not name:
        raise TimezoneConfigError(name, ValueError("empty timezone name"))
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        logger.error("Failed to load timezone '%s': %s", name, e)
        raise TimezoneConfigError(name, e) from e


def parse_local_datetime(value: str, tz: ZoneInfo, fmt: str = LOCAL_DATETIME_FORMAT) -> datetime:
    """
    Parse a naive local timestamp string in the given zone

    The zone's offset and DST rules at that wall-clock moment apply. The
    default format is fixed-width: every field must be zero-padded.

    Raises:
        ValueError: If the string does not match the format
    """
    if fmt == LOCAL_DATETIME_FORMAT and not _LOCAL_DATETIME_RE.fullmatch(value):
        raise ValueError(f"time data {value!r} does not match format 'YYYY-MM-DD HH:MM:SS'")
    naive = datetime.strptime(value, fmt)
    return naive.replace(tzinfo=tz)


def format_day(day: date) -> str:
    """Format a calendar day as YYYY-MM-DD"""
    return day.strftime(DAY_FORMAT)


def today_in(tz: ZoneInfo) -> date:
    """Current calendar day in the given zone"""
    return datetime.now(tz).date()


def to_utc(value: datetime) -> datetime:
    """Convert an aware datetime to UTC, treating naive values as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
