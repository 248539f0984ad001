"""Browser timestamp conversion.

Chromium stores instants as microseconds since the Windows FILETIME epoch
(1601-01-01 00:00:00 UTC); Firefox stores cookie expiry as Unix seconds.
Both are converted to timezone-aware UTC datetimes. Values outside the
range datetime can represent are clamped rather than rejected: browsers
write far-future sentinels that only need to mean "does not expire soon".
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

# Offset of the Unix epoch from the Windows FILETIME epoch, in microseconds:
# ((1970 - 1601) * 365 + 89) * 24 * 60 * 60 * 1_000_000, where 89 is the
# number of leap days between 1601 and 1970.
WINDOWS_UNIX_EPOCH_OFFSET_MICROS = 11_644_473_600_000_000
WINDOWS_UNIX_EPOCH_OFFSET_NANOS = WINDOWS_UNIX_EPOCH_OFFSET_MICROS * 1000

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MIN_DATETIME = datetime.min.replace(tzinfo=timezone.utc)
MAX_DATETIME = datetime.max.replace(tzinfo=timezone.utc)

_ONE_MICROSECOND = timedelta(microseconds=1)
_MIN_UNIX_MICROS = (MIN_DATETIME - UNIX_EPOCH) // _ONE_MICROSECOND
_MAX_UNIX_MICROS = (MAX_DATETIME - UNIX_EPOCH) // _ONE_MICROSECOND


def chrome_to_unix_nanos(chrome_time: int) -> int:
    """
    Convert a Chromium timestamp to Unix nanoseconds.

    The result is exact: Python integers do not overflow, so even the
    "never expires" sentinel keeps its value.

    Args:
        chrome_time: Microseconds since 1601-01-01 UTC.

    Returns:
        Nanoseconds since 1970-01-01 UTC (negative before 1970).
    """
    return chrome_time * 1000 - WINDOWS_UNIX_EPOCH_OFFSET_NANOS


def unix_nanos_to_datetime(nanos: int) -> datetime:
    """
    Convert Unix nanoseconds to a UTC datetime, clamped to datetime's range.

    Sub-microsecond precision is truncated (floored), since datetime cannot
    carry it.
    """
    micros = min(max(nanos // 1000, _MIN_UNIX_MICROS), _MAX_UNIX_MICROS)
    return UNIX_EPOCH + timedelta(microseconds=micros)


def chrome_time_to_datetime(chrome_time: int) -> datetime:
    """Convert a Chromium timestamp to a UTC datetime."""
    return unix_nanos_to_datetime(chrome_to_unix_nanos(chrome_time))


def unix_seconds_to_datetime(seconds: int) -> datetime:
    """
    Convert Unix seconds (Firefox expiry) to a UTC datetime.

    Firefox uses 64-bit expiry values that can exceed year 9999; those are
    clamped to the latest representable instant.
    """
    return unix_nanos_to_datetime(seconds * 1_000_000_000)
