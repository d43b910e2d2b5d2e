"""Time-zone conversion helpers.

Zones are referenced by IANA name throughout the package and resolved through
:func:`resolve_time_zone`, which caches :class:`zoneinfo.ZoneInfo` instances.
All conversions return timezone-aware datetimes.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from synthfeed.exceptions import DataValidationError

UTC = timezone.utc


@lru_cache(maxsize=None)
def resolve_time_zone(name: str) -> tzinfo:
    """Resolve an IANA time-zone name.

    :param name: Zone name such as ``"America/New_York"`` or ``"UTC"``.
    :returns: The resolved tzinfo.
    :raises DataValidationError: If the zone is unknown.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise DataValidationError(f"Unknown time zone: {name!r}") from e


def _as_tzinfo(zone: str | tzinfo) -> tzinfo:
    if isinstance(zone, str):
        return resolve_time_zone(zone)
    return zone


def convert_from_utc(instant: datetime, zone: str | tzinfo) -> datetime:
    """Convert a UTC instant into local time for ``zone``.

    Naive instants are read as UTC.

    :param instant: Instant to convert.
    :param zone: Target zone name or tzinfo.
    :returns: Aware datetime in the target zone.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return instant.astimezone(_as_tzinfo(zone))


def convert_to_utc(local: datetime, zone: str | tzinfo) -> datetime:
    """Convert a local time in ``zone`` into UTC.

    Naive values are read as wall-clock time in ``zone``; aware values keep
    their own offset.

    :param local: Local datetime.
    :param zone: Zone name or tzinfo the wall-clock time belongs to.
    :returns: Aware UTC datetime.
    """
    if local.tzinfo is None:
        local = local.replace(tzinfo=_as_tzinfo(zone))
    return local.astimezone(UTC)


__all__ = ["UTC", "resolve_time_zone", "convert_from_utc", "convert_to_utc"]
