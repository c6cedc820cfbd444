"""Shared value types and numeric helpers for the MyAmanah core.

Both the prayer-time and cycle engines consume plain values supplied by the
calling application (location settings, log history) and return plain values.
Nothing in this package performs I/O or keeps state between calls.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from zoneinfo import ZoneInfo


DEG = math.pi / 180
RAD = 180 / math.pi


def normalize_degrees(value: float, modulus: float = 360.0) -> float:
    """Reduce an angle (or hour value) into ``[0, modulus)``."""
    return value % modulus


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GeoCoordinate:
    """A caller-supplied observer location.

    Attributes:
        latitude:  Degrees, north positive.
        longitude: Degrees, east positive.
        timezone:  IANA timezone identifier (e.g. 'America/New_York').
        name:      Human-readable label shown alongside the schedule.
    """

    latitude: float
    longitude: float
    timezone: str = "UTC"
    name: str = ""

    @classmethod
    def mecca(cls) -> GeoCoordinate:
        return cls(
            latitude=21.4225,
            longitude=39.8262,
            timezone="Asia/Riyadh",
            name="Mecca, Saudi Arabia",
        )

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def utc_offset_minutes(self, on_date: date) -> int:
        """UTC offset of this location's timezone on ``on_date``.

        Evaluated at local noon so DST transitions (which happen overnight)
        resolve to the offset in force for most of the day.
        """
        local_noon = datetime.combine(on_date, time(12, 0), tzinfo=self.tzinfo)
        offset = local_noon.utcoffset()
        return int(offset.total_seconds() // 60) if offset is not None else 0
