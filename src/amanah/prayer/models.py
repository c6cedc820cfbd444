"""Value types for prayer-time schedules.

A ``DailyPrayerSchedule`` is derived from a (date, location, method) triple
and never mutated; when any input changes the caller computes a new one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from src.amanah.config_loader import AmanahConfig, get_amanah_config


class Prayer(str, Enum):
    """The six daily instants, in chronological order.

    Sunrise is a reference instant rather than a prayer obligation; it is
    computed the same way but excluded from ``Prayer.prayers()``.
    """

    FAJR = "fajr"
    SUNRISE = "sunrise"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def arabic_name(self) -> str:
        return _ARABIC_NAMES[self]

    @property
    def is_prayer(self) -> bool:
        return self is not Prayer.SUNRISE

    @classmethod
    def prayers(cls) -> list[Prayer]:
        return [p for p in cls if p.is_prayer]


_ARABIC_NAMES = {
    Prayer.FAJR: "الفجر",
    Prayer.SUNRISE: "الشروق",
    Prayer.DHUHR: "الظهر",
    Prayer.ASR: "العصر",
    Prayer.MAGHRIB: "المغرب",
    Prayer.ISHA: "العشاء",
}


class CalculationMethod(str, Enum):
    """Twilight-angle conventions published by the major authorities."""

    ISNA = "ISNA"
    MWL = "MWL"
    EGYPT = "EGYPT"
    MAKKAH = "MAKKAH"  # Umm al-Qura
    KARACHI = "KARACHI"
    TEHRAN = "TEHRAN"

    @property
    def display_name(self) -> str:
        return _METHOD_NAMES[self]

    def fajr_angle_for(self, config: AmanahConfig | None = None) -> float:
        config = config or get_amanah_config()
        return config.prayer.method_angles(self.value).fajr_angle

    def isha_angle_for(self, config: AmanahConfig | None = None) -> float:
        """Isha depression angle; 0 means a fixed offset after Maghrib."""
        config = config or get_amanah_config()
        return config.prayer.method_angles(self.value).isha_angle

    @property
    def fajr_angle(self) -> float:
        return self.fajr_angle_for()

    @property
    def isha_angle(self) -> float:
        return self.isha_angle_for()


_METHOD_NAMES = {
    CalculationMethod.ISNA: "ISNA (North America)",
    CalculationMethod.MWL: "Muslim World League",
    CalculationMethod.EGYPT: "Egyptian General Authority",
    CalculationMethod.MAKKAH: "Umm al-Qura (Saudi Arabia)",
    CalculationMethod.KARACHI: "University of Islamic Sciences, Karachi",
    CalculationMethod.TEHRAN: "Institute of Geophysics, Tehran",
}


class AsrConvention(str, Enum):
    """Asr juristic convention: how long the shadow must grow."""

    STANDARD = "standard"  # Shafi'i, Maliki, Hanbali
    HANAFI = "hanafi"

    @property
    def display_name(self) -> str:
        if self is AsrConvention.STANDARD:
            return "Standard (Shafi'i, Maliki, Hanbali)"
        return "Hanafi"

    def shadow_factor_for(self, config: AmanahConfig | None = None) -> float:
        config = config or get_amanah_config()
        return config.prayer.shadow_factor(self.value)

    @property
    def shadow_factor(self) -> float:
        return self.shadow_factor_for()


def _format_interval(seconds: float) -> str:
    hours = int(seconds) // 3600
    minutes = (int(seconds) % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


@dataclass(frozen=True)
class PrayerTime:
    """One entry of a daily schedule.

    Attributes:
        prayer:    Which instant this is.
        time:      Timezone-aware instant.
        is_next:   True for exactly one entry: the earliest still in the future.
        is_passed: True once the instant is at or before "now".
        clamped:   True when the hour-angle cosine saturated (polar geometry);
                   the time is a best-effort value, not a real solar event.
    """

    prayer: Prayer
    time: datetime
    is_next: bool = False
    is_passed: bool = False
    clamped: bool = False

    def time_until(self, now: datetime) -> str | None:
        """'in 2h 5m' style countdown, only for the next prayer."""
        if not self.is_next:
            return None
        interval = (self.time - now).total_seconds()
        if interval < 0:
            return None
        return f"in {_format_interval(interval)}"

    def time_since(self, now: datetime) -> str | None:
        """'1h 3m ago' style label, only for passed prayers."""
        if not self.is_passed or self.is_next:
            return None
        interval = (now - self.time).total_seconds()
        if interval < 0:
            return None
        return f"{_format_interval(interval)} ago"


@dataclass(frozen=True)
class DailyPrayerSchedule:
    """All six instants for one calendar day at one location."""

    date: date
    location: str
    method: CalculationMethod
    asr_convention: AsrConvention
    times: tuple[PrayerTime, ...]

    def get(self, prayer: Prayer) -> PrayerTime | None:
        return next((t for t in self.times if t.prayer is prayer), None)

    @property
    def next_prayer(self) -> PrayerTime | None:
        """The entry flagged next, or None once the day's last instant passed."""
        return next((t for t in self.times if t.is_next), None)

    @property
    def is_degenerate(self) -> bool:
        return any(t.clamped for t in self.times)
