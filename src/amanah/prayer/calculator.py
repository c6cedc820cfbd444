"""Astronomical prayer-time calculator.

Computes the six daily instants from the sun's position:

1. Julian date of the calendar day at 0h.
2. Mean anomaly / mean longitude → ecliptic longitude and obliquity.
3. Solar declination and equation of time.
4. Dhuhr is solar noon; every other instant is Dhuhr ± the hour angle at
   which the sun reaches that instant's altitude (4 minutes per degree).

All trigonometry works in degrees and converts via ``DEG`` / ``RAD``.

Polar geometry: when the sun never reaches a twilight angle (high latitudes
in summer) the hour-angle cosine falls outside [-1, 1].  It is clamped and
the resulting instant is flagged ``clamped=True`` instead of raising.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from src.amanah.base import DEG, RAD, GeoCoordinate, clamp, normalize_degrees
from src.amanah.config_loader import AmanahConfig, get_amanah_config
from src.amanah.prayer.models import (
    AsrConvention,
    CalculationMethod,
    DailyPrayerSchedule,
    Prayer,
    PrayerTime,
)

logger = logging.getLogger("amanah.prayer.calculator")

# JD of 2000-01-01 12:00 TT
_J2000 = 2451545.0
_MINUTES_PER_DEGREE = 4.0
_SOLAR_NOON_MINUTES = 12 * 60


@dataclass(frozen=True)
class SolarPosition:
    """Sun position for one day.

    Attributes:
        declination:      Solar declination in degrees.
        equation_of_time: Apparent minus mean solar time, in minutes.
    """

    declination: float
    equation_of_time: float


@dataclass(frozen=True)
class _HourAngle:
    degrees: float
    clamped: bool

    @property
    def minutes(self) -> float:
        return self.degrees * _MINUTES_PER_DEGREE


def julian_date(on_date: date) -> float:
    """Julian date at 0h of a Gregorian calendar date."""
    year, month, day = on_date.year, on_date.month, on_date.day
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day
        + b
        - 1524.5
    )


def solar_position(on_date: date) -> SolarPosition:
    """Declination and equation of time for ``on_date``."""
    d = julian_date(on_date) - _J2000

    g = normalize_degrees(357.529 + 0.98560028 * d)  # mean anomaly
    q = normalize_degrees(280.459 + 0.98564736 * d)  # mean longitude
    l = normalize_degrees(q + 1.915 * math.sin(g * DEG) + 0.020 * math.sin(2 * g * DEG))
    e = 23.439 - 0.00000036 * d  # obliquity

    declination = RAD * math.asin(math.sin(e * DEG) * math.sin(l * DEG))

    ra = RAD * math.atan2(math.cos(e * DEG) * math.sin(l * DEG), math.cos(l * DEG)) / 15
    ra = normalize_degrees(ra, 24.0)
    # q and ra wrap at different moments near the March equinox.
    equation_of_time = ((q / 15 - ra + 12) % 24 - 12) * 60

    return SolarPosition(declination=declination, equation_of_time=equation_of_time)


class PrayerTimeCalculator:
    """Compute daily prayer schedules.

    Stateless apart from the config it reads constants from; a single
    instance can serve any number of threads.

    Usage::

        calculator = PrayerTimeCalculator()
        schedule = calculator.calculate(
            date(2026, 3, 20),
            GeoCoordinate(40.7128, -74.0060, "America/New_York"),
            method=CalculationMethod.ISNA,
        )
        print(schedule.next_prayer)
    """

    def __init__(self, config: AmanahConfig | None = None) -> None:
        self._config = config or get_amanah_config()

    def calculate(
        self,
        on_date: date,
        coordinate: GeoCoordinate,
        method: CalculationMethod = CalculationMethod.ISNA,
        asr_convention: AsrConvention = AsrConvention.STANDARD,
        timezone_offset_minutes: int | None = None,
        now: datetime | None = None,
    ) -> DailyPrayerSchedule:
        """Build the schedule for one date and location.

        Args:
            on_date:                 Calendar date at the location.
            coordinate:              Observer location.
            method:                  Twilight-angle convention for Fajr/Isha.
            asr_convention:          Shadow factor convention for Asr.
            timezone_offset_minutes: UTC offset to use. Resolved from the
                                     coordinate's IANA zone when omitted.
            now:                     Reference instant for next/passed flags
                                     (defaults to the current UTC time).

        Returns:
            DailyPrayerSchedule with entries in chronological prayer order.
        """
        explicit_offset = timezone_offset_minutes is not None
        offset = (
            timezone_offset_minutes
            if explicit_offset
            else coordinate.utc_offset_minutes(on_date)
        )
        minutes = self.minutes_of_day(on_date, coordinate, offset, method, asr_convention)

        tz = timezone(timedelta(minutes=offset))
        midnight = datetime(on_date.year, on_date.month, on_date.day, tzinfo=tz)

        instants: list[tuple[Prayer, datetime, bool]] = []
        for prayer in Prayer:
            value, clamped = minutes[prayer]
            instant = midnight + timedelta(minutes=value)
            if not explicit_offset:
                instant = instant.astimezone(coordinate.tzinfo)
            instants.append((prayer, instant, clamped))

        reference = now or datetime.now(timezone.utc)
        times: list[PrayerTime] = []
        found_next = False
        for prayer, instant, clamped in instants:
            is_passed = instant < reference
            is_next = not is_passed and not found_next
            if is_next:
                found_next = True
            times.append(
                PrayerTime(
                    prayer=prayer,
                    time=instant,
                    is_next=is_next,
                    is_passed=is_passed,
                    clamped=clamped,
                )
            )

        return DailyPrayerSchedule(
            date=on_date,
            location=coordinate.name,
            method=method,
            asr_convention=asr_convention,
            times=tuple(times),
        )

    def minutes_of_day(
        self,
        on_date: date,
        coordinate: GeoCoordinate,
        timezone_offset_minutes: int,
        method: CalculationMethod,
        asr_convention: AsrConvention,
    ) -> dict[Prayer, tuple[float, bool]]:
        """Minutes after local midnight for each instant.

        Returns:
            Mapping prayer → (minutes-of-day, clamped).  Values may fall
            outside [0, 1440) at extreme longitudes or latitudes.
        """
        cfg = self._config.prayer
        sun = solar_position(on_date)
        latitude = coordinate.latitude
        declination = sun.declination

        dhuhr = (
            _SOLAR_NOON_MINUTES
            - _MINUTES_PER_DEGREE * coordinate.longitude
            - sun.equation_of_time
            + timezone_offset_minutes
        )

        fajr_ha = self._hour_angle(method.fajr_angle_for(self._config), latitude, declination)
        sunrise_ha = self._hour_angle(cfg.sunrise_angle, latitude, declination)

        # Shadow length = factor + shadow at noon; Asr altitude follows.
        shadow_factor = asr_convention.shadow_factor_for(self._config)
        asr_altitude = RAD * math.atan(
            1 / (shadow_factor + math.tan(abs(latitude - declination) * DEG))
        )
        # Zenith distance 90° − altitude, i.e. a negative depression.
        asr_ha = self._hour_angle(-asr_altitude, latitude, declination)

        maghrib = dhuhr + sunrise_ha.minutes
        times = {
            Prayer.FAJR: (dhuhr - fajr_ha.minutes, fajr_ha.clamped),
            Prayer.SUNRISE: (dhuhr - sunrise_ha.minutes, sunrise_ha.clamped),
            Prayer.DHUHR: (dhuhr, False),
            Prayer.ASR: (dhuhr + asr_ha.minutes, asr_ha.clamped),
            Prayer.MAGHRIB: (maghrib, sunrise_ha.clamped),
        }

        isha_angle = method.isha_angle_for(self._config)
        if isha_angle > 0:
            isha_ha = self._hour_angle(isha_angle, latitude, declination)
            times[Prayer.ISHA] = (dhuhr + isha_ha.minutes, isha_ha.clamped)
        else:
            times[Prayer.ISHA] = (
                maghrib + cfg.isha_fixed_offset_minutes,
                sunrise_ha.clamped,
            )

        logger.debug(
            "Prayer minutes for %s at (%.4f, %.4f) [%s/%s]: decl=%.3f eqt=%.3f dhuhr=%.1f",
            on_date,
            latitude,
            coordinate.longitude,
            method.value,
            asr_convention.value,
            declination,
            sun.equation_of_time,
            dhuhr,
        )
        return times

    @staticmethod
    def _hour_angle(depression: float, latitude: float, declination: float) -> _HourAngle:
        """Hour angle (degrees) at which the sun sits ``depression`` below the horizon.

        Negative depressions are altitudes above the horizon (used for Asr).
        The cosine is clamped to [-1, 1]; saturation means the sun never
        reaches that altitude on this day.
        """
        cos_ha = (
            -math.sin(depression * DEG)
            - math.sin(latitude * DEG) * math.sin(declination * DEG)
        ) / (math.cos(latitude * DEG) * math.cos(declination * DEG))

        clamped = not (-1.0 <= cos_ha <= 1.0)
        if clamped:
            logger.warning(
                "Hour angle saturated (cos=%.4f) for depression %.3f° at latitude %.4f, "
                "declination %.3f; using best-effort value",
                cos_ha,
                depression,
                latitude,
                declination,
            )
        return _HourAngle(degrees=RAD * math.acos(clamp(cos_ha, -1.0, 1.0)), clamped=clamped)
