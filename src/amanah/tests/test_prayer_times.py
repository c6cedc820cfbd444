"""Tests for solar position, prayer-time schedules and next/passed flagging."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

import pytest

from src.amanah.base import GeoCoordinate
from src.amanah.config_loader import AmanahConfig
from src.amanah.prayer.calculator import PrayerTimeCalculator, julian_date, solar_position
from src.amanah.prayer.models import (
    AsrConvention,
    CalculationMethod,
    DailyPrayerSchedule,
    Prayer,
    PrayerTime,
)
from src.amanah.tests.conftest import JAKARTA, LONDON, NEW_YORK, TEST_DATE, TROMSO

ORDER = [Prayer.FAJR, Prayer.SUNRISE, Prayer.DHUHR, Prayer.ASR, Prayer.MAGHRIB, Prayer.ISHA]
SAMPLE_DATES = [date(2026, 3, 20), date(2026, 6, 21), date(2026, 9, 23), date(2026, 12, 21)]


def local_time(schedule: DailyPrayerSchedule, prayer: Prayer) -> time:
    entry = schedule.get(prayer)
    assert entry is not None
    return entry.time.time()


def within(value: time, low: str, high: str) -> bool:
    return time.fromisoformat(low) <= value <= time.fromisoformat(high)


# ---------------------------------------------------------------------------
# Solar position
# ---------------------------------------------------------------------------


class TestSolarPosition:
    def test_julian_date_j2000(self) -> None:
        assert julian_date(date(2000, 1, 1)) == pytest.approx(2451544.5)

    def test_julian_date_after_february(self) -> None:
        # 1987-06-19 0h is JD 2446965.5 (Meeus, example 7.a)
        assert julian_date(date(1987, 6, 19)) == pytest.approx(2446965.5)

    def test_declination_at_june_solstice(self) -> None:
        assert 23.2 <= solar_position(date(2026, 6, 21)).declination <= 23.5

    def test_declination_at_december_solstice(self) -> None:
        assert -23.5 <= solar_position(date(2026, 12, 21)).declination <= -23.2

    def test_declination_near_zero_at_equinox(self) -> None:
        assert abs(solar_position(date(2026, 3, 20)).declination) < 0.6

    def test_equation_of_time_extremes(self) -> None:
        # Sun runs ~16 min fast in early November, ~14 min slow in mid February
        assert solar_position(date(2026, 11, 3)).equation_of_time == pytest.approx(16.4, abs=0.7)
        assert solar_position(date(2026, 2, 11)).equation_of_time == pytest.approx(-14.2, abs=0.7)

    def test_equation_of_time_continuous_across_march_equinox(self) -> None:
        values = [
            solar_position(date(2026, 3, 15) + timedelta(days=i)).equation_of_time
            for i in range(12)
        ]
        assert all(-15.0 < v < 0.0 for v in values)


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------


class TestPrayerTimeCalculator:
    def test_schedule_has_six_entries_in_order(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        schedule = calculator.calculate(TEST_DATE, NEW_YORK, now=start_of_day)
        assert [t.prayer for t in schedule.times] == ORDER
        assert schedule.location == "New York, USA"
        assert schedule.method is CalculationMethod.ISNA
        assert schedule.asr_convention is AsrConvention.STANDARD

    def test_new_york_equinox_reference_times(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        schedule = calculator.calculate(TEST_DATE, NEW_YORK, now=start_of_day)
        assert within(local_time(schedule, Prayer.DHUHR), "12:58", "13:09")
        assert within(local_time(schedule, Prayer.SUNRISE), "06:50", "07:10")
        assert within(local_time(schedule, Prayer.MAGHRIB), "19:00", "19:15")
        assert within(local_time(schedule, Prayer.FAJR), "05:35", "06:05")
        assert within(local_time(schedule, Prayer.ASR), "16:15", "16:40")

    def test_times_are_in_location_timezone(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        schedule = calculator.calculate(TEST_DATE, NEW_YORK, now=start_of_day)
        dhuhr = schedule.get(Prayer.DHUHR)
        assert dhuhr is not None
        assert dhuhr.time.utcoffset() == timedelta(hours=-4)  # EDT
        assert dhuhr.time.date() == TEST_DATE

    def test_explicit_offset_overrides_timezone(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        resolved = calculator.calculate(TEST_DATE, NEW_YORK, now=start_of_day)
        explicit = calculator.calculate(
            TEST_DATE, NEW_YORK, timezone_offset_minutes=-240, now=start_of_day
        )
        for a, b in zip(resolved.times, explicit.times):
            assert abs((a.time - b.time).total_seconds()) < 1
        assert explicit.times[0].time.utcoffset() == timedelta(minutes=-240)

    @pytest.mark.parametrize("method", list(CalculationMethod))
    @pytest.mark.parametrize("latitude", [-65.0, -40.0, -10.0, 0.0, 21.4, 45.0, 65.0])
    @pytest.mark.parametrize("on_date", SAMPLE_DATES)
    def test_monotonic_prayer_order(
        self,
        calculator: PrayerTimeCalculator,
        start_of_day: datetime,
        method: CalculationMethod,
        latitude: float,
        on_date: date,
    ) -> None:
        coordinate = GeoCoordinate(latitude, 10.0, "UTC")
        schedule = calculator.calculate(on_date, coordinate, method=method, now=start_of_day)
        instants = [t.time for t in schedule.times]
        assert instants == sorted(instants)
        assert len(set(instants)) == len(instants)

    @pytest.mark.parametrize("on_date", SAMPLE_DATES)
    def test_dhuhr_independent_of_method_and_asr(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime, on_date: date
    ) -> None:
        dhuhrs = {
            calculator.calculate(
                on_date, LONDON, method=method, asr_convention=asr, now=start_of_day
            ).get(Prayer.DHUHR).time
            for method in CalculationMethod
            for asr in AsrConvention
        }
        assert len(dhuhrs) == 1

    @pytest.mark.parametrize("coordinate", [NEW_YORK, LONDON, JAKARTA])
    @pytest.mark.parametrize("on_date", SAMPLE_DATES)
    def test_hanafi_delays_asr(
        self,
        calculator: PrayerTimeCalculator,
        start_of_day: datetime,
        coordinate: GeoCoordinate,
        on_date: date,
    ) -> None:
        standard = calculator.calculate(
            on_date, coordinate, asr_convention=AsrConvention.STANDARD, now=start_of_day
        )
        hanafi = calculator.calculate(
            on_date, coordinate, asr_convention=AsrConvention.HANAFI, now=start_of_day
        )
        assert hanafi.get(Prayer.ASR).time > standard.get(Prayer.ASR).time
        assert hanafi.get(Prayer.MAGHRIB).time == standard.get(Prayer.MAGHRIB).time

    def test_makkah_isha_is_fixed_offset_after_maghrib(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        schedule = calculator.calculate(
            TEST_DATE, GeoCoordinate.mecca(), method=CalculationMethod.MAKKAH, now=start_of_day
        )
        gap = schedule.get(Prayer.ISHA).time - schedule.get(Prayer.MAGHRIB).time
        assert abs(gap.total_seconds() - 90 * 60) < 1

    def test_larger_fajr_angle_gives_earlier_fajr(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        isna = calculator.calculate(
            TEST_DATE, LONDON, method=CalculationMethod.ISNA, now=start_of_day
        )
        egypt = calculator.calculate(
            TEST_DATE, LONDON, method=CalculationMethod.EGYPT, now=start_of_day
        )
        assert egypt.get(Prayer.FAJR).time < isna.get(Prayer.FAJR).time

    def test_identical_inputs_are_deterministic(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        a = calculator.calculate(TEST_DATE, JAKARTA, now=start_of_day)
        b = calculator.calculate(TEST_DATE, JAKARTA, now=start_of_day)
        assert a == b


# ---------------------------------------------------------------------------
# Next / passed flags
# ---------------------------------------------------------------------------


class TestNextPrayerFlags:
    def test_first_prayer_next_before_fajr(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        schedule = calculator.calculate(TEST_DATE, LONDON, now=start_of_day)
        assert schedule.next_prayer is not None
        assert schedule.next_prayer.prayer is Prayer.FAJR
        assert not any(t.is_passed for t in schedule.times)

    def test_exactly_one_next_after_dhuhr(self, calculator: PrayerTimeCalculator) -> None:
        probe = calculator.calculate(TEST_DATE, LONDON, now=datetime(2000, 1, 1, tzinfo=timezone.utc))
        now = probe.get(Prayer.DHUHR).time + timedelta(minutes=1)

        schedule = calculator.calculate(TEST_DATE, LONDON, now=now)
        flags = {t.prayer: (t.is_passed, t.is_next) for t in schedule.times}
        assert flags[Prayer.FAJR] == (True, False)
        assert flags[Prayer.SUNRISE] == (True, False)
        assert flags[Prayer.DHUHR] == (True, False)
        assert flags[Prayer.ASR] == (False, True)
        assert flags[Prayer.MAGHRIB] == (False, False)
        assert flags[Prayer.ISHA] == (False, False)
        assert sum(t.is_next for t in schedule.times) == 1

    def test_no_next_after_isha(self, calculator: PrayerTimeCalculator) -> None:
        now = datetime(2026, 3, 21, 23, 59, tzinfo=timezone.utc)
        schedule = calculator.calculate(TEST_DATE, LONDON, now=now)
        assert schedule.next_prayer is None
        assert all(t.is_passed for t in schedule.times)

    def test_time_until_and_since_labels(self) -> None:
        now = datetime(2026, 3, 20, 12, 0, tzinfo=timezone.utc)
        upcoming = PrayerTime(Prayer.ASR, now + timedelta(hours=2, minutes=5), is_next=True)
        soon = PrayerTime(Prayer.ASR, now + timedelta(minutes=7), is_next=True)
        passed = PrayerTime(Prayer.FAJR, now - timedelta(hours=1, minutes=3), is_passed=True)
        later = PrayerTime(Prayer.ISHA, now + timedelta(hours=8))

        assert upcoming.time_until(now) == "in 2h 5m"
        assert soon.time_until(now) == "in 7m"
        assert passed.time_since(now) == "1h 3m ago"
        assert later.time_until(now) is None
        assert later.time_since(now) is None
        assert passed.time_until(now) is None


# ---------------------------------------------------------------------------
# Polar degeneracy
# ---------------------------------------------------------------------------


class TestPolarClamping:
    def test_midsummer_above_arctic_circle_is_flagged(
        self,
        calculator: PrayerTimeCalculator,
        start_of_day: datetime,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="amanah.prayer.calculator"):
            schedule = calculator.calculate(
                date(2026, 6, 21), TROMSO, method=CalculationMethod.MWL, now=start_of_day
            )
        assert schedule.get(Prayer.FAJR).clamped
        assert schedule.get(Prayer.ISHA).clamped
        assert not schedule.get(Prayer.DHUHR).clamped
        assert schedule.is_degenerate
        assert "saturated" in caplog.text

    def test_clamped_values_are_still_finite_instants(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        schedule = calculator.calculate(
            date(2026, 6, 21), TROMSO, method=CalculationMethod.MWL, now=start_of_day
        )
        # Saturated at acos(-1): 180° either side of solar noon
        dhuhr = schedule.get(Prayer.DHUHR).time
        gap = dhuhr - schedule.get(Prayer.FAJR).time
        assert abs(gap.total_seconds() - 12 * 3600) < 1

    def test_mid_latitude_schedule_not_degenerate(
        self, calculator: PrayerTimeCalculator, start_of_day: datetime
    ) -> None:
        schedule = calculator.calculate(TEST_DATE, NEW_YORK, now=start_of_day)
        assert not schedule.is_degenerate


# ---------------------------------------------------------------------------
# Enum metadata
# ---------------------------------------------------------------------------


class TestPrayerEnums:
    def test_sunrise_is_not_a_prayer(self) -> None:
        assert not Prayer.SUNRISE.is_prayer
        assert Prayer.prayers() == [
            Prayer.FAJR,
            Prayer.DHUHR,
            Prayer.ASR,
            Prayer.MAGHRIB,
            Prayer.ISHA,
        ]

    def test_method_angles_from_config(self, amanah_config: AmanahConfig) -> None:
        assert CalculationMethod.MWL.fajr_angle_for(amanah_config) == 18.0
        assert CalculationMethod.MWL.isha_angle_for(amanah_config) == 17.0
        assert CalculationMethod.EGYPT.fajr_angle_for(amanah_config) == 19.5
        assert CalculationMethod.MAKKAH.isha_angle_for(amanah_config) == 0.0
        assert CalculationMethod.TEHRAN.fajr_angle == 17.7

    def test_asr_shadow_factors(self, amanah_config: AmanahConfig) -> None:
        assert AsrConvention.STANDARD.shadow_factor_for(amanah_config) == 1.0
        assert AsrConvention.HANAFI.shadow_factor == 2.0

    def test_display_names(self) -> None:
        assert Prayer.MAGHRIB.display_name == "Maghrib"
        assert Prayer.FAJR.arabic_name == "الفجر"
        assert CalculationMethod.MAKKAH.display_name == "Umm al-Qura (Saudi Arabia)"
