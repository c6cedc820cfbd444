"""Prayer times and Qibla direction.

Modules:
    models     — Prayer, CalculationMethod, AsrConvention, schedule types
    calculator — Solar-position prayer-time calculator
    qibla      — Great-circle bearing toward the Kaaba
"""

from src.amanah.prayer.calculator import PrayerTimeCalculator, SolarPosition, solar_position
from src.amanah.prayer.models import (
    AsrConvention,
    CalculationMethod,
    DailyPrayerSchedule,
    Prayer,
    PrayerTime,
)
from src.amanah.prayer.qibla import QiblaCalculator, QiblaDirection

__all__ = [
    "PrayerTimeCalculator",
    "SolarPosition",
    "solar_position",
    "AsrConvention",
    "CalculationMethod",
    "DailyPrayerSchedule",
    "Prayer",
    "PrayerTime",
    "QiblaCalculator",
    "QiblaDirection",
]
