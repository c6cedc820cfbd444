"""Cycle phase classification by cycle day."""

from __future__ import annotations

from datetime import date
from enum import Enum


class CyclePhase(str, Enum):
    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATION = "ovulation"
    LUTEAL = "luteal"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    CyclePhase.MENSTRUAL: "Your period phase",
    CyclePhase.FOLLICULAR: "Pre-ovulation phase",
    CyclePhase.OVULATION: "Fertility window",
    CyclePhase.LUTEAL: "Post-ovulation phase",
}


def phase_for_day(
    day: int,
    cycle_length: int = 28,
    luteal_days: int = 14,
    period_days: int = 5,
) -> CyclePhase:
    """Classify a 1-indexed cycle day.

    Ovulation is assumed ``luteal_days`` before the next period, with a
    two-day window either side.

    Args:
        day:          Cycle day (1 = first day of period).
        cycle_length: Expected cycle length in days.
        luteal_days:  Luteal phase length.
        period_days:  Days counted as menstrual.

    Returns:
        The phase for that day.
    """
    ovulation_day = cycle_length - luteal_days
    if day <= period_days:
        return CyclePhase.MENSTRUAL
    if day < ovulation_day - 2:
        return CyclePhase.FOLLICULAR
    if day <= ovulation_day + 2:
        return CyclePhase.OVULATION
    return CyclePhase.LUTEAL


def cycle_day_from_start(period_start: date, query_date: date) -> int:
    """Day number of ``query_date`` in a cycle starting ``period_start`` (1-indexed)."""
    return (query_date - period_start).days + 1
