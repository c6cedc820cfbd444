"""Cycle log records and the derived statistics / prediction types.

Log entries are created and persisted by the calling application.  The
statistics engine treats the full history as an immutable sequence and
recomputes every derived value from scratch on each call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable

from src.amanah.config_loader import AmanahConfig, get_amanah_config


class LogValidationError(ValueError):
    """Raised when a cycle log entry carries out-of-range values."""


class FlowLevel(str, Enum):
    NONE = "none"
    SPOTTING = "spotting"
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"

    @property
    def display_name(self) -> str:
        return "No Period" if self is FlowLevel.NONE else self.value.capitalize()


class Symptom(str, Enum):
    # Physical
    CRAMPS = "cramps"
    HEADACHE = "headache"
    FATIGUE = "fatigue"
    BLOATING = "bloating"
    BREAST_TENDERNESS = "breast_tenderness"
    BACKACHE = "backache"
    NAUSEA = "nausea"
    ACNE = "acne"
    INSOMNIA = "insomnia"
    HOT_FLASHES = "hot_flashes"
    # Digestive
    CONSTIPATION = "constipation"
    DIARRHEA = "diarrhea"
    APPETITE_INCREASE = "appetite_increase"
    APPETITE_DECREASE = "appetite_decrease"
    # Other
    DIZZINESS = "dizziness"
    JOINT_PAIN = "joint_pain"
    MUSCLE_ACHES = "muscle_aches"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def category(self) -> str:
        if self in _DIGESTIVE:
            return "digestive"
        if self in _OTHER:
            return "other"
        return "physical"


_DIGESTIVE = frozenset(
    {
        Symptom.CONSTIPATION,
        Symptom.DIARRHEA,
        Symptom.APPETITE_INCREASE,
        Symptom.APPETITE_DECREASE,
    }
)
_OTHER = frozenset({Symptom.DIZZINESS, Symptom.JOINT_PAIN, Symptom.MUSCLE_ACHES})


class Mood(str, Enum):
    HAPPY = "happy"
    CALM = "calm"
    ENERGETIC = "energetic"
    FOCUSED = "focused"
    ANXIOUS = "anxious"
    IRRITABLE = "irritable"
    SAD = "sad"
    MOODY = "moody"
    OVERWHELMED = "overwhelmed"
    NEUTRAL = "neutral"

    @property
    def is_positive(self) -> bool:
        return self in (Mood.HAPPY, Mood.CALM, Mood.ENERGETIC, Mood.FOCUSED)

    @property
    def is_negative(self) -> bool:
        return not self.is_positive and self is not Mood.NEUTRAL


class PredictionConfidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class CycleLogEntry:
    """One day's log.  ``log_date`` is the upsert key.

    Attributes:
        log_date:   Calendar day of the entry.
        flow:       Period flow; None or FlowLevel.NONE means not a period day.
        symptoms:   Symptom tags logged that day.
        mood:       Optional mood tag.
        pain_level: Optional 0–10 pain rating.
        notes:      Free text.
    """

    log_date: date
    flow: FlowLevel | None = None
    symptoms: frozenset[Symptom] = field(default_factory=frozenset)
    mood: Mood | None = None
    pain_level: int | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        # Accept any iterable of tags from callers.
        if not isinstance(self.symptoms, frozenset):
            object.__setattr__(self, "symptoms", frozenset(self.symptoms))
        self.validate()

    def validate(self, config: AmanahConfig | None = None) -> None:
        limits = (config or get_amanah_config()).log_limits
        if self.pain_level is not None and not (0 <= self.pain_level <= limits.max_pain_level):
            raise LogValidationError(
                f"pain_level must be between 0 and {limits.max_pain_level}, "
                f"got {self.pain_level}"
            )
        if len(self.symptoms) > limits.max_symptoms_per_log:
            raise LogValidationError(
                f"at most {limits.max_symptoms_per_log} symptoms per log, "
                f"got {len(self.symptoms)}"
            )
        if self.notes is not None and len(self.notes) > limits.max_notes_length:
            raise LogValidationError(
                f"notes exceed {limits.max_notes_length} characters"
            )

    @property
    def is_period_day(self) -> bool:
        return self.flow is not None and self.flow is not FlowLevel.NONE


def upsert_log(history: Iterable[CycleLogEntry], entry: CycleLogEntry) -> list[CycleLogEntry]:
    """Return a new history with ``entry`` replacing any log for the same day.

    The result is ordered newest first, the order the app displays logs in.
    """
    kept = [log for log in history if log.log_date != entry.log_date]
    kept.append(entry)
    return sorted(kept, key=lambda log: log.log_date, reverse=True)


@dataclass(frozen=True)
class DetectedCycle:
    """A cycle inferred from period-flagged days.

    Attributes:
        start_date:    First flagged day of the period run.
        length:        Days from this start to the next run's start.
        period_length: Number of flagged days in the run.
    """

    start_date: date
    length: int
    period_length: int


@dataclass(frozen=True)
class CyclePrediction:
    predicted_start: date
    predicted_end: date
    predicted_ovulation: date
    confidence: PredictionConfidence
    algorithm_version: str


@dataclass(frozen=True)
class CycleStatisticsSummary:
    """Descriptive statistics over completed cycles.

    With fewer than the minimum number of completed cycles the engine returns
    a placeholder (default lengths, regularity 0, ``completed_cycles`` 0).

    Attributes:
        average_cycle_length:  Mean completed-cycle length in days.
        average_period_length: Mean period length in days.
        regularity:            0–100, higher means more consistent lengths.
        completed_cycles:      Number of completed cycles observed.
        total_log_count:       Number of log entries in the history.
        regular_threshold:     Regularity at or above which cycles count as regular.
    """

    average_cycle_length: float
    average_period_length: float
    regularity: float
    completed_cycles: int
    total_log_count: int
    regular_threshold: int = 80

    @property
    def is_regular(self) -> bool:
        return self.regularity >= self.regular_threshold

    @property
    def has_sufficient_data(self) -> bool:
        return self.completed_cycles > 0
