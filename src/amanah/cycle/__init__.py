"""Menstrual cycle statistics for MyAmanah.

Cycles are inferred from the raw daily log history on every call; no cycle
state is stored.

Modules:
    models            — Log entries, detected cycles, predictions, summaries
    statistics_engine — Segmentation, statistics and weighted-average forecast
    phase             — Cycle phase by cycle day
"""

from src.amanah.cycle.models import (
    CycleLogEntry,
    CyclePrediction,
    CycleStatisticsSummary,
    DetectedCycle,
    FlowLevel,
    LogValidationError,
    Mood,
    PredictionConfidence,
    Symptom,
    upsert_log,
)
from src.amanah.cycle.phase import CyclePhase, phase_for_day
from src.amanah.cycle.statistics_engine import CycleStatisticsEngine

__all__ = [
    "CycleLogEntry",
    "CyclePrediction",
    "CycleStatisticsSummary",
    "DetectedCycle",
    "FlowLevel",
    "LogValidationError",
    "Mood",
    "PredictionConfidence",
    "Symptom",
    "upsert_log",
    "CyclePhase",
    "phase_for_day",
    "CycleStatisticsEngine",
]
