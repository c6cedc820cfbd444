"""Cycle statistics and prediction engine.

Works only from the raw daily log history:

- Period-flagged days are grouped into runs; a gap longer than the tolerance
  (3 days) starts a new run.
- Each run followed by another run is a completed cycle.  The final run has
  no known successor and never counts.
- Summary statistics and a weighted moving-average forecast are computed
  over the completed cycles.

Every call recomputes from the full history; nothing is cached between calls.
"""

from __future__ import annotations

import logging
import math
import statistics
from datetime import date, timedelta
from typing import Iterable, Sequence

from src.amanah.base import clamp
from src.amanah.config_loader import AmanahConfig, CycleConfig, get_amanah_config
from src.amanah.cycle.models import (
    CycleLogEntry,
    CyclePrediction,
    CycleStatisticsSummary,
    DetectedCycle,
    PredictionConfidence,
)
from src.amanah.cycle.phase import CyclePhase, cycle_day_from_start, phase_for_day

logger = logging.getLogger("amanah.cycle.statistics_engine")


def _population_stddev(values: Sequence[float], center: float) -> float:
    """sqrt(mean squared deviation from ``center``)."""
    return math.sqrt(sum((v - center) ** 2 for v in values) / len(values))


class CycleStatisticsEngine:
    """Segment log history into cycles, summarise them, and forecast.

    Usage::

        engine = CycleStatisticsEngine()
        summary = engine.summarize(logs)
        predictions = engine.predict(logs)
        if predictions:
            print(predictions[0].predicted_start, predictions[0].confidence)
    """

    def __init__(self, config: AmanahConfig | None = None) -> None:
        self._config = config or get_amanah_config()

    @property
    def _cy_config(self) -> CycleConfig:
        return self._config.cycle

    # ------------------------------------------------------------------
    # Segmentation
    # ------------------------------------------------------------------

    def period_runs(self, logs: Iterable[CycleLogEntry]) -> list[list[date]]:
        """Group period days into runs, oldest first.

        Duplicate entries for the same day count once.
        """
        days = sorted({log.log_date for log in logs if log.is_period_day})
        tolerance = self._cy_config.period_gap_tolerance_days

        runs: list[list[date]] = []
        for day in days:
            if runs and (day - runs[-1][-1]).days <= tolerance:
                runs[-1].append(day)
            else:
                runs.append([day])
        return runs

    def detect_cycles(self, logs: Iterable[CycleLogEntry]) -> list[DetectedCycle]:
        """Completed cycles, oldest first.

        A cycle spans from one run's first day to the next run's first day.
        The final (open) run is not emitted.
        """
        runs = self.period_runs(logs)
        cycles = [
            DetectedCycle(
                start_date=run[0],
                length=(following[0] - run[0]).days,
                period_length=len(run),
            )
            for run, following in zip(runs, runs[1:])
        ]
        logger.debug("Detected %d completed cycle(s) from %d period run(s)", len(cycles), len(runs))
        return cycles

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def summarize(self, logs: Sequence[CycleLogEntry]) -> CycleStatisticsSummary:
        """Average lengths and a 0–100 regularity score.

        With fewer than ``min_cycles_for_prediction`` completed cycles, a
        placeholder summary is returned (default lengths, regularity 0,
        ``completed_cycles`` 0).
        """
        cc = self._cy_config
        logs = list(logs)
        cycles = self.detect_cycles(logs)

        if len(cycles) < cc.min_cycles_for_prediction:
            logger.debug(
                "Insufficient history for statistics: %d cycle(s), need %d",
                len(cycles),
                cc.min_cycles_for_prediction,
            )
            return CycleStatisticsSummary(
                average_cycle_length=float(cc.default_cycle_length),
                average_period_length=float(cc.default_period_length),
                regularity=0.0,
                completed_cycles=0,
                total_log_count=len(logs),
                regular_threshold=cc.regular_threshold,
            )

        lengths = [c.length for c in cycles]
        avg_length = statistics.mean(lengths)
        avg_period = statistics.mean(c.period_length for c in cycles)
        regularity = self.regularity_score(lengths)

        return CycleStatisticsSummary(
            average_cycle_length=float(avg_length),
            average_period_length=float(avg_period),
            regularity=regularity,
            completed_cycles=len(cycles),
            total_log_count=len(logs),
            regular_threshold=cc.regular_threshold,
        )

    def regularity_score(self, lengths: Sequence[int]) -> float:
        """100 − multiplier·σ, clamped to [0, 100] (population σ)."""
        if not lengths:
            return 0.0
        sigma = statistics.pstdev(lengths)
        return clamp(100.0 - self._cy_config.regularity_stddev_multiplier * sigma, 0.0, 100.0)

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def predicted_cycle_length(self, cycles: Sequence[DetectedCycle]) -> float:
        """Weighted average of the most recent cycles.

        Weight index 0 goes to the most recent cycle.  The sum is divided by
        the total of the weights actually applied, so fewer than six cycles
        still yields a true weighted mean.
        """
        cc = self._cy_config
        recent = list(cycles)[-cc.max_cycles_for_average:]
        weighted_sum = 0.0
        total_weight = 0.0
        for weight, cycle in zip(cc.prediction_weights, reversed(recent)):
            weighted_sum += cycle.length * weight
            total_weight += weight
        return weighted_sum / total_weight

    def classify_confidence(self, stddev: float) -> PredictionConfidence:
        cc = self._cy_config
        if stddev < cc.high_confidence_max_stddev:
            return PredictionConfidence.HIGH
        if stddev < cc.medium_confidence_max_stddev:
            return PredictionConfidence.MEDIUM
        return PredictionConfidence.LOW

    def predict(self, logs: Iterable[CycleLogEntry]) -> list[CyclePrediction]:
        """Forecast the next cycle starts.

        Returns an empty list with fewer than ``min_cycles_for_prediction``
        completed cycles.  Otherwise returns ``predictions_per_run`` entries;
        each start is the previous one plus the rounded predicted length,
        beginning from the last completed cycle's start.
        """
        cc = self._cy_config
        cycles = self.detect_cycles(logs)
        if len(cycles) < cc.min_cycles_for_prediction:
            logger.debug("Insufficient history for prediction: %d cycle(s)", len(cycles))
            return []

        recent = cycles[-cc.max_cycles_for_average:]
        predicted_length = self.predicted_cycle_length(recent)
        stddev = _population_stddev([c.length for c in recent], predicted_length)
        confidence = self.classify_confidence(stddev)
        step = timedelta(days=round(predicted_length))

        predictions: list[CyclePrediction] = []
        start = cycles[-1].start_date
        for _ in range(cc.predictions_per_run):
            start = start + step
            predictions.append(
                CyclePrediction(
                    predicted_start=start,
                    predicted_end=start + timedelta(days=cc.default_period_length),
                    predicted_ovulation=start - timedelta(days=cc.luteal_phase_days),
                    confidence=confidence,
                    algorithm_version=cc.algorithm_version,
                )
            )

        logger.debug(
            "Predicted cycle length %.2f days (σ=%.2f, %s) from %d cycle(s); next start %s",
            predicted_length,
            stddev,
            confidence.value,
            len(recent),
            predictions[0].predicted_start,
        )
        return predictions

    # ------------------------------------------------------------------
    # Current-cycle helpers
    # ------------------------------------------------------------------

    def current_cycle_start(self, logs: Iterable[CycleLogEntry]) -> date | None:
        """First day of the most recent period run, or None without period logs."""
        runs = self.period_runs(logs)
        return runs[-1][0] if runs else None

    def current_cycle_day(self, logs: Iterable[CycleLogEntry], today: date) -> int | None:
        start = self.current_cycle_start(logs)
        if start is None:
            return None
        return cycle_day_from_start(start, today)

    def current_phase(self, logs: Sequence[CycleLogEntry], today: date) -> CyclePhase | None:
        """Phase for ``today`` using the personal average cycle length."""
        day = self.current_cycle_day(logs, today)
        if day is None:
            return None
        cc = self._cy_config
        summary = self.summarize(logs)
        return phase_for_day(
            day,
            cycle_length=round(summary.average_cycle_length),
            luteal_days=cc.luteal_phase_days,
            period_days=cc.default_period_length,
        )

    @staticmethod
    def days_until_next_period(
        predictions: Sequence[CyclePrediction], today: date
    ) -> int | None:
        if not predictions:
            return None
        return (predictions[0].predicted_start - today).days
