"""Load, validate, and hot-reload the MyAmanah core configuration.

The config lives in ``amanah_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_amanah_config()`` to re-read from
disk after an update — no restart required.  The ``AMANAH_CONFIG_PATH``
environment setting (see ``src.config``) points the loader at a different file.

Usage::

    from src.amanah.config_loader import get_amanah_config

    config = get_amanah_config()
    angles = config.prayer.method_angles("MWL")   # MethodAngles(18.0, 17.0)
    weights = config.cycle.prediction_weights      # [0.30, 0.25, ...]
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.config import get_settings

logger = logging.getLogger("amanah.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "amanah_config.yaml"

_REQUIRED_METHODS = ("ISNA", "MWL", "EGYPT", "MAKKAH", "KARACHI", "TEHRAN")


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class MethodAngles:
    """Twilight angles for one calculation method.

    An ``isha_angle`` of 0 means Isha is a fixed offset after Maghrib.
    """

    fajr_angle: float
    isha_angle: float

    @property
    def isha_is_fixed_offset(self) -> bool:
        return self.isha_angle <= 0


@dataclass
class PrayerConfig:
    """Prayer-time calculation settings."""

    sunrise_angle: float
    isha_fixed_offset_minutes: int
    methods: dict[str, MethodAngles]
    asr_shadow_factors: dict[str, float]

    def method_angles(self, method: str) -> MethodAngles:
        return self.methods[method]

    def shadow_factor(self, convention: str) -> float:
        return self.asr_shadow_factors[convention]


@dataclass
class QiblaConfig:
    """Reference point for the Qibla bearing."""

    latitude: float
    longitude: float


@dataclass
class CycleConfig:
    """Cycle segmentation, statistics and prediction settings."""

    period_gap_tolerance_days: int = 3
    min_cycles_for_prediction: int = 2
    max_cycles_for_average: int = 6
    prediction_weights: list[float] = field(
        default_factory=lambda: [0.30, 0.25, 0.20, 0.12, 0.08, 0.05]
    )
    predictions_per_run: int = 3
    default_cycle_length: int = 28
    default_period_length: int = 5
    luteal_phase_days: int = 14
    regularity_stddev_multiplier: float = 10.0
    regular_threshold: int = 80
    high_confidence_max_stddev: float = 3.0
    medium_confidence_max_stddev: float = 7.0
    algorithm_version: str = "v1"


@dataclass
class LogLimitsConfig:
    """Bounds applied when a cycle log entry is constructed."""

    max_symptoms_per_log: int = 20
    max_notes_length: int = 500
    max_pain_level: int = 10


@dataclass
class AmanahConfig:
    """Complete, validated core configuration.

    This is the single in-memory representation of amanah_config.yaml.
    The prayer, Qibla and cycle engines all read from this object.

    Attributes:
        version:    Config schema version string.
        prayer:     Prayer-time calculation settings.
        qibla:      Qibla reference point.
        cycle:      Cycle statistics / prediction settings.
        log_limits: Cycle log field bounds.
    """

    version: str
    prayer: PrayerConfig
    qibla: QiblaConfig
    cycle: CycleConfig
    log_limits: LogLimitsConfig
    _raw: dict = field(default_factory=dict, repr=False)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when amanah_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    try:
        import yaml  # pyyaml
    except ImportError as exc:
        raise ImportError(
            "pyyaml is required for config loading. Install with: pip install pyyaml"
        ) from exc

    if not path.exists():
        raise FileNotFoundError(f"Amanah config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> AmanahConfig:
    """Validate the raw YAML dict and construct an AmanahConfig.

    All problems are collected before raising so a bad file reports every
    error at once.

    Args:
        raw: Parsed YAML dict.

    Returns:
        Validated AmanahConfig instance.

    Raises:
        ConfigValidationError: If required fields are missing or invalid.
    """
    errors: list[str] = []

    def _number(section: dict, key: str, where: str, default: Any) -> float:
        value = section.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            errors.append(f"{where}.{key} must be a number, got {value!r}")
            return float(default)

    version = str(raw.get("version", "1.0"))

    # ── Prayer ──
    pr_raw = raw.get("prayer") or {}
    methods: dict[str, MethodAngles] = {}
    for name, angles in (pr_raw.get("methods") or {}).items():
        if not isinstance(angles, dict):
            errors.append(f"prayer.methods.{name} must be a mapping with fajr_angle/isha_angle")
            continue
        where = f"prayer.methods.{name}"
        fajr = _number(angles, "fajr_angle", where, 0.0)
        isha = _number(angles, "isha_angle", where, 0.0)
        for key, value in (("fajr_angle", fajr), ("isha_angle", isha)):
            if not (0.0 <= value < 90.0):
                errors.append(f"{where}.{key} = {value} is out of range [0, 90)")
        if fajr <= 0:
            errors.append(f"{where}.fajr_angle must be positive")
        methods[str(name).upper()] = MethodAngles(fajr_angle=fajr, isha_angle=isha)

    for name in _REQUIRED_METHODS:
        if name not in methods:
            errors.append(f"prayer.methods is missing calculation method '{name}'")

    shadow_raw = pr_raw.get("asr_shadow_factors") or {"standard": 1.0, "hanafi": 2.0}
    shadow_factors: dict[str, float] = {}
    for name in shadow_raw:
        factor = _number(shadow_raw, name, "prayer.asr_shadow_factors", 1.0)
        if factor <= 0:
            errors.append(f"prayer.asr_shadow_factors.{name} must be positive")
        shadow_factors[str(name).lower()] = factor
    for name in ("standard", "hanafi"):
        if name not in shadow_factors:
            errors.append(f"prayer.asr_shadow_factors is missing '{name}'")

    prayer = PrayerConfig(
        sunrise_angle=_number(pr_raw, "sunrise_angle", "prayer", 0.833),
        isha_fixed_offset_minutes=int(_number(pr_raw, "isha_fixed_offset_minutes", "prayer", 90)),
        methods=methods,
        asr_shadow_factors=shadow_factors,
    )

    # ── Qibla ──
    qb_raw = raw.get("qibla") or {}
    qibla = QiblaConfig(
        latitude=_number(qb_raw, "latitude", "qibla", 21.4225),
        longitude=_number(qb_raw, "longitude", "qibla", 39.8262),
    )
    if not (-90.0 <= qibla.latitude <= 90.0):
        errors.append(f"qibla.latitude = {qibla.latitude} is out of range [-90, 90]")
    if not (-180.0 <= qibla.longitude <= 180.0):
        errors.append(f"qibla.longitude = {qibla.longitude} is out of range [-180, 180]")

    # ── Cycle ──
    cy_raw = raw.get("cycle") or {}
    conf_raw = cy_raw.get("confidence") or {}
    weights_raw = cy_raw.get("prediction_weights", [0.30, 0.25, 0.20, 0.12, 0.08, 0.05])
    weights: list[float] = []
    for i, w in enumerate(weights_raw or []):
        try:
            weight = float(w)
        except (TypeError, ValueError):
            errors.append(f"cycle.prediction_weights[{i}] must be a number, got {w!r}")
            continue
        if not (0.0 < weight <= 1.0):
            errors.append(f"cycle.prediction_weights[{i}] = {weight} is out of range (0.0, 1.0]")
        weights.append(weight)

    cycle = CycleConfig(
        period_gap_tolerance_days=int(_number(cy_raw, "period_gap_tolerance_days", "cycle", 3)),
        min_cycles_for_prediction=int(_number(cy_raw, "min_cycles_for_prediction", "cycle", 2)),
        max_cycles_for_average=int(_number(cy_raw, "max_cycles_for_average", "cycle", 6)),
        prediction_weights=weights,
        predictions_per_run=int(_number(cy_raw, "predictions_per_run", "cycle", 3)),
        default_cycle_length=int(_number(cy_raw, "default_cycle_length", "cycle", 28)),
        default_period_length=int(_number(cy_raw, "default_period_length", "cycle", 5)),
        luteal_phase_days=int(_number(cy_raw, "luteal_phase_days", "cycle", 14)),
        regularity_stddev_multiplier=_number(
            cy_raw, "regularity_stddev_multiplier", "cycle", 10.0
        ),
        regular_threshold=int(_number(cy_raw, "regular_threshold", "cycle", 80)),
        high_confidence_max_stddev=_number(
            conf_raw, "high_max_stddev_days", "cycle.confidence", 3.0
        ),
        medium_confidence_max_stddev=_number(
            conf_raw, "medium_max_stddev_days", "cycle.confidence", 7.0
        ),
        algorithm_version=str(cy_raw.get("algorithm_version", "v1")),
    )

    if cycle.min_cycles_for_prediction < 1:
        errors.append("cycle.min_cycles_for_prediction must be at least 1")
    if len(cycle.prediction_weights) < cycle.max_cycles_for_average:
        errors.append(
            f"cycle.prediction_weights has {len(cycle.prediction_weights)} entries; "
            f"max_cycles_for_average needs {cycle.max_cycles_for_average}"
        )
    if cycle.high_confidence_max_stddev >= cycle.medium_confidence_max_stddev:
        errors.append(
            "cycle.confidence.high_max_stddev_days must be below medium_max_stddev_days"
        )
    if cycle.period_gap_tolerance_days < 1:
        errors.append("cycle.period_gap_tolerance_days must be at least 1")

    # ── Log limits ──
    ll_raw = raw.get("log_limits") or {}
    log_limits = LogLimitsConfig(
        max_symptoms_per_log=int(_number(ll_raw, "max_symptoms_per_log", "log_limits", 20)),
        max_notes_length=int(_number(ll_raw, "max_notes_length", "log_limits", 500)),
        max_pain_level=int(_number(ll_raw, "max_pain_level", "log_limits", 10)),
    )

    if errors:
        raise ConfigValidationError(
            f"amanah_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return AmanahConfig(
        version=version,
        prayer=prayer,
        qibla=qibla,
        cycle=cycle,
        log_limits=log_limits,
        _raw=raw,
    )


def load_amanah_config(path: Path | None = None) -> AmanahConfig:
    """Load and validate the core config from disk.

    Args:
        path: Override path to YAML. Falls back to the ``config_path``
              setting, then to the bundled amanah_config.yaml.

    Returns:
        Validated AmanahConfig instance.
    """
    configured = get_settings().config_path
    target = path or (Path(configured) if configured else _CONFIG_PATH)
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded amanah config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: AmanahConfig | None = None
_config_lock = threading.Lock()


def get_amanah_config() -> AmanahConfig:
    """Return the global AmanahConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_amanah_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_amanah_config()
    return _config


def reload_amanah_config(path: Path | None = None) -> AmanahConfig:
    """Reload the config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Args:
        path: Override path to YAML.

    Returns:
        The newly loaded AmanahConfig.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_amanah_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info(
        "Reloaded amanah config: %s → %s",
        old_version,
        new_config.version,
    )
    return new_config
