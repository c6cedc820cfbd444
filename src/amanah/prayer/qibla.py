"""Qibla bearing: great-circle initial bearing toward the Kaaba.

An observer standing exactly on the reference point has no defined bearing;
``atan2(0, 0)`` evaluates to 0, so the result is 0.0° / "N".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from src.amanah.base import DEG, RAD, GeoCoordinate, normalize_degrees
from src.amanah.config_loader import AmanahConfig, get_amanah_config

logger = logging.getLogger("amanah.prayer.qibla")

# Clockwise from north; each label covers 45° centred on its direction.
COMPASS_OCTANTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


@dataclass(frozen=True)
class QiblaDirection:
    """Bearing in degrees clockwise from true north, in [0, 360)."""

    degrees: float
    cardinal_direction: str


def octant_for(bearing: float) -> str:
    """8-way compass label; bands start at -22.5° relative to north."""
    index = int(normalize_degrees(bearing + 22.5) // 45) % len(COMPASS_OCTANTS)
    return COMPASS_OCTANTS[index]


class QiblaCalculator:
    def __init__(self, config: AmanahConfig | None = None) -> None:
        self._config = config or get_amanah_config()

    def bearing(self, coordinate: GeoCoordinate) -> QiblaDirection:
        ref = self._config.qibla
        ref_lat = ref.latitude * DEG
        obs_lat = coordinate.latitude * DEG
        delta_lon = (ref.longitude - coordinate.longitude) * DEG

        x = math.sin(delta_lon) * math.cos(ref_lat)
        y = math.cos(obs_lat) * math.sin(ref_lat) - math.sin(obs_lat) * math.cos(
            ref_lat
        ) * math.cos(delta_lon)

        degrees = normalize_degrees(RAD * math.atan2(x, y))
        # -1e-15 % 360 rounds to 360.0 in floating point
        if degrees >= 360.0:
            degrees = 0.0
        direction = QiblaDirection(degrees=degrees, cardinal_direction=octant_for(degrees))
        logger.debug(
            "Qibla from (%.4f, %.4f): %.2f° %s",
            coordinate.latitude,
            coordinate.longitude,
            direction.degrees,
            direction.cardinal_direction,
        )
        return direction
