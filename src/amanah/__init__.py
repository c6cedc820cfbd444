"""MyAmanah computational core.

Two independent, stateless engines that take plain values from the app and
return plain values:

Subpackages:
    prayer/ — Astronomical prayer times and Qibla bearing
    cycle/  — Cycle segmentation, statistics, prediction and phase

Core modules:
    base          — GeoCoordinate and numeric helpers
    config_loader — Load/validate/hot-reload amanah_config.yaml
"""

from src.amanah.base import GeoCoordinate
from src.amanah.config_loader import AmanahConfig, get_amanah_config

__all__ = [
    "GeoCoordinate",
    "AmanahConfig",
    "get_amanah_config",
]
