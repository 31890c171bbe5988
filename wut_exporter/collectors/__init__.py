"""
Request-scoped metric collectors.
"""

from .base import Collector, CollectorResult
from .temperature import TemperatureCollector

__all__ = [
    "Collector",
    "CollectorResult",
    "TemperatureCollector",
]
