"""
Temperature sample model.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Sample:
    """
    One temperature reading from one scrape.

    `sensor` is the 1-based position of the reading in the device's walk
    response, counted before unparseable readings are dropped.
    """

    room: str
    sensor: str
    value: float

    def labels(self) -> list[str]:
        """Label values in METRIC_LABELS order."""
        return [self.room, self.sensor]
