"""
Base collector interface.

Collectors follow the prometheus_client custom collector protocol
(describe()/collect()) and add an async fetch() step: the network I/O
happens in fetch(), collect() only turns the fetched result into metric
families. Every collector instance serves exactly one scrape.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

from prometheus_client.metrics_core import Metric

from ..logging import get_logger
from ..models.sample import Sample
from ..snmp.errors import AgentTimeoutError, WalkError


logger = get_logger("collectors")


@dataclass
class CollectorResult:
    """Result of one fetch."""

    samples: list[Sample] = field(default_factory=list)

    # False when the device could not be polled
    available: bool = True

    error: str | None = None

    def add(self, sample: Sample) -> None:
        self.samples.append(sample)

    def set_error(self, error: str) -> None:
        """Mark the fetch as failed; a failed result carries no samples."""
        self.available = False
        self.error = error
        self.samples = []

    def __repr__(self) -> str:
        status = "OK" if self.available else f"ERROR: {self.error}"
        return f"CollectorResult({len(self.samples)} samples, {status})"


class Collector(ABC):
    """
    Abstract base class for request-scoped collectors.

    Lifecycle: fetch() (or safe_fetch()) once, then collect() any number
    of times from the exposition encoder.
    """

    def __init__(self, name: str, address: str):
        self.name = name
        # Agent address, as carried by WalkError
        self.address = address
        self._result: CollectorResult | None = None

    @abstractmethod
    async def fetch(self) -> CollectorResult:
        """
        Poll the source.

        Raises:
            WalkError: If the source could not be polled
        """

    @abstractmethod
    def describe(self) -> Iterable[Metric]:
        """Metric families this collector produces, without samples."""

    @abstractmethod
    def collect(self) -> Iterable[Metric]:
        """Metric families with the samples of the last fetch."""

    @property
    def result(self) -> CollectorResult | None:
        return self._result

    async def safe_fetch(self, timeout: float | None = None) -> CollectorResult:
        """
        Fetch with an overall time limit, turning polling failures into
        an unavailable result.

        Args:
            timeout: Seconds before the fetch is cancelled (None = no limit)
        """
        try:
            result = await asyncio.wait_for(self.fetch(), timeout)
        except asyncio.TimeoutError:
            error = AgentTimeoutError(self.address, f"scrape timed out after {timeout:g}s")
            logger.error(f"Error walking SNMP data for {self.name}: {error}")
            result = CollectorResult()
            result.set_error(str(error))
        except WalkError as e:
            logger.error(f"Error walking SNMP data for {self.name}: {e}")
            result = CollectorResult()
            result.set_error(str(e))

        self._result = result
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, {self._result!r})"
