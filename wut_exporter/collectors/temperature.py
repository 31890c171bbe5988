"""
Temperature collector for WuT thermometers.

Walks the sensor value table of one device and exposes every readable
channel as a wut_temperature gauge labelled with room and sensor number.
"""

from collections.abc import Callable, Iterator

from prometheus_client.core import GaugeMetricFamily

from ..config.schema import SNMPConfig
from ..const import METRIC_DOCUMENTATION, METRIC_LABELS, METRIC_NAME
from ..logging import get_logger
from ..models.sample import Sample
from ..models.target import TargetRecord
from ..snmp.values import parse_value
from ..snmp.walker import RetryObserver, SNMPWalker
from .base import Collector, CollectorResult


logger = get_logger("collectors.temperature")

WalkerFactory = Callable[[str, str, SNMPConfig, RetryObserver | None], SNMPWalker]


class TemperatureCollector(Collector):
    """
    Collector for one thermometer, created per scrape.

    Sensor labels number the channels by their position in the walk, so a
    channel without a probe keeps its number free and the following
    channels keep theirs.
    """

    def __init__(
        self,
        target: TargetRecord,
        community: str,
        settings: SNMPConfig | None = None,
        walker_factory: WalkerFactory = SNMPWalker,
    ):
        super().__init__(name=f"{target.address} ({target.room})", address=target.address)
        self.target = target
        self.community = community
        self.settings = settings or SNMPConfig()
        self.walker_factory = walker_factory

    async def fetch(self) -> CollectorResult:
        walker = self.walker_factory(self.target.address, self.community, self.settings, self._log_retry)
        leaves = await walker.walk(self.settings.oid)

        room = self.target.room.lower()
        result = CollectorResult()
        for leaf in leaves:
            value = parse_value(leaf)
            if value is None:
                continue
            result.add(Sample(room=room, sensor=str(leaf.position + 1), value=value))

        logger.debug(f"{self.name}: {len(result.samples)} of {len(leaves)} channels readable")
        return result

    def _log_retry(self, address: str, attempt: int) -> None:
        logger.warning(f"SNMP retry {attempt} for {address} ({self.target.room})")

    def _family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(METRIC_NAME, METRIC_DOCUMENTATION, labels=list(METRIC_LABELS))

    def describe(self) -> Iterator[GaugeMetricFamily]:
        yield self._family()

    def collect(self) -> Iterator[GaugeMetricFamily]:
        family = self._family()
        if self._result is not None:
            for sample in self._result.samples:
                family.add_metric(sample.labels(), sample.value)
        yield family
