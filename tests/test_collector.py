"""
Tests for the temperature collector.
"""

import asyncio
import logging

from prometheus_client import CollectorRegistry, generate_latest

from conftest import FakeWalkers, text_leaves
from wut_exporter.collectors.temperature import TemperatureCollector
from wut_exporter.models.sample import Sample
from wut_exporter.models.target import TargetRecord
from wut_exporter.snmp.errors import AgentTimeoutError, AgentUnreachableError
from wut_exporter.snmp.values import Bytes, RawLeaf


KITCHEN = TargetRecord("10.0.0.5", "Kitchen")


def exposition(collector: TemperatureCollector) -> str:
    registry = CollectorRegistry()
    registry.register(collector)
    return generate_latest(registry).decode()


async def test_skipped_leaf_keeps_sensor_numbering(walkers: FakeWalkers) -> None:
    collector = TemperatureCollector(KITCHEN, "s3cret", walker_factory=walkers)

    result = await collector.safe_fetch()

    assert result.available
    assert result.samples == [
        Sample(room="kitchen", sensor="1", value=21.5),
        Sample(room="kitchen", sensor="3", value=19.8),
    ]
    assert walkers.created == [("10.0.0.5", "s3cret")]


async def test_exposition_output(walkers: FakeWalkers) -> None:
    collector = TemperatureCollector(KITCHEN, "s3cret", walker_factory=walkers)
    await collector.safe_fetch()

    body = exposition(collector)

    assert "# TYPE wut_temperature gauge" in body
    assert 'wut_temperature{room="kitchen",sensor="1"} 21.5' in body
    assert 'wut_temperature{room="kitchen",sensor="3"} 19.8' in body
    assert 'sensor="2"' not in body


async def test_bytes_values_are_parsed() -> None:
    walkers = FakeWalkers({"10.0.0.5": [RawLeaf(0, Bytes(b"--")), RawLeaf(1, Bytes(b"23,1"))]})
    collector = TemperatureCollector(KITCHEN, "c", walker_factory=walkers)

    result = await collector.safe_fetch()

    assert result.samples == [Sample(room="kitchen", sensor="2", value=23.1)]


async def test_describe_has_no_samples(walkers: FakeWalkers) -> None:
    collector = TemperatureCollector(KITCHEN, "s3cret", walker_factory=walkers)

    families = list(collector.describe())

    assert len(families) == 1
    assert families[0].name == "wut_temperature"
    assert families[0].samples == []
    assert walkers.created == []


async def test_walk_error_yields_no_samples(walkers: FakeWalkers, caplog) -> None:
    walkers.errors["10.0.0.5"] = AgentUnreachableError("10.0.0.5", "cannot open transport")
    collector = TemperatureCollector(KITCHEN, "s3cret", walker_factory=walkers)

    with caplog.at_level(logging.ERROR, logger="wut_exporter"):
        result = await collector.safe_fetch()

    assert not result.available
    assert result.samples == []
    assert "wut_temperature{" not in exposition(collector)
    assert any("10.0.0.5 (Kitchen)" in r.getMessage() for r in caplog.records if r.levelno == logging.ERROR)


async def test_timeout_cancels_walk(caplog) -> None:
    walkers = FakeWalkers({"10.0.0.5": text_leaves("20,0")}, delay=10)
    collector = TemperatureCollector(KITCHEN, "c", walker_factory=walkers)

    with caplog.at_level(logging.ERROR, logger="wut_exporter"):
        result = await collector.safe_fetch(timeout=0.05)

    assert not result.available
    assert "timed out" in result.error
    assert walkers.cancelled == ["10.0.0.5"]


async def test_retries_are_logged_as_warnings(caplog) -> None:
    class RetryingWalker:
        def __init__(self, address, community, settings, on_retry=None):
            self.address = address
            self.on_retry = on_retry

        async def walk(self, root_oid):
            for attempt in (1, 2, 3):
                self.on_retry(self.address, attempt)
            raise AgentTimeoutError(self.address, "no response after 4 attempts")

    collector = TemperatureCollector(KITCHEN, "c", walker_factory=RetryingWalker)

    with caplog.at_level(logging.WARNING, logger="wut_exporter"):
        result = await collector.safe_fetch()

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 3
    assert "SNMP retry 1 for 10.0.0.5" in warnings[0].getMessage()
    assert not result.available
    assert result.samples == []


async def test_concurrent_collectors_do_not_mix(walkers: FakeWalkers) -> None:
    walkers.delay = 0.01
    kitchen = TemperatureCollector(KITCHEN, "s3cret", walker_factory=walkers)
    server = TemperatureCollector(TargetRecord("10.0.0.6", "Server Room"), "s3cret", walker_factory=walkers)

    await asyncio.gather(kitchen.safe_fetch(), server.safe_fetch())

    assert {s.room for s in kitchen.result.samples} == {"kitchen"}
    assert server.result.samples == [
        Sample(room="server room", sensor="1", value=17.25),
        Sample(room="server room", sensor="2", value=18.0),
    ]


async def test_timeout_error_names_target_once(caplog) -> None:
    walkers = FakeWalkers({"10.0.0.5": text_leaves("20,0")}, delay=10)
    collector = TemperatureCollector(KITCHEN, "c", walker_factory=walkers)

    with caplog.at_level(logging.ERROR, logger="wut_exporter"):
        result = await collector.safe_fetch(timeout=0.05)

    assert result.error == "10.0.0.5: scrape timed out after 0.05s"
    (record,) = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert record.getMessage().count("10.0.0.5") == 2
    assert record.getMessage().count("Kitchen") == 1
