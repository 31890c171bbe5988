"""
Pytest configuration and fixtures.
"""

import asyncio
from pathlib import Path

import pytest

from wut_exporter.config.loader import ConfigLoader
from wut_exporter.config.schema import Config
from wut_exporter.snmp.values import RawLeaf, Text


TEST_CONFIG = """
community "s3cret";

snmp {
    timeout 2s;
    retries 3;
}

target "10.0.0.5" { room "Kitchen"; }
target "10.0.0.6" { room "Server Room"; }
target "10.0.0.7" { room "kitchen"; }
"""


@pytest.fixture
def example_config_path() -> Path:
    """Path to the shipped example config file."""
    return Path(__file__).parent.parent / "config.example.conf"


@pytest.fixture
def config() -> Config:
    return ConfigLoader().load_string(TEST_CONFIG)


def text_leaves(*values: str) -> list[RawLeaf]:
    return [RawLeaf(position=i, value=Text(v)) for i, v in enumerate(values)]


class FakeWalkers:
    """
    Stand-in for SNMPWalker used as a walker factory.

    Records every walker created and answers walks from a per-address table.
    """

    def __init__(self, leaves: dict[str, list[RawLeaf]] | None = None, delay: float = 0.0):
        self.leaves = leaves or {}
        self.errors: dict[str, Exception] = {}
        self.delay = delay
        self.created: list[tuple[str, str]] = []
        self.cancelled: list[str] = []

    def __call__(self, address, community, settings, on_retry=None):
        self.created.append((address, community))
        return _FakeWalker(self, address)


class _FakeWalker:
    def __init__(self, owner: FakeWalkers, address: str):
        self.owner = owner
        self.address = address

    async def walk(self, root_oid: str) -> list[RawLeaf]:
        try:
            await asyncio.sleep(self.owner.delay)
        except asyncio.CancelledError:
            self.owner.cancelled.append(self.address)
            raise
        if self.address in self.owner.errors:
            raise self.owner.errors[self.address]
        return self.owner.leaves.get(self.address, [])


@pytest.fixture
def walkers() -> FakeWalkers:
    return FakeWalkers(
        {
            "10.0.0.5": text_leaves("21.5", "--", "19,8"),
            "10.0.0.6": text_leaves(" 17,25 ", "18.0"),
        }
    )
