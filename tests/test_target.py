"""
Tests for target resolution.
"""

import pytest

from wut_exporter.config.schema import Config
from wut_exporter.models.target import TargetRecord, TargetTable


def test_every_target_resolves_by_room_and_address(config: Config) -> None:
    for target in config.targets:
        if target.room == "kitchen":
            # Shadowed by the earlier "Kitchen" entry
            continue
        assert config.targets.resolve(target.room) is target
        assert config.targets.resolve(target.address) is target


@pytest.mark.parametrize("key", ["kitchen", "KITCHEN", "Kitchen"])
def test_room_match_ignores_case(config: Config, key: str) -> None:
    assert config.targets.resolve(key) == TargetRecord("10.0.0.5", "Kitchen")


def test_first_match_wins(config: Config) -> None:
    # "kitchen" is also the room of 10.0.0.7, configured later
    assert config.targets.resolve("kitchen").address == "10.0.0.5"
    assert config.targets.resolve("10.0.0.7").room == "kitchen"


@pytest.mark.parametrize("key", ["", "Kitch", "server", "10.0.0", "10.0.0.50", "nowhere"])
def test_no_partial_matches(config: Config, key: str) -> None:
    assert config.targets.resolve(key) is None


def test_address_match_is_exact() -> None:
    table = TargetTable([TargetRecord("Thermo-1.lan", "Lab")])

    assert table.resolve("Thermo-1.lan").room == "Lab"
    assert table.resolve("thermo-1.lan") is None


def test_table_is_read_only_sequence(config: Config) -> None:
    records = list(config.targets)
    records.clear()

    assert len(config.targets) == 3
