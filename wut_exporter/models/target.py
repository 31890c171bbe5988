"""
Configured thermometer devices and target resolution.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class TargetRecord:
    """A configured device: its SNMP address and the room it measures."""

    address: str
    room: str


class TargetTable:
    """
    Read-only, ordered table of configured targets.

    Built once at startup and shared by every request.
    """

    def __init__(self, records: Iterable[TargetRecord] = ()):
        self._records = tuple(records)

    def resolve(self, key: str) -> TargetRecord | None:
        """
        Find the target for a scrape key.

        A key matches a record when it equals the room name ignoring case,
        or equals the address exactly. The first match in configured order
        wins; None is returned when nothing matches.
        """
        folded = key.casefold()
        for record in self._records:
            if record.room.casefold() == folded or record.address == key:
                return record
        return None

    def __iter__(self) -> Iterator[TargetRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"TargetTable({len(self._records)} targets)"
