"""
Configuration schema.

Frozen dataclasses built from a parsed ConfigDocument. The resulting Config
is created once at startup and shared read-only by every request.
"""

from dataclasses import dataclass, field
from enum import Enum

from ..const import (
    DEFAULT_HTTP_PORT,
    DEFAULT_LISTEN,
    DEFAULT_MAX_REPETITIONS,
    DEFAULT_SHUTDOWN_GRACE,
    DEFAULT_SNMP_PORT,
    DEFAULT_SNMP_RETRIES,
    DEFAULT_SNMP_TIMEOUT,
    SENSOR_VALUES_OID,
)
from ..models.target import TargetRecord, TargetTable
from .parser import Block, ConfigDocument


class SNMPVersion(Enum):
    """Supported community-based SNMP versions."""

    V1 = "1"
    V2C = "2c"

    @classmethod
    def parse(cls, value: object) -> "SNMPVersion":
        text = str(value).lower().lstrip("v")
        for version in cls:
            if version.value == text:
                return version
        if text == "2":
            return cls.V2C
        raise ValueError(f"Unsupported SNMP version: {value!r} (expected 1 or 2c)")

    @property
    def mp_model(self) -> int:
        """Message processing model for CommunityData."""
        return 0 if self is SNMPVersion.V1 else 1


@dataclass(frozen=True)
class SNMPConfig:
    """How devices are polled."""

    version: SNMPVersion = SNMPVersion.V1
    port: int = DEFAULT_SNMP_PORT
    timeout: float = DEFAULT_SNMP_TIMEOUT
    retries: int = DEFAULT_SNMP_RETRIES
    max_repetitions: int = DEFAULT_MAX_REPETITIONS
    oid: str = SENSOR_VALUES_OID

    @classmethod
    def from_block(cls, block: Block | None) -> "SNMPConfig":
        if block is None:
            return cls()
        return cls(
            version=SNMPVersion.parse(block.get_value("version", "1")),
            port=int(block.get_value("port", DEFAULT_SNMP_PORT)),
            timeout=float(block.get_value("timeout", DEFAULT_SNMP_TIMEOUT)),
            retries=int(block.get_value("retries", DEFAULT_SNMP_RETRIES)),
            max_repetitions=int(block.get_value("max_repetitions", DEFAULT_MAX_REPETITIONS)),
            oid=str(block.get_value("oid", SENSOR_VALUES_OID)),
        )

    @property
    def worst_case_duration(self) -> float:
        """Time one round trip can take when every attempt times out."""
        return self.timeout * (self.retries + 1)


@dataclass(frozen=True)
class HTTPConfig:
    """Exporter HTTP listener."""

    listen: str = DEFAULT_LISTEN
    port: int = DEFAULT_HTTP_PORT
    # None means derived from the SNMP settings
    scrape_timeout: float | None = None
    shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE

    @classmethod
    def from_block(cls, block: Block | None) -> "HTTPConfig":
        if block is None:
            return cls()
        scrape_timeout = block.get_value("scrape_timeout")
        return cls(
            listen=str(block.get_value("listen", DEFAULT_LISTEN)),
            port=int(block.get_value("port", DEFAULT_HTTP_PORT)),
            scrape_timeout=None if scrape_timeout is None else float(scrape_timeout),
            shutdown_grace=float(block.get_value("shutdown_grace", DEFAULT_SHUTDOWN_GRACE)),
        )


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    file: str | None = None
    file_level: str = "debug"
    file_max_size: int = 10  # MB
    file_keep: int = 5
    colors: bool = True
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    @classmethod
    def from_block(cls, block: Block | None) -> "LoggingConfig":
        if block is None:
            return cls()
        return cls(
            level=str(block.get_value("level", "info")),
            file=block.get_value("file"),
            file_level=str(block.get_value("file_level", "debug")),
            file_max_size=int(block.get_value("file_max_size", 10)),
            file_keep=int(block.get_value("file_keep", 5)),
            colors=bool(block.get_value("colors", True)),
            format=str(block.get_value("format", cls.format)),
        )


def target_from_block(block: Block) -> TargetRecord:
    """
    Build a TargetRecord from a 'target' block.

    The address is the block name or an 'address' directive:
        target "10.0.0.5" { room "Kitchen"; }
    """
    address = block.name or block.get_value("address")
    if not address:
        raise ValueError(f"Target block at line {block.line} has no address")
    return TargetRecord(address=str(address), room=str(block.get_value("room", "")))


@dataclass(frozen=True)
class Config:
    """Complete application configuration."""

    community: str = ""
    snmp: SNMPConfig = field(default_factory=SNMPConfig)
    http: HTTPConfig = field(default_factory=HTTPConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    targets: TargetTable = field(default_factory=TargetTable)

    @classmethod
    def from_document(cls, doc: ConfigDocument) -> "Config":
        """Create Config from a parsed ConfigDocument."""
        community = doc.get_value("community")
        if community is None:
            raise ValueError("'community' is not configured")

        targets = TargetTable(target_from_block(block) for block in doc.get_blocks("target"))
        if not len(targets):
            raise ValueError("No 'target' blocks configured")

        return cls(
            community=str(community),
            snmp=SNMPConfig.from_block(doc.get_block("snmp")),
            http=HTTPConfig.from_block(doc.get_block("http")),
            logging=LoggingConfig.from_block(doc.get_block("logging")),
            targets=targets,
        )

    @property
    def scrape_timeout(self) -> float:
        """Upper bound for one scrape, as enforced by the HTTP layer."""
        if self.http.scrape_timeout is not None:
            return self.http.scrape_timeout
        return self.snmp.worst_case_duration
