"""
Configuration loader with file lookup and validation.
"""

from collections import Counter
from pathlib import Path

from ..const import CONFIG_SEARCH_PATHS
from .lexer import LexerError
from .parser import ConfigDocument, ParseError, parse_config, parse_config_file
from .schema import Config


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


def find_config_file(search_paths: tuple[str, ...] = CONFIG_SEARCH_PATHS) -> Path | None:
    """Return the first existing file from the search path."""
    for candidate in search_paths:
        path = Path(candidate)
        if path.is_file():
            return path
    return None


class ConfigLoader:
    """
    Loads and validates configuration from files or strings.

    Usage:
        loader = ConfigLoader()
        config = loader.load_file("/etc/wut-temperature-exporter/config.conf")
        warnings = loader.validate(config)
    """

    # Known top-level directives (not in blocks)
    KNOWN_TOP_LEVEL = {"community"}

    # Known directives for each block type
    KNOWN_DIRECTIVES = {
        "snmp": {"version", "port", "timeout", "retries", "max_repetitions", "oid"},
        "http": {"listen", "port", "scrape_timeout", "shutdown_grace"},
        "logging": {"level", "file", "file_level", "file_max_size", "file_keep", "colors", "format"},
        "target": {"address", "room"},
    }

    def __init__(self):
        self.last_document: ConfigDocument | None = None

    def load_file(self, path: str | Path) -> Config:
        """
        Load configuration from a file.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.is_file():
            raise ConfigError(f"Not a file: {path}")

        try:
            document = parse_config_file(path)
        except (LexerError, ParseError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration: {e}") from e

        return self._build(document)

    def load_string(
        self,
        source: str,
        filename: str = "<string>",
        base_path: str | Path | None = None,
    ) -> Config:
        """
        Load configuration from a string.

        Raises:
            ConfigError: If the configuration cannot be parsed
        """
        try:
            document = parse_config(source, filename, Path(base_path) if base_path else None)
        except (LexerError, ParseError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e

        return self._build(document)

    def _build(self, document: ConfigDocument) -> Config:
        self.last_document = document
        try:
            return Config.from_document(document)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def validate(self, config: Config) -> list[str]:
        """
        Check a loaded configuration for suspicious settings.

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []

        if self.last_document:
            warnings.extend(self._check_unknown_directives(self.last_document))

        if not config.community:
            warnings.append("SNMP community is empty")

        addresses = Counter(target.address for target in config.targets)
        for address, count in addresses.items():
            if count > 1:
                warnings.append(f"Address '{address}' is configured {count} times; only the first is reachable")

        rooms = Counter(target.room.casefold() for target in config.targets if target.room)
        for room, count in rooms.items():
            if count > 1:
                warnings.append(f"Room '{room}' is configured {count} times; only the first is reachable by name")

        for target in config.targets:
            if not target.room:
                warnings.append(f"Target '{target.address}' has no room")

        if config.http.shutdown_grace < config.scrape_timeout:
            warnings.append(
                f"Shutdown grace period ({config.http.shutdown_grace:g}s) is shorter than "
                f"the scrape timeout ({config.scrape_timeout:g}s); in-flight scrapes may "
                f"be aborted on shutdown"
            )

        return warnings

    def _check_unknown_directives(self, document: ConfigDocument) -> list[str]:
        warnings = []

        for block in document.blocks:
            known = self.KNOWN_DIRECTIVES.get(block.type)
            if known is None:
                warnings.append(f"Unknown block '{block.type}' (line {block.line})")
                continue
            for directive in block.directives:
                if directive.name not in known:
                    warnings.append(
                        f"Unknown directive '{directive.name}' in {block.type} block (line {directive.line})"
                    )
            for nested in block.blocks:
                warnings.append(f"Unexpected block '{nested.type}' in {block.type} block (line {nested.line})")

        for directive in document.directives:
            if directive.name not in self.KNOWN_TOP_LEVEL:
                warnings.append(f"Unknown top-level directive '{directive.name}' (line {directive.line})")

        return warnings
