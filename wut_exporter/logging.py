"""
Logging configuration for the WuT exporter.

Features:
- Console output with optional colors
- File output with rotation
- Quieter third-party loggers (aiohttp access log, pysnmp)
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path


class Colors:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BRIGHT_RED = "\033[91m"


LEVEL_COLORS = {
    logging.DEBUG: Colors.DIM + Colors.CYAN,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.BOLD + Colors.BRIGHT_RED,
}

# Component colors for logger names
COMPONENT_COLORS = {
    "config": Colors.MAGENTA,
    "snmp": Colors.BLUE,
    "collector": Colors.CYAN,
    "server": Colors.GREEN,
    "app": Colors.GREEN,
}


class ColoredFormatter(logging.Formatter):
    """
    Formatter that adds ANSI colors to log output.

    Colors are applied based on log level and component name.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        use_colors: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        original_levelname = record.levelname
        original_name = record.name
        original_msg = record.msg

        level_color = LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{level_color}{record.levelname:8}{Colors.RESET}"

        for key, color in COMPONENT_COLORS.items():
            if key in record.name.lower():
                record.name = f"{color}{record.name}{Colors.RESET}"
                break

        if record.levelno >= logging.ERROR:
            record.msg = f"{Colors.RED}{record.msg}{Colors.RESET}"

        result = super().format(record)

        record.levelname = original_levelname
        record.name = original_name
        record.msg = original_msg

        return result


class PlainFormatter(logging.Formatter):
    """Plain formatter without colors for file output."""

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = f"{record.levelname:8}"
        return super().format(record)


@dataclass
class LogConfig:
    """Logging configuration."""

    # Console settings
    console_level: str = "INFO"
    console_colors: bool = True

    # File settings
    file_enabled: bool = False
    file_path: str = "/var/log/wut-exporter/wut-exporter.log"
    file_level: str = "DEBUG"
    file_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    file_backup_count: int = 5

    # Format
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"


def get_log_level(level_str: str) -> int:
    """Convert string log level to logging constant."""
    levels = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "warn": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    return levels.get(level_str.lower(), logging.INFO)


def setup_logging(config: LogConfig | None = None) -> None:
    """
    Configure logging for the application.

    Args:
        config: Logging configuration (uses defaults if None)
    """
    if config is None:
        config = LogConfig()

    root_logger = logging.getLogger("wut_exporter")
    root_logger.setLevel(logging.DEBUG)  # Capture all, filter at handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(get_log_level(config.console_level))

    use_colors = config.console_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    console_handler.setFormatter(
        ColoredFormatter(
            fmt=config.format,
            datefmt=config.date_format,
            use_colors=use_colors,
        )
    )
    root_logger.addHandler(console_handler)

    if config.file_enabled:
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
        )
        file_handler.setLevel(get_log_level(config.file_level))
        file_handler.setFormatter(
            PlainFormatter(
                fmt=config.format,
                datefmt=config.date_format,
            )
        )
        root_logger.addHandler(file_handler)

    # Reduce noise from external libraries
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("pysnmp").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a component.

    Args:
        name: Component name (will be prefixed with wut_exporter)

    Returns:
        Logger instance
    """
    if name.startswith("wut_exporter"):
        return logging.getLogger(name)
    return logging.getLogger(f"wut_exporter.{name}")
