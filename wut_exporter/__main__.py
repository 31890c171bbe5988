"""
Entry point for the WuT Temperature Exporter.

Usage:
    python -m wut_exporter /path/to/config.conf
    python -m wut_exporter --help
"""

import argparse
import asyncio
import sys
from pathlib import Path

from . import __version__
from .app import run_app
from .config.loader import ConfigError, ConfigLoader, find_config_file
from .const import CONFIG_SEARCH_PATHS
from .logging import LogConfig, get_logger, setup_logging


logger = get_logger("main")


def validate_config(config_path: str) -> int:
    """Validate configuration file and print warnings."""
    try:
        loader = ConfigLoader()
        config = loader.load_file(config_path)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    warnings = loader.validate(config)
    if warnings:
        print(f"Configuration warnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    print("\nConfiguration summary:")
    print(f"  Listen: {config.http.listen}:{config.http.port}")
    print(f"  SNMP: version {config.snmp.version.value}, port {config.snmp.port}, "
          f"timeout {config.snmp.timeout:g}s, retries {config.snmp.retries}")
    print(f"  Scrape timeout: {config.scrape_timeout:g}s")
    print(f"  Shutdown grace: {config.http.shutdown_grace:g}s")
    print(f"  Targets: {len(config.targets)}")
    for target in config.targets:
        print(f"    {target.address}  {target.room}")

    print("\nConfiguration is valid!")
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="wut-exporter",
        description="Prometheus exporter for WuT thermometers via SNMP",
    )

    parser.add_argument(
        "config",
        nargs="?",
        help=f"Path to configuration file (default: first of {', '.join(CONFIG_SEARCH_PATHS)})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging (INFO level)")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging (DEBUG level)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Quiet mode (only errors)")
    parser.add_argument("--log-file", metavar="PATH", help="Write logs to file")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--validate", action="store_true", help="Validate configuration and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()

    config_path = Path(args.config) if args.config else find_config_file()
    if config_path is None or not config_path.exists():
        print(f"Configuration file not found: {args.config or ', '.join(CONFIG_SEARCH_PATHS)}", file=sys.stderr)
        return 1

    if args.validate:
        return validate_config(str(config_path))

    # Only override the config file's logging when asked to
    log_config = None
    if args.debug or args.verbose or args.quiet or args.no_color or args.log_file:
        log_config = LogConfig()
        if args.debug:
            log_config.console_level = "debug"
        elif args.verbose:
            log_config.console_level = "info"
        elif args.quiet:
            log_config.console_level = "error"
        if args.no_color:
            log_config.console_colors = False
        if args.log_file:
            log_config.file_enabled = True
            log_config.file_path = args.log_file
    setup_logging(log_config)

    try:
        clean = asyncio.run(run_app(str(config_path), cli_log_config=log_config))
    except ConfigError as e:
        logger.error(f"No valid configuration found: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1

    return 0 if clean else 1


if __name__ == "__main__":
    sys.exit(main())
