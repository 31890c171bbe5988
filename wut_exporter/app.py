"""
Main application orchestrator.

Handles:
- Configuration loading
- HTTP server lifecycle
- Graceful shutdown with a bounded grace period
"""

import asyncio
import signal

from aiohttp import web

from .collectors.temperature import WalkerFactory
from .config.loader import ConfigLoader
from .config.schema import Config
from .logging import LogConfig, get_logger, setup_logging
from .server import INFLIGHT_KEY, SHUTTING_DOWN_KEY, create_web_app
from .snmp.walker import SNMPWalker


logger = get_logger("app")

# Time cancelled scrapes and open connections get to unwind after the grace period
CANCEL_WAIT = 1.0


class Application:
    """
    Main application class.

    Serves scrapes until SIGTERM/SIGINT, then stops accepting connections
    and gives running scrapes the configured grace period to finish.
    """

    def __init__(self, config: Config, walker_factory: WalkerFactory = SNMPWalker):
        self.config = config
        self.web_app = create_web_app(config, walker_factory)

        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._shutdown_event = asyncio.Event()
        self._signals: list[signal.Signals] = []

    @property
    def addresses(self) -> list:
        """Bound listening addresses (after start)."""
        return self._runner.addresses if self._runner else []

    def _setup_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler, sig)
            self._signals.append(sig)

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        while self._signals:
            loop.remove_signal_handler(self._signals.pop())

    def _signal_handler(self, sig: signal.Signals) -> None:
        logger.info(f"Shutting down server. Got signal: {sig.name}")
        self.request_shutdown()

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    async def start(self) -> None:
        """Start listening."""
        self._runner = web.AppRunner(
            self.web_app,
            handle_signals=False,
            handler_cancellation=True,
            shutdown_timeout=min(self.config.http.shutdown_grace, CANCEL_WAIT),
        )
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.http.listen, self.config.http.port)
        await self._site.start()

        logger.info(
            f"Listening on {self.config.http.listen}:{self.config.http.port} "
            f"({len(self.config.targets)} targets, scrape timeout {self.config.scrape_timeout:g}s)"
        )

    async def drain(self, grace: float) -> bool:
        """
        Wait for running scrapes to finish.

        Scrapes still running `grace` seconds after the call are cancelled.

        Returns:
            True if every scrape finished on its own
        """
        inflight = self.web_app[INFLIGHT_KEY]
        if not inflight:
            return True

        logger.info(f"Waiting up to {grace:g}s for {len(inflight)} running scrape(s)")
        loop = asyncio.get_running_loop()
        deadline = loop.time() + grace
        while inflight:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            await asyncio.wait(list(inflight), timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
        if not inflight:
            return True

        pending = list(inflight)
        logger.critical(
            f"Server forced to shutdown: {len(pending)} scrape(s) still running "
            f"after the {grace:g}s grace period"
        )
        for finished in pending:
            task = inflight.get(finished)
            if task is not None:
                task.cancel()
        await asyncio.wait(pending, timeout=CANCEL_WAIT)
        return False

    async def stop(self) -> bool:
        """
        Stop the server.

        Returns:
            False if running scrapes had to be aborted
        """
        self.web_app[SHUTTING_DOWN_KEY].set()

        if self._site is not None:
            await self._site.stop()
            self._site = None

        clean = await self.drain(self.config.http.shutdown_grace)

        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

        if clean:
            logger.info("Server stopped")
        return clean

    async def run(self) -> bool:
        """Run until a shutdown signal; returns whether shutdown was clean."""
        await self.start()
        self._setup_signal_handlers()
        await self._shutdown_event.wait()
        self._remove_signal_handlers()
        return await self.stop()


async def run_app(config_path: str, cli_log_config: LogConfig | None = None) -> bool:
    """
    Load configuration and run the application.

    Args:
        config_path: Path to configuration file
        cli_log_config: Logging config from CLI args (overrides file config)

    Raises:
        ConfigError: If the configuration cannot be loaded
    """
    loader = ConfigLoader()
    config = loader.load_file(config_path)

    if cli_log_config is None:
        setup_logging(
            LogConfig(
                console_level=config.logging.level,
                console_colors=config.logging.colors,
                file_enabled=config.logging.file is not None,
                file_path=config.logging.file or LogConfig.file_path,
                file_level=config.logging.file_level,
                file_max_bytes=config.logging.file_max_size * 1024 * 1024,
                file_backup_count=config.logging.file_keep,
                format=config.logging.format,
            )
        )
    else:
        # CLI args override file config, but keep the file's log file if none given
        if not cli_log_config.file_enabled and config.logging.file:
            cli_log_config.file_enabled = True
            cli_log_config.file_path = config.logging.file
            cli_log_config.file_level = config.logging.file_level
            cli_log_config.file_max_bytes = config.logging.file_max_size * 1024 * 1024
            cli_log_config.file_backup_count = config.logging.file_keep
        setup_logging(cli_log_config)

    logger.info(f"Loaded configuration from {config_path}")

    for warning in loader.validate(config):
        logger.warning(f"Config warning: {warning}")

    app = Application(config)
    return await app.run()
