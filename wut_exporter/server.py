"""
HTTP endpoint serving one scrape per request.

GET /?target=<room or address>

Each request gets its own collector and its own CollectorRegistry, so
concurrent scrapes never share metric state.
"""

import asyncio
from collections.abc import Awaitable, Callable

from aiohttp import web
from prometheus_client import CollectorRegistry
from prometheus_client.exposition import choose_encoder

from .collectors.temperature import TemperatureCollector, WalkerFactory
from .config.schema import Config
from .logging import get_logger
from .snmp.walker import SNMPWalker


logger = get_logger("server")

CONFIG_KEY = web.AppKey("config", Config)
WALKER_FACTORY_KEY = web.AppKey("walker_factory")
# Completion future of every running request -> the task handling it
INFLIGHT_KEY = web.AppKey("inflight", dict)
# Set once shutdown starts; later requests are refused
SHUTTING_DOWN_KEY = web.AppKey("shutting_down", asyncio.Event)

SCRAPE_TIMEOUT_HEADER = "X-Prometheus-Scrape-Timeout-Seconds"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def scrape_timeout(request: web.Request, config: Config) -> float:
    """
    Time limit for one scrape.

    The configured limit, lowered to the scraper's own timeout when it
    announces one.
    """
    limit = config.scrape_timeout
    header = request.headers.get(SCRAPE_TIMEOUT_HEADER)
    if header:
        try:
            announced = float(header)
        except ValueError:
            logger.debug(f"Ignoring invalid {SCRAPE_TIMEOUT_HEADER}: {header!r}")
        else:
            if announced > 0:
                limit = min(limit, announced)
    return limit


async def handle_scrape(request: web.Request) -> web.Response:
    """Resolve the target, poll it and render the exposition."""
    config = request.app[CONFIG_KEY]

    keys = request.query.getall("target", [])
    if len(keys) != 1 or not keys[0]:
        raise web.HTTPBadRequest(text="'target' parameter must be specified once")

    target = config.targets.resolve(keys[0])
    if target is None:
        logger.error(f"No target found for '{keys[0]}'")
        raise web.HTTPNotFound(text="Not found")

    collector = TemperatureCollector(
        target,
        config.community,
        config.snmp,
        walker_factory=request.app[WALKER_FACTORY_KEY],
    )
    registry = CollectorRegistry()
    registry.register(collector)

    result = await collector.safe_fetch(timeout=scrape_timeout(request, config))
    if not result.available:
        raise web.HTTPServiceUnavailable(text=f"Failed to poll target '{keys[0]}'")

    encoder, content_type = choose_encoder(request.headers.get("Accept", ""))
    return web.Response(body=encoder(registry), headers={"Content-Type": content_type})


@web.middleware
async def track_inflight(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Record running requests so shutdown can wait for them."""
    if request.app[SHUTTING_DOWN_KEY].is_set():
        # Kept-alive connections outlive the listening socket
        response = web.Response(status=503, text="Server is shutting down")
        response.force_close()
        return response

    inflight = request.app[INFLIGHT_KEY]
    finished = asyncio.get_running_loop().create_future()
    inflight[finished] = asyncio.current_task()
    try:
        return await handler(request)
    finally:
        del inflight[finished]
        finished.set_result(None)


def create_web_app(config: Config, walker_factory: WalkerFactory = SNMPWalker) -> web.Application:
    """Build the aiohttp application for a loaded configuration."""
    app = web.Application(middlewares=[track_inflight])
    app[CONFIG_KEY] = config
    app[WALKER_FACTORY_KEY] = walker_factory
    app[INFLIGHT_KEY] = {}
    app[SHUTTING_DOWN_KEY] = asyncio.Event()
    app.router.add_get("/", handle_scrape)
    return app
