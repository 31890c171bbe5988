"""
Tests for the scrape endpoint.
"""

import asyncio

import pytest
from aiohttp.test_utils import TestClient, TestServer

from conftest import FakeWalkers
from wut_exporter.config.schema import Config
from wut_exporter.server import create_web_app
from wut_exporter.snmp.errors import AgentTimeoutError


@pytest.fixture
async def client(config: Config, walkers: FakeWalkers):
    app = create_web_app(config, walkers)
    async with TestClient(TestServer(app)) as client:
        yield client


async def test_scrape_by_room(client: TestClient, walkers: FakeWalkers) -> None:
    response = await client.get("/", params={"target": "KITCHEN"})
    body = await response.text()

    assert response.status == 200
    assert response.headers["Content-Type"].startswith("text/plain")
    assert 'wut_temperature{room="kitchen",sensor="1"} 21.5' in body
    assert 'wut_temperature{room="kitchen",sensor="3"} 19.8' in body
    assert 'sensor="2"' not in body
    assert walkers.created == [("10.0.0.5", "s3cret")]


async def test_scrape_by_address(client: TestClient) -> None:
    response = await client.get("/?target=10.0.0.6")
    body = await response.text()

    assert response.status == 200
    assert 'wut_temperature{room="server room",sensor="1"} 17.25' in body


async def test_device_without_readable_sensors(client: TestClient) -> None:
    response = await client.get("/?target=10.0.0.7")
    body = await response.text()

    assert response.status == 200
    assert "wut_temperature{" not in body


@pytest.mark.parametrize("query", ["/", "/?target=", "/?target=kitchen&target=kitchen", "/?other=kitchen"])
async def test_bad_target_parameter(client: TestClient, walkers: FakeWalkers, query: str) -> None:
    response = await client.get(query)

    assert response.status == 400
    assert "'target' parameter must be specified once" in await response.text()
    assert walkers.created == []


async def test_unknown_target(client: TestClient, walkers: FakeWalkers, caplog) -> None:
    response = await client.get("/?target=garage")

    assert response.status == 404
    assert await response.text() == "Not found"
    assert walkers.created == []
    assert any("garage" in r.getMessage() for r in caplog.records)


async def test_agent_timeout_is_service_unavailable(client: TestClient, walkers: FakeWalkers) -> None:
    walkers.errors["10.0.0.5"] = AgentTimeoutError("10.0.0.5", "no response after 4 attempts")

    response = await client.get("/?target=kitchen")
    body = await response.text()

    assert response.status == 503
    assert "wut_temperature" not in body


async def test_scraper_timeout_header_bounds_scrape(client: TestClient, walkers: FakeWalkers) -> None:
    walkers.delay = 10

    response = await client.get(
        "/?target=kitchen",
        headers={"X-Prometheus-Scrape-Timeout-Seconds": "0.05"},
    )

    assert response.status == 503
    assert walkers.cancelled == ["10.0.0.5"]


async def test_openmetrics_negotiation(client: TestClient) -> None:
    response = await client.get(
        "/?target=kitchen",
        headers={"Accept": "application/openmetrics-text; version=1.0.0"},
    )
    body = await response.text()

    assert response.status == 200
    assert response.headers["Content-Type"].startswith("application/openmetrics-text")
    assert body.endswith("# EOF\n")


async def test_concurrent_scrapes_do_not_mix(client: TestClient, walkers: FakeWalkers) -> None:
    walkers.delay = 0.05

    kitchen, server = await asyncio.gather(
        client.get("/?target=kitchen"),
        client.get("/", params={"target": "Server Room"}),
    )
    kitchen_body = await kitchen.text()
    server_body = await server.text()

    assert 'room="kitchen"' in kitchen_body
    assert 'room="server room"' not in kitchen_body
    assert 'room="server room"' in server_body
    assert 'room="kitchen"' not in server_body
    assert 'sensor="3"' not in server_body
