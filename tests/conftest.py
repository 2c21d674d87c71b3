"""
Pytest configuration and fixtures for fda-device-importer tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import json
from pathlib import Path
from typing import Callable, Generator

import httpx
import pytest
from testcontainers.postgres import PostgresContainer

from fda_importer.sources import OpenFDASource
from fda_importer.warehouse import DatabaseConnectionPool, SchemaManager


FIXTURES_DIR = Path(__file__).parent / "fixtures"
TEST_BASE_URL = "https://api.test.local/device/"


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run the full pipeline"
    )


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_importer",
        password="test_password",
        dbname="test_fda_devices",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"PostgreSQL container unavailable (is Docker running?): {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def db_pool(postgres_container) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Open a connection pool against the test container with the schema in place

    Yields:
        Open DatabaseConnectionPool
    """
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_fda_devices",
        user="test_importer",
        password="test_password",
    )
    pool.open()
    SchemaManager(pool).ensure_schema()

    yield pool

    pool.close()


@pytest.fixture(scope="function")
def clean_db(db_pool) -> DatabaseConnectionPool:
    """
    Provide a pool over an empty devices table

    Returns:
        Open DatabaseConnectionPool
    """
    db_pool.execute_command("TRUNCATE TABLE devices")
    return db_pool


# =======================
# RAW RECORD FIXTURES
# =======================

@pytest.fixture(scope="session")
def raw_pma_records() -> list[dict]:
    """Raw PMA records as returned by the openFDA pma endpoint"""
    return json.loads((FIXTURES_DIR / "pma_results.json").read_text())["results"]


@pytest.fixture(scope="session")
def raw_510k_records() -> list[dict]:
    """Raw 510(k) records as returned by the openFDA 510k endpoint"""
    return json.loads((FIXTURES_DIR / "510k_results.json").read_text())["results"]


# =======================
# HTTP FIXTURES
# =======================

@pytest.fixture
def make_source() -> Generator[Callable[..., OpenFDASource], None, None]:
    """
    Factory building an OpenFDASource over an httpx.MockTransport handler

    Usage:
        source = make_source(handler, batch_size=2)
    """
    clients = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> OpenFDASource:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return OpenFDASource(base_url=TEST_BASE_URL, client=client, **kwargs)

    yield _make

    for client in clients:
        client.close()


def _paged_handler(pages_by_endpoint: dict[str, list[list[dict]]], requests: list | None = None):
    """
    Build a MockTransport handler serving fixed pages per endpoint file.

    The n-th request to an endpoint gets the n-th page; requests beyond the
    last page get an empty result list.

    Args:
        pages_by_endpoint: e.g. {"pma.json": [[r1, r2], [r3]]}
        requests: Optional list that collects every request received
    """
    served: dict[str, int] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        pages = pages_by_endpoint.get(endpoint)
        if pages is None:
            return httpx.Response(404, json={"error": {"code": "NOT_FOUND"}})
        index = served.get(endpoint, 0)
        served[endpoint] = index + 1
        results = pages[index] if index < len(pages) else []
        return httpx.Response(200, json={"meta": {}, "results": results})

    return handler


@pytest.fixture
def paged_handler():
    """Builder for MockTransport handlers serving fixed pages per endpoint"""
    return _paged_handler
