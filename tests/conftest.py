"""Pytest configuration and shared fixtures.

Fixtures are organized by category:
- Logging fixtures: global logging state reset between tests
- Transport fixtures: an in-memory stand-in for the HTTP transport
- Client fixtures: HALClient instances for respx-mocked tests
"""

import asyncio
import copy
import logging
from typing import Any

import pytest
import structlog

from src.halgraph.config import HALConfig
from src.halgraph.hal.client import HALClient
from src.halgraph.utils.exceptions import ResourceNotFoundError

# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to captured streams once a test has finished."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()


# =============================================================================
# Transport Fixtures
# =============================================================================


class FakeTransport:
    """
    In-memory transport serving canned HAL documents.

    Each call returns a fresh deep copy, like decoding a new HTTP response
    would, and yields to the event loop once so concurrent fetches interleave.
    `delays` maps a URI to extra event loop ticks before it answers.
    """

    def __init__(self, documents: dict[str, Any], delays: dict[str, int] | None = None) -> None:
        self.documents = documents
        self.delays = delays or {}
        self.calls: list[tuple[str, Any]] = []

    async def __call__(self, uri: str, options: Any = None) -> Any:
        self.calls.append((uri, options))
        for _ in range(1 + self.delays.get(uri, 0)):
            await asyncio.sleep(0)
        if uri not in self.documents:
            raise ResourceNotFoundError(uri)
        return copy.deepcopy(self.documents[uri])

    @property
    def uris(self) -> list[str]:
        return [uri for uri, _ in self.calls]

    def count(self, uri: str) -> int:
        return self.uris.count(uri)


@pytest.fixture
def make_transport():
    """Factory for FakeTransport instances.

    Example:
        def test_something(make_transport):
            transport = make_transport({"/a": {"_links": {"self": {"href": "/a"}}}})
    """
    return FakeTransport


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def hal_config() -> HALConfig:
    """Connection configuration pointing at a respx-mocked host."""
    return HALConfig(base_url="https://api.example.com/", max_rate_limit_retries=2)


@pytest.fixture
async def hal_client(hal_config: HALConfig):
    """HALClient closed after the test."""
    client = HALClient(hal_config)
    yield client
    await client.close()
