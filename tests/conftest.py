"""
Pytest configuration and shared fixtures.

Provides a stub upstream (httpx.MockTransport), a controllable clock,
executor/processor factories and environment setup for the RelayBot test
suite.

IMPORTANT: Environment variables must be set BEFORE importing relaybot
modules that use pydantic-settings, as Settings validates on load.
"""

import os

# Set test environment variables before importing relaybot modules
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"

# Now safe to import everything else
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from relaybot.config import Settings, get_settings
from relaybot.dispatcher import InMemoryPreferenceStore, MessageProcessor
from relaybot.gateway import RateLimiter, RequestExecutor, ResponseCache
from relaybot.registry import ServiceRegistry
from relaybot.services import build_services

from fixtures import FakeClock, StubUpstream


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "asyncio: mark test as async")
    config.addinivalue_line(
        "markers", "integration: mark test as requiring real API calls"
    )


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset all singleton instances between tests.

    This ensures each test starts with a clean state.
    """
    yield

    from relaybot.registry import services

    services._registry_instance = None
    get_settings.cache_clear()


@pytest.fixture
def make_settings():
    """
    Factory fixture for Settings that ignore any local .env file.

    Usage:
        settings = make_settings(retry_base_delay=0.5)
    """

    def _create(**overrides) -> Settings:
        return Settings(_env_file=None, **overrides)

    return _create


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def registry():
    """A fresh default ServiceRegistry."""
    return ServiceRegistry()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_executor(make_settings):
    """
    Factory fixture for a RequestExecutor wired to a StubUpstream.

    Usage:
        executor, upstream = make_executor(lambda r: httpx.Response(200, json={}))
        executor, upstream = make_executor(handler, clock=clock, retry_max_delay=4)
    """

    def _create(
        handler=None,
        registry: ServiceRegistry | None = None,
        settings: Settings | None = None,
        clock: FakeClock | None = None,
        **overrides,
    ) -> tuple[RequestExecutor, StubUpstream]:
        upstream = handler if isinstance(handler, StubUpstream) else StubUpstream(handler)
        settings = settings or make_settings(**overrides)
        time_source = clock or FakeClock()
        executor = RequestExecutor(
            registry=registry or ServiceRegistry(),
            settings=settings,
            transport=upstream.transport(),
            cache=ResponseCache(max_entries=settings.cache_max_entries, clock=time_source),
            rate_limiter=RateLimiter(clock=time_source),
            sleep=upstream.sleep,
        )
        return executor, upstream

    return _create


@pytest.fixture
def make_processor(make_executor):
    """
    Factory fixture for a MessageProcessor over stubbed upstreams.

    Usage:
        processor, upstream = make_processor(by_url({...}))
        processor, upstream = make_processor(handler, store=store)
    """

    def _create(handler=None, store: InMemoryPreferenceStore | None = None, **kwargs):
        executor, upstream = make_executor(handler, **kwargs)
        preferences = store if store is not None else InMemoryPreferenceStore()
        processor = MessageProcessor(build_services(executor), preferences, executor.settings)
        return processor, upstream

    return _create


@pytest.fixture
def preference_store():
    return InMemoryPreferenceStore()


@pytest.fixture
def stub_upstream():
    """Upstream answering every request with an empty JSON object."""
    return StubUpstream()


@pytest.fixture
def test_client(make_executor, stub_upstream):
    """
    Create a FastAPI TestClient whose executor talks to a StubUpstream.

    Tests can change `stub_upstream.handler` before sending requests.
    """
    executor, _ = make_executor(stub_upstream)

    # Patch at the module where the function is CALLED from (relaybot.main)
    with patch("relaybot.main.create_executor", return_value=executor):
        from relaybot.main import app

        with TestClient(app) as client:
            yield client
