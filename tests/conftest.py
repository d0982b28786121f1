"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - broker_config: Config with test keys, no throttling, temp upload dir
    - provider_stub: Programmable Groq/Gemini stub (tests.stubs.ProviderStub)
    - broker: BrokerService wired to the stub
    - async_client: HTTPX client for the FastAPI app using that broker
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from shniro.api import app
from shniro.broker.config import BrokerConfig
from shniro.broker.service import BrokerService, get_broker_service
from tests.stubs import ProviderStub


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Return an empty directory for uploaded images."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def broker_config(upload_dir: Path) -> BrokerConfig:
    """Config with test API keys and throttling disabled.

    Returns:
        BrokerConfig pointing uploads at a temp directory.
    """
    return BrokerConfig(
        gemini_api_key="test-gemini-key",
        groq_api_key="test-groq-key",
        rate_limit_interval_ms=0,
        upload_dir=str(upload_dir),
    )


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
async def broker(
    broker_config: BrokerConfig, provider_stub: ProviderStub
) -> AsyncGenerator[BrokerService]:
    """Create a broker service whose provider calls hit the stub.

    Yields:
        BrokerService with a mock-transport HTTP client.
    """
    client = httpx.AsyncClient(transport=provider_stub.transport())
    service = BrokerService(config=broker_config, client=client)
    yield service
    await service.aclose()


@pytest.fixture
async def async_client(broker: BrokerService) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    app.dependency_overrides[get_broker_service] = lambda: broker
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
