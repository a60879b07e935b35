"""Pytest configuration and fixtures."""

import pytest
from typing import AsyncGenerator

from httpx import ASGITransport, AsyncClient

from config import Config
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.storage import MemoryURLStorage
from shortener.users import UserRegistry
from shortener.common.logging_config import setup_logging
from web_app import create_app


BASE_URL = "http://localhost:8080"


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator()


@pytest.fixture
def storage(short_code_generator, logger):
    """Create in-memory storage."""
    return MemoryURLStorage(short_code_generator=short_code_generator, logger=logger)


@pytest.fixture
def registry():
    """Create ownership registry."""
    return UserRegistry(base_url=BASE_URL)


@pytest.fixture
async def service(storage, registry, logger) -> AsyncGenerator[URLShortenerService, None]:
    """Create service instance."""
    service = URLShortenerService(
        storage=storage,
        registry=registry,
        base_url=BASE_URL,
        num_workers=3,
        logger=logger,
    )
    
    yield service
    
    await service.close()


@pytest.fixture
def config():
    """Test configuration (trusted subnet covers the test client)."""
    return Config(base_url=BASE_URL, trusted_subnet="127.0.0.0/8")


@pytest.fixture
def app(service, config):
    """Create test FastAPI app."""
    return create_app(
        service_instance=service,
        config=config,
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
