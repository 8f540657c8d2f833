"""API test fixtures.

Provides an async HTTP client wired to a FastAPI app built around a fresh
``HealthChecks`` engine. Available to all colocated API tests under api/.

Pattern:
    1. Register fakes on ``engine``
    2. Hit the endpoint through ``client``
    3. Assert on the HTTP status and body
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from healthtree.core.health.service import HealthChecks


@pytest.fixture
def engine():
    """Empty engine with a short timeout so timeout tests stay fast."""
    return HealthChecks(timeout=0.1)


@pytest.fixture
def result_mapper():
    """No payload post-processing unless a test overrides this fixture."""
    return None


@pytest_asyncio.fixture
async def client(engine, result_mapper):
    """Async HTTP client against an app serving ``engine``."""
    from healthtree.main import create_app

    app = create_app(engine, result_mapper=result_mapper)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
