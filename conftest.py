"""Root conftest for pytest configuration and shared fixtures.

Loaded before every colocated ``tests/`` directory under ``healthtree/``.
"""

import os

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables, set before any healthtree module import
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("HEALTH_CHECK_TIMEOUT", "1.0")
os.environ.setdefault("LOG_LEVEL", "DEBUG")


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def health_checks():
    """Empty engine with a short timeout so timeout tests stay fast."""
    from healthtree.core.health.service import HealthChecks

    return HealthChecks(timeout=0.1)


@pytest.fixture
def nested_health_checks(health_checks):
    """Engine holding the two-branch tree used across query tests.

    sub/A (UP), sub/B (UP), sub2/c/C1 (UP), sub2/c/C2 (DOWN)
    """
    from healthtree.core.health.fakes import FakeSucceedingProcedure
    from healthtree.schemas.health import Status

    return (
        health_checks.register("sub/A", FakeSucceedingProcedure(Status.OK()))
        .register("sub/B", FakeSucceedingProcedure(Status.OK()))
        .register("sub2/c/C1", FakeSucceedingProcedure(Status.OK()))
        .register("sub2/c/C2", FakeSucceedingProcedure(Status.KO()))
    )
