"""Dependencies that are used in the API endpoints."""

from typing import Any, Awaitable, Callable, Optional

from fastapi import HTTPException, Request

from healthtree.core.health.protocols import HealthChecksProtocol

ResultMapper = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def get_health_checks(request: Request) -> HealthChecksProtocol:
    """Return the engine attached to the application state."""
    checks = getattr(request.app.state, "health_checks", None)
    if checks is None:
        raise HTTPException(status_code=503, detail="Health checks are not configured")
    return checks


def get_result_mapper(request: Request) -> Optional[ResultMapper]:
    """Return the optional payload post-processor attached to the application state."""
    return getattr(request.app.state, "health_result_mapper", None)
