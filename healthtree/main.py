"""Main module of the FastAPI application.

``create_app`` mounts the health router and attaches a ``HealthChecks``
engine to the application state. The module-level ``app`` starts with an
empty registry; services register their checks on ``app.state.health_checks``
before serving.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from healthtree.api.deps import ResultMapper
from healthtree.api.v1.api import api_router
from healthtree.core.config import settings
from healthtree.core.health.protocols import HealthChecksProtocol
from healthtree.core.health.service import HealthChecks
from healthtree.core.logging import logger


def create_app(
    health_checks: Optional[HealthChecksProtocol] = None,
    *,
    result_mapper: Optional[ResultMapper] = None,
) -> FastAPI:
    """Build a FastAPI application serving *health_checks*.

    Args:
        health_checks: Engine to expose. A fresh, empty one is created if omitted.
        result_mapper: Optional coroutine applied to every JSON body before it
            is sent, e.g. to add build information.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Log the mounted route on startup."""
        logger.info(f"Serving health checks under {settings.HEALTH_ROUTE_PREFIX}")
        yield
        logger.info("Health check application shutting down")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url="/openapi.json",
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.health_checks = health_checks if health_checks is not None else HealthChecks()
    app.state.health_result_mapper = result_mapper
    app.include_router(api_router)
    return app


app = create_app()
