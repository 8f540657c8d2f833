"""Health check endpoints.

``GET /health`` evaluates every registered check, ``GET /health/{path}``
only the subtree at *path*. The response status follows the category of
the result: 204 when nothing is registered, 200 when ``UP``, 503 when a
check reported ``DOWN``, 500 when a check failed to run, 404 for an
unknown path and 400 for a path that descends through a check.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from healthtree.api.deps import ResultMapper, get_health_checks, get_result_mapper
from healthtree.core.health.protocols import HealthChecksProtocol
from healthtree.schemas.health import ResponseCategory

router = APIRouter()


@router.get("", include_in_schema=False)
@router.get("/{path:path}")
async def check_status(
    path: str = "",
    checks: HealthChecksProtocol = Depends(get_health_checks),
    result_mapper: Optional[ResultMapper] = Depends(get_result_mapper),
) -> Response:
    """Evaluate the checks at *path* and report the aggregated outcome."""
    payload, category = await checks.check_status(path)

    if category is ResponseCategory.EMPTY or payload is None:
        return Response(status_code=category.http_status)

    if result_mapper is not None:
        payload = await result_mapper(payload)
    return JSONResponse(content=payload, status_code=category.http_status)
