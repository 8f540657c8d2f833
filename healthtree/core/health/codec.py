"""ResultCodec: renders evaluated checks into response payloads.

Payload shapes:

    absolute root target     {"outcome", "checks"}
    other composite target   {"id", "status", "outcome", "checks"}
    other leaf target        {"id", "status", "outcome", "data"}
    nested composite         {"id", "status", "checks"}
    nested leaf              {"id", "status", "data"}
"""

from typing import Any, Optional

from healthtree.core.health.types import CheckResult, Composite, Node, ResolutionError
from healthtree.schemas.health import CAUSE, Outcome, ResponseCategory

_RESOLUTION_CATEGORY = {
    ResolutionError.NOT_FOUND: ResponseCategory.NOT_FOUND,
    ResolutionError.INVALID_PATH: ResponseCategory.INVALID_PATH,
}

_RESOLUTION_CAUSE = {
    ResolutionError.NOT_FOUND: "Not found",
    ResolutionError.INVALID_PATH: "Invalid path",
}


class ResultCodec:
    """Stateless renderer; one instance can serve every query."""

    def render(
        self, target: Node, result: CheckResult, is_absolute_root: bool
    ) -> tuple[Optional[dict[str, Any]], ResponseCategory]:
        """Render *result* for the query target *target*.

        Returns ``(None, EMPTY)`` when the absolute root has no checks.
        """
        if is_absolute_root and isinstance(target, Composite) and not result.checks:
            return None, ResponseCategory.EMPTY

        payload = self._view(result, is_target=True, is_root=is_absolute_root)
        return payload, self.categorize(result)

    @staticmethod
    def categorize(result: CheckResult) -> ResponseCategory:
        if result.up:
            return ResponseCategory.SUCCESS
        if result.execution_failure:
            return ResponseCategory.EXECUTION_ERROR
        return ResponseCategory.UNAVAILABLE

    @staticmethod
    def render_error(error: ResolutionError) -> tuple[None, ResponseCategory]:
        return None, _RESOLUTION_CATEGORY[error]

    @staticmethod
    def error_body(error: ResolutionError) -> dict[str, Any]:
        """Body describing a resolution failure, for callers that always want JSON."""
        return {"outcome": Outcome.DOWN.value, CAUSE: _RESOLUTION_CAUSE[error]}

    def _view(
        self, result: CheckResult, *, is_target: bool = False, is_root: bool = False
    ) -> dict[str, Any]:
        view: dict[str, Any] = {}
        if not is_root:
            view["id"] = result.id
            view["status"] = result.status.value
        if is_target:
            view["outcome"] = result.status.value
        if result.is_leaf:
            view["data"] = dict(result.data or {})
        else:
            view["checks"] = [self._view(child) for child in result.checks]
        return view
