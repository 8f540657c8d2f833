"""HealthChecks: the check registry facade.

Owns one ``CheckTree`` for its lifetime and wires the resolver, the
aggregator and the codec together. Create one instance per mounted health
endpoint and share it; ``register``/``unregister`` may be called at any
time, including while queries are in flight.
"""

from typing import Any, Optional, Union

from healthtree.core.config import settings
from healthtree.core.exceptions import (
    InvalidArgumentError,
    InvalidProcedureError,
    InvalidRegistrationError,
)
from healthtree.core.health.aggregator import Aggregator
from healthtree.core.health.codec import ResultCodec
from healthtree.core.health.protocols import HealthChecksProtocol, Procedure
from healthtree.core.health.resolver import PathResolver
from healthtree.core.health.runner import ProcedureRunner
from healthtree.core.health.tree import CheckTree
from healthtree.core.health.types import CheckResult, Node, ResolutionError
from healthtree.core.logging import ContextualLogger
from healthtree.core.logging import logger as default_logger
from healthtree.schemas.health import ResponseCategory


class HealthChecks(HealthChecksProtocol):
    """Concrete ``HealthChecksProtocol`` implementation.

    Usage:
        checks = HealthChecks(timeout=2.0)
        checks.register("db/primary", ping_primary).register("cache", ping_cache)

        payload, category = await checks.check_status("db")
        response.status_code = category.http_status
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        max_concurrency: Optional[int] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialise an empty registry.

        Args:
            timeout: Default per-check timeout in seconds. Falls back to
                ``settings.HEALTH_CHECK_TIMEOUT``.
            max_concurrency: Max procedures running at once per query. Falls
                back to ``settings.HEALTH_MAX_CONCURRENCY``.
            logger: Logger to use; defaults to the package logger.
        """
        self._timeout = _validate_timeout(
            timeout if timeout is not None else settings.HEALTH_CHECK_TIMEOUT
        )
        concurrency = (
            max_concurrency if max_concurrency is not None else settings.HEALTH_MAX_CONCURRENCY
        )
        if concurrency < 1:
            raise InvalidArgumentError("max_concurrency must be at least 1")

        self._logger = logger or default_logger.with_context(component="health_checks")
        self._tree = CheckTree()
        self._resolver = PathResolver(self._tree)
        self._runner = ProcedureRunner(
            logger=self._logger, abandon_grace=settings.HEALTH_ABANDON_GRACE
        )
        self._aggregator = Aggregator(
            self._tree, self._runner, timeout=self._timeout, max_concurrency=concurrency
        )
        self._codec = ResultCodec()

    @property
    def timeout(self) -> float:
        """Default per-check timeout, in seconds."""
        return self._timeout

    @property
    def tree(self) -> CheckTree:
        return self._tree

    # -- registry ------------------------------------------------------------

    def register(
        self, path: str, procedure: Procedure, timeout: Optional[float] = None
    ) -> "HealthChecks":
        """Bind *procedure* at *path* and return ``self`` for chaining.

        Args:
            path: Slash-delimited name, e.g. ``"db/primary"``. Missing groups
                along the way are created.
            procedure: Callable receiving a ``Promise``.
            timeout: Per-check override of the default timeout, in seconds.

        Raises:
            InvalidRegistrationError: if *path* goes through an existing check,
                or names an existing group.
            InvalidArgumentError: if *path* is empty or *timeout* is not positive.
            InvalidProcedureError: if *procedure* is not callable.
        """
        if not callable(procedure):
            raise InvalidProcedureError(f"Procedure for {path!r} must be callable")
        if timeout is not None:
            _validate_timeout(timeout)

        try:
            self._tree.register(path, procedure, timeout)
        except InvalidRegistrationError as exc:
            self._logger.warning(f"Rejected registration of {path!r}: {exc}")
            raise

        self._logger.info(f"Registered health check {path!r}")
        return self

    def unregister(self, path: str) -> None:
        """Remove the check or group at *path*.

        Unknown paths are ignored. Groups left empty are kept and report
        ``UP``.
        """
        removed = self._tree.unregister(path)
        if removed is None:
            self._logger.debug(f"Nothing registered at {path!r}, unregister ignored")
        else:
            self._logger.info(f"Unregistered health check {path!r}")

    # -- queries -------------------------------------------------------------

    async def check(self, path: str = "") -> Union[CheckResult, ResolutionError]:
        """Evaluate the subtree at *path* without rendering it."""
        evaluated = await self._evaluate(path)
        if isinstance(evaluated, ResolutionError):
            return evaluated
        return evaluated[1]

    async def check_status(
        self, path: str = ""
    ) -> tuple[Optional[dict[str, Any]], ResponseCategory]:
        """Evaluate and render the subtree at *path*.

        Returns the payload (``None`` for ``EMPTY``, ``NOT_FOUND`` and
        ``INVALID_PATH``) and the response category.
        """
        evaluated = await self._evaluate(path)
        if isinstance(evaluated, ResolutionError):
            return self._codec.render_error(evaluated)
        node, result = evaluated
        return self._codec.render(node, result, node is self._tree.root)

    async def invoke(self, path: str = "") -> dict[str, Any]:
        """Like ``check_status`` but always returns a JSON body.

        An empty root yields ``{"outcome": "UP", "checks": []}``; resolution
        failures yield ``{"outcome": "DOWN", "cause": ...}``.
        """
        evaluated = await self._evaluate(path)
        if isinstance(evaluated, ResolutionError):
            return self._codec.error_body(evaluated)
        node, result = evaluated
        payload, _ = self._codec.render(node, result, node is self._tree.root)
        if payload is None:
            return {"outcome": result.status.value, "checks": []}
        return payload

    async def _evaluate(
        self, path: str
    ) -> Union[tuple[Node, CheckResult], ResolutionError]:
        node = self._resolver.resolve(path)
        if isinstance(node, ResolutionError):
            self._logger.debug(f"Health query for {path!r} failed: {node.value}")
            return node
        is_root = node is self._tree.root
        result = await self._aggregator.evaluate(
            node, None if is_root else node.name, path=(path or "").strip("/")
        )
        return node, result


def _validate_timeout(timeout: float) -> float:
    if timeout <= 0:
        raise InvalidArgumentError(f"Timeout must be greater than zero, got {timeout}")
    return timeout

