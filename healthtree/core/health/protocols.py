"""Health protocols for dependency injection.

Defines ``Procedure`` (one user-supplied check) and ``HealthChecksProtocol``
(the registry/query facade consumed by the HTTP layer).
"""

from typing import TYPE_CHECKING, Any, Awaitable, Optional, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from healthtree.core.health.promise import Promise
    from healthtree.core.health.types import CheckResult, ResolutionError
    from healthtree.schemas.health import ResponseCategory


@runtime_checkable
class Procedure(Protocol):
    """Protocol for a single health check.

    A procedure receives a ``Promise`` and must eventually signal it once,
    with ``promise.complete(status)`` or ``promise.fail(cause)``. It may be
    a plain callable or a coroutine function. A coroutine procedure may
    instead return a ``Status``, which completes the promise if nothing
    else did.

    Raising (synchronously, or from the coroutine body) marks the check as
    an execution failure. The runner handles timeouts, so procedures can
    stay simple.
    """

    def __call__(self, promise: "Promise") -> Optional[Awaitable[Any]]:
        """Run the check and signal *promise*."""
        ...


@runtime_checkable
class HealthChecksProtocol(Protocol):
    """Facade over the check registry."""

    def register(
        self, path: str, procedure: Procedure, timeout: Optional[float] = None
    ) -> "HealthChecksProtocol":
        """Bind *procedure* at *path*, creating intermediate groups."""
        ...

    def unregister(self, path: str) -> None:
        """Remove the check or group at *path*."""
        ...

    async def check(self, path: str = "") -> Union["CheckResult", "ResolutionError"]:
        """Evaluate the subtree at *path*."""
        ...

    async def check_status(self, path: str = "") -> tuple[Optional[dict], "ResponseCategory"]:
        """Evaluate and render the subtree at *path*."""
        ...

    async def invoke(self, path: str = "") -> dict:
        """Evaluate the subtree at *path* and return a JSON body in every case."""
        ...
