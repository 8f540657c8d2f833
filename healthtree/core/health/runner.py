"""ProcedureRunner: executes one check procedure under a timeout.

The procedure's completion is raced against the timeout. Whatever happens
first is final: timeouts and exceptions are converted into a ``DOWN``
result carrying the ``procedure-execution-failure`` marker, explicit
failures into a plain ``DOWN`` with a ``cause``. Nothing escapes to the
caller. Abandoned work is not cancelled when the timeout fires; when an
abandon grace period is configured, coroutine procedures still running
after it are cancelled.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Optional

from healthtree.core.health.promise import Promise, Signal, SignalKind
from healthtree.core.health.protocols import Procedure
from healthtree.core.health.types import CheckResult
from healthtree.core.logging import ContextualLogger
from healthtree.core.logging import logger as default_logger
from healthtree.schemas.health import CAUSE, PROCEDURE_EXECUTION_FAILURE, Outcome, Status

TIMEOUT_CAUSE = "Timeout"


class ProcedureRunner:
    """Runs a single procedure and produces a leaf-scoped ``CheckResult``."""

    def __init__(
        self,
        logger: Optional[ContextualLogger] = None,
        *,
        abandon_grace: Optional[float] = None,
    ) -> None:
        """Initialise the runner.

        Args:
            logger: Logger to use; defaults to the package logger.
            abandon_grace: Seconds an abandoned coroutine procedure may keep
                running before it is cancelled. ``None`` never cancels.
        """
        self._abandon_grace = abandon_grace
        self._logger = logger or default_logger.with_context(component="procedure_runner")
        # Tasks of coroutine procedures that have not returned yet.
        self._background: set[asyncio.Task] = set()

    async def run(
        self, procedure: Procedure, timeout: float, *, check_id: Optional[str] = None
    ) -> CheckResult:
        """Invoke *procedure* and wait at most *timeout* seconds for its signal."""
        log = self._logger.with_context(check_id=check_id) if check_id else self._logger
        promise = Promise()
        task: Optional[asyncio.Task] = None

        try:
            returned = procedure(promise)
        except Exception as exc:
            if not promise.raised(exc):
                log.debug(f"Procedure raised after signalling, ignoring: {exc!r}")
            else:
                log.warning(f"Procedure raised: {exc!r}")
        else:
            if inspect.isawaitable(returned):
                task = self._drive(returned, promise, log)

        try:
            signal = await asyncio.wait_for(asyncio.shield(promise.future), timeout=timeout)
        except asyncio.TimeoutError:
            promise.abandon()
            log.warning(f"Procedure timed out after {timeout:.3f}s")
            if task is not None and self._abandon_grace is not None:
                asyncio.get_running_loop().call_later(self._abandon_grace, self._reap, task, log)
            return self._execution_failure(TIMEOUT_CAUSE)

        return self._to_result(signal)

    def expired(self, *, check_id: Optional[str] = None) -> CheckResult:
        """Result for a procedure whose deadline passed before it could start."""
        log = self._logger.with_context(check_id=check_id) if check_id else self._logger
        log.warning("Procedure timed out before it was started")
        return self._execution_failure(TIMEOUT_CAUSE)

    @property
    def pending(self) -> int:
        """Number of abandoned or in-flight coroutine procedures."""
        return len(self._background)

    # -- helpers -------------------------------------------------------------

    def _drive(
        self, awaitable: Awaitable[Any], promise: Promise, log: ContextualLogger
    ) -> asyncio.Task:
        """Run a coroutine procedure as a task that settles *promise* on exit."""

        async def _body() -> None:
            try:
                returned = await awaitable
            except Exception as exc:
                if promise.abandoned:
                    log.debug(f"Procedure raised after timeout, discarded: {exc!r}")
                elif promise.raised(exc):
                    log.warning(f"Procedure raised: {exc!r}")
                return
            if isinstance(returned, Status) and not promise.try_complete(returned):
                if promise.abandoned:
                    log.debug("Procedure completed after timeout, discarded")

        task = asyncio.ensure_future(_body())
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    @staticmethod
    def _reap(task: asyncio.Task, log: ContextualLogger) -> None:
        if not task.done():
            log.warning("Cancelling procedure still running after its grace period")
            task.cancel()

    @staticmethod
    def _to_result(signal: Signal) -> CheckResult:
        if signal.kind is SignalKind.COMPLETED:
            status = signal.status
            return CheckResult(
                status=status.outcome,
                data=dict(status.data),
                execution_failure=not status.up and status.procedure_in_error,
            )
        if signal.kind is SignalKind.FAILED:
            return CheckResult(status=Outcome.DOWN, data={CAUSE: signal.cause})
        return ProcedureRunner._execution_failure(signal.cause)

    @staticmethod
    def _execution_failure(cause: Optional[str]) -> CheckResult:
        return CheckResult(
            status=Outcome.DOWN,
            data={CAUSE: cause, PROCEDURE_EXECUTION_FAILURE: True},
            execution_failure=True,
        )
