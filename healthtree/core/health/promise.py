"""Completion handle passed to check procedures."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from healthtree.core.exceptions import InvalidProcedureError, PromiseAlreadySettledError
from healthtree.schemas.health import Status


class SignalKind(str, Enum):
    """How a procedure finished."""

    COMPLETED = "completed"
    FAILED = "failed"
    RAISED = "raised"


@dataclass(frozen=True)
class Signal:
    """The single outcome a procedure produced."""

    kind: SignalKind
    status: Optional[Status] = None
    cause: Optional[str] = None


def _completed(status: Optional[Status]) -> Signal:
    if status is not None and not isinstance(status, Status):
        raise InvalidProcedureError(
            f"Procedure completed with {type(status).__name__}, expected Status or nothing"
        )
    return Signal(SignalKind.COMPLETED, status=status if status is not None else Status.OK())


def describe(cause: Union[str, BaseException, None]) -> str:
    """Turn a failure cause into the message rendered under ``data.cause``."""
    if cause is None:
        return "Unknown failure"
    if isinstance(cause, BaseException):
        return str(cause) or type(cause).__name__
    return str(cause)


class Promise:
    """One-shot completion handle for a single procedure invocation.

    The first signal wins. Signalling twice raises
    ``PromiseAlreadySettledError``, except after the runner has abandoned
    the promise (timeout), in which case late signals are silently dropped.
    Must be signalled from the event loop thread.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[Signal] = asyncio.get_running_loop().create_future()
        self._abandoned = False

    # -- procedure-facing API ------------------------------------------------

    def complete(self, status: Optional[Status] = None) -> None:
        """Signal success; a bare call means ``Status.OK()``.

        Raises:
            InvalidProcedureError: if *status* is not a ``Status``.
            PromiseAlreadySettledError: if the promise was already signalled.
        """
        self._settle(_completed(status))

    def fail(self, cause: Union[str, BaseException, None] = None) -> None:
        """Signal an explicit (business) failure."""
        self._settle(Signal(SignalKind.FAILED, cause=describe(cause)))

    def try_complete(self, status: Optional[Status] = None) -> bool:
        """Like ``complete`` but return ``False`` when already settled."""
        return self._try_settle(_completed(status))

    def try_fail(self, cause: Union[str, BaseException, None] = None) -> bool:
        """Like ``fail`` but return ``False`` instead of raising."""
        return self._try_settle(Signal(SignalKind.FAILED, cause=describe(cause)))

    # -- runner-facing API ---------------------------------------------------

    @property
    def done(self) -> bool:
        return self._future.done()

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    @property
    def future(self) -> "asyncio.Future[Signal]":
        return self._future

    def raised(self, exc: BaseException) -> bool:
        """Record that the procedure raised; ignored if already settled."""
        return self._try_settle(Signal(SignalKind.RAISED, cause=describe(exc)))

    def abandon(self) -> None:
        """Stop listening: every later signal becomes a no-op."""
        self._abandoned = True

    # -- helpers -------------------------------------------------------------

    def _settle(self, signal: Signal) -> None:
        if self._abandoned:
            return
        if self._future.done():
            raise PromiseAlreadySettledError(
                f"Procedure already signalled {self._future.result().kind.value}"
            )
        self._future.set_result(signal)

    def _try_settle(self, signal: Signal) -> bool:
        if self._abandoned or self._future.done():
            return False
        self._future.set_result(signal)
        return True
