"""Fake check procedures used in unit tests."""

import asyncio
from typing import Optional

from healthtree.core.health.promise import Promise
from healthtree.schemas.health import Status


class FakeProcedure:
    """Base for fakes: counts how many times it was invoked."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, promise: Promise) -> None:
        self.calls += 1
        self.run(promise)

    def run(self, promise: Promise) -> None:
        raise NotImplementedError


class FakeSucceedingProcedure(FakeProcedure):
    """Completes immediately, with *status* or bare success."""

    def __init__(self, status: Optional[Status] = None) -> None:
        """Create a procedure that completes with *status*."""
        super().__init__()
        self._status = status

    def run(self, promise: Promise) -> None:
        promise.complete(self._status)


class FakeFailingProcedure(FakeProcedure):
    """Signals an explicit failure with *cause*."""

    def __init__(self, cause: str = "BOOM") -> None:
        """Create a procedure that fails with *cause*."""
        super().__init__()
        self._cause = cause

    def run(self, promise: Promise) -> None:
        promise.fail(self._cause)


class FakeRaisingProcedure(FakeProcedure):
    """Raises the given exception before signalling anything."""

    def __init__(self, exc: Exception) -> None:
        """Create a procedure that raises *exc* on every call."""
        super().__init__()
        self._exc = exc

    def run(self, promise: Promise) -> None:
        raise self._exc


class FakeHangingProcedure(FakeProcedure):
    """Never signals."""

    def run(self, promise: Promise) -> None:
        pass


class FakeLateProcedure:
    """Coroutine procedure that signals after *delay* seconds.

    Signals ``fail(cause)`` when *cause* is given, ``complete(status)``
    otherwise. ``signalled`` is set once the late signal was sent.
    """

    def __init__(
        self,
        delay: float,
        *,
        status: Optional[Status] = None,
        cause: Optional[str] = None,
    ) -> None:
        """Create a procedure that waits *delay* seconds before signalling."""
        self._delay = delay
        self._status = status
        self._cause = cause
        self.calls = 0
        self.signalled = asyncio.Event()

    async def __call__(self, promise: Promise) -> None:
        self.calls += 1
        await asyncio.sleep(self._delay)
        if self._cause is not None:
            promise.fail(self._cause)
        else:
            promise.complete(self._status)
        self.signalled.set()


class FakeReturningProcedure:
    """Coroutine procedure that returns a ``Status`` instead of signalling."""

    def __init__(self, status: Status, delay: float = 0.0) -> None:
        """Create a procedure that returns *status* after *delay* seconds."""
        self._status = status
        self._delay = delay
        self.calls = 0

    async def __call__(self, promise: Promise) -> Status:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._status
