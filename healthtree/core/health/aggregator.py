"""Aggregator: evaluates a subtree bottom-up.

A query first walks the target subtree once, snapshotting every composite
and every leaf binding, and gives each leaf a deadline. A fixed pool of
workers then drains the leaves; composites are folded from the leaf
results. A composite is ``UP`` only when every child is ``UP``, and
carries an execution failure when any descendant leaf does.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Union

from healthtree.core.health.protocols import Procedure
from healthtree.core.health.runner import ProcedureRunner
from healthtree.core.health.tree import CheckTree
from healthtree.core.health.types import CheckResult, Composite, Leaf, Node
from healthtree.schemas.health import Outcome


def _join(path: str, name: str) -> str:
    return f"{path}/{name}" if path else name


@dataclass
class _LeafJob:
    """One leaf to run, bound to the procedure it had when visited."""

    index: int
    name: Optional[str]
    path: str
    procedure: Procedure
    deadline: float


@dataclass
class _Group:
    """A visited composite; members are groups or indexes into the results."""

    name: Optional[str]
    members: list[Union["_Group", int]] = field(default_factory=list)


class Aggregator:
    """Query-scoped evaluator over a ``CheckTree``."""

    def __init__(
        self,
        tree: CheckTree,
        runner: ProcedureRunner,
        *,
        timeout: float,
        max_concurrency: int,
    ) -> None:
        """Initialise with the tree, the leaf runner and fan-out limits."""
        self._tree = tree
        self._runner = runner
        self._timeout = timeout
        self._max_concurrency = max_concurrency

    async def evaluate(
        self, node: Node, name: Optional[str] = None, path: Optional[str] = None
    ) -> CheckResult:
        """Evaluate *node* and everything below it.

        Only procedures under *node* run, and at most ``max_concurrency``
        of them at once. Every leaf's deadline is fixed when the query
        starts: a leaf still queued at its deadline times out without
        running, so a query never takes much longer than one timeout.
        """
        loop = asyncio.get_running_loop()
        jobs: list[_LeafJob] = []
        planned = self._plan(node, name, path or name or "", jobs, loop.time())

        queue: asyncio.Queue = asyncio.Queue()
        for job in jobs:
            queue.put_nowait(job)
        results: list[Optional[CheckResult]] = [None] * len(jobs)

        workers = min(self._max_concurrency, len(jobs))
        await asyncio.gather(*(self._work(queue, results) for _ in range(workers)))
        return self._fold(planned, results)

    # -- helpers -------------------------------------------------------------

    def _plan(
        self,
        node: Node,
        name: Optional[str],
        path: str,
        jobs: list[_LeafJob],
        started: float,
    ) -> Union[_Group, int]:
        if isinstance(node, Leaf):
            procedure, timeout = self._tree.binding(node)
            deadline = started + (timeout if timeout is not None else self._timeout)
            jobs.append(_LeafJob(len(jobs), name, path, procedure, deadline))
            return len(jobs) - 1

        group = _Group(name)
        for child_name, child in self._tree.snapshot(node):
            group.members.append(
                self._plan(child, child_name, _join(path, child_name), jobs, started)
            )
        return group

    async def _work(self, queue: asyncio.Queue, results: list[Optional[CheckResult]]) -> None:
        loop = asyncio.get_running_loop()
        while True:
            try:
                job: _LeafJob = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            remaining = job.deadline - loop.time()
            if remaining <= 0:
                result = self._runner.expired(check_id=job.path)
            else:
                result = await self._runner.run(job.procedure, remaining, check_id=job.path)
            result.id = job.name
            results[job.index] = result

    def _fold(
        self, planned: Union[_Group, int], results: list[Optional[CheckResult]]
    ) -> CheckResult:
        if isinstance(planned, int):
            return results[planned]
        checks = [self._fold(member, results) for member in planned.members]
        return CheckResult(
            id=planned.name,
            status=Outcome.UP if all(c.up for c in checks) else Outcome.DOWN,
            checks=checks,
            execution_failure=any(c.execution_failure for c in checks),
        )
