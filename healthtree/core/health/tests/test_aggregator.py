"""Unit tests for bottom-up evaluation of check trees."""

import asyncio
import random
import time

import pytest

from healthtree.core.health.aggregator import Aggregator
from healthtree.core.health.fakes import (
    FakeHangingProcedure,
    FakeLateProcedure,
    FakeRaisingProcedure,
    FakeSucceedingProcedure,
)
from healthtree.core.health.runner import ProcedureRunner
from healthtree.core.health.tree import CheckTree
from healthtree.core.health.types import CheckResult
from healthtree.schemas.health import Outcome, Status


def _aggregator(
    tree: CheckTree, *, timeout: float = 0.5, max_concurrency: int = 64
) -> Aggregator:
    return Aggregator(tree, ProcedureRunner(), timeout=timeout, max_concurrency=max_concurrency)


def _random_tree(seed: int) -> CheckTree:
    """Build a random tree of UP/DOWN/raising leaves up to four levels deep."""
    rng = random.Random(seed)
    tree = CheckTree()
    for i in range(rng.randint(1, 25)):
        depth = rng.randint(1, 4)
        path = "/".join(f"n{rng.randint(0, 2)}" for _ in range(depth - 1))
        path = f"{path}/leaf{i}" if path else f"leaf{i}"
        kind = rng.choice(["up", "down", "raise"])
        if kind == "up":
            procedure = FakeSucceedingProcedure(Status.OK())
        elif kind == "down":
            procedure = FakeSucceedingProcedure(Status.KO())
        else:
            procedure = FakeRaisingProcedure(RuntimeError("broken"))
        tree.register(path, procedure)
    return tree


def _assert_invariants(result: CheckResult) -> None:
    if result.is_leaf:
        if result.execution_failure:
            assert result.status is Outcome.DOWN
        return
    for child in result.checks:
        _assert_invariants(child)
    assert result.up == all(child.up for child in result.checks)
    assert result.execution_failure == any(c.execution_failure for c in result.checks)


# ---------------------------------------------------------------------------
# Aggregation rules
# ---------------------------------------------------------------------------


class TestAggregation:
    """Tests for status and execution-failure propagation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(20))
    async def test_invariants_hold_on_random_trees(self, seed):
        tree = _random_tree(seed)
        result = await _aggregator(tree).evaluate(tree.root)
        _assert_invariants(result)

    @pytest.mark.asyncio
    async def test_empty_composite_is_up(self):
        tree = CheckTree()
        result = await _aggregator(tree).evaluate(tree.root)

        assert result.status is Outcome.UP
        assert result.checks == []
        assert result.execution_failure is False

    @pytest.mark.asyncio
    async def test_execution_failure_bubbles_up(self):
        tree = CheckTree()
        tree.register("a/b/ok", FakeSucceedingProcedure())
        tree.register("a/b/broken", FakeRaisingProcedure(RuntimeError("x")))
        tree.register("other", FakeSucceedingProcedure(Status.KO()))

        result = await _aggregator(tree).evaluate(tree.root)

        assert result.execution_failure is True
        assert result.get("a").execution_failure is True
        assert result.get("a").get("b").execution_failure is True
        assert result.get("other").execution_failure is False

    @pytest.mark.asyncio
    async def test_children_in_insertion_order(self):
        tree = CheckTree()
        for name in ["z", "a", "m"]:
            tree.register(f"g/{name}", FakeSucceedingProcedure())

        result = await _aggregator(tree).evaluate(tree.root)

        assert [c.id for c in result.get("g").checks] == ["z", "a", "m"]

    @pytest.mark.asyncio
    async def test_leaf_timeout_override(self):
        tree = CheckTree()
        tree.register("slow", FakeLateProcedure(0.1), timeout=0.5)

        result = await _aggregator(tree, timeout=0.02).evaluate(tree.root)

        assert result.get("slow").status is Outcome.UP


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


class TestScheduling:
    """Tests for fan-out, query scoping and the concurrency bound."""

    @pytest.mark.asyncio
    async def test_siblings_run_concurrently(self):
        tree = CheckTree()
        for i in range(5):
            tree.register(f"group/slow{i}", FakeLateProcedure(0.1))

        start = time.perf_counter()
        result = await _aggregator(tree, timeout=1.0).evaluate(tree.root)
        elapsed = time.perf_counter() - start

        assert result.status is Outcome.UP
        assert elapsed < 0.4

    @pytest.mark.asyncio
    async def test_timeouts_do_not_add_up(self):
        tree = CheckTree()
        for i in range(5):
            tree.register(f"hang{i}", FakeHangingProcedure())

        start = time.perf_counter()
        result = await _aggregator(tree, timeout=0.1).evaluate(tree.root)
        elapsed = time.perf_counter() - start

        assert all(c.data["cause"] == "Timeout" for c in result.checks)
        assert elapsed < 0.4

    @pytest.mark.asyncio
    async def test_only_subtree_procedures_run(self):
        tree = CheckTree()
        inside = FakeSucceedingProcedure()
        outside = FakeSucceedingProcedure()
        tree.register("sub/A", inside)
        tree.register("sub2/B", outside)

        await _aggregator(tree).evaluate(tree.root.children["sub"], "sub")

        assert inside.calls == 1
        assert outside.calls == 0

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        running = 0
        peak = 0

        async def procedure(promise):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            promise.complete()

        tree = CheckTree()
        for i in range(6):
            tree.register(f"c{i}", procedure)

        result = await _aggregator(tree, max_concurrency=2).evaluate(tree.root)

        assert result.status is Outcome.UP
        assert peak == 2

    @pytest.mark.asyncio
    async def test_mutation_during_evaluation_uses_snapshot(self):
        tree = CheckTree()

        def unregister_sibling(promise):
            tree.unregister("g/second")
            tree.register("g/third", FakeSucceedingProcedure())
            promise.complete()

        tree.register("g/first", unregister_sibling)
        tree.register("g/second", FakeSucceedingProcedure())

        result = await _aggregator(tree).evaluate(tree.root)

        assert [c.id for c in result.get("g").checks] == ["first", "second"]
        assert list(tree.root.children["g"].children) == ["first", "third"]

    @pytest.mark.asyncio
    async def test_queued_leaves_share_the_query_deadline(self):
        tree = CheckTree()
        for i in range(6):
            tree.register(f"hang{i}", FakeHangingProcedure())

        start = time.perf_counter()
        result = await _aggregator(tree, timeout=0.1, max_concurrency=2).evaluate(tree.root)
        elapsed = time.perf_counter() - start

        assert [c.data["cause"] for c in result.checks] == ["Timeout"] * 6
        assert all(c.execution_failure for c in result.checks)
        assert elapsed < 0.2

    @pytest.mark.asyncio
    async def test_task_count_is_bounded(self):
        seen = []

        def procedure(promise):
            seen.append(len(asyncio.all_tasks()))
            promise.complete()

        tree = CheckTree()
        for i in range(50):
            tree.register(f"g{i % 5}/c{i}", procedure)
        baseline = len(asyncio.all_tasks())

        result = await _aggregator(tree, max_concurrency=3).evaluate(tree.root)

        assert result.status is Outcome.UP
        assert len(seen) == 50
        assert max(seen) - baseline <= 3

    @pytest.mark.asyncio
    async def test_leaf_binding_is_read_when_visited(self):
        tree = CheckTree()
        replacement = FakeHangingProcedure()

        async def rebind_sibling(promise):
            await asyncio.sleep(0)
            tree.register("b", replacement, timeout=0.01)
            promise.complete()

        tree.register("a", rebind_sibling)
        tree.register("b", FakeSucceedingProcedure())

        result = await _aggregator(tree, max_concurrency=1).evaluate(tree.root)

        assert result.get("b").status is Outcome.UP
        assert replacement.calls == 0
        assert tree.binding(tree.root.children["b"]) == (replacement, 0.01)
