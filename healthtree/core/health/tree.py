"""CheckTree: the registry of check procedures.

Leaves hold procedures; composites group named children. Structural
changes are serialized by one lock, and readers work on snapshots of a
composite's children so a mutation never disturbs an in-flight query.
"""

import threading
from typing import Optional

from healthtree.core.exceptions import InvalidArgumentError, InvalidRegistrationError
from healthtree.core.health.protocols import Procedure
from healthtree.core.health.resolver import PathResolver, split_path
from healthtree.core.health.types import Composite, Leaf, Node, ResolutionError


class CheckTree:
    """Hierarchical namespace rooted at an anonymous ``Composite``."""

    def __init__(self) -> None:
        self.root = Composite(name="")
        self._lock = threading.RLock()
        self._resolver = PathResolver(self)

    # -- reads ---------------------------------------------------------------

    def child(self, composite: Composite, name: str) -> Optional[Node]:
        with self._lock:
            return composite.children.get(name)

    def snapshot(self, composite: Composite) -> list[tuple[str, Node]]:
        """Children of *composite* in insertion order, as of now."""
        with self._lock:
            return list(composite.children.items())

    def binding(self, leaf: Leaf) -> tuple[Procedure, Optional[float]]:
        """The procedure and timeout of *leaf*, read together."""
        with self._lock:
            return leaf.procedure, leaf.timeout

    def is_empty(self) -> bool:
        with self._lock:
            return not self.root.children

    # -- mutations -----------------------------------------------------------

    def register(self, path: str, procedure: Procedure, timeout: Optional[float] = None) -> Leaf:
        """Bind *procedure* at *path*, creating missing composites on the way.

        Re-registering an existing leaf swaps its procedure and timeout in
        place, keeping its position among its siblings.

        Raises:
            InvalidArgumentError: if *path* is empty or malformed.
            InvalidRegistrationError: if the path goes through an existing
                leaf, or its last segment names an existing composite.
        """
        segments = split_path(path)
        if not segments:
            raise InvalidArgumentError("Cannot register a procedure at the root")

        with self._lock:
            parent = self.root
            for segment in segments[:-1]:
                node = parent.children.get(segment)
                if node is None:
                    node = Composite(name=segment)
                    parent.children[segment] = node
                elif isinstance(node, Leaf):
                    raise InvalidRegistrationError(
                        path, f"`{segment}` is a check, not a group of checks"
                    )
                parent = node

            name = segments[-1]
            existing = parent.children.get(name)
            if isinstance(existing, Composite):
                raise InvalidRegistrationError(path, f"`{name}` is a group of checks")
            if isinstance(existing, Leaf):
                existing.procedure = procedure
                existing.timeout = timeout
                return existing

            leaf = Leaf(name=name, procedure=procedure, timeout=timeout)
            parent.children[name] = leaf
            return leaf

    def unregister(self, path: str) -> Optional[Node]:
        """Detach the node at *path*, with its subtree.

        Returns the removed node, or ``None`` when nothing matched. Parents
        left empty are kept.

        Raises:
            InvalidArgumentError: if *path* designates the root.
        """
        try:
            segments = split_path(path)
        except InvalidArgumentError:
            return None
        if not segments:
            raise InvalidArgumentError("Cannot unregister the root")

        with self._lock:
            parent = self._resolver.parent_of(segments)
            if isinstance(parent, ResolutionError):
                return None
            return parent.children.pop(segments[-1], None)
