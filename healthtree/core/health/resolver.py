"""PathResolver: maps slash-delimited paths onto tree nodes."""

from typing import TYPE_CHECKING, Union

from healthtree.core.exceptions import InvalidArgumentError
from healthtree.core.health.types import Composite, Leaf, Node, ResolutionError

if TYPE_CHECKING:
    from healthtree.core.health.tree import CheckTree

SEPARATOR = "/"


def split_path(path: str) -> list[str]:
    """Split *path* into name segments.

    Surrounding separators are ignored, so ``""`` and ``"/"`` both mean the
    root and yield ``[]``. An empty inner segment (``"a//b"``) is rejected.

    Raises:
        InvalidArgumentError: if the path contains an empty segment.
    """
    stripped = (path or "").strip(SEPARATOR)
    if not stripped:
        return []
    segments = stripped.split(SEPARATOR)
    if any(not s for s in segments):
        raise InvalidArgumentError(f"Empty segment in path {path!r}")
    return segments


class PathResolver:
    """Resolves paths against a ``CheckTree``.

    Failures are returned as ``ResolutionError`` values, never raised.
    """

    def __init__(self, tree: "CheckTree") -> None:
        self._tree = tree

    def resolve(self, path: str) -> Union[Node, ResolutionError]:
        try:
            segments = split_path(path)
        except InvalidArgumentError:
            return ResolutionError.INVALID_PATH
        return self.walk(segments)

    def walk(self, segments: list[str]) -> Union[Node, ResolutionError]:
        """Follow *segments* from the root."""
        node: Node = self._tree.root
        for segment in segments:
            if isinstance(node, Leaf):
                return ResolutionError.INVALID_PATH
            child = self._tree.child(node, segment)
            if child is None:
                return ResolutionError.NOT_FOUND
            node = child
        return node

    def parent_of(self, segments: list[str]) -> Union[Composite, ResolutionError]:
        """Resolve the Composite that holds the last of *segments*."""
        parent = self.walk(segments[:-1])
        if isinstance(parent, Leaf):
            return ResolutionError.INVALID_PATH
        return parent
