"""Health domain types.

Pure domain types: the namespace nodes (``Leaf`` / ``Composite``) and the
evaluated view of a node (``CheckResult``).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from healthtree.core.health.protocols import Procedure
from healthtree.schemas.health import Outcome

# ---------------------------------------------------------------------------
# Namespace nodes
# ---------------------------------------------------------------------------


@dataclass
class Leaf:
    """A namespace entry bound to exactly one check procedure."""

    name: str
    procedure: Procedure
    timeout: Optional[float] = None
    """Per-check timeout in seconds; ``None`` uses the engine default."""


@dataclass
class Composite:
    """A namespace entry grouping named children, in insertion order."""

    name: str
    children: dict[str, "Node"] = field(default_factory=dict)


Node = Union[Leaf, Composite]


class ResolutionError(str, Enum):
    """Why a path could not be resolved to a node."""

    NOT_FOUND = "not_found"
    """A segment names no existing child."""

    INVALID_PATH = "invalid_path"
    """The path is malformed or descends through a leaf."""


# ---------------------------------------------------------------------------
# Evaluation result
# ---------------------------------------------------------------------------


@dataclass
class CheckResult:
    """Evaluated view of one node.

    Leaves carry ``data``; composites carry ``checks``. ``execution_failure``
    is internal and never rendered: for a leaf it is set when the procedure
    timed out or raised, for a composite it is the OR over its descendants.
    """

    status: Outcome
    id: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    checks: Optional[list["CheckResult"]] = None
    execution_failure: bool = False

    @property
    def up(self) -> bool:
        return self.status is Outcome.UP

    @property
    def is_leaf(self) -> bool:
        return self.checks is None

    def get(self, check_id: str) -> Optional["CheckResult"]:
        """Return the immediate child named *check_id*, if any."""
        for child in self.checks or ():
            if child.id == check_id:
                return child
        return None
