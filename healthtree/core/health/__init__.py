"""Health sub-package: check registry, evaluation and rendering."""

from healthtree.core.health.promise import Promise
from healthtree.core.health.protocols import HealthChecksProtocol, Procedure
from healthtree.core.health.service import HealthChecks
from healthtree.core.health.types import CheckResult, ResolutionError

__all__ = [
    "CheckResult",
    "HealthChecks",
    "HealthChecksProtocol",
    "Procedure",
    "Promise",
    "ResolutionError",
]
