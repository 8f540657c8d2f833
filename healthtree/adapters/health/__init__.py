"""Ready-made check procedures for common dependencies."""

from healthtree.adapters.health.http import HttpProcedure

__all__ = ["HttpProcedure"]
