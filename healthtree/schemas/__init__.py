"""Schemas for healthtree."""

from .health import (
    CAUSE,
    PROCEDURE_EXECUTION_FAILURE,
    Outcome,
    ResponseCategory,
    Status,
)

__all__ = [
    "CAUSE",
    "PROCEDURE_EXECUTION_FAILURE",
    "Outcome",
    "ResponseCategory",
    "Status",
]
