"""Health check schemas."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

# Data key marking a check that did not run to completion (timeout or raise).
PROCEDURE_EXECUTION_FAILURE = "procedure-execution-failure"
CAUSE = "cause"


class Outcome(str, Enum):
    """Verdict of a single check or of a group of checks."""

    UP = "UP"
    DOWN = "DOWN"


class ResponseCategory(str, Enum):
    """Classification of a query result, consumed by the HTTP layer."""

    EMPTY = "empty"
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"
    EXECUTION_ERROR = "execution_error"
    NOT_FOUND = "not_found"
    INVALID_PATH = "invalid_path"

    @property
    def http_status(self) -> int:
        """HTTP status code for this category."""
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ResponseCategory.EMPTY: 204,
    ResponseCategory.SUCCESS: 200,
    ResponseCategory.UNAVAILABLE: 503,
    ResponseCategory.EXECUTION_ERROR: 500,
    ResponseCategory.NOT_FOUND: 404,
    ResponseCategory.INVALID_PATH: 400,
}


class Status(BaseModel):
    """Outcome reported by a check procedure.

    ``data`` is a flat mapping of JSON-representable values that is rendered
    verbatim under the check's ``data`` key.
    """

    up: bool
    data: dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "example": {
                "up": True,
                "data": {"availableMemory": "2Mb"},
            }
        }
    }

    @classmethod
    def OK(cls, data: Optional[dict[str, Any]] = None) -> "Status":  # noqa: N802
        """Successful status, optionally carrying diagnostic data."""
        return cls(up=True, data=dict(data or {}))

    @classmethod
    def KO(cls, data: Optional[dict[str, Any]] = None) -> "Status":  # noqa: N802
        """Failed status, optionally carrying diagnostic data."""
        return cls(up=False, data=dict(data or {}))

    @property
    def outcome(self) -> Outcome:
        """``UP`` or ``DOWN``."""
        return Outcome.UP if self.up else Outcome.DOWN

    @property
    def procedure_in_error(self) -> bool:
        """Whether the data carries the execution-failure marker."""
        return self.data.get(PROCEDURE_EXECUTION_FAILURE) is True
