"""Logging for healthtree.

Exposes a module-level ``logger`` (a ``ContextualLogger``) and a
``LoggerConfigurator`` that builds dimension-tagged loggers:

    from healthtree.core.logging import logger

    check_logger = logger.with_context(check_id="db/primary")
    check_logger.warning("Procedure timed out")
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

import structlog

from healthtree.core.config import LogFormat, settings

ROOT_LOGGER_NAME = "healthtree"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that carries a dict of dimensions on every record.

    Dimensions are attached to ``record.dimensions`` and rendered by the
    configured formatter. ``with_context`` and ``with_prefix`` return new
    adapters and never mutate the receiver.
    """

    def __init__(
        self,
        logger: logging.Logger,
        dimensions: Optional[dict[str, Any]] = None,
        prefix: str = "",
    ) -> None:
        """Wrap *logger* with the given dimensions and message prefix."""
        super().__init__(logger, dict(dimensions or {}))
        self.dimensions = dict(dimensions or {})
        self.prefix = prefix

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["dimensions"] = {**self.dimensions, **extra.get("dimensions", {})}
        kwargs["extra"] = extra
        return f"{self.prefix}{msg}", kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a logger with *dimensions* merged over the current ones."""
        return ContextualLogger(self.logger, {**self.dimensions, **dimensions}, self.prefix)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a logger that prepends *prefix* to every message."""
        return ContextualLogger(self.logger, self.dimensions, f"{self.prefix}{prefix}")


class _TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        dimensions = getattr(record, "dimensions", None)
        if dimensions:
            rendered = " ".join(f"{k}={v}" for k, v in dimensions.items())
            line = f"{line} [{rendered}]"
        return line


def _add_record_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Lift the record's dimensions and exception into the event dict."""
    record = event_dict.get("_record")
    if record is None:
        return event_dict
    event_dict.update(getattr(record, "dimensions", None) or {})
    if record.exc_info and "exc_info" not in event_dict:
        event_dict["exc_info"] = record.exc_info
    return event_dict


def _json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """Render stdlib records as JSON lines through structlog."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_record_context,
            structlog.processors.format_exc_info,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(default=str),
        ],
    )


class LoggerConfigurator:
    """Builds loggers under the ``healthtree`` namespace."""

    _configured = False

    @classmethod
    def configure_root(cls) -> None:
        """Install a stream handler on the package root logger (once)."""
        if cls._configured:
            return
        root = logging.getLogger(ROOT_LOGGER_NAME)
        handler = logging.StreamHandler(sys.stdout)
        if settings.LOG_FORMAT == LogFormat.JSON:
            handler.setFormatter(_json_formatter())
        else:
            handler.setFormatter(
                _TextFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
        root.addHandler(handler)
        root.setLevel(settings.LOG_LEVEL)
        cls._configured = True

    @classmethod
    def configure_logger(
        cls,
        name: str,
        dimensions: Optional[dict[str, Any]] = None,
    ) -> ContextualLogger:
        """Return a ``ContextualLogger`` for *name* tagged with *dimensions*."""
        cls.configure_root()
        return ContextualLogger(logging.getLogger(name), dimensions)


logger = LoggerConfigurator.configure_logger(ROOT_LOGGER_NAME)
