"""Structured logging utilities for tagtree.

Every record emitted through a :class:`CorrelationLogger` carries the
component name and an optional correlation ID in its ``extra`` mapping so
that log output from one parse can be grouped together.
"""

import logging
from typing import Any, Dict, Optional


class CorrelationLogger:
    """Stdlib logger bound to a component and a correlation ID."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        # "tagtree.parsing.machine" -> "machine"
        self.component = component or name.rsplit(".", 1)[-1]

    def _log(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]],
        **kwargs: Any
    ) -> None:
        context: Dict[str, Any] = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        context.update(extra or {})
        self.logger.log(level, message, extra=context, **kwargs)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, message, extra)

    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log at ERROR with the active exception's traceback."""
        self._log(logging.ERROR, message, extra, exc_info=True)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger for ``name`` (typically ``__name__``)."""
    return CorrelationLogger(name, correlation_id, component)
