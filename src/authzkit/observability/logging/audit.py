"""Observability – DecisionLogger.

The default sink for authorization decisions: one structured log entry per
:class:`~authzkit.engine.events.DecisionEvent`.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from authzkit.observability.logging.processors import get_logger

if TYPE_CHECKING:
    from authzkit.engine.events import DecisionEvent


class DecisionOutcome(str, Enum):
    """Standardised decision outcomes."""

    GRANTED = "granted"
    DENIED = "denied"


class DecisionLogger:
    """Structured-log sink for grant/deny decisions.

    Parameters
    ----------
    service:
        Logical service name injected into every entry.
    logger:
        Underlying structlog logger. Defaults to one named ``authzkit.audit``.
    level:
        Level name used for both outcomes (``"info"`` by default).
    """

    def __init__(
        self,
        service: str = "authz",
        logger: Any = None,
        level: str = "info",
    ) -> None:
        self._service = service
        self._log = logger if logger is not None else get_logger("authzkit.audit")
        self._level = logging.getLevelName(level.upper())
        if not isinstance(self._level, int):
            raise ValueError(f"Unknown log level: {level!r}")

    @property
    def level(self) -> int:
        return self._level

    def __call__(self, event: DecisionEvent) -> None:
        outcome = DecisionOutcome.GRANTED if event.granted else DecisionOutcome.DENIED
        entry: dict[str, Any] = {
            "service": self._service,
            "outcome": outcome.value,
            "summary": event.summary(),
            **event.to_dict(),
        }
        self._log.log(self._level, f"authz.{outcome.value}", **entry)


__all__ = ["DecisionLogger", "DecisionOutcome"]
