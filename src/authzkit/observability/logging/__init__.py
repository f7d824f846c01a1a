"""Observability – structured logging helpers and the decision log sink."""
from authzkit.observability.logging.audit import DecisionLogger, DecisionOutcome
from authzkit.observability.logging.factory import JsonLoggerFactory
from authzkit.observability.logging.processors import get_logger

__all__ = [
    "DecisionLogger",
    "DecisionOutcome",
    "JsonLoggerFactory",
    "get_logger",
]
