"""Engine – decisions, guarded retrieval and the host-facing facade."""
from authzkit.engine.authorization import Authorization
from authzkit.engine.decision import AuthorizationEngine
from authzkit.engine.events import DecisionEvent, DecisionSink
from authzkit.engine.predicate import Predicate
from authzkit.engine.yielding import Denied, Granted, NotFound, YieldGuard, YieldResult

__all__ = [
    "Authorization",
    "AuthorizationEngine",
    "DecisionEvent",
    "DecisionSink",
    "Denied",
    "Granted",
    "NotFound",
    "Predicate",
    "YieldGuard",
    "YieldResult",
]
