"""Engine – :class:`AuthorizationEngine`, the grant/deny decision procedure.

Algorithm for ``permitted(resource, action, roles, attributes, ...)``:

1. Resolve dynamic attributes from the protected value (explicit, or the
   scope's ``context``) and merge them over the static attributes.
2. Scan ``registry.view(scope)``.
3. Grant iff at least one privilege accepts. Rules are OR-ed; the first
   accepting rule is reported in the event but carries no precedence.
4. Deliver exactly one :class:`DecisionEvent` to the sink.

Evaluation never mutates registry state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from authzkit.engine.events import DecisionEvent, DecisionSink
from authzkit.observability.logging import DecisionLogger, get_logger
from authzkit.rules.attributes import AttributeResolver, merge_attributes
from authzkit.rules.registry import PrivilegeRegistry, Scope

_log = get_logger(__name__)

_DEFAULT_SINK: Any = object()


class AuthorizationEngine:
    """Evaluates requests against a :class:`PrivilegeRegistry`.

    Parameters
    ----------
    registry:
        Source of the visible rules.
    resolver:
        Attribute handlers; an empty resolver when omitted.
    sink:
        Receives one :class:`DecisionEvent` per call. Defaults to a
        :class:`DecisionLogger`; pass ``None`` to disable decision reporting.
    """

    def __init__(
        self,
        registry: PrivilegeRegistry,
        resolver: AttributeResolver | None = None,
        sink: DecisionSink | None = _DEFAULT_SINK,
    ) -> None:
        self._registry = registry
        self._resolver = resolver if resolver is not None else AttributeResolver()
        self._sink: DecisionSink | None = DecisionLogger() if sink is _DEFAULT_SINK else sink

    @property
    def registry(self) -> PrivilegeRegistry:
        return self._registry

    @property
    def resolver(self) -> AttributeResolver:
        return self._resolver

    def attributes_for(
        self,
        resource: str,
        action: str,
        attributes: Mapping[str, Any] | None = None,
        protected_value: Any = None,
        scope: Scope | None = None,
    ) -> dict[str, Any]:
        """Return static *attributes* merged with those derived from the protected value."""
        if protected_value is None and scope is not None:
            protected_value = scope.context
        if protected_value is None:
            return dict(attributes or {})
        dynamic = self._resolver.resolve(resource, action, protected_value)
        return merge_attributes(attributes, dynamic)

    def permitted(
        self,
        resource: str,
        action: str,
        roles: Iterable[str],
        attributes: Mapping[str, Any] | None = None,
        protected_value: Any = None,
        scope: Scope | str | None = None,
    ) -> bool:
        """Return ``True`` if any visible privilege accepts the request."""
        if isinstance(roles, str):
            raise TypeError("roles must be an iterable of role names, not a single string")
        role_set = tuple(roles)
        handle = self._registry.get_scope(scope) if scope is not None else None
        merged = self.attributes_for(resource, action, attributes, protected_value, handle)

        candidates = self._registry.view(handle)
        matched = next(
            (p for p in candidates if p.accepts(resource, action, role_set, merged)),
            None,
        )
        event = DecisionEvent(
            granted=matched is not None,
            resource=resource,
            action=action,
            roles=role_set,
            attributes=merged,
            matched_rule=matched,
        )
        _log.debug("decision.evaluated", candidates=len(candidates), granted=event.granted)
        if self._sink is not None:
            self._sink(event)
        return event.granted


__all__ = ["AuthorizationEngine"]
