"""Engine – :class:`Predicate`, a fluent builder over the decision surface.

Each step returns a new predicate, so a partially built one can be shared::

    can_edit = authz.predicate(scope).perform("edit")
    can_edit.on_resource("Book").with_value(book).permitted()
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from types import MappingProxyType
from typing import Any, TypeVar

from authzkit.engine.decision import AuthorizationEngine
from authzkit.engine.yielding import YieldGuard, YieldResult
from authzkit.kernel.errors import IncompletePredicateError
from authzkit.rules.registry import Scope

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class Predicate:
    engine: AuthorizationEngine
    scope: Scope | str | None = None
    roles: tuple[str, ...] = ()
    resource: str | None = None
    action: str | None = None
    attributes: MappingProxyType[str, Any] = dataclasses.field(
        default_factory=lambda: MappingProxyType({})
    )
    value: Any = None

    def perform(self, action: str) -> Predicate:
        return dataclasses.replace(self, action=action)

    def on_resource(self, resource: str) -> Predicate:
        return dataclasses.replace(self, resource=resource)

    def with_roles(self, *roles: str) -> Predicate:
        return dataclasses.replace(self, roles=roles)

    def with_attributes(self, **attributes: Any) -> Predicate:
        """Add static attributes; later calls override earlier keys."""
        return dataclasses.replace(
            self, attributes=MappingProxyType({**self.attributes, **attributes})
        )

    def with_value(self, value: Any) -> Predicate:
        """Set the protected value used for attribute resolution."""
        return dataclasses.replace(self, value=value)

    def _target(self) -> tuple[str, str]:
        if self.resource is None or self.action is None:
            raise IncompletePredicateError(
                "Predicate needs both a resource and an action before evaluation",
                detail={"resource": self.resource, "action": self.action},
            )
        return self.resource, self.action

    def permitted(self) -> bool:
        resource, action = self._target()
        return self.engine.permitted(
            resource,
            action,
            self.roles,
            attributes=dict(self.attributes),
            protected_value=self.value,
            scope=self.scope,
        )

    def yield_(self, fetch: Callable[[], T | None]) -> YieldResult[T]:
        resource, action = self._target()
        return YieldGuard(self.engine).yield_(
            fetch,
            resource,
            action,
            attributes=dict(self.attributes),
            roles=self.roles,
            scope=self.scope,
        )


__all__ = ["Predicate"]
