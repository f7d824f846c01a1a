"""Engine – :class:`Authorization`, the host-facing registration and decision surface.

Bundles one :class:`PrivilegeRegistry`, one :class:`AttributeResolver`, the
:class:`AuthorizationEngine` and a :class:`YieldGuard`. Construct it once at
start-up and hand it to request handlers explicitly.

Example::

    authz = Authorization()
    authz.add_global_group("admin", [("User", "edit"), ("Book", "remove")])
    authz.add_global_unscoped([("Book", "read", {"owned": True}),
                               ("Book", "read", {"public": True})])
    authz.register_attribute_handler(
        lambda book: {"owned": book.owner_id == uid, "public": book.is_public},
        resource="Book",
    )

    with authz.request_scope(roles=user.roles) as scope:
        for group in db.groups():   # per-request rules
            authz.add_scoped_group(scope, group.name, group.book_privileges())
        authz.yield_(lambda: db.books.get(book_id), "Book", "read", scope=scope) \\
            .on_granted(render).on_denied(forbid).on_not_found(missing)
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from authzkit.config.settings import AuthzSettings
from authzkit.engine.decision import _DEFAULT_SINK, AuthorizationEngine
from authzkit.engine.events import DecisionSink
from authzkit.engine.predicate import Predicate
from authzkit.engine.yielding import YieldGuard, YieldResult
from authzkit.observability.logging import DecisionLogger, JsonLoggerFactory
from authzkit.rules.attributes import AttributeHandler, AttributeResolver
from authzkit.rules.privilege import Privilege, PrivilegeLike
from authzkit.rules.registry import PrivilegeRegistry, Scope

T = TypeVar("T")


class Authorization:
    """Facade over registry, resolver, engine and guard."""

    def __init__(
        self,
        registry: PrivilegeRegistry | None = None,
        resolver: AttributeResolver | None = None,
        sink: DecisionSink | None = _DEFAULT_SINK,
    ) -> None:
        self.registry = registry if registry is not None else PrivilegeRegistry()
        self.resolver = resolver if resolver is not None else AttributeResolver()
        self.engine = AuthorizationEngine(self.registry, self.resolver, sink=sink)
        self.guard = YieldGuard(self.engine)

    @classmethod
    def from_settings(
        cls,
        settings: AuthzSettings,
        registry: PrivilegeRegistry | None = None,
        resolver: AttributeResolver | None = None,
        configure_logging: bool = False,
    ) -> Authorization:
        """Build an instance whose decision sink follows *settings*.

        With ``configure_logging`` the process-wide structlog setup is also
        (re)configured from ``settings.log_level`` and ``settings.json_logs``.
        """
        if configure_logging:
            JsonLoggerFactory.configure(level=settings.log_level_number, json=settings.json_logs)
        sink: DecisionSink | None = None
        if settings.log_decisions:
            sink = DecisionLogger(service=settings.service, level=settings.decision_log_level)
        return cls(registry=registry, resolver=resolver, sink=sink)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_global(
        self,
        resource: str,
        action: str,
        role: str | None = None,
        restrictions: Mapping[str, Any] | None = None,
    ) -> bool:
        return self.registry.add_global(Privilege(resource, action, role=role, restrictions=restrictions))

    def add_global_group(self, role: str, privileges: Iterable[PrivilegeLike]) -> int:
        return self.registry.add_global_group(role, privileges)

    def add_global_unscoped(self, privileges: Iterable[PrivilegeLike]) -> int:
        return self.registry.add_global_unscoped(privileges)

    def add_scoped(
        self,
        scope: Scope | str,
        resource: str,
        action: str,
        role: str | None = None,
        restrictions: Mapping[str, Any] | None = None,
    ) -> bool:
        return self.registry.add_scoped(scope, Privilege(resource, action, role=role, restrictions=restrictions))

    def add_scoped_group(self, scope: Scope | str, role: str, privileges: Iterable[PrivilegeLike]) -> int:
        return self.registry.add_scoped_group(scope, role, privileges)

    def add_scoped_unscoped(self, scope: Scope | str, privileges: Iterable[PrivilegeLike]) -> int:
        return self.registry.add_scoped_unscoped(scope, privileges)

    def register_attribute_handler(
        self,
        handler: AttributeHandler,
        resource: str | None = None,
        action: str | None = None,
    ) -> None:
        self.resolver.register(handler, resource, action)

    def request_scope(
        self,
        scope_id: str | None = None,
        *,
        roles: Iterable[str] = (),
        context: Any = None,
    ) -> contextlib.AbstractContextManager[Scope]:
        """Open a per-operation scope that is always ended on exit."""
        return self.registry.scope(scope_id, roles=roles, context=context)

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def permitted(
        self,
        resource: str,
        action: str,
        roles: Iterable[str] | None = None,
        attributes: Mapping[str, Any] | None = None,
        protected_value: Any = None,
        scope: Scope | str | None = None,
    ) -> bool:
        """Decide; ``roles=None`` falls back to the scope's roles."""
        return self.engine.permitted(
            resource,
            action,
            self._roles_for(roles, scope),
            attributes=attributes,
            protected_value=protected_value,
            scope=scope,
        )

    def yield_(
        self,
        fetch: Callable[[], T | None],
        resource: str,
        action: str,
        attributes: Mapping[str, Any] | None = None,
        roles: Iterable[str] | None = None,
        scope: Scope | str | None = None,
    ) -> YieldResult[T]:
        return self.guard.yield_(
            fetch,
            resource,
            action,
            attributes=attributes,
            roles=self._roles_for(roles, scope),
            scope=scope,
        )

    def predicate(
        self,
        scope: Scope | str | None = None,
        roles: Iterable[str] | None = None,
    ) -> Predicate:
        return Predicate(self.engine, scope=scope, roles=tuple(self._roles_for(roles, scope)))

    def _roles_for(self, roles: Iterable[str] | None, scope: Scope | str | None) -> Iterable[str]:
        if isinstance(roles, str):
            raise TypeError("roles must be an iterable of role names, not a single string")
        if roles is not None:
            return roles
        if scope is not None:
            return self.registry.get_scope(scope).roles
        return ()


__all__ = ["Authorization"]
