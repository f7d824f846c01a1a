"""Rules – :class:`PrivilegeRegistry` and per-operation :class:`Scope` handles.

The registry holds two layers:

* the *global* layer – process-lifetime rules, normally registered during
  application start-up;
* one *scoped* layer per active :class:`Scope` – rules registered for a
  single operation (e.g. one inbound request), discarded when it ends.

Scope identity is always passed explicitly; nothing is keyed on the current
thread or task.

Example::

    registry = PrivilegeRegistry()
    registry.add_global_group("admin", [priv("User", "edit")])

    with registry.scope(roles=["editor"]) as scope:
        registry.add_scoped(scope, priv("Book", "edit", {"book_id": 7}))
        registry.view(scope)  # global ++ scoped
"""

from __future__ import annotations

import contextlib
import re
import threading
import uuid
import warnings
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from authzkit.kernel.errors import DuplicateRuleWarning, InvalidPrivilegeError, ScopeMisuseError
from authzkit.observability.logging import get_logger
from authzkit.rules.privilege import Privilege, PrivilegeLike, coerce_privilege, format_privilege

_log = get_logger(__name__)

_ROLE_NAME = re.compile(r"\w")


class Scope:
    """Handle for one logical operation's overlay of dynamic rules.

    Carries the requester's ``roles`` and an optional ``context`` value (the
    protected value attribute handlers should describe when a decision does
    not name one explicitly). Obtain instances from
    :meth:`PrivilegeRegistry.begin_scope` or :meth:`PrivilegeRegistry.scope`.
    """

    __slots__ = ("_id", "_roles", "context")

    def __init__(self, scope_id: str, roles: Iterable[str] = (), context: Any = None) -> None:
        self._id = scope_id
        self._roles = _role_tuple(roles)
        self.context = context

    @property
    def id(self) -> str:
        return self._id

    @property
    def roles(self) -> tuple[str, ...]:
        return self._roles

    def set_context(self, value: Any) -> Scope:
        """Set the protected value for this scope; chainable."""
        self.context = value
        return self

    def __repr__(self) -> str:
        return f"Scope(id={self._id!r}, roles={self._roles!r})"


def _role_tuple(roles: Iterable[str]) -> tuple[str, ...]:
    if isinstance(roles, str):
        raise TypeError("roles must be an iterable of role names, not a single string")
    return tuple(roles)


class PrivilegeRegistry:
    """Single source of truth for which rules currently apply.

    Global writes take a lock and publish a new immutable tuple, so decision
    scans running in parallel always read a complete snapshot. A scope's
    layer is only written by the operation that owns the scope.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._global: tuple[Privilege, ...] = ()
        # scope id -> layer; ``None`` until the first scoped write
        self._scopes: dict[str, list[Privilege] | None] = {}
        self._handles: dict[str, Scope] = {}

    # ------------------------------------------------------------------
    # Global layer
    # ------------------------------------------------------------------

    def add_global(self, privilege: Privilege) -> bool:
        """Register a process-lifetime rule. Returns ``False`` for duplicates."""
        privilege = _check(privilege)
        with self._lock:
            if _warn_if_duplicate(privilege, self._global):
                return False
            self._global = (*self._global, privilege)
        _log.debug("privilege.registered", layer="global", rule=format_privilege(privilege))
        return True

    def add_global_group(self, role: str, privileges: Iterable[PrivilegeLike]) -> int:
        """Bind every privilege to *role* and register it globally."""
        return sum(self.add_global(p) for p in _bind_role(role, privileges))

    def add_global_unscoped(self, privileges: Iterable[PrivilegeLike]) -> int:
        """Register privileges that apply to every caller regardless of role."""
        return sum(self.add_global(p) for p in _coerce_all(privileges))

    # ------------------------------------------------------------------
    # Scope lifecycle
    # ------------------------------------------------------------------

    def begin_scope(
        self,
        scope_id: str | None = None,
        *,
        roles: Iterable[str] = (),
        context: Any = None,
    ) -> Scope:
        """Open a scope. Pair with :meth:`end_scope`, or use :meth:`scope`."""
        scope = Scope(scope_id or uuid.uuid4().hex, roles=roles, context=context)
        with self._lock:
            if scope.id in self._scopes:
                raise ScopeMisuseError(scope.id, reason="already active")
            self._scopes[scope.id] = None
            self._handles[scope.id] = scope
        return scope

    def end_scope(self, scope: Scope | str) -> None:
        """Discard the scope's layer. Ending a scope twice is an error."""
        scope_id = _scope_id(scope)
        with self._lock:
            if scope_id not in self._scopes:
                raise ScopeMisuseError(scope_id)
            layer = self._scopes.pop(scope_id)
            del self._handles[scope_id]
        _log.debug("scope.ended", scope=scope_id, rules=len(layer or ()))

    @contextlib.contextmanager
    def scope(
        self,
        scope_id: str | None = None,
        *,
        roles: Iterable[str] = (),
        context: Any = None,
    ) -> Iterator[Scope]:
        """Context manager that always ends the scope, including on errors."""
        handle = self.begin_scope(scope_id, roles=roles, context=context)
        try:
            yield handle
        finally:
            self.end_scope(handle)

    @property
    def active_scopes(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._scopes)

    def get_scope(self, scope: Scope | str) -> Scope:
        """Return the handle registered for *scope*, which may be given by id."""
        scope_id = _scope_id(scope)
        with self._lock:
            if scope_id not in self._handles:
                raise ScopeMisuseError(scope_id)
            return self._handles[scope_id]

    # ------------------------------------------------------------------
    # Scoped layer
    # ------------------------------------------------------------------

    def add_scoped(self, scope: Scope | str, privilege: Privilege) -> bool:
        """Register a rule for *scope* only. Returns ``False`` for duplicates.

        Deduplicates against the global layer and this scope's own layer;
        other scopes are never consulted.
        """
        privilege = _check(privilege)
        scope_id = _scope_id(scope)
        with self._lock:
            if scope_id not in self._scopes:
                raise ScopeMisuseError(scope_id)
            layer = self._scopes[scope_id]
            if layer is None:
                layer = self._scopes[scope_id] = []
            if _warn_if_duplicate(privilege, (*self._global, *layer)):
                return False
            layer.append(privilege)
        _log.debug("privilege.registered", layer="scoped", scope=scope_id, rule=format_privilege(privilege))
        return True

    def add_scoped_group(self, scope: Scope | str, role: str, privileges: Iterable[PrivilegeLike]) -> int:
        return sum(self.add_scoped(scope, p) for p in _bind_role(role, privileges))

    def add_scoped_unscoped(self, scope: Scope | str, privileges: Iterable[PrivilegeLike]) -> int:
        return sum(self.add_scoped(scope, p) for p in _coerce_all(privileges))

    # ------------------------------------------------------------------
    # Read view
    # ------------------------------------------------------------------

    def view(self, scope: Scope | str | None = None) -> tuple[Privilege, ...]:
        """Return global ++ scoped rules visible to *scope*.

        Order carries no priority; evaluation is "any match wins".
        """
        if scope is None:
            return self._global
        scope_id = _scope_id(scope)
        with self._lock:
            if scope_id not in self._scopes:
                raise ScopeMisuseError(scope_id)
            layer = self._scopes[scope_id]
            return (*self._global, *layer) if layer else self._global

    def __len__(self) -> int:
        return len(self._global)

    def __repr__(self) -> str:
        return f"PrivilegeRegistry(global={len(self._global)}, scopes={len(self._scopes)})"


def _check(privilege: Any) -> Privilege:
    if not isinstance(privilege, Privilege):
        raise InvalidPrivilegeError("Invalid privilege object", detail={"value": repr(privilege)})
    return privilege


def _scope_id(scope: Scope | str) -> str:
    return scope.id if isinstance(scope, Scope) else scope


def _bind_role(role: str, privileges: Iterable[PrivilegeLike]) -> list[Privilege]:
    if not isinstance(role, str) or not _ROLE_NAME.search(role):
        raise InvalidPrivilegeError(f"Invalid role name: {role!r}", field="role", value=role)
    return [p.with_role(role) for p in _coerce_all(privileges)]


def _coerce_all(privileges: Iterable[PrivilegeLike]) -> list[Privilege]:
    # validate the whole batch before anything is stored
    return [coerce_privilege(p) for p in privileges]


def _warn_if_duplicate(privilege: Privilege, visible: Sequence[Privilege]) -> bool:
    if not any(privilege.is_equal(p) for p in visible):
        return False
    rule = format_privilege(privilege)
    _log.warning("privilege.duplicate_skipped", rule=rule)
    warnings.warn(f"Duplicate privilege skipped: {rule}", DuplicateRuleWarning, stacklevel=3)
    return True


__all__ = ["PrivilegeRegistry", "Scope"]
