"""Rules – the :class:`Privilege` value object.

A privilege is one authorization rule: an optional role scope, a required
resource and action, and a set of required restriction key/value pairs.

Two comparisons are defined and must not be confused:

* :meth:`Privilege.is_equal` – structural equality, used for deduplication.
* :meth:`Privilege.accepts` – whether the rule grants a concrete request.
  Restrictions are a *subset* test: every restriction must be present in the
  request attributes with an equal value; extra attributes are ignored.

Example::

    p = Privilege("Book", "read", restrictions={"owned": True})
    p.accepts("Book", "read", [], {"owned": True, "public": False})  # True
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from authzkit.kernel.errors import InvalidPrivilegeError

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def _require_name(value: Any, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidPrivilegeError(
            f"{field.capitalize()} is a required non-empty string",
            field=field,
            value=value,
        )


def _freeze_restrictions(restrictions: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if restrictions is None:
        return _EMPTY
    if not isinstance(restrictions, Mapping):
        raise InvalidPrivilegeError(
            "Restrictions must be a mapping of attribute name to value",
            field="restrictions",
            value=restrictions,
        )
    for key in restrictions:
        if not isinstance(key, str) or not key:
            raise InvalidPrivilegeError(
                "Restriction keys must be non-empty strings",
                field="restrictions",
                value=restrictions,
            )
    if not restrictions:
        return _EMPTY
    return MappingProxyType(dict(restrictions))


@dataclasses.dataclass(frozen=True, eq=False, init=False)
class Privilege:
    """A single immutable authorization rule.

    ``role=None`` means the rule applies regardless of the caller's roles.
    ``restrictions=None`` and ``restrictions={}`` are the same rule.
    """

    resource: str
    action: str
    role: str | None
    restrictions: Mapping[str, Any]

    def __init__(
        self,
        resource: str,
        action: str,
        role: str | None = None,
        restrictions: Mapping[str, Any] | None = None,
    ) -> None:
        _require_name(resource, "resource")
        _require_name(action, "action")
        if role is not None:
            _require_name(role, "role")
        object.__setattr__(self, "resource", resource)
        object.__setattr__(self, "action", action)
        object.__setattr__(self, "role", role)
        object.__setattr__(self, "restrictions", _freeze_restrictions(restrictions))

    # ------------------------------------------------------------------
    # Equality (deduplication)
    # ------------------------------------------------------------------

    def is_equal(self, other: Privilege) -> bool:
        """Return ``True`` if *other* is structurally the same rule."""
        return (
            self.role == other.role
            and self.resource == other.resource
            and self.action == other.action
            and dict(self.restrictions) == dict(other.restrictions)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Privilege):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((self.role, self.resource, self.action, frozenset(self.restrictions)))

    # ------------------------------------------------------------------
    # Acceptance (decision)
    # ------------------------------------------------------------------

    def satisfies_role(self, roles: Iterable[str]) -> bool:
        if self.role is None:
            return True
        return any(r == self.role for r in roles)

    def satisfies_restrictions(self, attributes: Mapping[str, Any]) -> bool:
        for key, required in self.restrictions.items():
            if key not in attributes or attributes[key] != required:
                return False
        return True

    def accepts(
        self,
        resource: str | None,
        action: str | None,
        roles: Iterable[str] | None,
        attributes: Mapping[str, Any] | None,
    ) -> bool:
        """Return ``True`` if this rule grants *action* on *resource*.

        *roles* is the caller's role set; *attributes* the contextual
        attribute mapping. A ``None`` resource, action or attributes never
        matches.
        """
        if resource is None or action is None or attributes is None:
            return False
        if resource != self.resource or action != self.action:
            return False
        if not self.satisfies_role(roles or ()):
            return False
        return self.satisfies_restrictions(attributes)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def with_role(self, role: str | None) -> Privilege:
        """Return a copy of this rule bound to *role*."""
        return Privilege(self.resource, self.action, role=role, restrictions=self.restrictions)

    def __repr__(self) -> str:
        return (
            f"Privilege(resource={self.resource!r}, action={self.action!r}, "
            f"role={self.role!r}, restrictions={dict(self.restrictions)!r})"
        )


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_attributes(attributes: Mapping[str, Any]) -> str:
    """Render ``k=v,k=v`` in insertion order."""
    return ",".join(f"{k}={format_value(v)}" for k, v in attributes.items())


def format_privilege(privilege: Privilege) -> str:
    """Render *privilege* as ``[role] resource => action(k=v,...)``."""
    role = f"[{privilege.role}] " if privilege.role is not None else ""
    return f"{role}{privilege.resource} => {privilege.action}({format_attributes(privilege.restrictions)})"


def priv(
    resource: str,
    action: str,
    restrictions: Mapping[str, Any] | None = None,
) -> Privilege:
    """Return an unregistered, role-less :class:`Privilege`.

    Register it with a :class:`~authzkit.rules.registry.PrivilegeRegistry`
    (directly or through a role group) to make it count.
    """
    return Privilege(resource, action, restrictions=restrictions)


type PrivilegeLike = Privilege | tuple[str, str] | tuple[str, str, Mapping[str, Any] | None]


def coerce_privilege(value: PrivilegeLike) -> Privilege:
    """Accept a :class:`Privilege` or a ``(resource, action[, restrictions])`` tuple."""
    if isinstance(value, Privilege):
        return value
    if isinstance(value, tuple) and len(value) in (2, 3):
        return Privilege(value[0], value[1], restrictions=value[2] if len(value) == 3 else None)
    raise InvalidPrivilegeError(
        "Invalid privilege object",
        detail={"value": repr(value)},
    )


__all__ = [
    "Privilege",
    "PrivilegeLike",
    "coerce_privilege",
    "format_attributes",
    "format_privilege",
    "priv",
]
