"""Rule errors – structural problems with privileges, scopes and handlers.

These are programmer errors: they surface synchronously to the caller and are
never silently corrected.
"""

from __future__ import annotations

from typing import Any

from authzkit.kernel.errors.base import AuthzError


class InvalidPrivilegeError(AuthzError):
    """A privilege could not be constructed or registered.

    ``field`` names the offending attribute (``resource``, ``action``,
    ``role``, ``restrictions``) when known.
    """

    default_code = "invalid_privilege"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        detail = kwargs.pop("detail", None) or {}
        if field is not None:
            detail.setdefault("field", field)
            detail.setdefault("value", repr(value))
        super().__init__(message, detail=detail, **kwargs)
        self.field = field
        self.value = value


class ScopeMisuseError(AuthzError):
    """A registry call referenced a scope that is unknown or already ended."""

    default_code = "scope_misuse"

    def __init__(self, scope_id: str, reason: str = "unknown or already ended", **kwargs: Any) -> None:
        super().__init__(f"Scope {scope_id!r} is {reason}", **kwargs)
        self.scope_id = scope_id


class AttributeHandlerError(AuthzError):
    """An attribute handler raised or returned something other than a mapping.

    Never propagated out of the resolver; it exists so the failure can be
    logged with a stable code.
    """

    default_code = "attribute_handler_failure"

    def __init__(
        self,
        resource: str | None,
        action: str | None,
        reason: str,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("detail", {"resource": resource, "action": action})
        super().__init__(
            f"Attribute handler for {resource or '*'}/{action or '*'} failed: {reason}",
            **kwargs,
        )
        self.resource = resource
        self.action = action


class InvalidAttributeHandlerError(AuthzError):
    """An attribute handler registration was malformed."""

    default_code = "invalid_attribute_handler"


class IncompletePredicateError(AuthzError):
    """A predicate was evaluated before its resource and action were set."""

    default_code = "incomplete_predicate"


class DuplicateRuleWarning(UserWarning):
    """Issued when a privilege equal to an already visible one is registered.

    The registration is skipped; execution continues.
    """


__all__ = [
    "AttributeHandlerError",
    "DuplicateRuleWarning",
    "IncompletePredicateError",
    "InvalidAttributeHandlerError",
    "InvalidPrivilegeError",
    "ScopeMisuseError",
]
