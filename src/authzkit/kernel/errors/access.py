"""Access errors – raised only by the opt-in ``YieldResult.unwrap()``.

Denied and not-found outcomes are ordinary values everywhere else.
"""

from __future__ import annotations

from typing import Any

from authzkit.kernel.errors.base import AuthzError


class AccessDeniedError(AuthzError):
    """A guarded value was fetched but no privilege accepted the request."""

    default_code = "access_denied"

    def __init__(
        self,
        message: str = "Access denied",
        *,
        resource: str | None = None,
        action: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.resource = resource
        self.action = action


class NullYieldError(AuthzError):
    """The guarded fetch returned no value."""

    default_code = "null_yield"

    def __init__(
        self,
        message: str = "Nothing to yield",
        *,
        resource: str | None = None,
        action: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.resource = resource
        self.action = action


__all__ = ["AccessDeniedError", "NullYieldError"]
