"""Engine – guarded retrieval ("yield").

:class:`YieldGuard` fuses fetching a protected value with authorizing access
to it. The value reaches calling code only through :class:`Granted`; denied
and not-found outcomes are ordinary values, never exceptions::

    guard.yield_(lambda: books.get(book_id), "Book", "edit", roles=roles) \\
        .on_granted(lambda book: render(book)) \\
        .on_denied(lambda: abort(403)) \\
        .on_not_found(lambda: abort(404))

Variants are also pattern-matchable::

    match guard.yield_(fetch, "Book", "read", roles=roles):
        case Granted(value=book): ...
        case Denied(): ...
        case NotFound(): ...
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic, NoReturn, TypeVar

from authzkit.engine.decision import AuthorizationEngine
from authzkit.kernel.errors import AccessDeniedError, NullYieldError
from authzkit.rules.registry import Scope

T = TypeVar("T")


class YieldResult(abc.ABC, Generic[T]):
    """Outcome of a guarded retrieval; one of three variants."""

    __slots__ = ()
    __match_args__: tuple[str, ...] = ()

    def on_granted(self, fn: Callable[[T], Any]) -> YieldResult[T]:  # noqa: ARG002
        return self

    def on_denied(self, fn: Callable[[], Any]) -> YieldResult[T]:  # noqa: ARG002
        return self

    def on_not_found(self, fn: Callable[[], Any]) -> YieldResult[T]:  # noqa: ARG002
        return self

    def is_granted(self) -> bool:
        return False

    @abc.abstractmethod
    def unwrap(self) -> T:
        """Return the value, or raise for denied / not-found outcomes."""


class Granted(YieldResult[T]):
    """The value was fetched and access was granted."""

    __slots__ = ("_value",)
    __match_args__ = ("value",)

    def __init__(self, value: T) -> None:
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    def on_granted(self, fn: Callable[[T], Any]) -> Granted[T]:
        fn(self._value)
        return self

    def is_granted(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self._value

    def __repr__(self) -> str:
        return "Granted(...)"


class Denied(YieldResult[Any]):
    """A value was fetched but no privilege accepted the request."""

    __slots__ = ("resource", "action")

    def __init__(self, resource: str | None = None, action: str | None = None) -> None:
        self.resource = resource
        self.action = action

    def on_denied(self, fn: Callable[[], Any]) -> Denied:
        fn()
        return self

    def unwrap(self) -> NoReturn:
        raise AccessDeniedError(resource=self.resource, action=self.action)

    def __repr__(self) -> str:
        return f"Denied(resource={self.resource!r}, action={self.action!r})"


class NotFound(YieldResult[Any]):
    """The fetch returned no value; no authorization check was made."""

    __slots__ = ("resource", "action")

    def __init__(self, resource: str | None = None, action: str | None = None) -> None:
        self.resource = resource
        self.action = action

    def on_not_found(self, fn: Callable[[], Any]) -> NotFound:
        fn()
        return self

    def unwrap(self) -> NoReturn:
        raise NullYieldError(resource=self.resource, action=self.action)

    def __repr__(self) -> str:
        return f"NotFound(resource={self.resource!r}, action={self.action!r})"


class YieldGuard:
    """Composes a fetch callback with :meth:`AuthorizationEngine.permitted`."""

    def __init__(self, engine: AuthorizationEngine) -> None:
        self._engine = engine

    def yield_(
        self,
        fetch: Callable[[], T | None],
        resource: str,
        action: str,
        attributes: Mapping[str, Any] | None = None,
        roles: Iterable[str] = (),
        scope: Scope | str | None = None,
    ) -> YieldResult[T]:
        """Fetch, then authorize using the fetched value for attribute resolution.

        Exceptions raised by *fetch* propagate unchanged.
        """
        value = fetch()
        if value is None:
            return NotFound(resource, action)
        if self._engine.permitted(
            resource,
            action,
            roles,
            attributes=attributes,
            protected_value=value,
            scope=scope,
        ):
            return Granted(value)
        return Denied(resource, action)


__all__ = ["Denied", "Granted", "NotFound", "YieldGuard", "YieldResult"]
