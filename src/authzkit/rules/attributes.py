"""Rules – :class:`AttributeResolver`.

Attribute handlers compute dynamic attributes from a protected value at
decision time, so restrictions like ``{"owned": True}`` can be evaluated
against the data itself rather than against caller-declared guesses.

Handlers are registered at three levels of specificity and only the single
most specific one is invoked for a given ``(resource, action)``:

1. exact ``(resource, action)``
2. ``resource`` only
3. generic (no resource, no action)

Example::

    resolver = AttributeResolver()

    @resolver.handler("Book")
    def book_attrs(book):
        return {"owned": book.owner_id == current_user_id, "public": book.is_public}
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from authzkit.kernel.errors import AttributeHandlerError, InvalidAttributeHandlerError
from authzkit.observability.logging import get_logger

_log = get_logger(__name__)

AttributeHandler = Callable[[Any], Mapping[str, Any] | None]

_Key = tuple[str | None, str | None]


class AttributeResolver:
    """Registration table of attribute handlers keyed by ``(resource, action)``."""

    def __init__(self) -> None:
        self._handlers: dict[_Key, AttributeHandler] = {}

    def register(
        self,
        handler: AttributeHandler,
        resource: str | None = None,
        action: str | None = None,
    ) -> None:
        """Register *handler*; a later registration for the same key replaces it."""
        if not callable(handler):
            raise InvalidAttributeHandlerError(f"Attribute handler must be callable, got {handler!r}")
        if action is not None and resource is None:
            raise InvalidAttributeHandlerError("An action-specific handler must also name its resource")
        for name, value in (("resource", resource), ("action", action)):
            if value is not None and (not isinstance(value, str) or not value):
                raise InvalidAttributeHandlerError(f"Handler {name} must be a non-empty string")
        key = (resource, action)
        if key in self._handlers:
            _log.debug("attribute_handler.replaced", resource=resource, action=action)
        self._handlers[key] = handler

    def handler(
        self,
        resource: str | None = None,
        action: str | None = None,
    ) -> Callable[[AttributeHandler], AttributeHandler]:
        """Decorator form of :meth:`register`."""

        def decorator(fn: AttributeHandler) -> AttributeHandler:
            self.register(fn, resource, action)
            return fn

        return decorator

    def lookup(self, resource: str, action: str) -> AttributeHandler | None:
        """Return the most specific handler for *resource*/*action*, or ``None``."""
        for key in ((resource, action), (resource, None), (None, None)):
            found = self._handlers.get(key)
            if found is not None:
                return found
        return None

    def resolve(self, resource: str, action: str, value: Any) -> dict[str, Any]:
        """Return the dynamic attributes of *value*.

        A failing handler degrades to ``{}``: no additional attributes, never
        extra grants.
        """
        fn = self.lookup(resource, action)
        if fn is None:
            return {}
        try:
            result = fn(value)
        except Exception as exc:  # noqa: BLE001 – contained at the resolver boundary
            err = AttributeHandlerError(resource, action, repr(exc), cause=exc)
            _log.warning("attribute_handler.failed", **err.log_fields(), exc_info=exc)
            return {}
        if result is None:
            return {}
        if not isinstance(result, Mapping):
            err = AttributeHandlerError(resource, action, f"returned {type(result).__name__}, expected a mapping")
            _log.warning("attribute_handler.failed", **err.log_fields())
            return {}
        return dict(result)

    def __len__(self) -> int:
        return len(self._handlers)


def merge_attributes(
    static: Mapping[str, Any] | None,
    dynamic: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Merge caller-supplied and resolver-derived attributes; dynamic wins."""
    return {**(static or {}), **(dynamic or {})}


__all__ = ["AttributeHandler", "AttributeResolver", "merge_attributes"]
