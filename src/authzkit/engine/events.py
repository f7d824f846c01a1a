"""Engine – DecisionEvent and the decision sink port."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Protocol

from authzkit.rules.privilege import Privilege, format_attributes, format_privilege


@dataclasses.dataclass(frozen=True)
class DecisionEvent:
    """Structured record of one ``permitted`` call."""

    granted: bool
    resource: str
    action: str
    roles: tuple[str, ...]
    attributes: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    matched_rule: Privilege | None = None

    def summary(self) -> str:
        """Human-readable one-liner, e.g. ``Granted: [admin] User => edit()``."""
        if self.granted and self.matched_rule is not None:
            return f"Granted: {format_privilege(self.matched_rule)}"
        roles = f"[{','.join(self.roles)}] " if self.roles else ""
        check = f"{roles}{self.resource} => {self.action}({format_attributes(self.attributes)})"
        return f"{'Granted' if self.granted else 'Denied'}: {check}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "granted": self.granted,
            "resource": self.resource,
            "action": self.action,
            "roles": list(self.roles),
            "attributes": {k: v if isinstance(v, (bool, int, float, str)) or v is None else repr(v)
                           for k, v in self.attributes.items()},
            "rule": format_privilege(self.matched_rule) if self.matched_rule is not None else None,
        }


class DecisionSink(Protocol):
    """Port: receives exactly one event per decision."""

    def __call__(self, event: DecisionEvent) -> None: ...


__all__ = ["DecisionEvent", "DecisionSink"]
