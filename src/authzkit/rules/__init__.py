"""Rules – privileges, the privilege registry and attribute resolution."""
from authzkit.rules.attributes import AttributeHandler, AttributeResolver, merge_attributes
from authzkit.rules.privilege import (
    Privilege,
    PrivilegeLike,
    coerce_privilege,
    format_attributes,
    format_privilege,
    priv,
)
from authzkit.rules.registry import PrivilegeRegistry, Scope

__all__ = [
    "AttributeHandler",
    "AttributeResolver",
    "Privilege",
    "PrivilegeRegistry",
    "PrivilegeLike",
    "Scope",
    "coerce_privilege",
    "format_attributes",
    "format_privilege",
    "merge_attributes",
    "priv",
]
