"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    AuthzError
    ├── InvalidPrivilegeError         (rules.py)
    ├── ScopeMisuseError              (rules.py)
    ├── AttributeHandlerError         (rules.py)
    ├── InvalidAttributeHandlerError  (rules.py)
    ├── IncompletePredicateError      (rules.py)
    ├── AccessDeniedError             (access.py)
    └── NullYieldError                (access.py)

    UserWarning
    └── DuplicateRuleWarning          (rules.py)
"""

from authzkit.kernel.errors.access import AccessDeniedError, NullYieldError
from authzkit.kernel.errors.base import AuthzError
from authzkit.kernel.errors.rules import (
    AttributeHandlerError,
    DuplicateRuleWarning,
    IncompletePredicateError,
    InvalidAttributeHandlerError,
    InvalidPrivilegeError,
    ScopeMisuseError,
)

__all__ = [
    "AccessDeniedError",
    "AttributeHandlerError",
    "AuthzError",
    "DuplicateRuleWarning",
    "IncompletePredicateError",
    "InvalidAttributeHandlerError",
    "InvalidPrivilegeError",
    "NullYieldError",
    "ScopeMisuseError",
]
