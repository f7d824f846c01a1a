"""
authzkit – hybrid RBAC/ABAC authorization decisions.

Import path convention::

    from authzkit.rules import Privilege, PrivilegeRegistry, priv
    from authzkit.engine import Authorization, AuthorizationEngine, YieldGuard
    from authzkit.kernel.errors import InvalidPrivilegeError
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
