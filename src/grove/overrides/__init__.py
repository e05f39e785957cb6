"""Service overrides.

A service override reconfigures one tenant-scoped service whenever a
tenancy's current tenant changes.
"""

from grove.overrides.base import ServiceOverride
from grove.overrides.logging import LogContextOverride

__all__ = [
    "ServiceOverride",
    "LogContextOverride",
]
