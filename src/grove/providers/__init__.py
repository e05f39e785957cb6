"""Tenant providers.

Providers look tenants up in a backing store:
- DatabaseTenantProvider: SQL table via SQLAlchemy async sessions
- StaticTenantProvider: tenants declared inline in configuration
"""

from grove.providers.base import TenantProvider
from grove.providers.database import DatabaseTenantProvider
from grove.providers.static import StaticTenantProvider

__all__ = [
    "TenantProvider",
    "DatabaseTenantProvider",
    "StaticTenantProvider",
]
