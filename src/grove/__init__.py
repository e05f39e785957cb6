"""Grove: multi-tenancy for FastAPI/Starlette services and their workers.

Provides tenant identification and lifecycle management:
- Tenancy: named context holding the current tenant
- IdentityResolver: extracts a tenant identifier from a request
- TenantProvider: looks tenants up in a backing store
- ServiceOverride: reconfigures a service when the tenant changes
- Job context propagation across the Redis job queue

Example:
    from fastapi import Depends, FastAPI
    from grove import Grove, Tenant
    from grove.http import require_tenant

    grove = Grove.from_settings()

    app = FastAPI(lifespan=grove.lifespan)
    grove.install(app)

    @app.get("/orders")
    async def list_orders(tenant: Tenant = Depends(require_tenant())):
        ...
"""

from grove.config import MultitenancyConfig, Settings, settings
from grove.core import Grove
from grove.events import CurrentTenantChanged, TenantChangeDispatcher
from grove.exceptions import (
    GroveError,
    JobRestoreError,
    MisconfigurationError,
    TenantNotFoundError,
)
from grove.hooks import ResolutionHook
from grove.managers import IdentityResolverManager, TenancyManager, TenantProviderManager
from grove.overrides import LogContextOverride, ServiceOverride
from grove.providers import DatabaseTenantProvider, StaticTenantProvider, TenantProvider
from grove.resolvers import (
    CookieIdentityResolver,
    HeaderIdentityResolver,
    IdentityResolver,
    PathIdentityResolver,
    SubdomainIdentityResolver,
)
from grove.tenancy import DefaultTenancy, Tenancy
from grove.tenants import GenericTenant, ResourceTenant, Tenant, TenantHasResources

__all__ = [
    # Core
    "Grove",
    "ResolutionHook",
    # Config
    "Settings",
    "MultitenancyConfig",
    "settings",
    # Tenancy
    "Tenancy",
    "DefaultTenancy",
    "CurrentTenantChanged",
    "TenantChangeDispatcher",
    # Tenants
    "Tenant",
    "TenantHasResources",
    "GenericTenant",
    "ResourceTenant",
    # Providers
    "TenantProvider",
    "DatabaseTenantProvider",
    "StaticTenantProvider",
    # Resolvers
    "IdentityResolver",
    "SubdomainIdentityResolver",
    "HeaderIdentityResolver",
    "PathIdentityResolver",
    "CookieIdentityResolver",
    # Managers
    "IdentityResolverManager",
    "TenantProviderManager",
    "TenancyManager",
    # Overrides
    "ServiceOverride",
    "LogContextOverride",
    # Errors
    "GroveError",
    "MisconfigurationError",
    "TenantNotFoundError",
    "JobRestoreError",
]
