"""ASGI integration for Grove.

- TenancyMiddleware: resolves the tenant for every request
- require_tenant / get_tenancy: FastAPI dependencies for tenanted routes
"""

from grove.http.deps import get_grove, get_tenancy, require_tenant
from grove.http.middleware import TenancyMiddleware

__all__ = [
    "TenancyMiddleware",
    "get_grove",
    "get_tenancy",
    "require_tenant",
]
