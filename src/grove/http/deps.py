"""FastAPI dependencies for tenanted routes.

Usage:
    @router.get("/orders")
    async def list_orders(tenant: Tenant = Depends(require_tenant())):
        ...
"""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import HTTPException, Request, status

from grove.core import Grove
from grove.hooks import ResolutionHook
from grove.tenancy import Tenancy
from grove.tenants import Tenant


def get_grove(request: Request) -> Grove:
    """Get the Grove instance installed on the application."""
    grove = getattr(request.state, "grove", None) or getattr(request.app.state, "grove", None)
    if grove is None:
        raise RuntimeError("Grove is not installed. Call grove.install(app).")
    return grove


def get_tenancy(name: str | None = None) -> Callable[[Request], Tenancy]:
    """Dependency factory returning the named (or default) tenancy."""

    def dependency(request: Request) -> Tenancy:
        return get_grove(request).tenancy(name)

    return dependency


def require_tenant(name: str | None = None) -> Callable[[Request], Awaitable[Tenant]]:
    """Dependency factory returning the current tenant, or a 404.

    If the tenancy is still empty and the middleware hook is enabled,
    resolution is attempted once more for that hook first.
    """

    async def dependency(request: Request) -> Tenant:
        grove = get_grove(request)
        tenancy = grove.tenancy(name)

        if not tenancy.check() and grove.supports_hook(ResolutionHook.MIDDLEWARE):
            await grove.resolve(ResolutionHook.MIDDLEWARE, request)

        tenant = tenancy.tenant()
        if tenant is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No tenant found for tenancy {tenancy.name}",
            )
        return tenant

    return dependency
