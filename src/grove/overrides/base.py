"""Service override contract.

Lifecycle:
- boot(app): once, after the host application has started
- apply(tenancy, tenant): after a tenancy acquires a new current tenant
- cleanup(tenancy, previous): after a tenancy moves away from ``previous``

``cleanup`` is offered to every override for every change away from a
tenant, so implementations must tolerate being asked to release state they
never set up.

Example:
    class CachePrefixOverride(ServiceOverride):
        async def apply(self, tenancy: Tenancy, tenant: Tenant) -> None:
            cache.prefix = f"{tenancy.name}:{tenant.tenant_key}"

        async def cleanup(self, tenancy: Tenancy, tenant: Tenant) -> None:
            cache.prefix = ""
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from grove.tenancy import Tenancy
    from grove.tenants import Tenant


class ServiceOverride(ABC):
    """Reconfigures a service for the current tenant."""

    def __init__(self, service: str) -> None:
        self.service = service

    def boot(self, app: Any) -> None:
        """Hook into the service once the application has started."""
        pass

    @abstractmethod
    async def apply(self, tenancy: Tenancy, tenant: Tenant) -> None:
        """Switch the service to the given tenant."""
        pass

    @abstractmethod
    async def cleanup(self, tenancy: Tenancy, tenant: Tenant) -> None:
        """Release anything set up for the given (previous) tenant."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(service={self.service!r})"
