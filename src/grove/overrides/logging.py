"""Bind the active tenant into structured log records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from grove.observability.logging import tenancy_var, tenant_var
from grove.overrides.base import ServiceOverride

if TYPE_CHECKING:
    from grove.tenancy import Tenancy
    from grove.tenants import Tenant


class LogContextOverride(ServiceOverride):
    """Adds ``tenancy`` and ``tenant`` to every log record.

    Register it against the ``logging`` service:

        GROVE_SERVICES='{"logging": "grove.overrides.LogContextOverride"}'
    """

    async def apply(self, tenancy: Tenancy, tenant: Tenant) -> None:
        tenancy_var.set(tenancy.name)
        tenant_var.set(tenant.tenant_identifier)

    async def cleanup(self, tenancy: Tenancy, tenant: Tenant) -> None:
        # Another tenancy may own the log context
        if tenancy_var.get() != tenancy.name:
            return
        tenancy_var.set("")
        tenant_var.set("")
