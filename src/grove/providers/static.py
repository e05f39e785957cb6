"""Configuration-backed tenant provider."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from grove.providers.base import TenantProvider
from grove.tenants import GenericTenant, Tenant, TenantKey


class StaticTenantProvider(TenantProvider):
    """Serves a fixed set of tenants declared in configuration.

    Example config:
        {"driver": "static", "tenants": [{"id": 1, "identifier": "acme"}]}
    """

    def __init__(
        self,
        name: str,
        tenants: Iterable[Mapping[str, Any]] = (),
        entity: type[Any] = GenericTenant,
    ) -> None:
        super().__init__(name, entity)
        self._tenants: list[Tenant] = [entity.from_row(row) for row in tenants]

    @property
    def tenants(self) -> list[Tenant]:
        return list(self._tenants)

    async def retrieve_by_identifier(self, identifier: str) -> Tenant | None:
        for tenant in self._tenants:
            if tenant.tenant_identifier == identifier:
                return tenant
        return None

    async def retrieve_by_key(self, key: TenantKey) -> Tenant | None:
        for tenant in self._tenants:
            if tenant.tenant_key == key:
                return tenant
        return None

    async def _retrieve_by_resource_key(self, resource_key: str) -> Tenant | None:
        for tenant in self._tenants:
            if getattr(tenant, "tenant_resource_key", None) == resource_key:
                return tenant
        return None
