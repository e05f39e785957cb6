"""Tenant provider contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from grove.exceptions import MisconfigurationError
from grove.tenants import GenericTenant, Tenant, TenantKey, tenant_supports_resources


class TenantProvider(ABC):
    """Looks tenants up by identifier, key or resource key.

    Lookups return ``None`` when nothing matches. Errors from the backing
    store propagate unchanged.
    """

    def __init__(self, name: str, entity: type[Any] = GenericTenant) -> None:
        self.name = name
        self.entity = entity

    def get_name(self) -> str:
        return self.name

    def get_entity_class(self) -> type[Any]:
        return self.entity

    @abstractmethod
    async def retrieve_by_identifier(self, identifier: str) -> Tenant | None:
        """Retrieve a tenant by its URL-facing identifier."""
        pass

    @abstractmethod
    async def retrieve_by_key(self, key: TenantKey) -> Tenant | None:
        """Retrieve a tenant by its primary key."""
        pass

    @abstractmethod
    async def _retrieve_by_resource_key(self, resource_key: str) -> Tenant | None:
        pass

    async def retrieve_by_resource_key(self, resource_key: str) -> Tenant | None:
        """Retrieve a tenant by its resource key.

        Raises:
            MisconfigurationError: If the entity does not support resource keys
        """
        if not tenant_supports_resources(self.entity):
            raise MisconfigurationError.not_resource_ready(self.entity.__name__)
        return await self._retrieve_by_resource_key(resource_key)
