"""Tenant entities.

A tenant is anything exposing a ``tenant_key`` (the provider's primary key)
and a ``tenant_identifier`` (the URL-facing slug). Tenants that can be
looked up by a secondary resource key also expose ``tenant_resource_key``.

Grove never mutates tenants; providers build them from their backing store.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol, runtime_checkable

TenantKey = int | str


@runtime_checkable
class Tenant(Protocol):
    """Protocol implemented by every tenant entity."""

    @property
    def tenant_key(self) -> TenantKey: ...

    @property
    def tenant_identifier(self) -> str: ...


@runtime_checkable
class TenantHasResources(Tenant, Protocol):
    """Protocol for tenants that carry a resource key."""

    @property
    def tenant_resource_key(self) -> str: ...


@dataclass(frozen=True)
class GenericTenant:
    """Tenant backed by a plain row from the tenants table.

    Attributes:
        key: Primary key
        identifier: Unique, URL-facing identifier
        name: Human-readable name
        active: Whether the tenant is active
        attributes: Any remaining columns from the row
    """

    key_column: ClassVar[str] = "id"
    identifier_column: ClassVar[str] = "identifier"
    supports_resources: ClassVar[bool] = False

    key: TenantKey
    identifier: str
    name: str | None = None
    active: bool = True
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def tenant_key(self) -> TenantKey:
        return self.key

    @property
    def tenant_identifier(self) -> str:
        return self.identifier

    @classmethod
    def columns(cls) -> list[str]:
        """Columns the entity needs from the backing table."""
        return [cls.key_column, cls.identifier_column]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> GenericTenant:
        """Build a tenant from a row mapping."""
        data = dict(row)
        return cls(
            key=data.pop(cls.key_column),
            identifier=data.pop(cls.identifier_column),
            name=data.pop("name", None),
            active=bool(data.pop("active", True)),
            attributes=data,
        )


@dataclass(frozen=True)
class ResourceTenant(GenericTenant):
    """Generic tenant with a resource key for resource-scoped lookups."""

    resource_key_column: ClassVar[str] = "resource_key"
    supports_resources: ClassVar[bool] = True

    resource_key: str | None = None

    @property
    def tenant_resource_key(self) -> str:
        return str(self.resource_key)

    @classmethod
    def columns(cls) -> list[str]:
        return [*super().columns(), cls.resource_key_column]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ResourceTenant:
        data = dict(row)
        resource_key = data.pop(cls.resource_key_column, None)
        return cls(
            key=data.pop(cls.key_column),
            identifier=data.pop(cls.identifier_column),
            name=data.pop("name", None),
            active=bool(data.pop("active", True)),
            attributes=data,
            resource_key=str(resource_key) if resource_key is not None else None,
        )


def tenant_supports_resources(entity: type[Any]) -> bool:
    """Check whether an entity class can be looked up by resource key."""
    return bool(getattr(entity, "supports_resources", False))


def same_tenant(a: Tenant | None, b: Tenant | None) -> bool:
    """Compare two tenants by key; ``None`` only equals ``None``."""
    if a is None or b is None:
        return a is b
    return type(a) is type(b) and a.tenant_key == b.tenant_key
