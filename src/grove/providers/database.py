"""Database-backed tenant provider.

Reads tenants from a SQL table through SQLAlchemy Core. The table is not
reflected; a lightweight ``table()`` construct is built from the columns
the entity class declares, so custom entities can point at any table.

Example:
    provider = DatabaseTenantProvider(
        "tenants",
        session_factory=get_session_factory(),
        table="tenants",
        entity=ResourceTenant,
    )
    tenant = await provider.retrieve_by_identifier("acme")
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import TableClause, column, select, table
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from grove.providers.base import TenantProvider
from grove.tenants import GenericTenant, Tenant, TenantKey

logger = logging.getLogger(__name__)


class DatabaseTenantProvider(TenantProvider):
    """Tenant provider for a plain SQL table."""

    def __init__(
        self,
        name: str,
        session_factory: async_sessionmaker[AsyncSession],
        table: str = "tenants",
        entity: type[Any] = GenericTenant,
    ) -> None:
        super().__init__(name, entity)
        self.session_factory = session_factory
        self.table_name = table

    def get_table(self) -> str:
        return self.table_name

    def _table(self) -> TableClause:
        columns = dict.fromkeys([*self.entity.columns(), "name", "active"])
        return table(self.table_name, *(column(name) for name in columns))

    async def _first(self, column_name: str, value: Any) -> Tenant | None:
        tenants = self._table()
        stmt = select(tenants).where(tenants.c[column_name] == value).limit(1)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            row = result.mappings().first()

        if row is None:
            logger.debug(f"No tenant in {self.table_name} where {column_name}={value!r}")
            return None

        tenant: Tenant = self.entity.from_row(row)
        return tenant

    async def retrieve_by_identifier(self, identifier: str) -> Tenant | None:
        return await self._first(self.entity.identifier_column, identifier)

    async def retrieve_by_key(self, key: TenantKey) -> Tenant | None:
        return await self._first(self.entity.key_column, key)

    async def _retrieve_by_resource_key(self, resource_key: str) -> Tenant | None:
        return await self._first(self.entity.resource_key_column, resource_key)
