"""Shared helpers for the test suite."""

from __future__ import annotations

from typing import Any

from starlette.requests import Request

from grove.config import MultitenancyConfig, Settings
from grove.overrides.base import ServiceOverride
from grove.tenancy import Tenancy
from grove.tenants import Tenant

TENANTS: list[dict[str, Any]] = [
    {"id": 1, "identifier": "acme", "name": "Acme Corp"},
    {"id": 2, "identifier": "globex", "name": "Globex"},
    {"id": 3, "identifier": "x", "name": "X"},
]


def make_settings(
    resolvers: dict[str, dict[str, Any]] | None = None,
    tenancies: dict[str, dict[str, Any]] | None = None,
    providers: dict[str, dict[str, Any]] | None = None,
    **kwargs: Any,
) -> Settings:
    """Settings backed by an in-memory tenant provider."""
    multitenancy = MultitenancyConfig(
        tenancies=tenancies or {"tenants": {"driver": "default", "provider": "tenants"}},
        providers=providers or {"tenants": {"driver": "static", "tenants": TENANTS}},
        resolvers=resolvers
        if resolvers is not None
        else {"subdomain": {"driver": "subdomain", "domain": "example.com"}},
    )
    return Settings(multitenancy=multitenancy, **kwargs)


def make_request(
    host: str = "localhost",
    path: str = "/",
    headers: dict[str, str] | None = None,
) -> Request:
    """Build a bare Starlette request."""
    raw_headers = [(b"host", host.encode())]
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode(), value.encode()))

    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "path": path,
            "query_string": b"",
            "headers": raw_headers,
        }
    )


class RecordingOverride(ServiceOverride):
    """Override that records every lifecycle call into a shared log."""

    def __init__(self, service: str, calls: list[tuple[str, ...]] | None = None) -> None:
        super().__init__(service)
        self.calls = calls if calls is not None else []

    def boot(self, app: Any) -> None:
        self.calls.append(("boot", self.service))

    async def apply(self, tenancy: Tenancy, tenant: Tenant) -> None:
        self.calls.append(("apply", self.service, tenancy.name, tenant.tenant_identifier))

    async def cleanup(self, tenancy: Tenancy, tenant: Tenant) -> None:
        self.calls.append(("cleanup", self.service, tenancy.name, tenant.tenant_identifier))


class InMemoryRedis:
    """Just enough of the redis.asyncio client for the job queue."""

    def __init__(self) -> None:
        self.values: dict[str, bytes] = {}
        self.lists: dict[str, list[bytes]] = {}

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.values[key] = value.encode()
        return True

    async def get(self, key: str) -> bytes | None:
        return self.values.get(key)

    async def lpush(self, key: str, value: str) -> int:
        items = self.lists.setdefault(key, [])
        items.insert(0, value.encode())
        return len(items)

    async def brpoplpush(self, source: str, destination: str, timeout: int = 0) -> bytes | None:
        items = self.lists.get(source)
        if not items:
            return None
        value = items.pop()
        self.lists.setdefault(destination, []).insert(0, value)
        return value

    async def lrem(self, key: str, count: int, value: str) -> int:
        items = self.lists.get(key, [])
        if value.encode() in items:
            items.remove(value.encode())
            return 1
        return 0
