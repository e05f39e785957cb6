"""Tenancy state machine.

A tenancy is a named axis of multi-tenancy ("tenants", "teams", ...) that
holds at most one current tenant. It is either empty or identified, and
``set_tenant`` is the only way to move between the two:

    Empty -> Identified(t)         identify()/load() found t
    Identified(a) -> Identified(b) re-identification on a long-lived worker
    Identified(a) -> Empty         forget()

Every transition that actually changes the tenant fires one
CurrentTenantChanged event; re-setting the current tenant fires nothing.

The current tenant lives in a ContextVar owned by the tenancy instance, so a
cached tenancy can be shared by concurrent requests and jobs: each asyncio
task sees only the tenant set within its own context.

Example:
    tenancy = DefaultTenancy("tenants", provider, dispatcher)

    if await tenancy.identify("acme"):
        tenant = tenancy.tenant()

    await tenancy.forget()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextvars import ContextVar
from dataclasses import dataclass, replace

from grove.events import CurrentTenantChanged, TenantChangeDispatcher
from grove.exceptions import TenantNotFoundError
from grove.hooks import ResolutionHook
from grove.providers.base import TenantProvider
from grove.resolvers.base import IdentityResolver
from grove.tenants import Tenant, TenantKey, same_tenant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenancyState:
    """Identified state of a tenancy within one context."""

    tenant: Tenant
    resolver: IdentityResolver | None = None
    hook: ResolutionHook | None = None


class Tenancy(ABC):
    """Named context tracking the current tenant for one tenancy."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def provider(self) -> TenantProvider:
        """Provider used to look tenants up."""
        pass

    @abstractmethod
    def tenant(self) -> Tenant | None:
        """Current tenant, None if the tenancy is empty."""
        pass

    @abstractmethod
    async def set_tenant(self, tenant: Tenant | None) -> bool:
        """Set (or clear) the current tenant.

        Returns:
            True if the current tenant changed
        """
        pass

    @abstractmethod
    async def identify(self, identifier: str) -> bool:
        """Identify the tenant by identifier; False if none matches."""
        pass

    @abstractmethod
    async def load(self, key: TenantKey) -> bool:
        """Load the tenant by key.

        Raises:
            TenantNotFoundError: If the key does not resolve
        """
        pass

    @abstractmethod
    def resolver(self) -> IdentityResolver | None:
        """Resolver that identified the current tenant, if any."""
        pass

    @abstractmethod
    def hook(self) -> ResolutionHook | None:
        """Hook during which the current tenant was identified, if any."""
        pass

    @abstractmethod
    def set_resolver(self, resolver: IdentityResolver) -> None:
        pass

    @abstractmethod
    def set_hook(self, hook: ResolutionHook) -> None:
        pass

    def was_resolved(self) -> bool:
        """Check whether the current tenant came from a resolver."""
        return self.resolver() is not None

    def check(self) -> bool:
        """Check whether there is a current tenant."""
        return self.tenant() is not None

    def key(self) -> TenantKey | None:
        tenant = self.tenant()
        return tenant.tenant_key if tenant is not None else None

    def identifier(self) -> str | None:
        tenant = self.tenant()
        return tenant.tenant_identifier if tenant is not None else None

    async def forget(self) -> bool:
        """Empty the tenancy."""
        return await self.set_tenant(None)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, tenant={self.identifier()!r})"


class DefaultTenancy(Tenancy):
    """Tenancy backed by a tenant provider."""

    def __init__(
        self,
        name: str,
        provider: TenantProvider,
        events: TenantChangeDispatcher,
    ) -> None:
        super().__init__(name)
        self._provider = provider
        self._events = events
        self._state: ContextVar[TenancyState | None] = ContextVar(
            f"grove.tenancy.{name}",
            default=None,
        )

    def provider(self) -> TenantProvider:
        return self._provider

    def tenant(self) -> Tenant | None:
        state = self._state.get()
        return state.tenant if state is not None else None

    def resolver(self) -> IdentityResolver | None:
        state = self._state.get()
        return state.resolver if state is not None else None

    def hook(self) -> ResolutionHook | None:
        state = self._state.get()
        return state.hook if state is not None else None

    def set_resolver(self, resolver: IdentityResolver) -> None:
        state = self._state.get()
        if state is not None:
            self._state.set(replace(state, resolver=resolver))

    def set_hook(self, hook: ResolutionHook) -> None:
        state = self._state.get()
        if state is not None:
            self._state.set(replace(state, hook=hook))

    async def set_tenant(self, tenant: Tenant | None) -> bool:
        previous = self.tenant()

        if same_tenant(previous, tenant):
            return False

        self._state.set(TenancyState(tenant=tenant) if tenant is not None else None)

        logger.info(
            f"Tenancy {self.name} changed tenant: "
            f"{previous.tenant_identifier if previous else None} -> "
            f"{tenant.tenant_identifier if tenant else None}"
        )

        await self._events.dispatch(
            CurrentTenantChanged(tenancy=self, previous=previous, current=tenant)
        )
        return True

    async def identify(self, identifier: str) -> bool:
        tenant = await self._provider.retrieve_by_identifier(identifier)

        if tenant is None:
            logger.debug(f"Tenancy {self.name} could not identify tenant: {identifier}")
            return False

        await self.set_tenant(tenant)
        return True

    async def load(self, key: TenantKey) -> bool:
        tenant = await self._provider.retrieve_by_key(key)

        if tenant is None:
            raise TenantNotFoundError(self.name, key)

        await self.set_tenant(tenant)
        return True
