"""Grove coordinator.

Ties the managers, the tenant change dispatcher and the service overrides
together, and runs identity resolution for a hook:

    grove = Grove.from_settings()

    app = FastAPI(lifespan=grove.lifespan)
    grove.install(app)

For each request the middleware calls ``grove.resolve(ResolutionHook.ROUTING,
request)``. The configured resolvers supporting the hook are tried in
configuration order; the first one whose identifier matches a tenant of
its tenancy wins and the remaining resolvers are never consulted.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.requests import Request

from grove.config import Settings
from grove.config import settings as default_settings
from grove.events import TenantChangeDispatcher, TenantChangeListener
from grove.exceptions import MisconfigurationError
from grove.hooks import ResolutionHook
from grove.listeners import CleanupServiceOverrides, SetupServiceOverrides
from grove.loading import resolve_reference
from grove.managers import IdentityResolverManager, TenancyManager, TenantProviderManager
from grove.observability.logging import configure_logging
from grove.overrides.base import ServiceOverride
from grove.tenancy import Tenancy

logger = logging.getLogger(__name__)


class Grove:
    """Central registry for tenancies, resolvers, providers and overrides."""

    def __init__(
        self,
        settings: Settings | None = None,
        session_factory: Callable[[], async_sessionmaker[AsyncSession]] | None = None,
    ) -> None:
        """Initialize Grove.

        Args:
            settings: Settings to use (module-level settings if not provided)
            session_factory: Returns the session factory for database providers
        """
        self.settings = settings or default_settings
        self.events = TenantChangeDispatcher()

        config = self.settings.multitenancy
        self._resolvers = IdentityResolverManager(config)
        self._providers = TenantProviderManager(config, session_factory)
        self._tenancies = TenancyManager(config, self._providers, self.events)

        self._overrides: dict[str, ServiceOverride] = {}
        self._booted = False
        self._app: Any = None

        self.events.listen(CleanupServiceOverrides(self))
        self.events.listen(SetupServiceOverrides(self))

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        session_factory: Callable[[], async_sessionmaker[AsyncSession]] | None = None,
    ) -> Grove:
        """Create Grove with the overrides and bootstrappers from settings."""
        grove = cls(settings, session_factory)

        for service, override in grove.settings.services.items():
            grove.register_override(service, override)

        for bootstrapper in grove.settings.bootstrappers:
            grove.listen(bootstrapper)

        return grove

    # -------------------------------------------------------------------------
    # Managers
    # -------------------------------------------------------------------------

    def resolvers(self) -> IdentityResolverManager:
        return self._resolvers

    def providers(self) -> TenantProviderManager:
        return self._providers

    def tenancies(self) -> TenancyManager:
        return self._tenancies

    def tenancy(self, name: str | None = None) -> Tenancy:
        """Get a tenancy by name, or the default tenancy."""
        return self._tenancies.get(name)

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def listen(self, listener: TenantChangeListener | str) -> None:
        """Register a tenant change listener after the existing ones.

        Accepts a callable, an object with ``handle``, a class (instantiated
        with this Grove), or a dotted path to any of those.
        """
        target = resolve_reference(listener)
        if isinstance(target, type):
            target = target(self)
        self.events.listen(target)

    # -------------------------------------------------------------------------
    # Service overrides
    # -------------------------------------------------------------------------

    def register_override(self, service: str, override: ServiceOverride | type | str) -> None:
        """Register a service override against a service name.

        Raises:
            MisconfigurationError: If the service already has an override, or
                the reference is not a ServiceOverride
        """
        if service in self._overrides:
            raise MisconfigurationError.duplicate_override(service)

        target = resolve_reference(override)
        if isinstance(target, type) and issubclass(target, ServiceOverride):
            target = target(service)

        if not isinstance(target, ServiceOverride):
            raise MisconfigurationError(
                f"The override for service [{service}] is not a ServiceOverride: {override!r}"
            )

        self._overrides[service] = target
        logger.debug(f"Registered service override for {service}: {target!r}")

        # Overrides registered after boot are booted straight away
        if self._booted:
            target.boot(self._app)

    def get_overrides(self) -> dict[str, ServiceOverride]:
        """Registered overrides in registration order (read-only copy)."""
        return dict(self._overrides)

    def has_override(self, service: str) -> bool:
        return service in self._overrides

    def boot_overrides(self, app: Any) -> None:
        """Boot every registered override once."""
        if self._booted:
            return

        self._app = app
        for service, override in self._overrides.items():
            override.boot(app)
            logger.debug(f"Booted service override for {service}")

        self._booted = True

    def has_booted_overrides(self) -> bool:
        return self._booted

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def supports_hook(self, hook: ResolutionHook) -> bool:
        return hook in self.settings.hooks

    async def resolve(self, hook: ResolutionHook, request: Request) -> bool:
        """Identify the tenant for a request during the given hook.

        Returns:
            True if a tenant was identified, False if the hook is unsatisfied
        """
        if not self.supports_hook(hook):
            logger.debug(f"Resolution hook {hook.value} is not enabled")
            return False

        for name in self._resolvers.names():
            resolver = self._resolvers.get(name)
            if not resolver.supports_hook(hook):
                continue

            identifier = resolver.resolve_from_request(request)
            if identifier is None:
                continue

            tenancy = self._tenancies.get(resolver.tenancy)
            if await tenancy.identify(identifier):
                tenancy.set_resolver(resolver)
                tenancy.set_hook(hook)
                logger.debug(
                    f"Resolver {name} identified {identifier} on tenancy {tenancy.name}"
                )
                return True

            logger.warning(
                f"Resolver {name} found identifier {identifier} but no tenant matched "
                f"on tenancy {tenancy.name}"
            )
            if self.settings.resolution_miss == "abort":
                return False

        return False

    async def reset(self) -> None:
        """Forget the current tenant of every tenancy created so far."""
        for tenancy in self._tenancies.resolved().values():
            await tenancy.forget()

    # -------------------------------------------------------------------------
    # Application integration
    # -------------------------------------------------------------------------

    def install(
        self,
        app: Any,
        hook: ResolutionHook = ResolutionHook.ROUTING,
        require_tenant: bool = False,
        excluded_paths: list[str] | None = None,
    ) -> None:
        """Attach Grove to a FastAPI/Starlette application.

        Adds the tenancy middleware and exposes this Grove on ``app.state``.
        """
        from grove.http.middleware import TenancyMiddleware

        app.state.grove = self
        app.add_middleware(
            TenancyMiddleware,
            grove=self,
            hook=hook,
            require_tenant=require_tenant,
            excluded_paths=excluded_paths,
        )

    @asynccontextmanager
    async def lifespan(self, app: Any) -> AsyncIterator[None]:
        """Application lifespan: boot overrides on startup, reset on shutdown."""
        # Structured logging (JSON unless disabled, console otherwise)
        configure_logging(json_format=self.settings.log_json, level=self.settings.log_level)

        self.boot_overrides(app)
        logger.info(
            f"Grove started for {self.settings.app_name} ({self.settings.env}) "
            f"with {len(self._overrides)} service overrides"
        )
        yield
        await self.reset()
