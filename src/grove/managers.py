"""Factories for resolvers, providers and tenancies.

Each manager builds named instances from a configuration table, dispatching
on the entry's ``driver`` through an explicit driver registry, and caches
them per name. Custom drivers can be added with ``register``.

Example:
    providers = TenantProviderManager(config)
    tenancies = TenancyManager(config, providers, dispatcher)

    tenancy = tenancies.get("tenants")
    providers.register("api", lambda options, name: ApiTenantProvider(name))
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from grove.config import MultitenancyConfig
from grove.events import TenantChangeDispatcher
from grove.exceptions import MisconfigurationError
from grove.hooks import ResolutionHook
from grove.loading import resolve_reference
from grove.providers.base import TenantProvider
from grove.providers.database import DatabaseTenantProvider
from grove.providers.static import StaticTenantProvider
from grove.resolvers.base import IdentityResolver
from grove.resolvers.cookie import CookieIdentityResolver
from grove.resolvers.header import HeaderIdentityResolver
from grove.resolvers.path import PathIdentityResolver
from grove.resolvers.subdomain import SubdomainIdentityResolver
from grove.tenancy import DefaultTenancy, Tenancy
from grove.tenants import GenericTenant

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Builds an instance from its config options and registered name
Creator = Callable[[dict[str, Any], str], T]


class BaseFactory(ABC, Generic[T]):
    """Lazily creates and caches named instances from configuration."""

    #: Name used in error messages ("resolver", "provider", "tenancy")
    factory_name: str = ""

    #: Driver assumed when an entry has none; None makes driver required
    default_driver: str | None = None

    def __init__(self, config: MultitenancyConfig) -> None:
        self.config = config
        self._objects: dict[str, T] = {}
        self._creators: dict[str, Creator[T]] = dict(self.drivers())

    @abstractmethod
    def drivers(self) -> Mapping[str, Creator[T]]:
        """Built-in drivers for this factory."""
        pass

    @abstractmethod
    def config_table(self) -> Mapping[str, dict[str, Any]]:
        pass

    @abstractmethod
    def default_name(self) -> str | None:
        pass

    def register(self, driver: str, creator: Creator[T]) -> None:
        """Register a custom driver, replacing any existing one."""
        self._creators[driver] = creator

    def has_driver(self, driver: str) -> bool:
        return driver in self._creators

    def get(self, name: str | None = None) -> T:
        """Get the named instance, creating it on first access.

        Raises:
            MisconfigurationError: If the name has no valid configuration
        """
        if name is None:
            name = self.default_name()
            if name is None:
                raise MisconfigurationError.no_default(self.factory_name)

        if name not in self._objects:
            self._objects[name] = self.create(name)

        return self._objects[name]

    def create(self, name: str) -> T:
        """Create a fresh instance for the named configuration entry."""
        options = self.config_table().get(name)
        if options is None:
            raise MisconfigurationError.no_config(self.factory_name, name)

        options = dict(options)
        driver = options.get("driver", self.default_driver)
        if driver is None:
            raise MisconfigurationError.missing_config("driver", self.factory_name, name)

        creator = self._creators.get(driver)
        if creator is None:
            raise MisconfigurationError.unsupported_driver(self.factory_name, name, driver)

        instance = creator(options, name)
        logger.debug(f"Created {self.factory_name} {name} using driver {driver}")
        return instance

    def has_resolved(self, name: str | None = None) -> bool:
        if name is None:
            return bool(self._objects)
        return name in self._objects

    def resolved(self) -> dict[str, T]:
        """Instances created so far (read-only copy)."""
        return dict(self._objects)

    def flush_resolved(self) -> None:
        """Forget cached instances so they are rebuilt on next access."""
        self._objects.clear()


class IdentityResolverManager(BaseFactory[IdentityResolver]):
    """Creates identity resolvers from ``multitenancy.resolvers``."""

    factory_name = "resolver"

    def drivers(self) -> Mapping[str, Creator[IdentityResolver]]:
        return {
            "subdomain": self._create_subdomain_resolver,
            "header": self._create_header_resolver,
            "path": self._create_path_resolver,
            "cookie": self._create_cookie_resolver,
        }

    def config_table(self) -> Mapping[str, dict[str, Any]]:
        return self.config.resolvers

    def default_name(self) -> str | None:
        return self.config.defaults.resolver

    def names(self) -> list[str]:
        """Configured resolver names, in configuration order."""
        return list(self.config.resolvers)

    def _common_options(self, options: dict[str, Any], name: str) -> dict[str, Any]:
        tenancy = options.get("tenancy") or self.config.defaults.tenancy
        if not tenancy:
            raise MisconfigurationError.missing_config("tenancy", self.factory_name, name)

        raw_hooks = options.get("hooks", [ResolutionHook.ROUTING])
        try:
            hooks = [ResolutionHook(hook) for hook in raw_hooks]
        except (TypeError, ValueError) as e:
            raise MisconfigurationError.invalid_config(
                "hooks", self.factory_name, name, raw_hooks
            ) from e

        return {"name": name, "tenancy": tenancy, "hooks": hooks}

    def _create_subdomain_resolver(
        self, options: dict[str, Any], name: str
    ) -> SubdomainIdentityResolver:
        if not options.get("domain"):
            raise MisconfigurationError.missing_config("domain", self.factory_name, name)

        try:
            return SubdomainIdentityResolver(
                domain=options["domain"],
                pattern=options.get("pattern"),
                parameter=options.get("parameter"),
                **self._common_options(options, name),
            )
        except re.error as e:
            raise MisconfigurationError.invalid_config(
                "pattern", self.factory_name, name, options.get("pattern")
            ) from e

    def _create_header_resolver(self, options: dict[str, Any], name: str) -> HeaderIdentityResolver:
        return HeaderIdentityResolver(
            header=options.get("header"),
            **self._common_options(options, name),
        )

    def _create_path_resolver(self, options: dict[str, Any], name: str) -> PathIdentityResolver:
        segment = options.get("segment", 1)
        if isinstance(segment, bool) or not isinstance(segment, int) or segment < 1:
            raise MisconfigurationError.invalid_config(
                "segment", self.factory_name, name, segment
            )

        return PathIdentityResolver(
            segment=segment,
            parameter=options.get("parameter"),
            **self._common_options(options, name),
        )

    def _create_cookie_resolver(self, options: dict[str, Any], name: str) -> CookieIdentityResolver:
        return CookieIdentityResolver(
            cookie=options.get("cookie"),
            **self._common_options(options, name),
        )


class TenantProviderManager(BaseFactory[TenantProvider]):
    """Creates tenant providers from ``multitenancy.providers``."""

    factory_name = "provider"

    def __init__(
        self,
        config: MultitenancyConfig,
        session_factory: Callable[[], async_sessionmaker[AsyncSession]] | None = None,
    ) -> None:
        super().__init__(config)
        self._session_factory = session_factory

    def drivers(self) -> Mapping[str, Creator[TenantProvider]]:
        return {
            "database": self._create_database_provider,
            "static": self._create_static_provider,
        }

    def config_table(self) -> Mapping[str, dict[str, Any]]:
        return self.config.providers

    def default_name(self) -> str | None:
        return self.config.defaults.provider

    def _entity(self, options: dict[str, Any], name: str) -> type[Any]:
        entity = resolve_reference(options.get("entity", GenericTenant))
        if not isinstance(entity, type) or not hasattr(entity, "from_row"):
            raise MisconfigurationError.invalid_config(
                "entity", self.factory_name, name, options.get("entity")
            )
        return entity

    def _create_database_provider(
        self, options: dict[str, Any], name: str
    ) -> DatabaseTenantProvider:
        if self._session_factory is None:
            from grove.persistence.db import get_session_factory

            self._session_factory = get_session_factory

        return DatabaseTenantProvider(
            name,
            session_factory=self._session_factory(),
            table=options.get("table") or "tenants",
            entity=self._entity(options, name),
        )

    def _create_static_provider(self, options: dict[str, Any], name: str) -> StaticTenantProvider:
        tenants = options.get("tenants")
        if not isinstance(tenants, list):
            raise MisconfigurationError.missing_config("tenants", self.factory_name, name)

        return StaticTenantProvider(name, tenants=tenants, entity=self._entity(options, name))


class TenancyManager(BaseFactory[Tenancy]):
    """Creates tenancies from ``multitenancy.tenancies``.

    Tenancies are cached per name for the life of the manager; their
    current tenant is context-local, so one manager serves every flow.
    """

    factory_name = "tenancy"
    default_driver = "default"

    def __init__(
        self,
        config: MultitenancyConfig,
        providers: TenantProviderManager,
        events: TenantChangeDispatcher,
    ) -> None:
        super().__init__(config)
        self.providers = providers
        self.events = events

    def drivers(self) -> Mapping[str, Creator[Tenancy]]:
        return {"default": self._create_default_tenancy}

    def config_table(self) -> Mapping[str, dict[str, Any]]:
        return self.config.tenancies

    def default_name(self) -> str | None:
        return self.config.defaults.tenancy

    def _create_default_tenancy(self, options: dict[str, Any], name: str) -> DefaultTenancy:
        return DefaultTenancy(
            name,
            provider=self.providers.get(options.get("provider")),
            events=self.events,
        )
