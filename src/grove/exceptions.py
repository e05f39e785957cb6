"""Exceptions raised by Grove.

Resolution misses are never exceptions; they surface as ``False``/``None``.
Everything here is either a configuration problem (fatal, raised when the
offending operation is invoked) or a tenant that should exist but does not.
"""

from __future__ import annotations

from typing import Any


class GroveError(Exception):
    """Base exception for Grove errors."""

    pass


class MisconfigurationError(GroveError):
    """Raised when a resolver, provider, tenancy or override is misconfigured."""

    @classmethod
    def missing_config(cls, key: str, factory: str, name: str) -> MisconfigurationError:
        return cls(f"The {factory} [{name}] is missing a required value for '{key}'")

    @classmethod
    def invalid_config(
        cls, key: str, factory: str, name: str, value: Any = None
    ) -> MisconfigurationError:
        return cls(f"The provided value for '{key}' is not valid for {factory} [{name}]: {value!r}")

    @classmethod
    def no_config(cls, factory: str, name: str) -> MisconfigurationError:
        return cls(f"The {factory} [{name}] has no config")

    @classmethod
    def unsupported_driver(cls, factory: str, name: str, driver: str) -> MisconfigurationError:
        return cls(f"The {factory} [{name}] uses an unsupported driver '{driver}'")

    @classmethod
    def no_default(cls, factory: str) -> MisconfigurationError:
        return cls(f"There is no default {factory} set")

    @classmethod
    def not_resource_ready(cls, entity: str) -> MisconfigurationError:
        return cls(f"The current tenant [{entity}] is not configured correctly for resources")

    @classmethod
    def duplicate_override(cls, service: str) -> MisconfigurationError:
        return cls(f"A service override is already registered for [{service}]")


class TenantNotFoundError(GroveError):
    """Raised when a trusted tenant key does not resolve to a tenant."""

    def __init__(self, tenancy: str, key: Any) -> None:
        super().__init__(f"No tenant with key [{key}] exists for tenancy [{tenancy}]")
        self.tenancy = tenancy
        self.key = key


class JobRestoreError(GroveError):
    """Raised when a job's captured tenant context can no longer be restored."""

    def __init__(self, job_id: str, tenancy: str, key: Any) -> None:
        super().__init__(
            f"Unable to restore tenant [{key}] on tenancy [{tenancy}] for job {job_id}"
        )
        self.job_id = job_id
        self.tenancy = tenancy
        self.key = key
