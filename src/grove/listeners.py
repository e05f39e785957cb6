"""Built-in tenant change listeners.

Grove registers these ahead of any configured bootstrappers, cleanup first,
so that for a change from T1 to T2 every override releases T1 before any
override applies T2.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from grove.events import CurrentTenantChanged

if TYPE_CHECKING:
    from grove.core import Grove


class CleanupServiceOverrides:
    """Offers every override the chance to release the previous tenant."""

    def __init__(self, grove: Grove) -> None:
        self.grove = grove

    async def handle(self, event: CurrentTenantChanged) -> None:
        # Nothing to tear down without a previous tenant
        if event.previous is None:
            return

        for override in self.grove.get_overrides().values():
            await override.cleanup(event.tenancy, event.previous)


class SetupServiceOverrides:
    """Applies every override for the new current tenant."""

    def __init__(self, grove: Grove) -> None:
        self.grove = grove

    async def handle(self, event: CurrentTenantChanged) -> None:
        if event.current is None:
            return

        for override in self.grove.get_overrides().values():
            await override.apply(event.tenancy, event.current)
