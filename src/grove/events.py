"""Tenant change notification.

Every real transition of a tenancy's current tenant produces exactly one
CurrentTenantChanged event, delivered synchronously (awaited inline) to the
registered listeners in registration order.

Example:
    dispatcher = TenantChangeDispatcher()

    async def announce(event: CurrentTenantChanged) -> None:
        print(f"{event.tenancy.name}: {event.previous} -> {event.current}")

    dispatcher.listen(announce)
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, Union

if TYPE_CHECKING:
    from grove.tenancy import Tenancy
    from grove.tenants import Tenant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentTenantChanged:
    """A tenancy's current tenant changed.

    Attributes:
        tenancy: The tenancy whose tenant changed
        previous: Tenant before the change, None if there was none
        current: Tenant after the change, None if the tenancy was emptied
    """

    tenancy: Tenancy
    previous: Tenant | None
    current: Tenant | None

    @property
    def tenant(self) -> Tenant | None:
        return self.current


class TenantChangeHandler(Protocol):
    """Listener object exposing a ``handle`` method."""

    def handle(self, event: CurrentTenantChanged) -> Awaitable[None] | None: ...


TenantChangeCallable = Callable[[CurrentTenantChanged], Union[Awaitable[None], None]]
TenantChangeListener = Union[TenantChangeCallable, TenantChangeHandler]


class TenantChangeDispatcher:
    """Ordered, in-process fan-out of tenant change events.

    Listeners may be plain callables or objects with a ``handle`` method,
    sync or async. Exceptions raised by a listener propagate to whoever
    changed the tenant; later listeners do not run.
    """

    def __init__(self) -> None:
        self._listeners: list[TenantChangeListener] = []

    @property
    def listeners(self) -> list[TenantChangeListener]:
        """Registered listeners (read-only copy)."""
        return list(self._listeners)

    def listen(self, listener: TenantChangeListener) -> None:
        """Register a listener after all existing ones."""
        self._listeners.append(listener)

    def forget(self, listener: TenantChangeListener) -> None:
        """Remove a previously registered listener."""
        self._listeners.remove(listener)

    async def dispatch(self, event: CurrentTenantChanged) -> None:
        """Deliver an event to every listener, in order."""
        logger.debug(
            f"Dispatching tenant change on {event.tenancy.name} to {len(self._listeners)} listeners"
        )
        for listener in list(self._listeners):
            handler: Any = getattr(listener, "handle", listener)
            result = handler(event)
            if inspect.isawaitable(result):
                await result
