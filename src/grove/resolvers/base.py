"""Identity resolver contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from starlette.requests import Request

from grove.hooks import ResolutionHook


class IdentityResolver(ABC):
    """Extracts a tenant identifier from a request.

    Attributes:
        name: Registered resolver name
        tenancy: Name of the tenancy the identifier belongs to
        hooks: Resolution hooks this resolver takes part in
    """

    def __init__(
        self,
        name: str,
        tenancy: str,
        hooks: Iterable[ResolutionHook] = (ResolutionHook.ROUTING,),
    ) -> None:
        self.name = name
        self.tenancy = tenancy
        self.hooks = frozenset(hooks)

    def get_name(self) -> str:
        return self.name

    def supports_hook(self, hook: ResolutionHook) -> bool:
        return hook in self.hooks

    @abstractmethod
    def resolve_from_request(self, request: Request) -> str | None:
        """Extract the tenant identifier, or None if the request has none."""
        pass

    def format_placeholder(self, value: str) -> str:
        """Substitute ``{tenancy}`` and ``{Tenancy}`` with the tenancy name."""
        return value.replace("{tenancy}", self.tenancy).replace(
            "{Tenancy}", self.tenancy.capitalize()
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, tenancy={self.tenancy!r})"

    @staticmethod
    def set_route_parameter(request: Request, parameter: str, value: str) -> None:
        """Expose a resolved value on ``request.state.route_parameters``."""
        parameters = getattr(request.state, "route_parameters", None)
        if parameters is None:
            parameters = {}
            request.state.route_parameters = parameters
        parameters[parameter] = value
