"""Path segment identity resolver.

    resolver = PathIdentityResolver("path", "tenants", segment=1)
    # GET /acme/orders -> "acme"
"""

from __future__ import annotations

from collections.abc import Iterable

from starlette.requests import Request

from grove.hooks import ResolutionHook
from grove.resolvers.base import IdentityResolver

DEFAULT_PARAMETER = "{tenancy}_path"


class PathIdentityResolver(IdentityResolver):
    """Resolves the tenant identifier from a 1-based path segment."""

    def __init__(
        self,
        name: str,
        tenancy: str,
        segment: int = 1,
        parameter: str | None = None,
        hooks: Iterable[ResolutionHook] = (ResolutionHook.ROUTING,),
    ) -> None:
        super().__init__(name, tenancy, hooks)
        self.segment = segment
        self.parameter = self.format_placeholder(parameter or DEFAULT_PARAMETER)

    def resolve_from_request(self, request: Request) -> str | None:
        segments = [part for part in request.url.path.split("/") if part]
        if len(segments) < self.segment:
            return None

        identifier = segments[self.segment - 1]

        self.set_route_parameter(request, self.parameter, identifier)

        return identifier
