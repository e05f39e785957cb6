"""Subdomain identity resolver.

Matches the request host against ``<identifier>.<domain>``:

    resolver = SubdomainIdentityResolver("subdomain", "tenants", "example.com")
    # Host: acme.example.com -> "acme"
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from starlette.requests import Request

from grove.hooks import ResolutionHook
from grove.resolvers.base import IdentityResolver

DEFAULT_PATTERN = r"[^.]+"
DEFAULT_PARAMETER = "{tenancy}_subdomain"


class SubdomainIdentityResolver(IdentityResolver):
    """Resolves the tenant identifier from the request subdomain.

    The matched identifier is also exposed to downstream consumers as
    ``request.state.route_parameters[parameter]``.
    """

    def __init__(
        self,
        name: str,
        tenancy: str,
        domain: str,
        pattern: str | None = None,
        parameter: str | None = None,
        hooks: Iterable[ResolutionHook] = (ResolutionHook.ROUTING,),
    ) -> None:
        super().__init__(name, tenancy, hooks)
        self.domain = domain.lower().strip(".")
        self.pattern = pattern or DEFAULT_PATTERN
        self.parameter = self.format_placeholder(parameter or DEFAULT_PARAMETER)
        self._regex = re.compile(
            rf"^(?P<identifier>{self.pattern})\.{re.escape(self.domain)}$",
            re.IGNORECASE,
        )

    def resolve_from_request(self, request: Request) -> str | None:
        host = request.url.hostname or ""
        match = self._regex.match(host)
        if match is None:
            return None

        identifier = match.group("identifier")

        self.set_route_parameter(request, self.parameter, identifier)

        return identifier
