"""Header identity resolver."""

from __future__ import annotations

from collections.abc import Iterable

from starlette.requests import Request

from grove.hooks import ResolutionHook
from grove.resolvers.base import IdentityResolver

DEFAULT_HEADER = "{Tenancy}-Identifier"


class HeaderIdentityResolver(IdentityResolver):
    """Resolves the tenant identifier from a request header."""

    def __init__(
        self,
        name: str,
        tenancy: str,
        header: str | None = None,
        hooks: Iterable[ResolutionHook] = (ResolutionHook.ROUTING,),
    ) -> None:
        super().__init__(name, tenancy, hooks)
        self.header = self.format_placeholder(header or DEFAULT_HEADER)

    def resolve_from_request(self, request: Request) -> str | None:
        return request.headers.get(self.header) or None
