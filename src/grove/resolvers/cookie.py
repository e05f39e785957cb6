"""Cookie identity resolver."""

from __future__ import annotations

from collections.abc import Iterable

from starlette.requests import Request

from grove.hooks import ResolutionHook
from grove.resolvers.base import IdentityResolver

DEFAULT_COOKIE = "{Tenancy}-Identifier"


class CookieIdentityResolver(IdentityResolver):
    """Resolves the tenant identifier from a cookie."""

    def __init__(
        self,
        name: str,
        tenancy: str,
        cookie: str | None = None,
        hooks: Iterable[ResolutionHook] = (ResolutionHook.ROUTING,),
    ) -> None:
        super().__init__(name, tenancy, hooks)
        self.cookie = self.format_placeholder(cookie or DEFAULT_COOKIE)

    def resolve_from_request(self, request: Request) -> str | None:
        return request.cookies.get(self.cookie) or None
