"""Tenant resolution middleware for FastAPI/Starlette.

Runs Grove's resolution pipeline for the configured hook on every request
and forgets every tenant once the request is done.

The middleware is plain ASGI: the rest of the application runs in the same
task, so tenants set further down (for example by ``require_tenant`` on the
``MIDDLEWARE`` hook, or by a handler loading a tenant itself) are visible
to the final reset and their overrides are cleaned up.

Example:
    from fastapi import FastAPI
    from grove.http.middleware import TenancyMiddleware

    app = FastAPI()
    app.add_middleware(TenancyMiddleware, grove=grove, require_tenant=True)
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import Receive, Scope, Send

from grove.core import Grove
from grove.hooks import ResolutionHook

logger = logging.getLogger(__name__)


class TenancyMiddleware:
    """Middleware that identifies the tenant for incoming requests.

    Sets ``request.state.grove`` and ``request.state.tenant_resolved``. When
    ``require_tenant`` is set, requests that resolve no tenant get a 404.
    """

    def __init__(
        self,
        app: Any,
        grove: Grove,
        hook: ResolutionHook = ResolutionHook.ROUTING,
        require_tenant: bool = False,
        excluded_paths: list[str] | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application
            grove: Grove instance that performs resolution
            hook: Resolution hook to run
            require_tenant: Respond 404 when no tenant is resolved
            excluded_paths: Path prefixes that skip resolution
        """
        self.app = app
        self.grove = grove
        self.hook = hook
        self.require_tenant = require_tenant
        self.excluded_paths = excluded_paths or [
            "/health",
            "/ready",
            "/metrics",
            "/docs",
            "/openapi.json",
        ]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        request.state.grove = self.grove

        if self._is_excluded(request.url.path):
            await self.app(scope, receive, send)
            return

        try:
            resolved = await self.grove.resolve(self.hook, request)
            request.state.tenant_resolved = resolved

            if not resolved and self.require_tenant:
                logger.info(f"No tenant resolved for {request.url.path}")
                response = JSONResponse({"error": "Tenant not found"}, status_code=404)
                await response(scope, receive, send)
                return

            await self.app(scope, receive, send)

        finally:
            await self.grove.reset()

    def _is_excluded(self, path: str) -> bool:
        return any(path.startswith(excluded) for excluded in self.excluded_paths)
