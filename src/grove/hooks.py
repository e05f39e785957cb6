"""Resolution hooks.

A resolution hook is a point in the request lifecycle at which tenant
identity may be resolved. Resolvers declare which hooks they support and
the application enables the hooks it wants Grove to act on.
"""

from __future__ import annotations

from enum import Enum


class ResolutionHook(str, Enum):
    """Points in the request lifecycle where resolution may occur."""

    ROUTING = "routing"  # Once per request, before the route handler
    MIDDLEWARE = "middleware"  # Explicitly from route-level middleware
