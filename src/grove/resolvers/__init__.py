"""Identity resolvers.

Each resolver extracts a raw tenant identifier from an inbound request:
- SubdomainIdentityResolver: acme.example.com -> "acme"
- HeaderIdentityResolver: Tenants-Identifier: acme -> "acme"
- PathIdentityResolver: /acme/orders -> "acme"
- CookieIdentityResolver: Tenants-Identifier=acme -> "acme"
"""

from grove.resolvers.base import IdentityResolver
from grove.resolvers.cookie import CookieIdentityResolver
from grove.resolvers.header import HeaderIdentityResolver
from grove.resolvers.path import PathIdentityResolver
from grove.resolvers.subdomain import SubdomainIdentityResolver

__all__ = [
    "IdentityResolver",
    "SubdomainIdentityResolver",
    "HeaderIdentityResolver",
    "PathIdentityResolver",
    "CookieIdentityResolver",
]
