"""Persistence layer for Grove.

This module provides:
- Async engine and session factory used by the database tenant provider
- The default ``tenants`` table definition
"""

from grove.persistence.db import close_db, get_engine, get_session_factory, init_db
from grove.persistence.tables import Base, TenantTable

__all__ = [
    # DB
    "get_engine",
    "get_session_factory",
    "init_db",
    "close_db",
    # Tables
    "Base",
    "TenantTable",
]
