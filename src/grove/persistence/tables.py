"""SQLAlchemy ORM model for the default tenants table."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TenantTable(Base):
    """Tenants table read by the database tenant provider.

    ``identifier`` is the URL-facing slug resolvers extract from requests;
    ``resource_key`` is only read by resource-aware tenant entities.
    """

    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    identifier: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    resource_key: Mapped[str | None] = mapped_column(String(36), unique=True, nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
