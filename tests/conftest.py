"""Global pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest
from support import make_settings

from grove.config import Settings
from grove.core import Grove


@pytest.fixture(autouse=True)
def configure_logging() -> Iterator[MagicMock]:
    """Keep the lifespan from replacing pytest's root log handlers."""
    with patch("grove.core.configure_logging") as mock:
        yield mock


@pytest.fixture
def settings() -> Settings:
    """Settings with a static tenant provider and a subdomain resolver."""
    return make_settings()


@pytest.fixture
def grove(settings: Settings) -> Grove:
    return Grove(settings)
