"""Resolve dotted-path references from configuration."""

from __future__ import annotations

import importlib
from typing import Any

from grove.exceptions import MisconfigurationError


def import_string(path: str) -> Any:
    """Import an attribute from a ``package.module.Attribute`` path.

    Raises:
        MisconfigurationError: If the module or attribute does not exist
    """
    module_path, _, attribute = path.rpartition(".")
    if not module_path:
        raise MisconfigurationError(f"'{path}' is not a dotted path")

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise MisconfigurationError(f"Unable to import '{module_path}': {e}") from e

    try:
        return getattr(module, attribute)
    except AttributeError as e:
        raise MisconfigurationError(f"Module '{module_path}' has no attribute '{attribute}'") from e


def resolve_reference(reference: Any) -> Any:
    """Return the referenced object, importing it if given a dotted path."""
    if isinstance(reference, str):
        return import_string(reference)
    return reference
