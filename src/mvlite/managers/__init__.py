"""mvlite managers."""

from mvlite.managers.registry import ViewRegistry, DEFAULT_REGISTRY_TABLE
from mvlite.managers.materialized import (
    MaterializedViewManager,
    DRIFT_RECREATE,
    DRIFT_REJECT,
)

__all__ = [
    "ViewRegistry",
    "DEFAULT_REGISTRY_TABLE",
    "MaterializedViewManager",
    "DRIFT_RECREATE",
    "DRIFT_REJECT",
]
