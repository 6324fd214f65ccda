"""Component catalog: discovery sources, conflict resolution, name oracle."""

from showcase.catalog.builder import (
    ComponentCatalog,
    build_catalog,
    build_catalog_sync,
    resolve_conflicts,
    sources_from_config,
)
from showcase.catalog.categorize import categorize, is_component_name
from showcase.catalog.oracle import NameOracle

__all__ = [
    "ComponentCatalog",
    "NameOracle",
    "build_catalog",
    "build_catalog_sync",
    "categorize",
    "is_component_name",
    "resolve_conflicts",
    "sources_from_config",
]
