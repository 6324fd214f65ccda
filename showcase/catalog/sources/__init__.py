"""Discovery sources for the component catalog."""

from showcase.catalog.sources.base import CatalogSource
from showcase.catalog.sources.local import LocalFileSource
from showcase.catalog.sources.manifest import ManifestSource
from showcase.catalog.sources.overrides import OverrideSource
from showcase.catalog.sources.package import InstalledPackageSource, select_provider

__all__ = [
    "CatalogSource",
    "InstalledPackageSource",
    "LocalFileSource",
    "ManifestSource",
    "OverrideSource",
    "select_provider",
]
