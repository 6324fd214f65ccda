"""Catalog builder: probe every source, then resolve name collisions.

Sources run concurrently and must all finish before resolution starts. When two
sources produce the same name, the record from the higher-priority origin
survives whole and the other is dropped:

    user_override > local_file_scan > installed_package > declarative_manifest

A failing source is logged and contributes nothing. The build itself never fails.
"""

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional

from showcase.catalog.sources import (
    CatalogSource,
    InstalledPackageSource,
    LocalFileSource,
    ManifestSource,
    OverrideSource,
)
from showcase.config.schema import ProjectConfig
from showcase.types import ORIGIN_PRIORITY, ComponentRecord

logger = logging.getLogger(__name__)


def resolve_conflicts(batches: list[list[ComponentRecord]]) -> list[ComponentRecord]:
    """Keep exactly one record per name, chosen by origin priority.

    ``batches`` is in source order; within equal priority the earlier source wins.
    """
    by_name: dict[str, list[tuple[int, int, ComponentRecord]]] = {}
    for source_index, batch in enumerate(batches):
        for record in batch:
            by_name.setdefault(record.name, []).append(
                (ORIGIN_PRIORITY[record.origin], source_index, record)
            )

    survivors = []
    for name, candidates in by_name.items():
        candidates.sort(key=lambda c: (c[0], c[1]))
        winner = candidates[0][2]
        if len(candidates) > 1:
            dropped = ", ".join(c[2].origin.value for c in candidates[1:])
            logger.debug("Component %s: kept %s, dropped %s", name, winner.origin.value, dropped)
        survivors.append(winner)
    return sorted(survivors, key=lambda r: r.name)


async def build_catalog(sources: Iterable[CatalogSource]) -> list[ComponentRecord]:
    """Probe all sources concurrently and return the de-duplicated catalog."""
    sources = list(sources)
    results = await asyncio.gather(*(s.discover() for s in sources), return_exceptions=True)

    batches: list[list[ComponentRecord]] = []
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.warning("Skipping source %s: %s", getattr(source, "label", source), result)
            batches.append([])
            continue
        batches.append(result)

    catalog = resolve_conflicts(batches)
    logger.info("Catalog built: %d components from %d sources", len(catalog), len(sources))
    return catalog


def build_catalog_sync(sources: Iterable[CatalogSource]) -> list[ComponentRecord]:
    return asyncio.run(build_catalog(sources))


def sources_from_config(config: ProjectConfig, introspection_timeout: float = 20.0) -> list[CatalogSource]:
    """Turn a ProjectConfig into the ordered list of discovery sources."""
    root = Path(config.project_root)
    sources: list[CatalogSource] = []

    for package in config.packages:
        sources.append(InstalledPackageSource(package, root, timeout=introspection_timeout))

    for entry in config.directories:
        directory = Path(entry.path)
        if not directory.is_absolute():
            directory = root / directory
        sources.append(LocalFileSource(
            directory,
            dialect=config.dialect,
            patterns=entry.patterns or None,
            import_path=entry.import_path or config.import_path or None,
            project_root=root,
        ))

    for entry in config.manifests:
        path = Path(entry.path)
        if not path.is_absolute():
            path = root / path
        sources.append(ManifestSource(
            path,
            component_prefix=config.component_prefix,
            import_path=entry.import_path or config.import_path or None,
        ))

    if config.overrides:
        sources.append(OverrideSource(config.overrides, import_path=config.import_path))

    return sources


class ComponentCatalog:
    """Immutable, built catalog. Safe to share between concurrent validations."""

    def __init__(self, records: Iterable[ComponentRecord], primary_import_path: Optional[str] = None) -> None:
        self._records: tuple[ComponentRecord, ...] = tuple(records)
        self._by_name = {r.name: r for r in self._records}
        self.primary_import_path = primary_import_path or self._most_common_import_path()

    def _most_common_import_path(self) -> str:
        counts: dict[str, int] = {}
        for r in self._records:
            if r.import_path:
                counts[r.import_path] = counts.get(r.import_path, 0) + 1
        if not counts:
            return ""
        return max(counts.items(), key=lambda kv: (kv[1], -len(kv[0])))[0]

    @classmethod
    async def from_config(cls, config: ProjectConfig, introspection_timeout: float = 20.0) -> "ComponentCatalog":
        records = await build_catalog(sources_from_config(config, introspection_timeout))
        return cls(records, primary_import_path=config.import_path or None)

    @property
    def records(self) -> tuple[ComponentRecord, ...]:
        return self._records

    def names(self) -> list[str]:
        return [r.name for r in self._records]

    def get(self, name: str) -> Optional[ComponentRecord]:
        return self._by_name.get(name)

    def import_table(self) -> dict[str, str]:
        """name -> import path lookup."""
        return {r.name: r.import_path for r in self._records}

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self):
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
