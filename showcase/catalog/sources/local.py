"""Local component source tree scan."""

import asyncio
import fnmatch
import logging
import os
from pathlib import Path
from typing import Optional

from showcase.catalog.categorize import categorize
from showcase.catalog.sources.extractors import (
    USAGE_EXAMPLE_SUFFIXES,
    extract_export_names,
    extract_props,
    extract_slots,
    find_usage_example,
    mine_usage_example,
)
from showcase.catalog.sources.package import is_component_export
from showcase.exceptions import CatalogSourceError
from showcase.types import ComponentOrigin, ComponentRecord, Dialect

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS: dict[Dialect, list[str]] = {
    Dialect.REACT: ["*.tsx", "*.jsx", "*.ts", "*.js"],
    Dialect.VUE: ["*.vue"],
    Dialect.SVELTE: ["*.svelte"],
    Dialect.ANGULAR: ["*.component.ts"],
    Dialect.WEB_COMPONENTS: ["*.ts", "*.js"],
}

SKIPPED_DIRECTORIES = frozenset({"node_modules"})

# Files that never define a component: tests, type declarations, stories, config, mocks.
NON_COMPONENT_MARKERS = (
    ".test.", ".spec.", ".stories.", ".story.", ".config.", ".mock.",
) + tuple(f"{suffix}." for suffix in USAGE_EXAMPLE_SUFFIXES)


def is_non_component_file(filename: str) -> bool:
    if filename.endswith(".d.ts"):
        return True
    return any(marker in filename for marker in NON_COMPONENT_MARKERS)


class LocalFileSource:
    """Walks a directory and turns exported components into ComponentRecords.

    Hidden directories and node_modules are pruned. Each retained component
    gets props from every prop strategy plus whatever a co-located usage
    example file reveals.
    """

    origin = ComponentOrigin.LOCAL_FILE_SCAN

    def __init__(
        self,
        directory: Path,
        dialect: Dialect = Dialect.REACT,
        patterns: Optional[list[str]] = None,
        import_path: Optional[str] = None,
        project_root: Optional[Path] = None,
    ) -> None:
        self.directory = Path(directory)
        self.dialect = dialect
        self.patterns = patterns or DEFAULT_PATTERNS[dialect]
        self.import_path = import_path
        self.project_root = Path(project_root) if project_root else self.directory.parent
        self.label = f"directory:{self.directory}"

    async def discover(self) -> list[ComponentRecord]:
        return await asyncio.to_thread(self.scan)

    def iter_files(self):
        """Yield candidate component files in deterministic order."""
        if not self.directory.is_dir():
            raise CatalogSourceError(f"Not a directory: {self.directory}", source=self.label)
        for dirpath, dirnames, filenames in os.walk(self.directory):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in SKIPPED_DIRECTORIES
            )
            for filename in sorted(filenames):
                if is_non_component_file(filename):
                    continue
                if any(fnmatch.fnmatch(filename, p) for p in self.patterns):
                    yield Path(dirpath) / filename

    def scan(self) -> list[ComponentRecord]:
        records: dict[str, ComponentRecord] = {}
        for path in self.iter_files():
            try:
                text = path.read_text(errors="replace")
            except OSError as e:
                logger.debug("Skipping unreadable file %s: %s", path, e)
                continue

            for name in extract_export_names(text, path):
                if not is_component_export(name, "declared"):
                    continue
                record = self._build_record(name, text, path)
                existing = records.get(name)
                # barrel files re-export names without their props
                if existing is None or (not existing.props and record.props):
                    records[name] = record

        logger.info("Directory %s: %d components", self.directory, len(records))
        return list(records.values())

    def _build_record(self, name: str, text: str, path: Path) -> ComponentRecord:
        props = extract_props(text, name)
        prop_types: dict[str, str] = {}

        example = find_usage_example(path, name)
        if example is not None:
            try:
                mined = mine_usage_example(example.read_text(errors="replace"), name)
            except OSError as e:
                logger.debug("Could not read usage example %s: %s", example, e)
                mined = {}
            for prop, inferred in mined.items():
                if prop not in props:
                    props.append(prop)
                prop_types[prop] = inferred

        return ComponentRecord(
            name=name,
            category=categorize(name),
            props=props,
            slots=extract_slots(text),
            description=f"{name} component",
            import_path=self.import_path or self._relative_import(path),
            origin=self.origin,
            prop_types=prop_types,
            source_file=str(path),
        )

    def _relative_import(self, path: Path) -> str:
        try:
            rel = path.relative_to(self.project_root)
        except ValueError:
            rel = path
        rel = rel.with_suffix("")
        if rel.name == "index":
            rel = rel.parent
        return rel.as_posix()
