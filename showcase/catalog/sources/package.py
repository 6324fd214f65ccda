"""Installed-package introspection.

Package exports are enumerated through a capability-provider interface with
three implementations, tried in the order chosen by ``select_provider``:

  NodeIntrospectionProvider: loads the package in a sandboxed ``node``
    subprocess and reports the shape of every export
  PackageStructureProvider: reads package.json / .d.ts files on disk without
    executing anything
  StaticTableProvider: curated tables for well-known design systems

The factory probes the environment once (is the package on disk? is node on
PATH?) so nothing downstream branches on capability.
"""

import asyncio
import json
import logging
import os
import re
import shutil
from asyncio.subprocess import PIPE
from pathlib import Path
from typing import NamedTuple, Optional, Protocol, runtime_checkable

from showcase.catalog.categorize import categorize, is_component_name
from showcase.catalog.sources.known_packages import KNOWN_PACKAGES
from showcase.exceptions import IntrospectionError
from showcase.types import ComponentOrigin, ComponentRecord

logger = logging.getLogger(__name__)


class ExportInfo(NamedTuple):
    name: str
    kind: str  # function | class | object-component | object | other | declared | known
    import_path: str = ""
    description: str = ""
    category: str = ""
    props: tuple[str, ...] = ()


# Exports that are PascalCase-adjacent but never components.
UTILITY_EXPORT_PATTERNS: list[re.Pattern] = [re.compile(p) for p in (
    r"^use[A-Z]", r"^create[A-Z]", r"^get[A-Z]", r"^set[A-Z]", r"^handle[A-Z]",
    r"^on[A-Z]", r"Config$", r"Provider$", r"Context$", r"^default$",
    r"^DEFAULT_", r"^SUPPORTED_", r"^Key$", r"^DATA_", r"String$",
    r"To(Hex|Rgb|Hsl|Hsb)$", r"_SECRET_", r"Value$",
)]

_COMPONENT_KINDS = frozenset({"function", "class", "object-component", "declared", "known"})


def is_component_export(name: str, kind: str) -> bool:
    """Capability heuristic: conventional component name + callable-ish shape."""
    if any(p.search(name) for p in UTILITY_EXPORT_PATTERNS):
        return False
    if not is_component_name(name):
        return False
    return kind in _COMPONENT_KINDS


@runtime_checkable
class ExportProvider(Protocol):
    """Enumerates a package's exports. Returns None when it has no data."""

    async def list_exports(self, package: str) -> Optional[list[ExportInfo]]:
        ...


# ── Live introspection ─────────────────────────────────────────────────────────

_NODE_SCRIPT = r"""
const pkg = process.argv[process.argv.length - 1];
function shape(value) {
  const t = typeof value;
  if (t === 'function') {
    return /^class[\s{]/.test(Function.prototype.toString.call(value)) ? 'class' : 'function';
  }
  if (value && t === 'object') {
    return (value.$$typeof || value.render || value.component || value.Component)
      ? 'object-component' : 'object';
  }
  return 'other';
}
(async () => {
  let mod;
  try {
    mod = require(pkg);
  } catch (err) {
    mod = await import(pkg);
  }
  const out = {};
  for (const name of Object.keys(mod)) {
    try { out[name] = shape(mod[name]); } catch (e) { out[name] = 'other'; }
  }
  process.stdout.write(JSON.stringify(out));
})().catch((err) => {
  process.stderr.write(String((err && err.message) || err));
  process.exit(2);
});
"""


class NodeIntrospectionProvider:
    """Loads the package with node inside the project root and reports export shapes.

    The subprocess gets a minimal environment with outbound network disabled
    and is killed after ``timeout`` seconds.
    """

    def __init__(self, project_root: Path, timeout: float = 20.0, node_binary: str = "node") -> None:
        self._root = Path(project_root)
        self._timeout = timeout
        self._node = node_binary

    def _env(self) -> dict[str, str]:
        proxy = "http://127.0.0.1:0"
        return {
            "PATH": os.environ.get("PATH", "/usr/bin:/usr/local/bin"),
            "HOME": "/tmp",
            "NODE_ENV": "production",
            "NODE_PATH": str(self._root / "node_modules"),
            "http_proxy": proxy,
            "https_proxy": proxy,
            "HTTP_PROXY": proxy,
            "HTTPS_PROXY": proxy,
        }

    async def list_exports(self, package: str) -> Optional[list[ExportInfo]]:
        try:
            proc = await asyncio.create_subprocess_exec(
                self._node, "-e", _NODE_SCRIPT, package,
                cwd=str(self._root), env=self._env(),
                stdout=PIPE, stderr=PIPE,
            )
        except OSError as e:
            raise IntrospectionError(f"Could not start node: {e}", package=package) from e

        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            raise IntrospectionError(
                f"Loading {package} timed out after {self._timeout}s", package=package,
            )

        if proc.returncode != 0:
            raise IntrospectionError(
                f"node could not load {package}: {err.decode(errors='replace').strip()[:300]}",
                package=package,
            )

        try:
            shapes = json.loads(out.decode(errors="replace") or "{}")
        except json.JSONDecodeError as e:
            raise IntrospectionError(f"Unreadable export map for {package}: {e}", package=package) from e

        return [ExportInfo(name, str(kind), package) for name, kind in shapes.items()]


# ── Static on-disk analysis ────────────────────────────────────────────────────

_DTS_DECLARED = re.compile(r"export\s+declare\s+(?:const|function|class)\s+([A-Z][A-Za-z0-9]*)")
_DTS_LIST = re.compile(r"export\s*(?:type\s*)?\{([^}]+)\}")
_DTS_DEFAULT = re.compile(r"export\s+default\s+([A-Z][A-Za-z0-9]*)")
_SUBDIR_ROOTS = ("", "es", "lib", "dist", "esm", "cjs")


def _pascalize(segment: str) -> str:
    if re.match(r"^[A-Z][A-Za-z0-9]*$", segment):
        return segment
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]", segment) if part)


def parse_dts_exports(text: str) -> list[str]:
    """Component-looking names exported by a TypeScript declaration file."""
    names = _DTS_DECLARED.findall(text)
    for block in _DTS_LIST.findall(text):
        for item in block.split(","):
            item = item.strip()
            if not item or item.startswith("type "):
                continue
            local = item.split(" as ")[-1].strip()
            names.append(local)
    names.extend(_DTS_DEFAULT.findall(text))
    return [n for n in dict.fromkeys(names) if n[:1].isupper()]


class PackageStructureProvider:
    """Reads node_modules/<package> without executing it.

    Tries package.json ``exports`` sub-paths, then the package's type
    declarations, then subdirectories that ship their own index.d.ts.
    """

    def __init__(self, project_root: Path) -> None:
        self._root = Path(project_root)

    async def list_exports(self, package: str) -> Optional[list[ExportInfo]]:
        return await asyncio.to_thread(self._analyze, package)

    def _analyze(self, package: str) -> Optional[list[ExportInfo]]:
        pkg_dir = self._root / "node_modules" / package
        manifest_path = pkg_dir / "package.json"
        if not manifest_path.exists():
            return None
        try:
            manifest = json.loads(manifest_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.debug("Unreadable package.json for %s: %s", package, e)
            manifest = {}

        found = self._from_exports_map(package, manifest)
        if found:
            return found
        found = self._from_type_declarations(package, pkg_dir, manifest)
        if found:
            return found
        return self._from_subdirectories(package, pkg_dir) or None

    def _from_exports_map(self, package: str, manifest: dict) -> list[ExportInfo]:
        exports = manifest.get("exports")
        if not isinstance(exports, dict):
            return []
        out = []
        for key in exports:
            if not key.startswith("./") or "*" in key:
                continue
            last = key.rstrip("/").split("/")[-1]
            last = re.sub(r"\.(m?js|cjs|tsx?)$", "", last)
            if last[:1].isupper():
                out.append(ExportInfo(last, "declared", package))
        return out

    def _from_type_declarations(self, package: str, pkg_dir: Path, manifest: dict) -> list[ExportInfo]:
        candidates = [manifest.get("types"), manifest.get("typings"), "index.d.ts", "dist/index.d.ts"]
        for rel in candidates:
            if not rel:
                continue
            dts = pkg_dir / rel
            if dts.is_file():
                try:
                    names = parse_dts_exports(dts.read_text(errors="replace"))
                except OSError as e:
                    logger.debug("Could not read %s: %s", dts, e)
                    continue
                if names:
                    return [ExportInfo(n, "declared", package) for n in names]
        return []

    def _from_subdirectories(self, package: str, pkg_dir: Path) -> list[ExportInfo]:
        out: list[ExportInfo] = []
        seen: set[str] = set()
        for base in _SUBDIR_ROOTS:
            root = pkg_dir / base if base else pkg_dir
            if not root.is_dir():
                continue
            for child in sorted(root.iterdir()):
                if not child.is_dir() or child.name.startswith((".", "_")) or child.name == "node_modules":
                    continue
                if not (child / "index.d.ts").exists():
                    continue
                name = _pascalize(child.name)
                if name in seen:
                    continue
                seen.add(name)
                sub = f"{base}/{child.name}" if base else child.name
                out.append(ExportInfo(name, "declared", f"{package}/{sub}"))
        return out


# ── Curated tables ─────────────────────────────────────────────────────────────

class StaticTableProvider:
    """Curated component lists keyed by package identity."""

    async def list_exports(self, package: str) -> Optional[list[ExportInfo]]:
        factory = KNOWN_PACKAGES.get(package)
        if factory is None:
            return None
        return [
            ExportInfo(c.name, "known", package, c.description, c.category, c.props)
            for c in factory()
        ]


class FallbackProvider:
    """Tries each provider in order; first non-empty answer wins."""

    def __init__(self, providers: list[ExportProvider]) -> None:
        self.providers = providers

    async def list_exports(self, package: str) -> Optional[list[ExportInfo]]:
        for provider in self.providers:
            try:
                exports = await provider.list_exports(package)
            except IntrospectionError as e:
                logger.info("%s unavailable for %s: %s", type(provider).__name__, package, e)
                continue
            if exports:
                logger.debug("%s listed %d exports for %s", type(provider).__name__, len(exports), package)
                return exports
        return None


def select_provider(package: str, project_root: Path, timeout: float = 20.0) -> FallbackProvider:
    """Build the provider chain the current environment supports."""
    root = Path(project_root)
    on_disk = (root / "node_modules" / package / "package.json").exists()
    node = shutil.which("node")

    providers: list[ExportProvider] = []
    if on_disk and node:
        providers.append(NodeIntrospectionProvider(root, timeout=timeout, node_binary=node))
    if on_disk:
        providers.append(PackageStructureProvider(root))
    providers.append(StaticTableProvider())
    return FallbackProvider(providers)


class InstalledPackageSource:
    """Catalog source for one installed package specifier."""

    origin = ComponentOrigin.INSTALLED_PACKAGE

    def __init__(
        self,
        package: str,
        project_root: Path,
        provider: Optional[ExportProvider] = None,
        timeout: float = 20.0,
    ) -> None:
        self.package = package
        self.label = f"package:{package}"
        self._root = Path(project_root)
        self._provider = provider
        self._timeout = timeout

    async def discover(self) -> list[ComponentRecord]:
        provider = self._provider or select_provider(self.package, self._root, self._timeout)
        exports = await provider.list_exports(self.package)
        if not exports:
            logger.debug("No export data for %s; contributing nothing", self.package)
            return []

        records: dict[str, ComponentRecord] = {}
        for export in exports:
            if export.name in records or not is_component_export(export.name, export.kind):
                continue
            records[export.name] = ComponentRecord(
                name=export.name,
                category=export.category or categorize(export.name),
                props=list(export.props),
                description=export.description or f"{export.name} component from {self.package}",
                import_path=export.import_path or self.package,
                origin=self.origin,
            )
        logger.info("Package %s: %d components", self.package, len(records))
        return list(records.values())
