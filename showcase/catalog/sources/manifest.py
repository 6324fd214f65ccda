"""custom-elements.json (Custom Elements Manifest) source."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from showcase.catalog.categorize import categorize
from showcase.exceptions import CatalogSourceError
from showcase.types import ComponentOrigin, ComponentRecord

logger = logging.getLogger(__name__)


def _public_field(member: dict) -> bool:
    if member.get("kind") != "field":
        return False
    if member.get("privacy") in ("private", "protected") or member.get("static"):
        return False
    name = member.get("name", "")
    return bool(name) and not name.startswith(("#", "_"))


def parse_manifest(data: dict, component_prefix: str = "", import_path: Optional[str] = None) -> list[ComponentRecord]:
    """Records for every class declaration explicitly marked as a custom element."""
    records = []
    for module in data.get("modules") or []:
        module_path = module.get("path", "")
        for decl in module.get("declarations") or []:
            if decl.get("kind") != "class" or not decl.get("customElement"):
                continue
            name = decl.get("name")
            if not name:
                continue
            props = [m["name"] for m in decl.get("members") or [] if _public_field(m)]
            slots = ["default" if not s.get("name") else s["name"] for s in decl.get("slots") or []]
            records.append(ComponentRecord(
                name=f"{component_prefix}{name}",
                category=categorize(name),
                props=props,
                slots=slots,
                description=decl.get("description") or decl.get("summary") or "",
                import_path=import_path or module_path,
                origin=ComponentOrigin.DECLARATIVE_MANIFEST,
                tag_name=decl.get("tagName"),
            ))
    return records


class ManifestSource:
    """Reads a custom-elements.json file from disk."""

    origin = ComponentOrigin.DECLARATIVE_MANIFEST

    def __init__(self, path: Path, component_prefix: str = "", import_path: Optional[str] = None) -> None:
        self.path = Path(path)
        self.component_prefix = component_prefix
        self.import_path = import_path
        self.label = f"manifest:{self.path}"

    async def discover(self) -> list[ComponentRecord]:
        return await asyncio.to_thread(self._load)

    def _load(self) -> list[ComponentRecord]:
        try:
            data = json.loads(self.path.read_text())
        except OSError as e:
            raise CatalogSourceError(f"Cannot read manifest {self.path}: {e}", source=self.label) from e
        except json.JSONDecodeError as e:
            raise CatalogSourceError(f"Malformed manifest JSON {self.path}: {e}", source=self.label) from e
        if not isinstance(data, dict):
            raise CatalogSourceError(f"Manifest {self.path} is not a JSON object", source=self.label)

        records = parse_manifest(data, self.component_prefix, self.import_path)
        logger.info("Manifest %s: %d custom elements", self.path, len(records))
        return records
