"""Pydantic models for showcase.yaml validation.

These accept loose YAML input (bare strings for directories, mixed-case
category names) and coerce it to the shapes the catalog sources expect.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from showcase.types import ComponentCategory, Dialect


class DirectoryEntry(BaseModel):
    """A local directory to scan for component source files."""

    path: str
    patterns: list[str] = Field(default_factory=list)  # empty = dialect defaults
    import_path: Optional[str] = None


class ManifestEntry(BaseModel):
    """A custom-elements.json manifest."""

    path: str
    import_path: Optional[str] = None


class OverrideEntry(BaseModel):
    """A component described by hand in showcase.yaml."""

    name: str
    props: list[str] = Field(default_factory=list)
    slots: list[str] = Field(default_factory=list)
    category: Optional[ComponentCategory] = None
    description: str = ""
    import_path: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v):
        if isinstance(v, str):
            return ComponentCategory(v.lower())
        return v


class ProjectConfig(BaseModel):
    """Root schema for showcase.yaml."""

    import_path: str = ""
    dialect: Dialect = Dialect.REACT
    component_prefix: str = ""
    packages: list[str] = Field(default_factory=list)
    directories: list[DirectoryEntry] = Field(default_factory=list)
    manifests: list[ManifestEntry] = Field(default_factory=list)
    overrides: list[OverrideEntry] = Field(default_factory=list)
    deprecated: dict[str, str] = Field(default_factory=dict)  # name -> replacement
    project_root: str = "."

    @field_validator("dialect", mode="before")
    @classmethod
    def coerce_dialect(cls, v):
        if isinstance(v, str):
            return Dialect(v.lower())
        return v

    @field_validator("directories", mode="before")
    @classmethod
    def coerce_directories(cls, v):
        if v is None:
            return []
        return [{"path": item} if isinstance(item, str) else item for item in v]

    @field_validator("manifests", mode="before")
    @classmethod
    def coerce_manifests(cls, v):
        if v is None:
            return []
        return [{"path": item} if isinstance(item, str) else item for item in v]

    @field_validator("import_path", mode="before")
    @classmethod
    def strip_import_path(cls, v):
        if v is None:
            return ""
        return str(v).strip().rstrip("/")
