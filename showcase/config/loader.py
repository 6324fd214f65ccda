"""Load and validate showcase.yaml into a ProjectConfig.

Resolution order:
  1. Path passed explicitly by caller
  2. ./showcase.yaml in current working directory
  3. Built-in defaults (showcase/config/defaults/showcase.yaml)
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from showcase.config.schema import ProjectConfig
from showcase.exceptions import ConfigError

_DEFAULTS_DIR = Path(__file__).parent / "defaults"
CONFIG_FILENAME = "showcase.yaml"


def _find_file(name: str, explicit: Optional[Path]) -> Path:
    """Locate config file: explicit > cwd > defaults."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(f"Config file not found: {p}", path=str(p))
        return p

    cwd_path = Path.cwd() / name
    if cwd_path.exists():
        return cwd_path

    defaults_path = _DEFAULTS_DIR / name
    if defaults_path.exists():
        return defaults_path

    raise ConfigError(
        f"No {name} found. Create one in your project directory "
        f"or use load_project_config(path=...)."
    )


def load_project_config(path: Optional[Path] = None) -> ProjectConfig:
    """Load showcase.yaml → ProjectConfig.

    Relative ``project_root`` values are resolved against the directory the
    config file lives in, so a config can be used from any working directory.

    Args:
        path: Explicit path to showcase.yaml. If None, searches cwd then defaults.

    Returns:
        Validated ProjectConfig.

    Raises:
        ConfigError: File missing, not valid YAML, or fails schema validation.
    """
    resolved = _find_file(CONFIG_FILENAME, path)
    try:
        raw = yaml.safe_load(resolved.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {resolved}: {e}", path=str(resolved)) from e

    try:
        config = ProjectConfig.model_validate(raw or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid project config {resolved}: {e}", path=str(resolved)) from e

    root = Path(config.project_root)
    if not root.is_absolute():
        base = Path.cwd() if resolved.parent == _DEFAULTS_DIR else resolved.parent
        config.project_root = str((base / root).resolve())
    return config
