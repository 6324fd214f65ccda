"""Application settings + declarative YAML project config.

All env vars defined here with SHOWCASE_ prefix.
YAML loader: load_project_config()
"""

from typing import Optional

from pydantic_settings import BaseSettings

from showcase.config.loader import load_project_config
from showcase.config.schema import DirectoryEntry, ManifestEntry, OverrideEntry, ProjectConfig


class ShowcaseSettings(BaseSettings):
    # ── App ──
    log_level: str = "INFO"
    project_config: Optional[str] = None     # explicit showcase.yaml path

    # ── Preview server ──
    preview_url: Optional[str] = None        # wins over everything below
    preview_port: Optional[int] = None
    proxy_enabled: bool = False              # hosted mode: preview behind local proxy
    proxy_port: int = 6006

    # ── Runtime verification ──
    runtime_validation: Optional[bool] = None  # None = on only in proxy mode
    propagation_delay_seconds: float = 3.0     # wait for HMR to pick up the file
    request_timeout_seconds: float = 5.0
    retry_attempts: int = 3
    retry_delay_seconds: float = 1.0
    retry_backoff: float = 1.0                 # 1.0 = fixed delay
    story_prefix: str = "Generated/"

    # ── Static validation ──
    max_repair_passes: int = 3
    strict_import_paths: bool = False

    # ── Discovery ──
    introspection_timeout_seconds: float = 20.0

    model_config = {"env_prefix": "SHOWCASE_", "env_file": ".env", "extra": "ignore"}


settings = ShowcaseSettings()


__all__ = [
    "ShowcaseSettings",
    "settings",
    "load_project_config",
    "ProjectConfig",
    "DirectoryEntry",
    "ManifestEntry",
    "OverrideEntry",
]
