"""Configuration and path protections for reclaim."""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from reclaim.categories import (
    CATEGORIES,
    DEFAULT_APPLICATION_DIRS,
    DEFAULT_DUPLICATE_DIRS,
)
from reclaim.models import CleanCategory

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RECLAIM_CONFIG"


def default_config_file() -> Path:
    """Location of the JSON config file."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(os.path.expanduser(override))
    return Path.home() / ".reclaim" / "config.json"


def expand_path(path: str, home: Path | None = None) -> Path:
    """Expand ~ (against *home* when given) and environment variables in path."""
    path = os.path.expandvars(path)
    if home is not None and (path == "~" or path.startswith("~/")):
        return Path(home) / path[2:]
    return Path(os.path.expanduser(path))


class ReclaimConfig(BaseModel):
    """Engine settings. Every root is injectable so scans can run against any tree."""

    home: Path = Field(default_factory=Path.home, description="User home directory")
    temp_dirs: list[Path] = Field(
        default_factory=lambda: [Path(tempfile.gettempdir())],
        description="Temporary areas that are scanned and may be cleaned",
    )
    application_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_APPLICATION_DIRS),
        description="Directories holding installed .app bundles",
    )
    duplicate_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DUPLICATE_DIRS),
        description="Directories searched for duplicates by default",
    )
    protected_paths: list[str] = Field(
        default_factory=list,
        description="Paths never classified or deleted",
    )
    thresholds: dict[CleanCategory, int] = Field(
        default_factory=dict,
        description="Per-category minimum size overrides in bytes",
    )
    max_workers: int = Field(4, ge=1, description="Parallel deletion workers")
    scan_workers: int = Field(4, ge=1, description="Parallel category scanners")
    progress_every: int = Field(5, ge=1, description="Report clean progress every N items")
    use_du: bool = Field(True, description="Measure directories with du when available")
    registry_timeout: float = Field(
        10.0, gt=0, description="Seconds to wait for the installed-app registry"
    )

    def expand(self, path: str) -> Path:
        """Expand a ~-relative path against the configured home."""
        return expand_path(path, self.home)

    def min_size_for(self, category: CleanCategory) -> int:
        """Threshold for a category; items must be strictly larger."""
        if category in self.thresholds:
            return self.thresholds[category]
        return CATEGORIES[category].min_size_bytes

    def application_roots(self) -> list[Path]:
        return [self.expand(p) for p in self.application_dirs]

    def duplicate_roots(self) -> list[Path]:
        return [self.expand(p) for p in self.duplicate_dirs]


def load_config(path: Path | None = None) -> ReclaimConfig:
    """Load configuration from disk, falling back to defaults."""
    config_file = path or default_config_file()
    if not config_file.exists():
        return ReclaimConfig()

    try:
        with open(config_file) as f:
            return ReclaimConfig.model_validate(json.load(f))
    except (json.JSONDecodeError, ValidationError, OSError) as e:
        log.warning("Ignoring unreadable config %s: %s", config_file, e)
        return ReclaimConfig()


def save_config(config: ReclaimConfig, path: Path | None = None) -> bool:
    """Save configuration to disk."""
    config_file = path or default_config_file()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w") as f:
            f.write(config.model_dump_json(indent=2))
        return True
    except OSError as e:
        log.error("Could not save config %s: %s", config_file, e)
        return False


def add_protection(config: ReclaimConfig, path: str) -> dict:
    """
    Add a path to the protection list.

    Args:
        config: Configuration to update in place
        path: Path to protect (can contain ~)

    Returns:
        Dict with success status and current protections
    """
    expanded = str(config.expand(path))
    if not Path(expanded).exists():
        return {"success": False, "error": f"Path does not exist: {path}"}

    if expanded not in config.protected_paths:
        config.protected_paths.append(expanded)

    return {"success": True, "protected_paths": list(config.protected_paths)}


def remove_protection(config: ReclaimConfig, path: str) -> dict:
    """Remove a path from the protection list."""
    expanded = str(config.expand(path))
    if expanded not in config.protected_paths:
        return {"success": False, "error": f"Path is not protected: {path}"}

    config.protected_paths.remove(expanded)
    return {"success": True, "protected_paths": list(config.protected_paths)}
