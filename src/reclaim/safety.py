"""Path-safety checks shared by the scanner and the cleaner.

A path may only be classified or deleted when it lies strictly inside the
user's home directory or one of the configured temporary areas, is not a
user-protected path (or a parent of one), and is not an archived build
artifact.
"""

import os
from pathlib import Path

from reclaim.categories import EXCLUDED_BUILD_ARTIFACTS
from reclaim.config import ReclaimConfig


def resolve_path(path: str | Path) -> Path:
    """Normalize *path* and resolve symlinks in its parent directories.

    The final component is left alone so a symlink is judged by where it
    lives, not by where it points.
    """
    absolute = Path(os.path.abspath(os.path.expanduser(str(path))))
    if absolute.parent == absolute:
        return absolute
    return Path(os.path.realpath(absolute.parent)) / absolute.name


def _is_inside(path: Path, root: Path) -> bool:
    return root in path.parents


def _is_same_or_inside(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def allowed_roots(config: ReclaimConfig) -> list[Path]:
    """Roots under which cleanable items may live."""
    roots = [Path(os.path.realpath(config.home))]
    roots.extend(Path(os.path.realpath(p)) for p in config.temp_dirs)
    return roots


def is_protected(path: str | Path, config: ReclaimConfig) -> bool:
    """
    Check if a path is protected from cleanup.

    A path is protected when it is a protected path, lives inside one, or
    contains one.

    Args:
        path: Path to check
        config: Configuration holding the protection list

    Returns:
        True if the path is protected
    """
    resolved = resolve_path(path)
    for protected in config.protected_paths:
        protected_resolved = resolve_path(config.expand(protected))
        if _is_same_or_inside(resolved, protected_resolved):
            return True
        if _is_inside(protected_resolved, resolved):
            return True

    for excluded in EXCLUDED_BUILD_ARTIFACTS:
        if _is_same_or_inside(resolved, resolve_path(config.expand(excluded))):
            return True

    return False


def is_path_allowed(path: str | Path, config: ReclaimConfig) -> bool:
    """
    Check if a path may be classified as cleanable or deleted.

    Args:
        path: Path to check
        config: Configuration providing home, temp and protected paths

    Returns:
        True if the path is strictly inside an allowed root and not protected
    """
    resolved = resolve_path(path)
    if not any(_is_inside(resolved, root) for root in allowed_roots(config)):
        return False
    return not is_protected(resolved, config)
