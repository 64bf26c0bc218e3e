"""Size measurement for reclaim."""

import logging
import os
import shutil
import subprocess
from pathlib import Path

log = logging.getLogger(__name__)


def get_directory_size_fast(path: Path, max_depth: int = 64) -> tuple[int, int, int]:
    """
    Directory size calculation using os.scandir with depth limit.

    Unreadable entries are skipped rather than failing the whole walk.

    Args:
        path: Directory to scan
        max_depth: Maximum recursion depth

    Returns:
        Tuple of (total_bytes, file_count, dir_count)
    """
    total_size = 0
    file_count = 0
    dir_count = 0

    def _scan(p: str, depth: int):
        nonlocal total_size, file_count, dir_count
        if depth > max_depth:
            return
        try:
            with os.scandir(p) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total_size += entry.stat(follow_symlinks=False).st_size
                            file_count += 1
                        elif entry.is_dir(follow_symlinks=False):
                            dir_count += 1
                            _scan(entry.path, depth + 1)
                    except (PermissionError, OSError):
                        continue
        except (PermissionError, OSError):
            pass

    _scan(str(path), 0)
    return total_size, file_count, dir_count


def get_directory_size(path: Path) -> tuple[int, int, int]:
    """
    Calculate total size of a directory by walking it.

    Returns:
        Tuple of (total_bytes, file_count, dir_count)
    """
    return get_directory_size_fast(path)


def du_size(path: Path) -> int | None:
    """
    Allocated size of a directory as reported by ``du -sk``.

    ``du`` exits non-zero when some subentries are unreadable but still
    prints a total for the rest, so its output is used regardless of the
    exit status. Runs without a timeout: a premature zero would corrupt
    category totals.

    Returns:
        Size in bytes, or None if du is unavailable or printed nothing usable
    """
    du = shutil.which("du")
    if du is None:
        return None

    try:
        result = subprocess.run(
            [du, "-sk", str(path)],
            capture_output=True,
            text=True,
        )
    except OSError as e:
        log.debug("du failed for %s: %s", path, e)
        return None

    fields = result.stdout.split()
    if not fields:
        return None
    try:
        return int(fields[0]) * 1024
    except ValueError:
        log.debug("Unexpected du output for %s: %r", path, result.stdout)
        return None


def get_size(path: Path, use_du: bool = True) -> int:
    """
    Total size in bytes of a file or directory.

    Args:
        path: Path to measure
        use_du: Prefer ``du`` for directories, falling back to a manual walk

    Returns:
        Size in bytes; 0 for paths that do not exist or cannot be read
    """
    try:
        if path.is_symlink():
            return path.lstat().st_size
        if path.is_file():
            return path.stat().st_size
        if not path.is_dir():
            return 0
    except (PermissionError, OSError):
        return 0

    if use_du:
        size = du_size(path)
        if size is not None:
            return size

    size, _, _ = get_directory_size(path)
    return size
