"""Duplicate file detection for reclaim.

Files are bucketed by exact size first; only buckets with two or more members
are fingerprinted. The fingerprint covers the first megabyte of content only,
so two large files that share their first megabyte but differ later are
reported as duplicates. Full-file hashing would remove that false positive at
the cost of reading every byte of every candidate.
"""

import hashlib
import logging
import os
import stat
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

from reclaim.models import DuplicateGroup, FileInfo

log = logging.getLogger(__name__)

# Files must be strictly larger than this to be considered
MIN_FILE_SIZE = 1024

# Bytes of content covered by the fingerprint
FINGERPRINT_BYTES = 1024 * 1024


def iter_candidate_files(
    directories: Iterable[Path],
    min_size: int = MIN_FILE_SIZE,
    seen: set[tuple[int, int]] | None = None,
):
    """
    Yield FileInfo for every visible regular file under the directories.

    Hidden files and hidden directories are skipped and symlinks are not
    followed. Files are identified by (device, inode), so a file reached
    through a symlinked root, a differently cased spelling or a hard link is
    yielded only once.

    Args:
        directories: Directories to walk
        min_size: Files must be strictly larger than this
        seen: Identities already yielded; pass the same set across calls to
            keep separate walks from reporting one file twice
    """
    if seen is None:
        seen = set()

    for directory in directories:
        for dirpath, dirnames, filenames in os.walk(directory, onerror=_log_walk_error):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))

            for filename in sorted(filenames):
                if filename.startswith("."):
                    continue

                path = os.path.join(dirpath, filename)
                try:
                    st = os.lstat(path)
                except (PermissionError, OSError):
                    continue
                if not stat.S_ISREG(st.st_mode):
                    continue
                if st.st_size <= min_size:
                    continue

                identity = (st.st_dev, st.st_ino)
                if identity in seen:
                    continue
                seen.add(identity)
                yield FileInfo(
                    path=path,
                    name=filename,
                    size_bytes=st.st_size,
                    modified=datetime.fromtimestamp(st.st_mtime),
                )


def _log_walk_error(error: OSError) -> None:
    log.debug("Skipping unreadable directory: %s", error)


def fingerprint(path: str, limit: int = FINGERPRINT_BYTES) -> str | None:
    """
    MD5 of the first *limit* bytes of a file.

    Returns:
        Hex digest, or None if the file cannot be read or is empty
    """
    try:
        with open(path, "rb") as f:
            chunk = f.read(limit)
    except (PermissionError, OSError) as e:
        log.debug("Cannot read %s: %s", path, e)
        return None

    if not chunk:
        return None
    return hashlib.md5(chunk).hexdigest()


def group_by_size(files: Iterable[FileInfo]) -> dict[int, list[FileInfo]]:
    """Bucket files by size, keeping only buckets that could hold duplicates."""
    buckets: dict[int, list[FileInfo]] = defaultdict(list)
    for info in files:
        buckets[info.size_bytes].append(info)
    return {size: members for size, members in buckets.items() if len(members) > 1}


def find_duplicates(
    directories: Iterable[Path],
    progress_callback: Callable[[str], None] | None = None,
    max_workers: int = 4,
) -> list[DuplicateGroup]:
    """
    Find groups of files with identical size and content fingerprint.

    Args:
        directories: Directories to search recursively
        progress_callback: Optional callback(label) for status updates
        max_workers: Parallel fingerprinting workers

    Returns:
        Duplicate groups sorted by wasted bytes descending; members of each
        group are ordered oldest first
    """
    roots = [Path(d) for d in directories]
    files = []
    seen: set[tuple[int, int]] = set()
    for root in roots:
        if progress_callback:
            progress_callback(f"Scanning {root.name}...")
        files.extend(iter_candidate_files([root], seen=seen))

    buckets = group_by_size(files)

    if progress_callback:
        progress_callback("Comparing files...")

    to_hash = [info for members in buckets.values() for info in members]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        digests = dict(zip(to_hash, executor.map(lambda f: fingerprint(f.path), to_hash)))

    groups = []
    for size, members in buckets.items():
        by_digest: dict[str, list[FileInfo]] = defaultdict(list)
        for info in members:
            digest = digests.get(info)
            if digest is not None:
                by_digest[digest].append(info)

        for digest, same in by_digest.items():
            if len(same) < 2:
                continue
            same.sort(key=lambda f: (f.modified, f.path))
            groups.append(DuplicateGroup(fingerprint=digest, size_bytes=size, members=tuple(same)))

    groups.sort(key=lambda g: g.wasted_bytes, reverse=True)
    log.info("Found %d duplicate groups in %d candidate files", len(groups), len(files))
    return groups
