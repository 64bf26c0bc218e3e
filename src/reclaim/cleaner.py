"""Recoverable, concurrent deletion with safety checks for reclaim."""

import logging
import os
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable

from send2trash import send2trash

from reclaim.config import ReclaimConfig
from reclaim.models import CleanableItem, CleanupResult, DeleteOutcome
from reclaim.privileges import ElevatedExecutor, trash_elevated
from reclaim.safety import is_path_allowed, resolve_path

log = logging.getLogger(__name__)


def delete_path(
    path: str,
    config: ReclaimConfig,
    elevated: ElevatedExecutor | None = None,
    dry_run: bool = False,
) -> DeleteOutcome:
    """
    Move a path to the trash after re-checking that it may be touched.

    Args:
        path: Path to delete
        config: Configuration providing the allowed roots and protections
        elevated: Optional executor tried once on a permission error
        dry_run: If True, run every check but move nothing

    Returns:
        What happened to the path
    """
    if not is_path_allowed(path, config):
        log.warning("Refusing to delete %s: outside allowed roots or protected", path)
        return DeleteOutcome.SKIPPED_UNSAFE

    if not os.path.lexists(path):
        log.debug("%s no longer exists", path)
        return DeleteOutcome.SKIPPED_MISSING

    if dry_run:
        return DeleteOutcome.REMOVED

    try:
        send2trash(path)
        return DeleteOutcome.REMOVED
    except FileNotFoundError:
        return DeleteOutcome.SKIPPED_MISSING
    except PermissionError as e:
        log.info("Permission denied for %s: %s", path, e)
        if trash_elevated(elevated, path):
            return DeleteOutcome.REMOVED
        return DeleteOutcome.FAILED
    except OSError as e:
        log.warning("Could not move %s to the trash: %s", path, e)
        return DeleteOutcome.FAILED


def delete_file(
    path: str,
    config: ReclaimConfig,
    elevated: ElevatedExecutor | None = None,
) -> bool:
    """Move a single item to the trash. Returns True if it was removed."""
    try:
        return delete_path(path, config, elevated) == DeleteOutcome.REMOVED
    except Exception:
        log.exception("Unexpected error deleting %s", path)
        return False


def clean_items(
    items: Iterable[CleanableItem],
    config: ReclaimConfig,
    progress_callback: Callable[[float, str], None] | None = None,
    elevated: ElevatedExecutor | None = None,
    dry_run: bool = False,
) -> CleanupResult:
    """
    Delete items on a bounded worker pool.

    Each unique path is deleted at most once, even when it was listed by more
    than one category. Items that are unsafe, already gone or fail to move
    are skipped and left out of the totals.

    Args:
        items: Items to delete
        config: Engine configuration (worker count, progress throttle, roots)
        progress_callback: Optional callback(fraction, path), called every
            ``config.progress_every`` items and always for the last one, with
            non-decreasing fractions; it must not call back into clean_items
        elevated: Optional executor for permission-denied items
        dry_run: If True, report what would be removed without moving anything

    Returns:
        CleanupResult with bytes freed and items actually removed
    """
    items = list(items)
    total = len(items)
    if total == 0:
        return CleanupResult(dry_run=dry_run)

    lock = threading.Lock()
    processed: set[str] = set()
    outcomes: Counter = Counter()
    completed = 0
    bytes_freed = 0
    removed = 0

    def _clean_one(item: CleanableItem) -> None:
        nonlocal completed, bytes_freed, removed

        key = str(resolve_path(item.path))
        with lock:
            duplicate = key in processed
            processed.add(key)

        if duplicate:
            outcome = DeleteOutcome.DUPLICATE
        else:
            try:
                outcome = delete_path(item.path, config, elevated, dry_run)
            except Exception:
                log.exception("Unexpected error deleting %s", item.path)
                outcome = DeleteOutcome.FAILED

        with lock:
            completed += 1
            count = completed
            outcomes[outcome] += 1
            if outcome == DeleteOutcome.REMOVED:
                bytes_freed += item.size_bytes
                removed += 1

            # Reported under the lock so fractions arrive in increasing order
            if progress_callback and (count % config.progress_every == 0 or count == total):
                progress_callback(count / total, item.path)

    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        list(executor.map(_clean_one, items))

    log.info(
        "Cleaned %d of %d items (%s)",
        removed,
        total,
        ", ".join(f"{o.value}={n}" for o, n in sorted(outcomes.items())),
    )
    return CleanupResult(
        bytes_freed=bytes_freed,
        items_removed=removed,
        items_requested=total,
        dry_run=dry_run,
    )
