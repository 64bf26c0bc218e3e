"""Categorized scanning for reclaim."""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable

from reclaim.categories import (
    APP_SUPPORT_ROOT,
    ARCHIVE_EXTENSIONS,
    BROWSER_CACHE_NAMES,
    BROWSER_CACHE_PREFIXES,
    CATEGORIES,
    EXCLUDED_CACHE_DIRECTORIES,
    INSTALLER_EXTENSIONS,
    PREFERENCES_MIN_SIZE,
    PREFERENCES_ROOT,
    VENDOR_PREFIXES,
)
from reclaim.config import ReclaimConfig
from reclaim.models import CategorySummary, CleanableItem, CleanCategory, InstalledApp
from reclaim.orphans import OrphanDetector, humanize_bundle_id
from reclaim.safety import is_path_allowed, resolve_path
from reclaim.sizing import get_size

log = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60


def list_entries(root: Path) -> list[Path]:
    """Entries directly inside *root*, sorted; empty if it cannot be read."""
    try:
        return sorted(root.iterdir())
    except (PermissionError, OSError) as e:
        log.debug("Skipping unreadable directory %s: %s", root, e)
        return []


def measure_item(
    path: Path,
    name: str,
    category: CleanCategory,
    config: ReclaimConfig,
    min_size: int | None = None,
) -> CleanableItem | None:
    """
    Measure a candidate and build an item if it passes safety and size checks.

    Args:
        path: Candidate path
        name: Display name
        category: Category to assign
        config: Engine configuration
        min_size: Threshold override; defaults to the category threshold

    Returns:
        CleanableItem, or None if the path is unsafe, missing or too small
    """
    if not is_path_allowed(path, config):
        log.debug("Not classifying %s: outside allowed roots or protected", path)
        return None

    threshold = config.min_size_for(category) if min_size is None else min_size
    size = get_size(path, use_du=config.use_du)
    if size <= threshold:
        return None

    return CleanableItem(
        path=str(path),
        display_name=name,
        size_bytes=size,
        category=category,
    )


def _modified_before(path: Path, cutoff: float) -> bool:
    try:
        return path.lstat().st_mtime < cutoff
    except (PermissionError, OSError):
        return False


def scan_known_locations(category: CleanCategory, config: ReclaimConfig) -> list[CleanableItem]:
    """Measure each fixed location of a category."""
    items = []
    for location in CATEGORIES[category].locations:
        path = config.expand(location.path)
        if not os.path.lexists(path):
            continue
        item = measure_item(path, location.name, category, config)
        if item:
            items.append(item)
    return items


def is_app_cache_candidate(name: str) -> bool:
    """Whether an entry of ~/Library/Caches belongs to the app-cache category."""
    if name.startswith("."):
        return False
    if name in EXCLUDED_CACHE_DIRECTORIES:
        return False
    if name.startswith(VENDOR_PREFIXES):
        return False
    if name in BROWSER_CACHE_NAMES or name.startswith(BROWSER_CACHE_PREFIXES):
        return False
    return True


def scan_app_cache(config: ReclaimConfig) -> list[CleanableItem]:
    items = []
    for root in CATEGORIES[CleanCategory.APP_CACHE].search_roots:
        for entry in list_entries(config.expand(root)):
            if not is_app_cache_candidate(entry.name):
                continue
            name = f"{humanize_bundle_id(entry.name)} Cache"
            item = measure_item(entry, name, CleanCategory.APP_CACHE, config)
            if item:
                items.append(item)
    return items


def scan_logs(config: ReclaimConfig, now: float | None = None) -> list[CleanableItem]:
    category = CATEGORIES[CleanCategory.LOGS]
    cutoff = (now or time.time()) - category.max_age_days * DAY_SECONDS

    items = []
    for root in category.search_roots:
        for entry in list_entries(config.expand(root)):
            if not _modified_before(entry, cutoff):
                continue
            item = measure_item(entry, entry.name, CleanCategory.LOGS, config)
            if item:
                items.append(item)
    return items


def _owned_by_current_user(path: Path) -> bool:
    try:
        return path.lstat().st_uid == os.getuid()
    except (PermissionError, OSError):
        return False


def scan_temp_files(config: ReclaimConfig) -> list[CleanableItem]:
    items = []
    for temp_dir in config.temp_dirs:
        for entry in list_entries(Path(temp_dir)):
            if not _owned_by_current_user(entry):
                continue
            item = measure_item(entry, entry.name, CleanCategory.TEMP_FILES, config)
            if item:
                items.append(item)
    return items


def is_installer(name: str) -> bool:
    """
    Whether a download looks like an installer image.

    Archive formats are rejected before the installer check so that a name
    such as ``setup.pkg.zip`` is never treated as an installer.
    """
    if "." not in name:
        return False
    extension = name.rsplit(".", 1)[-1].lower()
    if extension in ARCHIVE_EXTENSIONS:
        return False
    return extension in INSTALLER_EXTENSIONS


def scan_old_downloads(config: ReclaimConfig, now: float | None = None) -> list[CleanableItem]:
    category = CATEGORIES[CleanCategory.OLD_DOWNLOADS]
    cutoff = (now or time.time()) - category.max_age_days * DAY_SECONDS

    items = []
    for root in category.search_roots:
        for entry in list_entries(config.expand(root)):
            if not is_installer(entry.name):
                continue
            if not _modified_before(entry, cutoff):
                continue
            item = measure_item(entry, entry.name, CleanCategory.OLD_DOWNLOADS, config)
            if item:
                items.append(item)
    return items


def scan_leftovers(config: ReclaimConfig, detector: OrphanDetector) -> list[CleanableItem]:
    """Find Application Support folders and preference files of removed apps."""
    items = []

    for entry in list_entries(config.expand(APP_SUPPORT_ROOT)):
        if entry.name.startswith("."):
            continue
        if not detector.is_orphan(entry.name):
            continue
        item = measure_item(entry, f"{entry.name} Data", CleanCategory.APP_LEFTOVERS, config)
        if item:
            items.append(item)

    for entry in list_entries(config.expand(PREFERENCES_ROOT)):
        if entry.name.startswith(".") or not entry.name.endswith(".plist"):
            continue
        bundle_id = entry.name[: -len(".plist")]
        if not detector.is_orphan(bundle_id):
            continue
        item = measure_item(
            entry,
            f"{bundle_id} Preferences",
            CleanCategory.APP_LEFTOVERS,
            config,
            min_size=PREFERENCES_MIN_SIZE,
        )
        if item:
            items.append(item)

    return items


def scan_category(
    category: CleanCategory,
    config: ReclaimConfig,
    detector: OrphanDetector | None = None,
) -> list[CleanableItem]:
    """
    Scan a single category.

    Args:
        category: Category to scan
        config: Engine configuration
        detector: Orphan detector; leftovers are skipped without one

    Returns:
        Items found for this category (not yet deduplicated against others)
    """
    if category == CleanCategory.APP_CACHE:
        return scan_app_cache(config)
    if category == CleanCategory.LOGS:
        return scan_logs(config)
    if category == CleanCategory.TEMP_FILES:
        return scan_temp_files(config)
    if category == CleanCategory.OLD_DOWNLOADS:
        return scan_old_downloads(config)
    if category == CleanCategory.APP_LEFTOVERS:
        if detector is None:
            log.warning("Installed applications unknown; skipping leftover scan")
            return []
        return scan_leftovers(config, detector)
    return scan_known_locations(category, config)


def _overlaps(path: Path, claimed: set[Path]) -> bool:
    if path in claimed:
        return True
    if any(parent in claimed for parent in path.parents):
        return True
    return any(path in other.parents for other in claimed)


def merge_category_results(
    results: dict[CleanCategory, list[CleanableItem]],
) -> list[CleanableItem]:
    """
    Merge per-category results so that every path belongs to one category.

    Categories are merged in precedence order; an item is dropped if its path
    equals, lies inside, or contains a path already claimed.

    Returns:
        Deduplicated items sorted by size descending
    """
    items: list[CleanableItem] = []
    claimed: set[Path] = set()

    for category in CATEGORIES:
        for item in results.get(category, []):
            path = resolve_path(item.path)
            if _overlaps(path, claimed):
                log.debug("%s already claimed by another category", item.path)
                continue
            claimed.add(path)
            items.append(item)

    items.sort(key=lambda i: i.size_bytes, reverse=True)
    return items


def summarize(
    items: list[CleanableItem] | tuple[CleanableItem, ...],
    deselected: set[CleanCategory] | None = None,
) -> list[CategorySummary]:
    """
    Aggregate items into per-category summaries.

    Args:
        items: Items to aggregate
        deselected: Categories to mark as not selected

    Returns:
        Non-empty summaries sorted by total size descending
    """
    deselected = deselected or set()
    totals: dict[CleanCategory, tuple[int, int]] = {}
    for item in items:
        size, count = totals.get(item.category, (0, 0))
        totals[item.category] = (size + item.size_bytes, count + 1)

    summaries = [
        CategorySummary(
            category=category,
            total_size_bytes=size,
            item_count=count,
            selected=category not in deselected,
        )
        for category, (size, count) in totals.items()
        if size > 0
    ]
    summaries.sort(key=lambda s: s.total_size_bytes, reverse=True)
    return summaries


def scan_all_categories(
    config: ReclaimConfig,
    apps: list[InstalledApp] | None = None,
    progress_callback: Callable[[str, int, int], None] | None = None,
) -> list[CleanableItem]:
    """
    Scan all categories in parallel.

    Args:
        config: Engine configuration
        apps: Installed applications; None skips the leftover category
        progress_callback: Optional callback(category_name, current, total)

    Returns:
        Deduplicated CleanableItems sorted by size descending
    """
    detector = None
    if apps is not None:
        detector = OrphanDetector(apps, config.application_roots())

    categories = list(CATEGORIES)
    total = len(categories)
    results: dict[CleanCategory, list[CleanableItem]] = {}

    with ThreadPoolExecutor(max_workers=config.scan_workers) as executor:
        future_to_category = {
            executor.submit(scan_category, category, config, detector): category
            for category in categories
        }

        for i, future in enumerate(as_completed(future_to_category)):
            category = future_to_category[future]

            if progress_callback:
                progress_callback(CATEGORIES[category].name, i + 1, total)

            try:
                results[category] = future.result()
            except Exception:
                log.exception("Scanning %s failed", category.value)
                results[category] = []

    return merge_category_results(results)
