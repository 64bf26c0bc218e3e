"""Orphan detection: does a support folder still belong to an installed app?

Matching is deliberately loose so that anything resembling an installed
application is kept. A real leftover left unflagged costs some disk space;
a live folder flagged by mistake costs the user their data.
"""

import logging
import plistlib
from pathlib import Path
from typing import Iterable

from reclaim.categories import PROTECTED_VENDOR_FOLDERS, VENDOR_PREFIXES
from reclaim.models import InstalledApp

log = logging.getLogger(__name__)

# Leading reverse-DNS namespace tokens that say nothing about the app itself
NAMESPACE_TOKENS = frozenset({"com", "org", "net", "io", "co", "de", "uk", "app", "dev"})


def read_app_bundle(bundle: Path) -> InstalledApp:
    """Build an InstalledApp from a .app bundle, reading its Info.plist if possible."""
    name = bundle.stem
    bundle_id = None

    info_plist = bundle / "Contents" / "Info.plist"
    try:
        with open(info_plist, "rb") as f:
            info = plistlib.load(f)
        bundle_id = info.get("CFBundleIdentifier") or None
        name = info.get("CFBundleDisplayName") or info.get("CFBundleName") or name
    except (OSError, plistlib.InvalidFileException, ValueError) as e:
        log.debug("No readable Info.plist in %s: %s", bundle, e)

    return InstalledApp(name=str(name), bundle_id=bundle_id, path=str(bundle))


def discover_installed_apps(app_dirs: Iterable[Path]) -> list[InstalledApp]:
    """
    List .app bundles found directly inside the given directories.

    Args:
        app_dirs: Application install roots (e.g. /Applications)

    Returns:
        Installed applications; unreadable directories are skipped
    """
    apps = []
    for app_dir in app_dirs:
        try:
            entries = sorted(app_dir.iterdir())
        except (PermissionError, OSError):
            continue

        for entry in entries:
            try:
                if entry.suffix == ".app" and entry.is_dir():
                    apps.append(read_app_bundle(entry))
            except (PermissionError, OSError):
                continue

    return apps


def humanize_bundle_id(bundle_id: str) -> str:
    """
    Turn a bundle-id-like folder name into a display name.

    "com.acme.superTool" -> "Super Tool"
    """
    last = bundle_id.split(".")[-1]
    if not last:
        return bundle_id

    words = []
    current = ""
    for char in last:
        if char.isupper() and current:
            words.append(current)
            current = ""
        current += char
    words.append(current)
    return " ".join(w.capitalize() for w in words)


class OrphanDetector:
    """Decides whether a leftover candidate belongs to no installed application."""

    def __init__(self, apps: Iterable[InstalledApp], app_dirs: Iterable[Path] = ()):
        self.app_dirs = list(app_dirs)
        self.names: set[str] = set()
        self.bundle_ids: set[str] = set()
        self.tokens: set[str] = set()

        for app in apps:
            if app.name:
                self.names.add(app.name.lower())
            if app.bundle_id:
                bundle_id = app.bundle_id.lower()
                self.bundle_ids.add(bundle_id)
                parts = [p for p in bundle_id.split(".") if p]
                if parts and parts[0] in NAMESPACE_TOKENS:
                    parts = parts[1:]
                self.tokens.update(parts)

    def is_protected_vendor(self, name: str) -> bool:
        return name.lower() in PROTECTED_VENDOR_FOLDERS

    def matches_installed(self, name: str) -> bool:
        """True if *name* resembles any installed app by name or bundle id."""
        candidate = name.lower()
        if not candidate:
            return True

        if candidate in self.names or candidate in self.bundle_ids:
            return True

        if any(token == candidate or token in candidate for token in self.tokens):
            return True

        if any(app_name in candidate or candidate in app_name for app_name in self.names):
            return True

        return any(candidate in bundle_id or bundle_id in candidate for bundle_id in self.bundle_ids)

    def bundle_exists(self, name: str) -> bool:
        for app_dir in self.app_dirs:
            try:
                if (app_dir / f"{name}.app").exists():
                    return True
            except OSError:
                continue
        return False

    def is_orphan(self, name: str) -> bool:
        """
        Check if a leftover candidate no longer belongs to any installed app.

        Args:
            name: Folder name, or preference file name without ``.plist``

        Returns:
            True if the candidate may be reported as a leftover
        """
        if self.is_protected_vendor(name):
            return False
        if name.startswith(VENDOR_PREFIXES):
            return False
        if self.matches_installed(name):
            return False
        if self.bundle_exists(name):
            return False
        return True
