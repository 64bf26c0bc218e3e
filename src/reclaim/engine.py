"""The reclamation engine: state machine and command surface.

The engine is the only writer of its state. Every change produces a new
immutable EngineState that is handed to subscribers, so observers never see
a half-updated scan. Work runs on a single background worker: commands that
scan or delete return a Future immediately, and a command issued while
another is running waits its turn instead of interleaving with it.

    idle -> scanning -> ready -> cleaning -> complete -> idle
"""

import concurrent.futures
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable

from reclaim.cleaner import clean_items
from reclaim.cleaner import delete_file as trash_file
from reclaim.config import ReclaimConfig, load_config
from reclaim.duplicates import find_duplicates
from reclaim.models import (
    CleanableItem,
    CleanCategory,
    CleanupResult,
    DuplicateGroup,
    EnginePhase,
    EngineState,
    InstalledApp,
)
from reclaim.orphans import discover_installed_apps
from reclaim.privileges import ElevatedExecutor
from reclaim.scanner import scan_all_categories, summarize

log = logging.getLogger(__name__)

Subscriber = Callable[[EngineState], None]


class ReclaimEngine:
    """Owns scan results and selection, and runs scans and cleans in the background."""

    def __init__(
        self,
        config: ReclaimConfig | None = None,
        app_provider: Callable[[], list[InstalledApp]] | None = None,
        elevated: ElevatedExecutor | None = None,
    ):
        self.config = config or load_config()
        self.elevated = elevated
        self._app_provider = app_provider or (
            lambda: discover_installed_apps(self.config.application_roots())
        )
        self._state = EngineState()
        self._lock = threading.RLock()
        self._subscribers: list[Subscriber] = []
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="reclaim-engine")

    def __enter__(self) -> "ReclaimEngine":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background worker after queued commands finish."""
        self._worker.shutdown(wait=wait)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        with self._lock:
            return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback receiving every new state snapshot.

        The callback is called once immediately with the current state.

        Returns:
            Function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)
            state = self._state
        callback(state)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _update(self, **changes) -> EngineState:
        with self._lock:
            self._state = self._state.model_copy(update=changes)
            state = self._state
            for callback in list(self._subscribers):
                try:
                    callback(state)
                except Exception:
                    log.exception("State subscriber failed")
        return state

    def _advance(self, fraction: float, task: str) -> None:
        with self._lock:
            self._update(progress=max(self._state.progress, min(fraction, 1.0)), current_task=task)

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    def scan_all(self) -> "Future[EngineState]":
        """Start a full categorized scan. Resolves to the ready state."""
        return self._worker.submit(self._run_scan)

    def _installed_apps(self) -> list[InstalledApp] | None:
        """Ask the registry for installed apps, bounded by registry_timeout."""
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="reclaim-registry")
        future = pool.submit(self._app_provider)
        try:
            return list(future.result(timeout=self.config.registry_timeout))
        except concurrent.futures.TimeoutError:
            log.warning(
                "Installed-app registry timed out after %.1fs", self.config.registry_timeout
            )
        except Exception:
            log.exception("Installed-app registry failed")
        finally:
            pool.shutdown(wait=False)
        return None

    def _run_scan(self) -> EngineState:
        self._update(
            phase=EnginePhase.SCANNING,
            progress=0.0,
            current_task="Preparing scan...",
            items=(),
            summaries=(),
            result=None,
        )

        def on_progress(name: str, current: int, total: int) -> None:
            self._advance(current / total, f"Scanned {name}")

        try:
            apps = self._installed_apps()
            items = scan_all_categories(self.config, apps, on_progress)
        except Exception:
            log.exception("Scan failed")
            self._update(phase=EnginePhase.IDLE, progress=0.0, current_task="")
            raise

        log.info("Scan found %d items", len(items))
        return self._update(
            phase=EnginePhase.READY,
            progress=1.0,
            current_task="",
            items=tuple(items),
            summaries=tuple(summarize(items)),
        )

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def toggle_category(self, category: CleanCategory) -> None:
        with self._lock:
            summaries = tuple(
                s.model_copy(update={"selected": not s.selected}) if s.category == category else s
                for s in self._state.summaries
            )
            self._update(summaries=summaries)

    def _select_categories(self, selected: Callable[[CleanCategory], bool]) -> None:
        with self._lock:
            summaries = tuple(
                s.model_copy(update={"selected": selected(s.category)})
                for s in self._state.summaries
            )
            self._update(summaries=summaries)

    def select_all(self) -> None:
        self._select_categories(lambda c: True)

    def deselect_all(self) -> None:
        self._select_categories(lambda c: False)

    def set_item_selected(self, path: str, selected: bool) -> None:
        """Include or exclude a single item from the next clean."""
        with self._lock:
            items = tuple(
                i.model_copy(update={"selected": selected}) if i.path == path else i
                for i in self._state.items
            )
            self._update(items=items)

    # -------------------------------------------------------------------------
    # Cleaning
    # -------------------------------------------------------------------------

    def clean_selected(self, dry_run: bool = False) -> "Future[CleanupResult]":
        """Delete every selected item in the selected categories."""
        return self._worker.submit(self._run_clean, dry_run)

    def clean_category(self, category: CleanCategory, dry_run: bool = False) -> "Future[CleanupResult]":
        """Select only *category* and clean it."""

        def run() -> CleanupResult:
            self._select_categories(lambda c: c == category)
            return self._run_clean(dry_run)

        return self._worker.submit(run)

    def _run_clean(self, dry_run: bool) -> CleanupResult:
        state = self.state
        selected = state.selected_categories
        to_clean = [i for i in state.items if i.category in selected and i.selected]

        if not to_clean:
            log.info("Nothing selected to clean")
            return CleanupResult(dry_run=dry_run)

        self._update(
            phase=EnginePhase.CLEANING,
            progress=0.0,
            current_task="Preparing cleanup...",
            result=None,
        )

        def on_progress(fraction: float, path: str) -> None:
            self._advance(fraction, f"Cleaning {Path(path).name}...")

        result = clean_items(to_clean, self.config, on_progress, self.elevated, dry_run)

        with self._lock:
            current = self._state
            if dry_run:
                remaining = current.items
            else:
                remaining = tuple(i for i in current.items if os.path.lexists(i.path))
            deselected = {s.category for s in current.summaries if not s.selected}
            self._update(
                phase=EnginePhase.COMPLETE,
                progress=1.0,
                current_task="",
                items=remaining,
                summaries=tuple(summarize(remaining, deselected)),
                result=result,
            )
        return result

    def acknowledge(self) -> None:
        """Leave the complete phase and return to idle."""
        with self._lock:
            if self._state.phase == EnginePhase.COMPLETE:
                self._update(
                    phase=EnginePhase.IDLE,
                    progress=0.0,
                    current_task="",
                    items=(),
                    summaries=(),
                    result=None,
                )

    # -------------------------------------------------------------------------
    # Duplicates and single items
    # -------------------------------------------------------------------------

    def scan_for_duplicates(
        self, directories: Iterable[str | Path] | None = None
    ) -> "Future[list[DuplicateGroup]]":
        """Search directories (default: the configured ones) for duplicate files."""
        roots = [Path(d) for d in directories] if directories else self.config.duplicate_roots()
        return self._worker.submit(self._run_duplicates, roots)

    def _run_duplicates(self, roots: list[Path]) -> list[DuplicateGroup]:
        self._update(scanning_duplicates=True, duplicate_groups=(), duplicate_task="Starting scan...")
        try:
            groups = find_duplicates(
                roots,
                progress_callback=lambda label: self._update(duplicate_task=label),
                max_workers=self.config.scan_workers,
            )
        finally:
            self._update(scanning_duplicates=False, duplicate_task="")

        self._update(duplicate_groups=tuple(groups))
        return groups

    def delete_file(self, path: str) -> bool:
        """Move one path to the trash and drop it from scan and duplicate results."""
        removed = trash_file(path, self.config, self.elevated)
        if removed:
            self._forget(path)
        return removed

    def _forget(self, path: str) -> None:
        with self._lock:
            groups = []
            for group in self._state.duplicate_groups:
                members = tuple(m for m in group.members if m.path != path)
                if len(members) == len(group.members):
                    groups.append(group)
                elif len(members) >= 2:
                    groups.append(group.model_copy(update={"members": members}))

            items: tuple[CleanableItem, ...] = tuple(
                i for i in self._state.items if i.path != path
            )
            deselected = {s.category for s in self._state.summaries if not s.selected}
            self._update(
                duplicate_groups=tuple(groups),
                items=items,
                summaries=tuple(summarize(items, deselected)),
            )
