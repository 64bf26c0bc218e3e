"""Data models for reclaim."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RiskLevel(str, Enum):
    """Risk level for cleanup categories."""

    SAFE = "safe"  # Regenerated automatically
    REVIEW = "review"  # User data that may still be wanted


class CleanCategory(str, Enum):
    """Classification bucket for a cleanable item."""

    SYSTEM_CACHE = "system_cache"
    BROWSER_CACHE = "browser_cache"
    APP_CACHE = "app_cache"
    LOGS = "logs"
    TEMP_FILES = "temp_files"
    OLD_DOWNLOADS = "old_downloads"
    BUILD_TOOL_CACHE = "build_tool_cache"
    APP_LEFTOVERS = "app_leftovers"


class EnginePhase(str, Enum):
    """Phase of the scan/clean state machine."""

    IDLE = "idle"
    SCANNING = "scanning"
    READY = "ready"
    CLEANING = "cleaning"
    COMPLETE = "complete"


class DeleteOutcome(str, Enum):
    """What happened to a single path during a clean."""

    REMOVED = "removed"
    SKIPPED_UNSAFE = "skipped_unsafe"
    SKIPPED_MISSING = "skipped_missing"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class KnownLocation(BaseModel):
    """A fixed path scanned by a category."""

    path: str = Field(..., description="Path to scan (supports ~ expansion)")
    name: str = Field(..., description="Display name for items found here")


class Category(BaseModel):
    """Definition of a cleanup category."""

    id: CleanCategory = Field(..., description="Unique identifier for the category")
    name: str = Field(..., description="Human-readable name")
    risk_level: RiskLevel = Field(..., description="Risk level for this category")
    locations: list[KnownLocation] = Field(
        default_factory=list,
        description="Fixed locations measured as a whole",
    )
    search_roots: list[str] = Field(
        default_factory=list,
        description="Directories whose entries are discovered and classified one by one",
    )
    min_size_bytes: int = Field(
        default=0,
        description="Items must be strictly larger than this to be included",
    )
    max_age_days: Optional[int] = Field(
        None,
        description="Items must be last modified more than this many days ago",
    )
    description: str = Field(..., description="What this category contains")
    consequences: str = Field(..., description="What happens if deleted")
    recovery: str = Field(..., description="How to recover if needed")
    edge_cases: Optional[str] = Field(
        None,
        description="What is deliberately left alone",
    )


class CleanableItem(BaseModel):
    """A single path identified as a candidate for removal."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Absolute path of the item")
    display_name: str = Field(..., description="Human-readable name")
    size_bytes: int = Field(..., ge=0, description="Measured size in bytes")
    category: CleanCategory = Field(..., description="Category assigned during the scan")
    selected: bool = Field(True, description="Whether the item will be cleaned")

    @property
    def size_human(self) -> str:
        """Human-readable size string (decimal units like macOS)."""
        return format_size(self.size_bytes)


class CategorySummary(BaseModel):
    """Aggregate of all items sharing a category."""

    model_config = ConfigDict(frozen=True)

    category: CleanCategory
    total_size_bytes: int = 0
    item_count: int = 0
    selected: bool = True


class FileInfo(BaseModel):
    """A regular file considered by the duplicate finder. Identity is by path."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    size_bytes: int
    modified: datetime

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileInfo):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)


class DuplicateGroup(BaseModel):
    """Files sharing an identical size and content fingerprint."""

    model_config = ConfigDict(frozen=True)

    fingerprint: str = Field(..., description="Digest of the bounded content prefix")
    size_bytes: int = Field(..., description="Size shared by every member")
    members: tuple[FileInfo, ...] = Field(..., min_length=2)

    @property
    def wasted_bytes(self) -> int:
        """Bytes held by every member except the first."""
        return sum(f.size_bytes for f in self.members[1:])


class InstalledApp(BaseModel):
    """An application known to be installed."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name")
    bundle_id: Optional[str] = Field(None, description="Bundle identifier, if known")
    path: str = Field("", description="Install path of the bundle")


class CleanupResult(BaseModel):
    """Aggregate result of a clean operation."""

    model_config = ConfigDict(frozen=True)

    bytes_freed: int = Field(0, description="Bytes moved to the trash")
    items_removed: int = Field(0, description="Items actually removed")
    items_requested: int = Field(0, description="Items handed to the executor")
    dry_run: bool = Field(False, description="Whether this was a dry run")


class EngineState(BaseModel):
    """Immutable snapshot of the engine, published after every change."""

    model_config = ConfigDict(frozen=True)

    phase: EnginePhase = EnginePhase.IDLE
    progress: float = Field(0.0, ge=0.0, le=1.0)
    current_task: str = ""
    items: tuple[CleanableItem, ...] = ()
    summaries: tuple[CategorySummary, ...] = ()
    result: Optional[CleanupResult] = None
    duplicate_groups: tuple[DuplicateGroup, ...] = ()
    scanning_duplicates: bool = False
    duplicate_task: str = ""

    @property
    def selected_categories(self) -> set[CleanCategory]:
        """Categories currently selected for cleaning."""
        return {s.category for s in self.summaries if s.selected}

    @property
    def total_cleanable_bytes(self) -> int:
        """Total size of the selected categories."""
        return sum(s.total_size_bytes for s in self.summaries if s.selected)

    @property
    def selected_categories_count(self) -> int:
        return sum(1 for s in self.summaries if s.selected)


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (decimal units like macOS)."""
    if size_bytes >= 1000**3:
        return f"{size_bytes / (1000**3):.1f} GB"
    elif size_bytes >= 1000**2:
        return f"{size_bytes / (1000**2):.1f} MB"
    elif size_bytes >= 1000:
        return f"{size_bytes / 1000:.1f} KB"
    else:
        return f"{size_bytes} B"
