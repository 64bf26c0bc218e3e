"""Cleanup category definitions for reclaim."""

from reclaim.models import Category, CleanCategory, KnownLocation, RiskLevel

KB = 1024
MB = 1024 * 1024

# Installer formats that are safe to flag once old; matched on the lowercased suffix
INSTALLER_EXTENSIONS = frozenset({"dmg", "pkg", "mpkg", "iso"})

# General archives may hold anything, so they are rejected outright
ARCHIVE_EXTENSIONS = frozenset({"zip", "tar", "gz", "tgz", "bz2", "xz", "7z", "rar"})

# Reserved vendor prefixes (the OS vendor's own bundle namespace)
VENDOR_PREFIXES = ("com.apple.", "group.com.apple.")

# System cache folders that sync or account daemons still rely on
EXCLUDED_CACHE_DIRECTORIES = frozenset(
    {
        "CloudKit",
        "com.apple.nsurlsessiond",
        "com.apple.HomeKit",
        "com.apple.bird",
        "com.apple.iCloudHelper",
        "com.apple.ap.adprivacyd",
        "com.apple.parsecd",
        "com.apple.accountsd",
        "com.apple.appstored",
        "com.apple.commerce",
        "com.apple.containermanagerd",
    }
)

# Cache entries owned by the browser category
BROWSER_CACHE_NAMES = frozenset({"Google", "Firefox"})
BROWSER_CACHE_PREFIXES = ("com.google.", "org.mozilla.")

# Application Support folders that never count as leftovers (lowercased).
# Cloud sync clients, password managers, IDEs, chat apps and virtualization
# tools keep live state here that does not map onto a single .app bundle.
PROTECTED_VENDOR_FOLDERS = frozenset(
    {
        "addressbook",
        "dock",
        "icloud",
        "clouddocs",
        "mobilesync",
        "knowledge",
        "callhistorydb",
        "syncservices",
        "google",
        "firefox",
        "sublime text",
        "code",
        "jetbrains",
        "microsoft",
        "adobe",
        "spotify",
        "discord",
        "slack",
        "zoom",
        "telegram",
        "steam",
        "epic",
        "1password",
        "bitwarden",
        "keychain",
        "crashreporter",
        "coresimulator",
        "developer",
        "obs-studio",
        "notion",
        "bear",
        "obsidian",
        "evernote",
        "dropbox",
        "onedrive",
        "virtualbox",
        "vmware",
        "parallels",
        "docker",
        "atom",
        "visual studio code",
    }
)

# Build artifacts the user may still need (signed archives, device symbols)
EXCLUDED_BUILD_ARTIFACTS = (
    "~/Library/Developer/Xcode/Archives",
    "~/Library/Developer/Xcode/iOS DeviceSupport",
    "~/Library/Developer/Xcode/watchOS DeviceSupport",
)

# Leftover sources: (directory, suffix filter, minimum size)
APP_SUPPORT_ROOT = "~/Library/Application Support"
PREFERENCES_ROOT = "~/Library/Preferences"
APP_SUPPORT_MIN_SIZE = 5 * MB
PREFERENCES_MIN_SIZE = 10 * KB

# Where installed .app bundles live
DEFAULT_APPLICATION_DIRS = ("/Applications", "~/Applications")

# Directories searched for duplicates when none are given
DEFAULT_DUPLICATE_DIRS = ("~/Downloads", "~/Desktop", "~/Documents")


# Ordered: earlier categories win when two would claim the same path
CATEGORIES: dict[CleanCategory, Category] = {
    CleanCategory.SYSTEM_CACHE: Category(
        id=CleanCategory.SYSTEM_CACHE,
        name="System Cache",
        risk_level=RiskLevel.SAFE,
        locations=[
            KnownLocation(path="~/Library/Caches/com.apple.helpd", name="Help Index Cache"),
            KnownLocation(
                path="~/Library/Caches/com.apple.nsservicescache.plist", name="Services Cache"
            ),
            KnownLocation(
                path="~/Library/Caches/com.apple.preferencepanes.cache", name="Preferences Cache"
            ),
            KnownLocation(path="~/Library/Caches/com.apple.spotlight", name="Spotlight Cache"),
        ],
        min_size_bytes=512 * KB,
        description="macOS system component caches",
        consequences="Help, Spotlight and Settings panes rebuild their indexes",
        recovery="Automatic - rebuilt on next use",
    ),
    CleanCategory.BROWSER_CACHE: Category(
        id=CleanCategory.BROWSER_CACHE,
        name="Browser Cache",
        risk_level=RiskLevel.SAFE,
        locations=[
            KnownLocation(path="~/Library/Caches/com.apple.Safari", name="Safari Cache"),
            KnownLocation(path="~/Library/Caches/Google/Chrome", name="Chrome Cache"),
            KnownLocation(path="~/Library/Caches/com.google.Chrome", name="Chrome Cache"),
            KnownLocation(
                path="~/Library/Application Support/Google/Chrome/Default/Cache",
                name="Chrome Data Cache",
            ),
            KnownLocation(
                path="~/Library/Application Support/Google/Chrome/Default/Code Cache",
                name="Chrome Code Cache",
            ),
            KnownLocation(
                path="~/Library/Application Support/Google/Chrome/Default/GPUCache",
                name="Chrome GPU Cache",
            ),
            KnownLocation(path="~/Library/Caches/Firefox", name="Firefox Cache"),
            KnownLocation(path="~/Library/Caches/org.mozilla.firefox", name="Firefox Cache"),
            KnownLocation(path="~/Library/Caches/com.brave.Browser", name="Brave Cache"),
            KnownLocation(path="~/Library/Caches/com.microsoft.edgemac", name="Edge Cache"),
            KnownLocation(path="~/Library/Caches/com.operasoftware.Opera", name="Opera Cache"),
        ],
        min_size_bytes=1 * MB,
        description="Safari, Chrome, Firefox, Brave, Edge and Opera caches",
        consequences="Websites load slower on first visit",
        recovery="Automatic - browsers re-cache as you browse",
        edge_cases="Profiles, local storage, bookmarks and passwords are never touched",
    ),
    CleanCategory.APP_CACHE: Category(
        id=CleanCategory.APP_CACHE,
        name="App Cache",
        risk_level=RiskLevel.SAFE,
        search_roots=["~/Library/Caches"],
        min_size_bytes=1 * MB,
        description="Per-application caches in ~/Library/Caches",
        consequences="Apps may be slower on first launch",
        recovery="Automatic - apps re-create caches as needed",
        edge_cases="Apple system caches and browser caches are handled elsewhere",
    ),
    CleanCategory.LOGS: Category(
        id=CleanCategory.LOGS,
        name="Logs",
        risk_level=RiskLevel.SAFE,
        search_roots=["~/Library/Logs"],
        max_age_days=7,
        description="Log files not modified in the last 7 days",
        consequences="Historical logs are unavailable for debugging",
        recovery="New logs are created automatically",
    ),
    CleanCategory.TEMP_FILES: Category(
        id=CleanCategory.TEMP_FILES,
        name="Temp Files",
        risk_level=RiskLevel.SAFE,
        min_size_bytes=1 * MB,
        description="Temporary files owned by the current user",
        consequences="Running apps may need to recreate scratch files",
        recovery="Automatic - temp files are recreated on demand",
    ),
    CleanCategory.OLD_DOWNLOADS: Category(
        id=CleanCategory.OLD_DOWNLOADS,
        name="Old Downloads",
        risk_level=RiskLevel.REVIEW,
        search_roots=["~/Downloads"],
        max_age_days=30,
        description="Installer images (.dmg, .pkg, .iso) older than 30 days",
        consequences="Installers must be downloaded again to reinstall",
        recovery="Restore from the Trash or re-download from the vendor",
        edge_cases="Archives such as .zip or .tar are never matched",
    ),
    CleanCategory.BUILD_TOOL_CACHE: Category(
        id=CleanCategory.BUILD_TOOL_CACHE,
        name="Build Tool Cache",
        risk_level=RiskLevel.SAFE,
        locations=[
            KnownLocation(
                path="~/Library/Developer/Xcode/DerivedData", name="Xcode DerivedData"
            ),
            KnownLocation(
                path="~/Library/Developer/CoreSimulator/Caches", name="Simulator Caches"
            ),
            KnownLocation(
                path="~/Library/Developer/CoreSimulator/Devices", name="Simulator Devices"
            ),
        ],
        min_size_bytes=10 * MB,
        description="Xcode build artifacts and simulator data",
        consequences="Next build is a full rebuild",
        recovery="Automatic - Xcode rebuilds on next compile",
        edge_cases="Archives and device support files are kept",
    ),
    CleanCategory.APP_LEFTOVERS: Category(
        id=CleanCategory.APP_LEFTOVERS,
        name="App Leftovers",
        risk_level=RiskLevel.REVIEW,
        search_roots=[APP_SUPPORT_ROOT, PREFERENCES_ROOT],
        min_size_bytes=APP_SUPPORT_MIN_SIZE,
        description="Support data and preferences of apps that are no longer installed",
        consequences="Settings are lost if the app is reinstalled",
        recovery="Restore from the Trash",
        edge_cases="Matching is conservative; cloud, IDE and password manager data is never flagged",
    ),
}


def get_category(category_id: CleanCategory | str) -> Category | None:
    """Get a category by ID."""
    try:
        return CATEGORIES.get(CleanCategory(category_id))
    except ValueError:
        return None


def get_all_categories() -> list[Category]:
    """Get all categories in precedence order."""
    return list(CATEGORIES.values())


def get_safe_categories() -> list[Category]:
    """Get all safe categories."""
    return [c for c in CATEGORIES.values() if c.risk_level == RiskLevel.SAFE]


def get_review_categories() -> list[Category]:
    """Get all categories that need review."""
    return [c for c in CATEGORIES.values() if c.risk_level == RiskLevel.REVIEW]
