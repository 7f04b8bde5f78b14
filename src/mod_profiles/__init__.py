"""mod-profiles - Switch between named sets of game mods and asset packs.

Public API: the profile switching engine, the collection resolver and the
registry/download collaborators they are composed with. Paths, conflict
prompts and HTTP sessions are injected by the application.
"""

from .backups import backup_active_mods
from .backups import list_backups
from .backups import restore_backup
from .downloader import DownloadReport
from .downloader import download_file
from .downloader import download_mods
from .exceptions import AmbiguousActiveStateError
from .exceptions import BackupNotFoundError
from .exceptions import CannotDeleteActiveProfileError
from .exceptions import DownloadCancelledError
from .exceptions import DownloadError
from .exceptions import InvalidProfileNameError
from .exceptions import ModProfileError
from .exceptions import ProfileExistsError
from .exceptions import ProfileNotFoundError
from .exceptions import RegistryError
from .extraction import extract_identifiers
from .protocols import ConflictResolverProtocol
from .protocols import OverwriteAlways
from .protocols import RegistryProtocol
from .registry import GameVersionCatalog
from .registry import ModrinthRegistry
from .resolver import CollectionResolver
from .schema import PackEntry
from .schema import PackType
from .schema import ProfileSettings
from .schema import ProjectInfo
from .schema import ProjectVersion
from .schema import ResolutionStatus
from .schema import ResolvedMod
from .schema import VersionFile
from .state import ActiveState
from .store import ProfileStore
from .switcher import ProfileSwitcher

__all__ = [
    # Settings and models
    "ProfileSettings",
    "PackType",
    "PackEntry",
    "ProjectInfo",
    "ProjectVersion",
    "VersionFile",
    "ResolutionStatus",
    "ResolvedMod",
    # Switching
    "ProfileSwitcher",
    "ProfileStore",
    "ActiveState",
    "ConflictResolverProtocol",
    "OverwriteAlways",
    # Resolution
    "CollectionResolver",
    "RegistryProtocol",
    "extract_identifiers",
    "ModrinthRegistry",
    "GameVersionCatalog",
    # Downloads
    "download_file",
    "download_mods",
    "DownloadReport",
    # Backups
    "backup_active_mods",
    "restore_backup",
    "list_backups",
    # Exceptions
    "ModProfileError",
    "ProfileNotFoundError",
    "ProfileExistsError",
    "InvalidProfileNameError",
    "AmbiguousActiveStateError",
    "CannotDeleteActiveProfileError",
    "BackupNotFoundError",
    "RegistryError",
    "DownloadError",
    "DownloadCancelledError",
]

__version__ = "0.1.0"
