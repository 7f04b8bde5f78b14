"""Snapshots of the active mod set.

Backups are plain copies of the loose mod files into timestamped folders
(``YYYYmmdd_HHMMSS``) under ``settings.backups_dir``. They are independent of
profile folders, marker and manifests.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path

from .exceptions import BackupNotFoundError
from .exceptions import ModProfileError
from .schema import ProfileSettings
from .store import ProfileStore

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def _backups_dir(settings: ProfileSettings) -> Path:
    if settings.backups_dir is None:
        raise ModProfileError("No backups directory configured")
    return settings.backups_dir


def backup_active_mods(settings: ProfileSettings, now: datetime | None = None) -> Path:
    """
    Copy the loose mod files into a new timestamped backup folder.

    Args:
        settings: Filesystem layout (backups_dir must be set)
        now: Timestamp to name the folder after (defaults to the current time)

    Returns:
        Path to the created backup folder
    """
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    backup_dir = _backups_dir(settings) / stamp
    backup_dir.mkdir(parents=True, exist_ok=True)

    mod_files = ProfileStore(settings).active_mod_files()
    for mod_file in mod_files:
        shutil.copy2(mod_file, backup_dir / mod_file.name)

    logger.info(f"Backed up {len(mod_files)} mods to {backup_dir}")
    return backup_dir


def restore_backup(settings: ProfileSettings, backup_dir: Path) -> int:
    """
    Replace the loose mod files with the contents of a backup.

    Args:
        settings: Filesystem layout
        backup_dir: Backup folder (absolute path or a name under backups_dir)

    Returns:
        Number of mod files restored

    Raises:
        BackupNotFoundError: If the backup folder doesn't exist
    """
    if not backup_dir.is_absolute():
        backup_dir = _backups_dir(settings) / backup_dir
    if not backup_dir.is_dir():
        raise BackupNotFoundError(f"Backup not found: {backup_dir}", context={"backup_dir": str(backup_dir)})

    store = ProfileStore(settings)
    for mod_file in store.active_mod_files():
        mod_file.unlink()

    settings.mods_dir.mkdir(parents=True, exist_ok=True)
    restored = store.mod_files(backup_dir)
    for mod_file in restored:
        shutil.copy2(mod_file, settings.mods_dir / mod_file.name)

    logger.info(f"Restored {len(restored)} mods from {backup_dir.name}")
    return len(restored)


def list_backups(settings: ProfileSettings) -> list[str]:
    """Backup folder names, newest first."""
    if settings.backups_dir is None or not settings.backups_dir.is_dir():
        return []
    return sorted((d.name for d in settings.backups_dir.iterdir() if d.is_dir()), reverse=True)
