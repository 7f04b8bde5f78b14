"""Filesystem helpers shared by the switching engine and backups."""

import logging
import shutil
from pathlib import Path

from .exceptions import InvalidProfileNameError
from .schema import PackType

logger = logging.getLogger(__name__)

_RESERVED_NAMES = {pack_type.value for pack_type in PackType}


def move_file(source: Path, destination: Path) -> None:
    """Move a file, replacing any file already at ``destination``.

    Args:
        source: File to move
        destination: Full target path (parent must exist)

    Raises:
        OSError: If the move fails; nothing is rolled back
    """
    logger.debug(f"Moving {source} -> {destination}")
    if destination.exists():
        destination.unlink()
    shutil.move(str(source), str(destination))


def is_directory_empty(path: Path) -> bool:
    """True if ``path`` is missing or has no entries."""
    if not path.is_dir():
        return True
    return not any(path.iterdir())


def validate_profile_name(name: str | None) -> str:
    """Validate and normalize a profile name.

    Names become folder names inside the mods directory, so they must not
    contain path separators, start with a dot (dot-files hold the marker and
    manifests), or collide with a pack folder name.

    Args:
        name: Candidate profile name

    Returns:
        The name with surrounding whitespace removed

    Raises:
        InvalidProfileNameError: If the name is unusable
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidProfileNameError("Profile name cannot be empty")
    if "/" in cleaned or "\\" in cleaned or cleaned.startswith("."):
        raise InvalidProfileNameError(
            f"Invalid profile name '{cleaned}': must not contain path separators or start with '.'",
            context={"name": cleaned},
        )
    if cleaned in _RESERVED_NAMES:
        raise InvalidProfileNameError(
            f"Invalid profile name '{cleaned}': reserved for pack folders",
            context={"name": cleaned},
        )
    return cleaned
