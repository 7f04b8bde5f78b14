"""Profile and resolution exceptions.

Every error carries a human-readable message plus a context dict
(profile names, paths, identifiers) for callers that want to surface details.
"""


class ModProfileError(Exception):
    """Base exception for profile switching, resolution and download operations."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (file paths, profile names, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ProfileNotFoundError(ModProfileError):
    """Profile storage folder does not exist."""


class ProfileExistsError(ModProfileError):
    """A profile storage folder with that name already exists."""


class InvalidProfileNameError(ModProfileError):
    """Profile name is empty, reserved, or would escape the mods directory."""


class AmbiguousActiveStateError(ModProfileError):
    """Loose mod files are present but no profile name is known for them."""


class CannotDeleteActiveProfileError(ModProfileError):
    """The currently active profile cannot be deleted."""


class BackupNotFoundError(ModProfileError):
    """Backup folder does not exist."""


class RegistryError(ModProfileError):
    """Registry request failed or returned an unreadable payload."""


class DownloadError(ModProfileError):
    """Downloading a file failed."""


class DownloadCancelledError(DownloadError):
    """Download was cancelled before it completed."""
