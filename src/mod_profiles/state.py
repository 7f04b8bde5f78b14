"""Persisted switching state: the active marker and per-profile pack manifests.

Both live as small dot-files inside the mods directory:

    <mods>/.active_profile      profile name of the loose mod files (absent = unbound)
    <mods>/.packs_<profile>     one ``packType|fileName`` line per deployed pack

These files are the only durable state shared between calls. The switching
engine owns one ActiveState instance and writes it as the final step of each
mutating operation.
"""

import logging
from pathlib import Path

from .schema import PackEntry
from .schema import ProfileSettings

logger = logging.getLogger(__name__)


class ActiveState:
    """Typed view of the marker and pack manifests (with injected settings)."""

    def __init__(self, settings: ProfileSettings):
        """Load the active marker from disk.

        Args:
            settings: Filesystem layout; the marker and manifests live in ``settings.mods_dir``

        Example:
            >>> state = ActiveState(ProfileSettings.for_game_dir(Path.home() / ".minecraft"))
            >>> state.active_name  # None when no profile is bound
        """
        self.settings = settings
        self._active_name: str | None = None
        self._load()

    @property
    def marker_path(self) -> Path:
        return self.settings.mods_dir / self.settings.marker_file_name

    @property
    def active_name(self) -> str | None:
        """Name of the profile whose mods are loose in the mods directory, if known."""
        return self._active_name

    def _load(self) -> None:
        """Read the marker file if it exists."""
        if not self.marker_path.exists():
            self._active_name = None
            return

        name = self.marker_path.read_text(encoding="utf-8").strip()
        self._active_name = name or None
        logger.debug(f"Loaded active marker: {self._active_name!r}")

    def set_active(self, name: str | None) -> None:
        """Persist ``name`` as the active profile, or delete the marker when empty.

        Args:
            name: Profile name; None or blank clears the marker
        """
        cleaned = (name or "").strip()
        if not cleaned:
            self.clear_active()
            return

        self.marker_path.parent.mkdir(parents=True, exist_ok=True)
        self.marker_path.write_text(cleaned, encoding="utf-8")
        self._active_name = cleaned
        logger.debug(f"Active marker set to {cleaned!r}")

    def clear_active(self) -> None:
        """Delete the marker (unbound state)."""
        if self.marker_path.exists():
            self.marker_path.unlink()
        self._active_name = None
        logger.debug("Active marker cleared")

    # ---- Pack manifests ----

    def manifest_path(self, profile_name: str) -> Path:
        return self.settings.mods_dir / f"{self.settings.manifest_prefix}{profile_name}"

    def read_manifest(self, profile_name: str) -> list[PackEntry]:
        """Read the packs recorded for a profile (empty if no manifest).

        Malformed lines are skipped with a warning.
        """
        path = self.manifest_path(profile_name)
        if not path.exists():
            return []

        entries: list[PackEntry] = []
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            try:
                entries.append(PackEntry.from_line(line.strip()))
            except ValueError as e:
                logger.warning(f"Skipping manifest line for '{profile_name}': {e}")
        return entries

    def write_manifest(self, profile_name: str, entries: list[PackEntry]) -> None:
        """Replace a profile's manifest; an empty list deletes the file."""
        if not entries:
            self.delete_manifest(profile_name)
            return

        path = self.manifest_path(profile_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(entry.to_line() for entry in entries) + "\n", encoding="utf-8")
        logger.debug(f"Wrote manifest for '{profile_name}' with {len(entries)} packs")

    def delete_manifest(self, profile_name: str) -> None:
        path = self.manifest_path(profile_name)
        if path.exists():
            path.unlink()
            logger.debug(f"Deleted manifest for '{profile_name}'")

    def has_tracked_packs(self, profile_name: str) -> bool:
        return bool(self.read_manifest(profile_name))

    def rename_manifest(self, old_name: str, new_name: str) -> None:
        """Carry a manifest over to a renamed profile."""
        old_path = self.manifest_path(old_name)
        if old_path.exists():
            old_path.replace(self.manifest_path(new_name))
