"""Profile store - read-only view of profile folders and the active mod set.

Layout convention inside the mods directory:
- loose mod files (by extension) are the active profile's mods
- each non-hidden subfolder is an inactive profile holding its mod files
- a profile folder may contain ``resourcepacks/`` and ``shaderpacks/`` subfolders

Listings never modify the filesystem and return sorted names.
"""

from pathlib import Path

from .schema import PackEntry
from .schema import PackType
from .schema import ProfileSettings


class ProfileStore:
    """Read-only projections of the profile folders (with injected settings)."""

    def __init__(self, settings: ProfileSettings):
        self.settings = settings

    @property
    def mods_dir(self) -> Path:
        return self.settings.mods_dir

    def profile_dir(self, name: str) -> Path:
        """Storage folder for an inactive profile (may not exist)."""
        return self.mods_dir / name

    def profile_exists(self, name: str) -> bool:
        return self.profile_dir(name).is_dir()

    def mod_files(self, directory: Path) -> list[Path]:
        """Mod files directly inside ``directory``, sorted by name."""
        if not directory.is_dir():
            return []
        return sorted((f for f in directory.iterdir() if self.settings.is_mod_file(f)), key=lambda p: p.name)

    def active_mod_files(self) -> list[Path]:
        """Loose mod files in the mods directory."""
        return self.mod_files(self.mods_dir)

    def list_inactive_profiles(self) -> list[str]:
        """
        List profile storage folders.

        Hidden entries (names starting with '.') are skipped.

        Returns:
            Sorted profile names
        """
        if not self.mods_dir.is_dir():
            return []
        return sorted(d.name for d in self.mods_dir.iterdir() if d.is_dir() and not d.name.startswith("."))

    def list_profile_mods(self, name: str) -> list[str]:
        """List mod file names stored in an inactive profile's folder."""
        return [f.name for f in self.mod_files(self.profile_dir(name))]

    def list_active_mods(self) -> list[str]:
        """List the loose (active) mod file names."""
        return [f.name for f in self.active_mod_files()]

    def list_profile_packs(self, name: str) -> list[PackEntry]:
        """
        List pack files stored inside an inactive profile's folder.

        Returns:
            Entries grouped by pack type (resource packs first), sorted by file name
        """
        entries: list[PackEntry] = []
        profile_dir = self.profile_dir(name)
        for pack_type in PackType:
            pack_dir = profile_dir / pack_type.value
            if not pack_dir.is_dir():
                continue
            for pack_file in sorted(pack_dir.iterdir(), key=lambda p: p.name):
                if pack_file.is_file():
                    entries.append(PackEntry(pack_type=pack_type, file_name=pack_file.name))
        return entries
