"""Profile switching engine.

How it works:
- Active profile = loose mod files sitting directly in the mods directory
- Inactive profiles = subfolders of the mods directory (e.g. ``mods/1.21.4/``)
- Switching stashes the loose mods into a subfolder named after the active
  profile, then moves the target subfolder's mods to the root.

Resource and shader packs:
- A profile folder may hold ``resourcepacks/`` and ``shaderpacks/``.
- Activation moves those files into the shared pack directories. When a
  same-named shared file exists the ConflictResolverProtocol decides.
- Every deployed file is recorded in the profile's pack manifest; stashing
  moves back exactly the recorded files and nothing else.

Failure model: preconditions are validated before any file moves. An OSError
raised part way through an operation propagates as-is and nothing is rolled
back, leaving the store partially migrated. The marker and manifests are
written last, so they still describe the pre-operation owner when that happens.
Operations assume a single caller per mods directory; there is no locking.
"""

import logging
import shutil
from pathlib import Path

from .exceptions import AmbiguousActiveStateError
from .exceptions import CannotDeleteActiveProfileError
from .exceptions import InvalidProfileNameError
from .exceptions import ProfileExistsError
from .exceptions import ProfileNotFoundError
from .protocols import ConflictResolverProtocol
from .protocols import OverwriteAlways
from .schema import PackEntry
from .schema import PackType
from .schema import ProfileSettings
from .state import ActiveState
from .store import ProfileStore
from .utils import is_directory_empty
from .utils import move_file
from .utils import validate_profile_name

logger = logging.getLogger(__name__)


class ProfileSwitcher:
    """
    Switch which profile's mods are live (with injected settings and conflict policy).

    Example:
        >>> settings = ProfileSettings.for_game_dir(Path.home() / ".minecraft")
        >>> switcher = ProfileSwitcher(settings)
        >>> switcher.list_inactive_profiles()
        ['1.20.1-fabric', 'vanilla-plus']
        >>> switcher.switch_to("vanilla-plus", name_for_current="my-mods")
    """

    def __init__(
        self,
        settings: ProfileSettings,
        conflict_resolver: ConflictResolverProtocol | None = None,
    ):
        """Initialize the engine and load the persisted marker.

        Args:
            settings: Filesystem layout (mods directory, shared pack directories)
            conflict_resolver: Decides pack overwrites during deployment.
                             When omitted, deployment always overwrites.
        """
        self.settings = settings
        self.store = ProfileStore(settings)
        self.state = ActiveState(settings)
        self.conflict_resolver: ConflictResolverProtocol = conflict_resolver or OverwriteAlways()

    @property
    def active_profile_name(self) -> str | None:
        return self.state.active_name

    def active_mod_count(self) -> int:
        """Number of loose mod files in the mods directory."""
        return len(self.store.active_mod_files())

    # ---- Listings ----

    def list_inactive_profiles(self) -> list[str]:
        return self.store.list_inactive_profiles()

    def list_profile_mods(self, name: str) -> list[str]:
        return self.store.list_profile_mods(name)

    def list_active_mods(self) -> list[str]:
        return self.store.list_active_mods()

    def list_profile_packs(self, name: str) -> list[PackEntry]:
        return self.store.list_profile_packs(name)

    def list_active_profile_packs(self) -> list[PackEntry]:
        """Packs the active profile is tracked as owning.

        Reads the manifest rather than scanning the shared directories, so
        packs placed there by hand or by other profiles are not reported.
        """
        if not self.state.active_name:
            return []
        return self.state.read_manifest(self.state.active_name)

    # ---- Switching ----

    def switch_to(self, target: str, name_for_current: str | None = None) -> None:
        """
        Make ``target`` the active profile.

        Process:
        1. Stash the loose mods (and their tracked packs) into a folder named after
           the active profile, or ``name_for_current`` when no profile is active
        2. Move the target folder's mods into the mods directory and deploy its packs
        3. Remove the target folder if it is now empty
        4. Write the marker

        Args:
            target: Name of an existing profile folder
            name_for_current: Name to stash unnamed loose mods under

        Raises:
            ProfileNotFoundError: If the target folder doesn't exist
            AmbiguousActiveStateError: If loose mods exist with no marker and no name_for_current
            ProfileExistsError: If the stash name equals the target
            OSError: If a file move fails part way (no rollback)
        """
        target = self._existing_name(target)
        target_dir = self.store.profile_dir(target)
        if not target_dir.is_dir():
            raise ProfileNotFoundError(
                f"Profile folder '{target}' not found in {self.settings.mods_dir}",
                context={"profile": target, "mods_dir": str(self.settings.mods_dir)},
            )

        loose_mods = self.store.active_mod_files()
        stash_name = self._stash_name(loose_mods, name_for_current)
        if stash_name == target:
            raise ProfileExistsError(
                f"Cannot stash the current mods as '{target}': it is the profile being activated",
                context={"profile": target},
            )

        if stash_name:
            self._stash(stash_name, loose_mods, pack_owner=self.state.active_name or stash_name)

        logger.debug(f"Activating profile '{target}'")
        for mod_file in self.store.mod_files(target_dir):
            move_file(mod_file, self.settings.mods_dir / mod_file.name)

        self._deploy_packs(target, target_dir)

        if is_directory_empty(target_dir):
            shutil.rmtree(target_dir)
            logger.debug(f"Removed empty profile folder {target_dir}")

        self.state.set_active(target)
        logger.info(f"Switched to profile '{target}'")

    def deactivate(self, name_override: str | None = None) -> None:
        """
        Stash the loose mods and tracked packs, leaving no profile active.

        No-op when there is nothing to stash and no override name is given.

        Args:
            name_override: Folder name to stash under instead of the marker name

        Raises:
            AmbiguousActiveStateError: If loose mods exist but no name is known
            OSError: If a file move fails part way (no rollback)
        """
        loose_mods = self.store.active_mod_files()
        if name_override is not None and name_override.strip():
            name = validate_profile_name(name_override)
        else:
            name_override = None
            name = self.state.active_name

        if name is None:
            if loose_mods:
                raise AmbiguousActiveStateError(
                    "There are loose mods in the mods folder but no active profile name is set. "
                    "Provide a name so they can be saved.",
                    context={"loose_mods": [f.name for f in loose_mods]},
                )
            return

        pack_owner = self.state.active_name or name
        has_packs = self.state.has_tracked_packs(pack_owner)
        if not loose_mods and not has_packs and name_override is None:
            return

        if loose_mods or has_packs:
            self._stash(name, loose_mods, pack_owner=pack_owner)

        self.state.clear_active()
        logger.info(f"Deactivated profile; mods saved as '{name}'")

    def set_active_profile_name(self, name: str | None) -> None:
        """Rewrite the marker without moving files (blank clears it).

        Used to name an already-present, unnamed set of loose mods.
        """
        if name is None or not name.strip():
            self.state.clear_active()
            return
        self.state.set_active(validate_profile_name(name))

    def _existing_name(self, name: str | None) -> str:
        """Normalize a name that must refer to an existing profile.

        A name that could never have been created (empty, ``.``, ``..``, path
        separators, pack folder names) can't name a profile either.

        Raises:
            ProfileNotFoundError: If the name is not a valid profile name
        """
        try:
            return validate_profile_name(name)
        except InvalidProfileNameError as e:
            raise ProfileNotFoundError(f"Profile '{name}' not found.", context={"profile": name}) from e

    def _stash_name(self, loose_mods: list[Path], name_for_current: str | None) -> str | None:
        """Pick the folder to stash the current mods into (None if nothing to stash)."""
        active = self.state.active_name
        if loose_mods:
            if active:
                return active
            if name_for_current and name_for_current.strip():
                return validate_profile_name(name_for_current)
            raise AmbiguousActiveStateError(
                "There are loose mods in the mods folder but no active profile name is set. "
                "Name the current set of mods first so they can be saved.",
                context={"loose_mods": [f.name for f in loose_mods]},
            )

        # A profile made only of packs still needs its packs stashed
        if active and self.state.has_tracked_packs(active):
            return active
        return None

    def _stash(self, name: str, loose_mods: list[Path], pack_owner: str) -> None:
        """Move loose mods and tracked packs into the ``name`` folder (stash always overwrites)."""
        stash_dir = self.store.profile_dir(name)
        stash_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Stashing {len(loose_mods)} mods into '{name}'")

        for mod_file in loose_mods:
            move_file(mod_file, stash_dir / mod_file.name)

        self._stash_packs(pack_owner, stash_dir)

    def _stash_packs(self, owner: str, stash_dir: Path) -> None:
        """Move packs recorded in ``owner``'s manifest back into ``stash_dir``, then clear the manifest."""
        manifest = self.state.read_manifest(owner)
        if not manifest:
            return

        for entry in manifest:
            shared_file = self.settings.shared_pack_dir(entry.pack_type) / entry.file_name
            if not shared_file.is_file():
                logger.warning(f"Tracked {entry.pack_type.label} '{entry.file_name}' is gone, skipping")
                continue

            pack_dir = stash_dir / entry.pack_type.value
            pack_dir.mkdir(parents=True, exist_ok=True)
            move_file(shared_file, pack_dir / entry.file_name)

        self.state.delete_manifest(owner)

    def _deploy_packs(self, profile: str, profile_dir: Path) -> None:
        """Move a profile's packs into the shared directories and record a fresh manifest."""
        deployed: list[PackEntry] = []

        for pack_type in PackType:
            source_dir = profile_dir / pack_type.value
            if not source_dir.is_dir():
                continue

            shared_dir = self.settings.shared_pack_dir(pack_type)
            shared_dir.mkdir(parents=True, exist_ok=True)

            for pack_file in sorted(source_dir.iterdir(), key=lambda p: p.name):
                if not pack_file.is_file():
                    continue

                destination = shared_dir / pack_file.name
                if destination.exists() and not self.conflict_resolver.resolve(pack_file.name, pack_type):
                    logger.info(f"Kept existing {pack_type.label} '{pack_file.name}', not deployed")
                    continue

                move_file(pack_file, destination)
                deployed.append(PackEntry(pack_type=pack_type, file_name=pack_file.name))

            if is_directory_empty(source_dir):
                source_dir.rmdir()

        self.state.write_manifest(profile, deployed)
        if deployed:
            logger.debug(f"Deployed {len(deployed)} packs for '{profile}'")

    # ---- Folder management ----

    def create_profile_folder(self, name: str) -> Path:
        """
        Create an empty profile folder.

        Raises:
            InvalidProfileNameError: If the name is unusable
            ProfileExistsError: If the folder exists or the name is the active profile
        """
        name = validate_profile_name(name)
        profile_dir = self.store.profile_dir(name)
        if profile_dir.exists() or name == self.state.active_name:
            raise ProfileExistsError(f"Profile '{name}' already exists.", context={"profile": name})

        profile_dir.mkdir(parents=True)
        logger.info(f"Created profile '{name}'")
        return profile_dir

    def rename_profile_folder(self, old_name: str, new_name: str) -> None:
        """
        Rename a profile folder.

        Renaming the active profile relabels the marker (and its pack manifest);
        its loose mods stay where they are. The active profile usually has no
        folder, so a missing folder is only an error for inactive profiles.

        Raises:
            ProfileNotFoundError: If ``old_name`` is neither a folder nor the active profile
            ProfileExistsError: If ``new_name`` is already taken
        """
        old_name = self._existing_name(old_name)
        new_name = validate_profile_name(new_name)
        old_dir = self.store.profile_dir(old_name)
        new_dir = self.store.profile_dir(new_name)
        is_active = old_name == self.state.active_name

        if not is_active and not old_dir.is_dir():
            raise ProfileNotFoundError(f"Profile '{old_name}' not found.", context={"profile": old_name})
        if new_dir.exists() or (new_name == self.state.active_name and not is_active):
            raise ProfileExistsError(f"Profile '{new_name}' already exists.", context={"profile": new_name})

        if old_dir.is_dir():
            old_dir.rename(new_dir)

        if is_active:
            self.state.rename_manifest(old_name, new_name)
            self.state.set_active(new_name)

        logger.info(f"Renamed profile '{old_name}' to '{new_name}'")

    def delete_profile_folder(self, name: str) -> None:
        """
        Delete a profile folder and everything in it.

        Raises:
            CannotDeleteActiveProfileError: If ``name`` is the active profile
            ProfileNotFoundError: If the folder doesn't exist
        """
        name = self._existing_name(name)
        if name == self.state.active_name:
            raise CannotDeleteActiveProfileError(
                "Cannot delete the active profile. Deactivate or switch first.",
                context={"profile": name},
            )

        profile_dir = self.store.profile_dir(name)
        if not profile_dir.is_dir():
            raise ProfileNotFoundError(f"Profile '{name}' not found.", context={"profile": name})

        shutil.rmtree(profile_dir)
        self.state.delete_manifest(name)
        logger.info(f"Deleted profile '{name}'")

    # ---- Adding and removing files ----

    def mod_dir_for(self, profile: str) -> Path:
        """Directory holding ``profile``'s mods right now (mods root when active).

        Raises:
            ProfileNotFoundError: If the profile is neither active nor a folder
        """
        profile = self._existing_name(profile)
        if profile == self.state.active_name:
            return self.settings.mods_dir
        profile_dir = self.store.profile_dir(profile)
        if not profile_dir.is_dir():
            raise ProfileNotFoundError(f"Profile '{profile}' not found.", context={"profile": profile})
        return profile_dir

    def add_mod_file(self, profile: str, source: Path) -> Path:
        """Copy a mod file into a profile, replacing a same-named file.

        Returns:
            Path of the copied file
        """
        destination = self.mod_dir_for(profile) / source.name
        shutil.copy2(source, destination)
        logger.info(f"Added mod {source.name} to '{profile}'")
        return destination

    def remove_mod_file(self, profile: str, file_name: str) -> bool:
        """Delete a mod file from a profile. Returns False if it wasn't there."""
        file_name = Path(file_name).name
        path = self.mod_dir_for(profile) / file_name
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"Removed mod {file_name} from '{profile}'")
        return True

    def add_pack_file(self, profile: str, source: Path, pack_type: PackType) -> bool:
        """
        Copy a pack into a profile.

        For the active profile the pack goes straight to the shared directory and
        is recorded in the profile's manifest; otherwise it goes into the
        profile folder's pack subfolder. An existing same-named file is only
        replaced if the conflict resolver agrees.

        Returns:
            True if the pack was copied, False if the resolver declined
        """
        mod_dir = self.mod_dir_for(profile)
        is_active = mod_dir == self.settings.mods_dir
        if is_active:
            target_dir = self.settings.shared_pack_dir(pack_type)
        else:
            target_dir = mod_dir / pack_type.value
        target_dir.mkdir(parents=True, exist_ok=True)

        destination = target_dir / source.name
        if destination.exists() and not self.conflict_resolver.resolve(source.name, pack_type):
            return False

        shutil.copy2(source, destination)
        if is_active:
            entry = PackEntry(pack_type=pack_type, file_name=source.name)
            manifest = self.state.read_manifest(self.state.active_name)
            if entry not in manifest:
                self.state.write_manifest(self.state.active_name, [*manifest, entry])

        logger.info(f"Added {pack_type.label} {source.name} to '{profile}'")
        return True

    def remove_pack_file(self, profile: str, pack_type: PackType, file_name: str) -> bool:
        """Delete a pack from a profile.

        For the active profile only packs tracked in its manifest are removed.

        Returns:
            True if a file was removed
        """
        file_name = Path(file_name).name
        entry = PackEntry(pack_type=pack_type, file_name=file_name)
        mod_dir = self.mod_dir_for(profile)
        if mod_dir == self.settings.mods_dir:
            manifest = self.state.read_manifest(self.state.active_name)
            if entry not in manifest:
                return False
            path = self.settings.shared_pack_dir(pack_type) / file_name
            if path.is_file():
                path.unlink()
            self.state.write_manifest(self.state.active_name, [e for e in manifest if e != entry])
        else:
            path = mod_dir / pack_type.value / file_name
            if not path.is_file():
                return False
            path.unlink()

        logger.info(f"Removed {pack_type.label} {file_name} from '{profile}'")
        return True
