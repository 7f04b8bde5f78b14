"""Tests for ProfileSwitcher switching, packs and folder management."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from mod_profiles import AmbiguousActiveStateError
from mod_profiles import CannotDeleteActiveProfileError
from mod_profiles import InvalidProfileNameError
from mod_profiles import PackEntry
from mod_profiles import PackType
from mod_profiles import ProfileExistsError
from mod_profiles import ProfileNotFoundError
from mod_profiles import ProfileSettings
from mod_profiles import ProfileSwitcher


class DecliningResolver:
    """Conflict resolver that never overwrites and remembers what it was asked."""

    def __init__(self):
        self.calls: list[tuple[str, PackType]] = []

    def resolve(self, file_name: str, pack_type: PackType) -> bool:
        self.calls.append((file_name, pack_type))
        return False


def make_settings(game_dir: Path) -> ProfileSettings:
    settings = ProfileSettings.for_game_dir(game_dir)
    settings.mods_dir.mkdir(parents=True)
    return settings


def write_files(directory: Path, *names: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_text(f"content of {name}")


def jar_names(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.glob("*.jar"))


def test_switch_stashes_marked_profile_and_activates_target():
    """Loose mods go to the marked profile's folder, target mods become loose."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        mods = settings.mods_dir
        write_files(mods, "a.jar", "b.jar")
        (mods / ".active_profile").write_text("old")
        write_files(mods / "new", "c.jar", "d.jar", "e.jar")

        switcher = ProfileSwitcher(settings)
        switcher.switch_to("new")

        assert switcher.active_profile_name == "new"
        assert (mods / ".active_profile").read_text() == "new"
        assert jar_names(mods) == ["c.jar", "d.jar", "e.jar"]
        assert jar_names(mods / "old") == ["a.jar", "b.jar"]
        assert not (mods / "new").exists()


def test_switch_with_unnamed_loose_mods_requires_name():
    """Unnamed loose mods make the switch ambiguous and nothing moves."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        mods = settings.mods_dir
        write_files(mods, "a.jar")
        write_files(mods / "new", "c.jar")

        switcher = ProfileSwitcher(settings)
        with pytest.raises(AmbiguousActiveStateError):
            switcher.switch_to("new")

        assert jar_names(mods) == ["a.jar"]
        assert jar_names(mods / "new") == ["c.jar"]
        assert switcher.active_profile_name is None


def test_switch_uses_name_for_unnamed_loose_mods():
    """name_for_current is used when no marker exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        mods = settings.mods_dir
        write_files(mods, "a.jar")
        write_files(mods / "new", "c.jar")

        switcher = ProfileSwitcher(settings)
        switcher.switch_to("new", name_for_current="my-mods")

        assert jar_names(mods / "my-mods") == ["a.jar"]
        assert jar_names(mods) == ["c.jar"]
        assert switcher.active_profile_name == "new"


def test_marker_wins_over_name_for_current():
    """An existing marker names the stash even if a name is supplied."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        mods = settings.mods_dir
        write_files(mods, "a.jar")
        (mods / ".active_profile").write_text("marked\n")
        write_files(mods / "new", "c.jar")

        ProfileSwitcher(settings).switch_to("new", name_for_current="ignored")

        assert jar_names(mods / "marked") == ["a.jar"]
        assert not (mods / "ignored").exists()


def test_switch_to_missing_profile_raises():
    """Target folder must exist."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        write_files(settings.mods_dir, "a.jar")

        with pytest.raises(ProfileNotFoundError, match="not found"):
            ProfileSwitcher(settings).switch_to("missing", name_for_current="x")

        assert jar_names(settings.mods_dir) == ["a.jar"]


def test_stash_overwrites_stale_leftover():
    """A same-named file already in the stash folder is replaced by the loose one."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        mods = settings.mods_dir
        (mods / "a.jar").write_text("fresh")
        (mods / ".active_profile").write_text("old")
        write_files(mods / "old")
        (mods / "old" / "a.jar").write_text("stale")
        write_files(mods / "new", "c.jar")

        ProfileSwitcher(settings).switch_to("new")

        assert (mods / "old" / "a.jar").read_text() == "fresh"


def test_target_folder_kept_when_not_empty():
    """Non-mod files keep the target folder alive."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        mods = settings.mods_dir
        write_files(mods / "new", "c.jar", "notes.txt")

        ProfileSwitcher(settings).switch_to("new")

        assert (mods / "new" / "notes.txt").exists()
        assert jar_names(mods) == ["c.jar"]


def test_only_one_profile_owns_each_mod_after_switches():
    """Switching back and forth never duplicates or loses mod files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        mods = settings.mods_dir
        write_files(mods / "alpha", "a1.jar", "a2.jar")
        write_files(mods / "beta", "b1.jar")

        switcher = ProfileSwitcher(settings)
        switcher.switch_to("alpha")
        switcher.switch_to("beta")
        switcher.switch_to("alpha")

        assert switcher.active_profile_name == "alpha"
        assert jar_names(mods) == ["a1.jar", "a2.jar"]
        assert switcher.list_inactive_profiles() == ["beta"]
        assert switcher.list_profile_mods("beta") == ["b1.jar"]


def test_stash_name_equal_to_target_is_rejected():
    """Stashing into the folder being activated would mix the two sets."""
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = make_settings(Path(tmpdir))
        write_files(settings.mods_dir, "a.jar")
        write_files(settings.mods_dir / "new", "c.jar")

        with pytest.raises(ProfileExistsError):
            ProfileSwitcher(settings).switch_to("new", name_for_current="new")

        assert jar_names(settings.mods_dir) == ["a.jar"]


class TestPacks:
    """Resource and shader pack deployment and stashing."""

    def test_deploy_moves_packs_and_records_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            profile = settings.mods_dir / "fancy"
            write_files(profile, "m.jar")
            write_files(profile / "resourcepacks", "faithful.zip")
            write_files(profile / "shaderpacks", "bsl.zip")

            switcher = ProfileSwitcher(settings)
            switcher.switch_to("fancy")

            assert (settings.resourcepacks_dir / "faithful.zip").exists()
            assert (settings.shaderpacks_dir / "bsl.zip").exists()
            assert not profile.exists()
            assert switcher.list_active_profile_packs() == [
                PackEntry(pack_type=PackType.RESOURCE, file_name="faithful.zip"),
                PackEntry(pack_type=PackType.SHADER, file_name="bsl.zip"),
            ]
            assert (settings.mods_dir / ".packs_fancy").read_text().splitlines() == [
                "resourcepacks|faithful.zip",
                "shaderpacks|bsl.zip",
            ]

    def test_deploy_then_deactivate_round_trip(self):
        """Packs come back to exactly where they were and the manifest is cleared."""
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            profile = settings.mods_dir / "fancy"
            write_files(profile, "m.jar")
            write_files(profile / "resourcepacks", "faithful.zip", "dark-ui.zip")
            write_files(profile / "shaderpacks", "bsl.zip")
            before = sorted(str(p.relative_to(profile)) for p in profile.rglob("*") if p.is_file())

            switcher = ProfileSwitcher(settings)
            switcher.switch_to("fancy")
            switcher.deactivate()

            after = sorted(str(p.relative_to(profile)) for p in profile.rglob("*") if p.is_file())
            assert after == before
            assert not (settings.mods_dir / ".packs_fancy").exists()
            assert switcher.active_profile_name is None
            assert list(settings.resourcepacks_dir.iterdir()) == []

    def test_declined_conflict_leaves_pack_in_profile(self):
        """A declined overwrite keeps the profile copy and doesn't track the shared one."""
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            profile = settings.mods_dir / "fancy"
            write_files(profile, "m.jar")
            write_files(profile / "resourcepacks", "faithful.zip")
            settings.resourcepacks_dir.mkdir()
            (settings.resourcepacks_dir / "faithful.zip").write_text("user's own copy")

            resolver = DecliningResolver()
            switcher = ProfileSwitcher(settings, conflict_resolver=resolver)
            switcher.switch_to("fancy")

            assert resolver.calls == [("faithful.zip", PackType.RESOURCE)]
            assert (profile / "resourcepacks" / "faithful.zip").read_text() == "content of faithful.zip"
            assert (settings.resourcepacks_dir / "faithful.zip").read_text() == "user's own copy"
            assert switcher.list_active_profile_packs() == []
            assert not (settings.mods_dir / ".packs_fancy").exists()

    def test_conflict_defaults_to_overwrite(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            profile = settings.mods_dir / "fancy"
            write_files(profile / "shaderpacks", "bsl.zip")
            settings.shaderpacks_dir.mkdir()
            (settings.shaderpacks_dir / "bsl.zip").write_text("old")

            switcher = ProfileSwitcher(settings)
            switcher.switch_to("fancy")

            assert (settings.shaderpacks_dir / "bsl.zip").read_text() == "content of bsl.zip"
            assert switcher.list_active_profile_packs() == [PackEntry(pack_type=PackType.SHADER, file_name="bsl.zip")]


    def test_untracked_shared_packs_are_never_touched(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.resourcepacks_dir, "someone-elses.zip")
            write_files(settings.mods_dir / "fancy" / "resourcepacks", "faithful.zip")
            write_files(settings.mods_dir / "plain", "p.jar")

            switcher = ProfileSwitcher(settings)
            switcher.switch_to("fancy")
            switcher.switch_to("plain")

            assert sorted(p.name for p in settings.resourcepacks_dir.iterdir()) == ["someone-elses.zip"]
            assert switcher.list_profile_packs("fancy") == [
                PackEntry(pack_type=PackType.RESOURCE, file_name="faithful.zip")
            ]

    def test_missing_tracked_pack_is_skipped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "fancy", "m.jar")
            write_files(settings.mods_dir / "fancy" / "resourcepacks", "a.zip", "b.zip")

            switcher = ProfileSwitcher(settings)
            switcher.switch_to("fancy")
            (settings.resourcepacks_dir / "a.zip").unlink()
            switcher.deactivate()

            assert switcher.list_profile_packs("fancy") == [PackEntry(pack_type=PackType.RESOURCE, file_name="b.zip")]

            assert not (settings.mods_dir / ".packs_fancy").exists()

    def test_pack_only_profile_is_stashed_on_switch(self):
        """A profile without mods still gets its packs back when switching away."""
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "packs-only" / "shaderpacks", "bsl.zip")
            write_files(settings.mods_dir / "other", "o.jar")

            switcher = ProfileSwitcher(settings)
            switcher.switch_to("packs-only")
            switcher.switch_to("other")

            assert switcher.list_profile_packs("packs-only") == [
                PackEntry(pack_type=PackType.SHADER, file_name="bsl.zip")
            ]

            assert not (settings.shaderpacks_dir / "bsl.zip").exists()


class TestDeactivate:
    """Deactivation and marker management."""

    def test_deactivate_stashes_under_marker(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir, "a.jar")
            switcher = ProfileSwitcher(settings)
            switcher.set_active_profile_name("current")

            switcher.deactivate()

            assert jar_names(settings.mods_dir / "current") == ["a.jar"]
            assert jar_names(settings.mods_dir) == []
            assert not (settings.mods_dir / ".active_profile").exists()

    def test_deactivate_with_override_name(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir, "a.jar")
            switcher = ProfileSwitcher(settings)

            switcher.deactivate("saved")

            assert jar_names(settings.mods_dir / "saved") == ["a.jar"]
            assert switcher.active_profile_name is None

    def test_deactivate_without_name_raises_when_loose_mods(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir, "a.jar")

            with pytest.raises(AmbiguousActiveStateError):
                ProfileSwitcher(settings).deactivate()

            assert jar_names(settings.mods_dir) == ["a.jar"]

    def test_deactivate_noop_when_nothing_active(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            switcher = ProfileSwitcher(settings)

            switcher.deactivate()

            assert switcher.list_inactive_profiles() == []

    def test_set_active_profile_name_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            switcher = ProfileSwitcher(settings)

            switcher.set_active_profile_name("named")
            first = (settings.mods_dir / ".active_profile").read_bytes()
            switcher.set_active_profile_name("named")

            assert (settings.mods_dir / ".active_profile").read_bytes() == first
            assert ProfileSwitcher(settings).active_profile_name == "named"

    def test_set_active_profile_name_blank_clears(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            switcher = ProfileSwitcher(settings)
            switcher.set_active_profile_name("named")

            switcher.set_active_profile_name("")

            assert switcher.active_profile_name is None
            assert not (settings.mods_dir / ".active_profile").exists()

    def test_set_active_profile_name_moves_nothing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir, "a.jar")

            ProfileSwitcher(settings).set_active_profile_name("named")

            assert jar_names(settings.mods_dir) == ["a.jar"]
            assert not (settings.mods_dir / "named").exists()


class TestFolderManagement:
    """Create, rename and delete profile folders."""

    def test_create_profile_folder(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            switcher = ProfileSwitcher(settings)

            switcher.create_profile_folder("fresh")

            assert (settings.mods_dir / "fresh").is_dir()
            with pytest.raises(ProfileExistsError):
                switcher.create_profile_folder("fresh")

    def test_create_rejects_active_name(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            switcher = ProfileSwitcher(settings)
            switcher.set_active_profile_name("live")

            with pytest.raises(ProfileExistsError):
                switcher.create_profile_folder("live")

    @pytest.mark.parametrize("name", ["", "  ", ".hidden", "a/b", "..", "resourcepacks"])
    def test_create_rejects_invalid_names(self, name):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)

            with pytest.raises(InvalidProfileNameError):
                ProfileSwitcher(settings).create_profile_folder(name)

    def test_rename_profile_folder(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "old", "a.jar")
            switcher = ProfileSwitcher(settings)

            switcher.rename_profile_folder("old", "new")

            assert switcher.list_profile_mods("new") == ["a.jar"]
            assert not (settings.mods_dir / "old").exists()

    def test_rename_errors(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "one")
            write_files(settings.mods_dir / "two")
            switcher = ProfileSwitcher(settings)

            with pytest.raises(ProfileNotFoundError):
                switcher.rename_profile_folder("missing", "three")
            with pytest.raises(ProfileExistsError):
                switcher.rename_profile_folder("one", "two")

    def test_rename_active_profile_relabels_marker_and_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "live", "a.jar")
            write_files(settings.mods_dir / "live" / "shaderpacks", "bsl.zip")
            switcher = ProfileSwitcher(settings)
            switcher.switch_to("live")

            switcher.rename_profile_folder("live", "renamed")

            assert switcher.active_profile_name == "renamed"
            assert jar_names(settings.mods_dir) == ["a.jar"]
            assert switcher.list_active_profile_packs() == [PackEntry(pack_type=PackType.SHADER, file_name="bsl.zip")]


            switcher.deactivate()
            assert switcher.list_profile_packs("renamed") == [PackEntry(pack_type=PackType.SHADER, file_name="bsl.zip")]


    def test_delete_profile_folder(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "gone", "a.jar")
            switcher = ProfileSwitcher(settings)

            switcher.delete_profile_folder("gone")

            assert not (settings.mods_dir / "gone").exists()
            with pytest.raises(ProfileNotFoundError):
                switcher.delete_profile_folder("gone")

    def test_delete_active_profile_forbidden(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            switcher = ProfileSwitcher(settings)
            switcher.set_active_profile_name("live")

            with pytest.raises(CannotDeleteActiveProfileError):
                switcher.delete_profile_folder("live")

    @pytest.mark.parametrize("name", [".", "..", "a/b", "resourcepacks", "  "])
    def test_delete_rejects_names_that_are_not_profiles(self, name):
        """Paths that escape or alias the profile store are never deleted."""
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(game_dir, "options.txt")
            write_files(settings.mods_dir, "keep.jar")
            write_files(settings.mods_dir / "a" / "b", "b.jar")
            write_files(settings.mods_dir / "resourcepacks", "pack.zip")

            with pytest.raises(ProfileNotFoundError):
                ProfileSwitcher(settings).delete_profile_folder(name)

            assert (game_dir / "options.txt").exists()
            assert jar_names(settings.mods_dir) == ["keep.jar"]
            assert (settings.mods_dir / "a" / "b" / "b.jar").exists()
            assert (settings.mods_dir / "resourcepacks" / "pack.zip").exists()

    @pytest.mark.parametrize("name", [".", "..", "a/b", "shaderpacks"])
    def test_names_outside_profile_store_are_not_found(self, name):
        """Switching, renaming and resolving a mod directory all reject non-profile names."""
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(game_dir, "stray.jar")
            write_files(settings.mods_dir / "a" / "b", "b.jar")
            write_files(settings.mods_dir / "shaderpacks", "bsl.zip")
            switcher = ProfileSwitcher(settings)

            with pytest.raises(ProfileNotFoundError):
                switcher.switch_to(name)
            with pytest.raises(ProfileNotFoundError):
                switcher.rename_profile_folder(name, "renamed")
            with pytest.raises(ProfileNotFoundError):
                switcher.mod_dir_for(name)

            assert switcher.active_profile_name is None
            assert not (settings.mods_dir / ".active_profile").exists()
            assert jar_names(settings.mods_dir) == []
            assert (game_dir / "stray.jar").exists()
            assert not (settings.mods_dir / "renamed").exists()


class TestAddRemoveFiles:
    """Adding and removing files in active and inactive profiles."""

    def test_add_mod_to_inactive_and_active(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "stored")
            source = game_dir / "download" / "new.jar"
            write_files(source.parent, "new.jar")
            switcher = ProfileSwitcher(settings)
            switcher.set_active_profile_name("live")

            switcher.add_mod_file("stored", source)
            switcher.add_mod_file("live", source)

            assert switcher.list_profile_mods("stored") == ["new.jar"]
            assert switcher.list_active_mods() == ["new.jar"]
            assert source.exists()

    def test_add_mod_to_unknown_profile_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            source = game_dir / "x.jar"
            source.write_text("x")

            with pytest.raises(ProfileNotFoundError):
                ProfileSwitcher(settings).add_mod_file("nope", source)

    def test_add_and_remove_pack_on_active_profile_tracks_manifest(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            source = game_dir / "pack.zip"
            source.write_text("pack")
            switcher = ProfileSwitcher(settings)
            switcher.set_active_profile_name("live")

            assert switcher.add_pack_file("live", source, PackType.RESOURCE)
            assert (settings.resourcepacks_dir / "pack.zip").exists()
            assert switcher.list_active_profile_packs() == [
                PackEntry(pack_type=PackType.RESOURCE, file_name="pack.zip")
            ]


            assert switcher.remove_pack_file("live", PackType.RESOURCE, "pack.zip")
            assert not (settings.resourcepacks_dir / "pack.zip").exists()
            assert switcher.list_active_profile_packs() == []

    def test_remove_untracked_active_pack_is_refused(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.resourcepacks_dir, "foreign.zip")
            switcher = ProfileSwitcher(settings)
            switcher.set_active_profile_name("live")

            assert not switcher.remove_pack_file("live", PackType.RESOURCE, "foreign.zip")
            assert (settings.resourcepacks_dir / "foreign.zip").exists()

    def test_add_pack_to_inactive_profile_respects_resolver(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "stored" / "shaderpacks", "bsl.zip")
            source = game_dir / "bsl.zip"
            source.write_text("newer")
            switcher = ProfileSwitcher(settings, conflict_resolver=DecliningResolver())

            assert not switcher.add_pack_file("stored", source, PackType.SHADER)
            assert (settings.mods_dir / "stored" / "shaderpacks" / "bsl.zip").read_text() == "content of bsl.zip"

    def test_remove_mod_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir / "stored", "a.jar")
            switcher = ProfileSwitcher(settings)

            assert switcher.remove_mod_file("stored", "a.jar")
            assert not switcher.remove_mod_file("stored", "a.jar")

    def test_remove_uses_only_the_file_name(self):
        """A file name with directory parts can't reach outside the profile."""
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            write_files(settings.mods_dir, "outside.jar")
            write_files(settings.mods_dir / "stored" / "shaderpacks", "bsl.zip")
            write_files(game_dir, "options.txt")
            switcher = ProfileSwitcher(settings)

            assert not switcher.remove_mod_file("stored", "../outside.jar")
            assert not switcher.remove_pack_file("stored", PackType.SHADER, "../../../options.txt")

            assert (settings.mods_dir / "outside.jar").exists()
            assert (game_dir / "options.txt").exists()
            assert switcher.remove_pack_file("stored", PackType.SHADER, "nested/bsl.zip")


class TestPartialFailure:
    """Mid-sequence failures are surfaced and not rolled back."""

    def test_failed_move_leaves_partial_state_and_old_marker(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            mods = settings.mods_dir
            write_files(mods, "a.jar")
            (mods / ".active_profile").write_text("old")
            write_files(mods / "new", "c.jar", "d.jar")

            from mod_profiles import switcher as switcher_module

            real_move = switcher_module.move_file
            calls = {"count": 0}

            def flaky_move(source, destination):
                calls["count"] += 1
                if calls["count"] == 3:
                    raise OSError("disk full")
                real_move(source, destination)

            switcher = ProfileSwitcher(settings)
            with patch.object(switcher_module, "move_file", side_effect=flaky_move):
                with pytest.raises(OSError, match="disk full"):
                    switcher.switch_to("new")

            # Stash completed, activation half done
            assert jar_names(mods / "old") == ["a.jar"]
            assert jar_names(mods) == ["c.jar"]
            assert jar_names(mods / "new") == ["d.jar"]
            # Marker still names the pre-operation owner
            assert (mods / ".active_profile").read_text() == "old"

    def test_recovery_after_partial_failure(self):
        """After a failed switch the caller can finish by naming and switching again."""
        with tempfile.TemporaryDirectory() as tmpdir:
            game_dir = Path(tmpdir)
            settings = make_settings(game_dir)
            mods = settings.mods_dir
            write_files(mods, "c.jar")
            write_files(mods / "old", "a.jar")
            write_files(mods / "new", "d.jar")
            (mods / ".active_profile").write_text("old")

            switcher = ProfileSwitcher(settings)
            # Loose c.jar belongs to "new": stash it back there and switch again
            switcher.deactivate("new")
            switcher.switch_to("new")

            assert jar_names(mods) == ["c.jar", "d.jar"]
            assert switcher.active_profile_name == "new"

