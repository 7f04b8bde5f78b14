"""Data models for profiles, packs and registry records.

Registry records mirror the Modrinth v2 JSON shapes; unknown fields are ignored
so new registry fields never break parsing.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class PackType(str, Enum):
    """Asset pack types managed alongside mods.

    The value doubles as the folder name, both inside the game directory and
    inside each profile storage folder.
    """

    RESOURCE = "resourcepacks"
    SHADER = "shaderpacks"

    @property
    def label(self) -> str:
        """Human-readable name used in prompts."""
        return "resource pack" if self is PackType.RESOURCE else "shader pack"


class PackEntry(BaseModel):
    """One pack file deployed to a shared pack directory on behalf of a profile."""

    model_config = ConfigDict(frozen=True)

    pack_type: PackType
    file_name: str

    def to_line(self) -> str:
        """Serialize as a manifest line (``packType|fileName``)."""
        return f"{self.pack_type.value}|{self.file_name}"

    @classmethod
    def from_line(cls, line: str) -> "PackEntry":
        """Parse a manifest line.

        Raises:
            ValueError: If the line is not ``packType|fileName`` with a known pack type
        """
        parts = line.split("|")
        if len(parts) != 2 or not parts[1]:
            raise ValueError(f"Malformed manifest line: {line!r}")
        return cls(pack_type=PackType(parts[0]), file_name=parts[1])


class ProfileSettings(BaseModel):
    """Filesystem layout for one game installation (injected by the app).

    Profile storage folders are the non-hidden subfolders of ``mods_dir``; the
    active marker and pack manifests are dot-files in ``mods_dir``.
    """

    model_config = ConfigDict(frozen=True)

    mods_dir: Path
    resourcepacks_dir: Path
    shaderpacks_dir: Path
    backups_dir: Path | None = None
    mod_extensions: tuple[str, ...] = (".jar",)
    marker_file_name: str = ".active_profile"
    manifest_prefix: str = ".packs_"

    @classmethod
    def for_game_dir(cls, game_dir: Path, **overrides) -> "ProfileSettings":
        """Build settings for the conventional ``<game>/mods`` style layout.

        Example:
            >>> settings = ProfileSettings.for_game_dir(Path.home() / ".minecraft")
            >>> settings.shaderpacks_dir.name
            'shaderpacks'
        """
        values = {
            "mods_dir": game_dir / "mods",
            "resourcepacks_dir": game_dir / PackType.RESOURCE.value,
            "shaderpacks_dir": game_dir / PackType.SHADER.value,
            "backups_dir": game_dir / "backups",
        }
        values.update(overrides)
        return cls(**values)

    def shared_pack_dir(self, pack_type: PackType) -> Path:
        """Shared directory the game reads packs of ``pack_type`` from."""
        if pack_type is PackType.RESOURCE:
            return self.resourcepacks_dir
        return self.shaderpacks_dir

    def is_mod_file(self, path: Path) -> bool:
        """Check whether ``path`` is a loose mod file by extension."""
        return path.is_file() and path.suffix.lower() in {ext.lower() for ext in self.mod_extensions}


class ProjectInfo(BaseModel):
    """Project metadata (title and canonical identifiers)."""

    id: str = ""
    slug: str = ""
    title: str = ""


class VersionFile(BaseModel):
    """Downloadable file attached to a project version."""

    filename: str
    url: str
    primary: bool = False


class ProjectVersion(BaseModel):
    """A single project version as listed by the registry."""

    id: str
    project_id: str = ""
    version_number: str = ""
    game_versions: list[str] = Field(default_factory=list)
    loaders: list[str] = Field(default_factory=list)
    files: list[VersionFile] = Field(default_factory=list)

    def primary_file(self) -> VersionFile | None:
        """File flagged primary, else the first listed file, else None."""
        for file in self.files:
            if file.primary:
                return file
        return self.files[0] if self.files else None


class ResolutionStatus(str, Enum):
    """Outcome of resolving one identifier."""

    COMPATIBLE = "compatible"
    VERSION_MISMATCH = "version_mismatch"
    NOT_FOUND = "not_found"


class ResolvedMod(BaseModel):
    """Resolution result for one identifier.

    ``selected`` is the default pick state offered to the user; only
    compatible results start selected.
    """

    slug: str
    title: str
    status: ResolutionStatus
    project_id: str = ""
    version_id: str = ""
    file_name: str = ""
    download_url: str = ""
    selected: bool = False
    actual_game_versions: list[str] = Field(default_factory=list)
    actual_loaders: list[str] = Field(default_factory=list)

    @property
    def display_game_versions(self) -> str:
        return ", ".join(self.actual_game_versions)

    @property
    def display_loaders(self) -> str:
        return ", ".join(self.actual_loaders)

    @classmethod
    def not_found(cls, slug: str, title: str | None = None) -> "ResolvedMod":
        """Result for an identifier with no usable versions."""
        return cls(slug=slug, title=title or slug, status=ResolutionStatus.NOT_FOUND, selected=False)

    def __str__(self) -> str:
        return f"{self.slug} - {self.file_name}"
