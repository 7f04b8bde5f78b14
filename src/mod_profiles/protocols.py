"""Protocols for capabilities injected by the application.

The switching engine asks a ConflictResolverProtocol before overwriting shared
pack files; the collection resolver talks to any RegistryProtocol. Apps provide
implementations (dialog prompts, HTTP clients, in-memory fakes for tests).
"""

from typing import Protocol
from typing import runtime_checkable

from .schema import PackType
from .schema import ProjectInfo
from .schema import ProjectVersion


@runtime_checkable
class ConflictResolverProtocol(Protocol):
    """Decides whether a pack being deployed may overwrite a same-named shared file."""

    def resolve(self, file_name: str, pack_type: PackType) -> bool:
        """Return True to overwrite the existing shared file, False to skip deploying it.

        Args:
            file_name: Name of the conflicting pack file
            pack_type: Pack type (and therefore shared directory) involved
        """
        ...


class OverwriteAlways:
    """Default conflict resolver: the deploying profile always wins."""

    def resolve(self, file_name: str, pack_type: PackType) -> bool:
        return True


class RegistryProtocol(Protocol):
    """Metadata source consumed by CollectionResolver.

    Every method raises RegistryError (or lets a network error escape) on failure.
    """

    def get_project(self, identifier: str) -> ProjectInfo:
        """Fetch project metadata by slug or id."""
        ...

    def get_versions(
        self,
        identifier: str,
        loader: str | None = None,
        game_version: str | None = None,
    ) -> list[ProjectVersion]:
        """Fetch versions, best match first, optionally filtered by loader and game version."""
        ...

    def get_collection_projects(self, collection_id: str) -> list[str]:
        """Fetch the member project identifiers of a collection."""
        ...
