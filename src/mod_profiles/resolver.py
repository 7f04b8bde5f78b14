"""Collection resolver - turn pasted text into downloadable mod files.

Each identifier resolves independently against the registry:
1. Fetch the project title (best effort, falls back to the identifier)
2. Fetch versions filtered by loader and game version; first one wins -> Compatible
3. Otherwise fetch unfiltered versions; first one wins -> VersionMismatch
   (not selected, with the versions/loaders it actually supports recorded)
4. No versions at all -> NotFound

The registry's ordering is trusted as best match first. There is no
dependency resolution between identifiers.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from .extraction import extract_identifiers
from .protocols import RegistryProtocol
from .schema import ProjectVersion
from .schema import ResolutionStatus
from .schema import ResolvedMod

logger = logging.getLogger(__name__)


class CollectionResolver:
    """
    Resolve pasted collections to ResolvedMod results (with an injected registry).

    Example:
        >>> resolver = CollectionResolver(ModrinthRegistry())
        >>> mods = resolver.resolve("https://modrinth.com/mod/sodium", game_version="1.21", loader="fabric")
        >>> [(m.slug, m.status.value) for m in mods]
        [('sodium', 'compatible')]
    """

    def __init__(self, registry: RegistryProtocol, max_workers: int = 1):
        """Initialize resolver.

        Args:
            registry: Metadata source (HTTP client or fake)
            max_workers: Identifiers resolved in parallel; 1 resolves sequentially.
                       Result order always follows the extracted identifier order.
        """
        self.registry = registry
        self.max_workers = max(1, max_workers)

    def resolve(
        self,
        text: str,
        game_version: str | None = None,
        loader: str | None = None,
    ) -> list[ResolvedMod]:
        """
        Extract identifiers from pasted text and resolve each one.

        Args:
            text: Pasted collection URL, project URLs, JSON, or bare slugs
            game_version: Target game version filter (e.g. "1.21")
            loader: Target loader filter (e.g. "fabric")

        Returns:
            One result per identifier, in extraction order. Identifiers whose
            chosen version has no files are left out.
        """
        identifiers = extract_identifiers(text, registry=self.registry)
        if not identifiers:
            return []

        logger.debug(f"Resolving {len(identifiers)} identifiers")
        if self.max_workers == 1:
            results = [self.resolve_identifier(i, game_version, loader) for i in identifiers]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(lambda i: self.resolve_identifier(i, game_version, loader), identifiers))

        resolved = [r for r in results if r is not None]
        logger.info(f"Resolved {len(resolved)} of {len(identifiers)} mods")
        return resolved

    def resolve_identifier(
        self,
        identifier: str,
        game_version: str | None = None,
        loader: str | None = None,
    ) -> ResolvedMod | None:
        """
        Resolve a single identifier.

        Never raises: any registry failure becomes a NotFound result.

        Returns:
            ResolvedMod, or None if the chosen version lists no files
        """
        try:
            title = self._fetch_title(identifier)

            versions = self.registry.get_versions(identifier, loader=loader, game_version=game_version)
            if versions:
                return self._from_version(identifier, title, versions[0], ResolutionStatus.COMPATIBLE)

            versions = self.registry.get_versions(identifier)
            if not versions:
                return ResolvedMod.not_found(identifier, title)

            return self._from_version(identifier, title, versions[0], ResolutionStatus.VERSION_MISMATCH)

        except Exception as e:
            logger.warning(f"Failed to resolve '{identifier}': {e}")
            return ResolvedMod.not_found(identifier)

    def _fetch_title(self, identifier: str) -> str:
        try:
            project = self.registry.get_project(identifier)
            return project.title or identifier
        except Exception as e:
            logger.debug(f"No project metadata for '{identifier}': {e}")
            return identifier

    def _from_version(
        self,
        identifier: str,
        title: str,
        version: ProjectVersion,
        status: ResolutionStatus,
    ) -> ResolvedMod | None:
        chosen = version.primary_file()
        if chosen is None:
            logger.warning(f"Version {version.id} of '{identifier}' has no files, skipping")
            return None

        mismatch = status is ResolutionStatus.VERSION_MISMATCH
        return ResolvedMod(
            slug=identifier,
            title=title,
            status=status,
            project_id=version.project_id,
            version_id=version.id,
            file_name=chosen.filename,
            download_url=chosen.url,
            selected=not mismatch,
            actual_game_versions=list(version.game_versions) if mismatch else [],
            actual_loaders=list(version.loaders) if mismatch else [],
        )
