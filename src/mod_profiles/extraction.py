"""Identifier extraction from pasted text.

Pasted text may hold a collection URL, project page URLs, an exported JSON
list, or bare slugs one per line. Extractors run in a fixed order and their
results merge into one ordered, case-insensitively deduplicated list:

1. collection URL  -> member identifiers fetched from the registry
2. project URLs    -> captured slugs
3. JSON            -> strings, or slug/id/project_id of objects, or a "mods" array
4. bare lines      -> only when 1-3 found nothing
"""

import json
import logging
import re
from collections.abc import Callable

from .protocols import RegistryProtocol

logger = logging.getLogger(__name__)

COLLECTION_URL_RE = re.compile(r"modrinth\.com/collection/(?P<id>[A-Za-z0-9]+)", re.IGNORECASE)
PROJECT_URL_RE = re.compile(
    r"modrinth\.com/(?:mod|plugin|project|datapack|shader|resourcepack)/(?P<slug>[A-Za-z0-9_-]+)",
    re.IGNORECASE,
)
IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_-]+$")

JSON_ID_KEYS = ("slug", "id", "project_id")

Extractor = Callable[[str], list[str]]


def collection_extractor(registry: RegistryProtocol) -> Extractor:
    """Build an extractor that expands the first collection URL via the registry.

    A failed collection fetch is logged and contributes nothing.
    """

    def extract(text: str) -> list[str]:
        match = COLLECTION_URL_RE.search(text)
        if not match:
            return []

        collection_id = match.group("id")
        try:
            members = registry.get_collection_projects(collection_id)
        except Exception as e:
            logger.warning(f"Could not fetch collection {collection_id}: {e}")
            return []

        logger.debug(f"Collection {collection_id} has {len(members)} projects")
        return [str(member) for member in members if member]

    return extract


def extract_project_urls(text: str) -> list[str]:
    """Slugs from every project page URL in the text."""
    return [match.group("slug") for match in PROJECT_URL_RE.finditer(text)]


def _identifiers_from_json(value: object) -> list[str]:
    if isinstance(value, list):
        identifiers = []
        for item in value:
            if isinstance(item, str):
                identifiers.append(item)
            elif isinstance(item, dict):
                for key in JSON_ID_KEYS:
                    if item.get(key):
                        identifiers.append(str(item[key]))
                        break
        return identifiers

    if isinstance(value, dict) and isinstance(value.get("mods"), list):
        return _identifiers_from_json(value["mods"])

    return []


def extract_json(text: str) -> list[str]:
    """Identifiers from a JSON array or a ``{"mods": [...]}`` object.

    Text that isn't JSON yields nothing.
    """
    stripped = text.strip()
    if not stripped.startswith(("[", "{")):
        return []
    try:
        return _identifiers_from_json(json.loads(stripped))
    except (json.JSONDecodeError, RecursionError):
        return []


def extract_bare_lines(text: str) -> list[str]:
    """Each line that, trimmed of whitespace and slashes, looks like an identifier."""
    identifiers = []
    for line in text.splitlines():
        candidate = line.strip().strip("/")
        if candidate and IDENTIFIER_RE.match(candidate):
            identifiers.append(candidate)
    return identifiers


def _merge(identifiers: list[str], new: list[str], seen: set[str]) -> None:
    for identifier in new:
        key = identifier.lower()
        if key not in seen:
            seen.add(key)
            identifiers.append(identifier)


def extract_identifiers(
    text: str,
    registry: RegistryProtocol | None = None,
    extractors: list[Extractor] | None = None,
    fallback: Extractor = extract_bare_lines,
) -> list[str]:
    """
    Extract project identifiers from pasted text.

    Args:
        text: Pasted text
        registry: Registry used to expand collection URLs (skipped when None)
        extractors: Primary extractor chain; defaults to collection, URLs, JSON
        fallback: Extractor used only when the primary chain finds nothing

    Returns:
        Identifiers in first-seen order, deduplicated ignoring case

    Example:
        >>> extract_identifiers("https://modrinth.com/mod/sodium\\nhttps://modrinth.com/mod/Sodium")
        ['sodium']
    """
    if not text or not text.strip():
        return []

    if extractors is None:
        extractors = [extract_project_urls, extract_json]
        if registry is not None:
            extractors.insert(0, collection_extractor(registry))

    identifiers: list[str] = []
    seen: set[str] = set()
    for extractor in extractors:
        _merge(identifiers, extractor(text), seen)

    if not identifiers:
        _merge(identifiers, fallback(text), seen)

    return identifiers
