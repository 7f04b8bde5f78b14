"""Modrinth registry client.

Implements RegistryProtocol over the public Modrinth HTTP API using requests.
Transient network failures are retried with exponential backoff; anything that
still fails is raised as RegistryError.
"""

import json
import logging
import time
from collections.abc import Callable
from typing import Any
from typing import TypeVar
from urllib.parse import quote

import requests

from .exceptions import RegistryError
from .schema import ProjectInfo
from .schema import ProjectVersion

logger = logging.getLogger(__name__)

API_BASE = "https://api.modrinth.com/v2"
# Collections are only served by the v3 API
COLLECTIONS_API_BASE = "https://api.modrinth.com/v3"
USER_AGENT = "mod-profiles/0.1.0"
REQUEST_TIMEOUT = 30
MAX_RETRIES = 3
RETRY_DELAY = 1.0
BACKOFF_MULTIPLIER = 2

FALLBACK_GAME_VERSIONS = [
    "1.21.4", "1.21.3", "1.21.2", "1.21.1", "1.21",
    "1.20.6", "1.20.4", "1.20.3", "1.20.2", "1.20.1", "1.20",
    "1.19.4", "1.19.3", "1.19.2", "1.19.1", "1.19",
    "1.18.2", "1.18.1", "1.18",
    "1.17.1", "1.17",
    "1.16.5", "1.16.4", "1.16.3", "1.16.2", "1.16.1", "1.16",
]  # fmt: skip

T = TypeVar("T")

TRANSIENT_ERRORS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


def retry_with_backoff(
    func: Callable[[], T],
    max_retries: int = MAX_RETRIES,
    delay: float = RETRY_DELAY,
    backoff: float = BACKOFF_MULTIPLIER,
    exceptions: tuple[type[Exception], ...] = TRANSIENT_ERRORS,
) -> T:
    """Call ``func``, retrying on ``exceptions`` with exponential backoff.

    Raises:
        The last exception once ``max_retries`` attempts have failed
    """
    current_delay = delay
    for attempt in range(1, max_retries + 1):
        try:
            return func()
        except exceptions as e:
            if attempt >= max_retries:
                raise
            logger.debug(f"Attempt {attempt}/{max_retries} failed ({e}), retrying in {current_delay}s")
            time.sleep(current_delay)
            current_delay *= backoff
    raise RuntimeError("max_retries must be at least 1")


class ModrinthRegistry:
    """
    Modrinth API client (with injectable session and endpoints).

    Example:
        >>> registry = ModrinthRegistry()
        >>> registry.get_project("sodium").title
        'Sodium'
        >>> versions = registry.get_versions("sodium", loader="fabric", game_version="1.21")
    """

    def __init__(
        self,
        base_url: str = API_BASE,
        collections_url: str = COLLECTIONS_API_BASE,
        user_agent: str = USER_AGENT,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.collections_url = collections_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def _get_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        def request() -> Any:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        logger.debug(f"GET {url} {params or ''}")
        try:
            return retry_with_backoff(request, max_retries=self.max_retries, delay=self.retry_delay)
        except requests.exceptions.RequestException as e:
            raise RegistryError(f"Registry request failed: {e}", context={"url": url}) from e
        except ValueError as e:
            raise RegistryError(f"Registry returned invalid JSON: {e}", context={"url": url}) from e

    def get_project(self, identifier: str) -> ProjectInfo:
        data = self._get_json(f"{self.base_url}/project/{quote(identifier, safe='')}")
        try:
            return ProjectInfo.model_validate(data)
        except ValueError as e:
            raise RegistryError(f"Unexpected project payload for '{identifier}': {e}") from e

    def get_versions(
        self,
        identifier: str,
        loader: str | None = None,
        game_version: str | None = None,
    ) -> list[ProjectVersion]:
        """
        List project versions, newest/best first.

        Filters are sent as single-valued JSON lists (``loaders=["fabric"]``) and
        omitted when empty.
        """
        params = {}
        if loader:
            params["loaders"] = json.dumps([loader])
        if game_version:
            params["game_versions"] = json.dumps([game_version])

        data = self._get_json(f"{self.base_url}/project/{quote(identifier, safe='')}/version", params or None)
        if not isinstance(data, list):
            raise RegistryError(f"Unexpected version list payload for '{identifier}'")
        try:
            return [ProjectVersion.model_validate(item) for item in data]
        except ValueError as e:
            raise RegistryError(f"Unexpected version payload for '{identifier}': {e}") from e

    def get_collection_projects(self, collection_id: str) -> list[str]:
        data = self._get_json(f"{self.collections_url}/collection/{quote(collection_id, safe='')}")
        projects = data.get("projects") if isinstance(data, dict) else None
        if not isinstance(projects, list):
            return []
        return [str(p) for p in projects]

    def get_game_versions(self) -> list[str]:
        """Release game versions, newest first (as ordered by the registry)."""
        data = self._get_json(f"{self.base_url}/tag/game_version")
        if not isinstance(data, list):
            raise RegistryError("Unexpected game version payload")
        return [
            item["version"]
            for item in data
            if isinstance(item, dict) and item.get("version_type") == "release" and item.get("version")
        ]


class GameVersionCatalog:
    """Cached game-version list with a hardcoded fallback.

    The first successful (or failed) lookup is cached until clear_cache().
    """

    def __init__(self, registry: ModrinthRegistry, fallback: list[str] | None = None):
        self.registry = registry
        self.fallback = list(fallback if fallback is not None else FALLBACK_GAME_VERSIONS)
        self._cached: list[str] | None = None

    def get_versions(self) -> list[str]:
        if self._cached is not None:
            return self._cached

        try:
            self._cached = self.registry.get_game_versions()
        except RegistryError as e:
            logger.warning(f"Could not fetch game versions, using built-in list: {e}")
            self._cached = list(self.fallback)
        return self._cached

    def clear_cache(self) -> None:
        self._cached = None
