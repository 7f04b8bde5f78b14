"""Streaming downloads with progress, cancellation and temp-file safety.

A file is streamed to ``<destination>.tmp`` and only renamed over the
destination once fully written. Batch downloads isolate failures per item.
"""

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

import requests

from .exceptions import DownloadCancelledError
from .exceptions import DownloadError
from .registry import REQUEST_TIMEOUT
from .registry import USER_AGENT
from .schema import ResolvedMod

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192

ProgressCallback = Callable[[float], None]


def download_file(
    url: str,
    destination: Path,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
    session: requests.Session | None = None,
    timeout: float = REQUEST_TIMEOUT,
) -> Path:
    """
    Download ``url`` to ``destination``.

    Args:
        url: File URL
        destination: Final file path (parent directory is created)
        progress: Called with 0.0-1.0 when the server reports a content length
        cancel_event: Checked before each chunk; when set the download stops
        session: Optional requests session (shared connection pool, headers)
        timeout: Connect/read timeout in seconds

    Returns:
        The destination path

    Raises:
        DownloadCancelledError: If cancel_event was set
        DownloadError: If the request or the write failed
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    temp_path = destination.with_name(destination.name + ".tmp")
    http = session or requests

    try:
        with http.get(url, stream=True, timeout=timeout, headers={"User-Agent": USER_AGENT}) as response:
            response.raise_for_status()
            total = int(response.headers.get("Content-Length") or 0)
            received = 0

            with open(temp_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if cancel_event is not None and cancel_event.is_set():
                        raise DownloadCancelledError(f"Download cancelled: {url}", context={"url": url})
                    if not chunk:
                        continue
                    f.write(chunk)
                    received += len(chunk)
                    if total and progress:
                        progress(min(1.0, received / total))

        os.replace(temp_path, destination)
        logger.debug(f"Downloaded {url} -> {destination}")
        return destination

    except DownloadError:
        _discard(temp_path)
        raise
    except (requests.exceptions.RequestException, OSError) as e:
        _discard(temp_path)
        raise DownloadError(f"Download failed: {e}", context={"url": url, "destination": str(destination)}) from e


def _discard(temp_path: Path) -> None:
    try:
        temp_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove temporary file {temp_path}: {e}")


class DownloadReport:
    """Outcome of a batch download: which files arrived and which failed."""

    def __init__(self):
        self.downloaded: list[Path] = []
        self.failed: list[dict[str, str]] = []
        self.cancelled = False

    def add_downloaded(self, path: Path) -> None:
        self.downloaded.append(path)

    def add_failed(self, mod: ResolvedMod, error: str) -> None:
        self.failed.append({"mod": mod.slug, "file": mod.file_name, "url": mod.download_url, "error": error})

    def has_errors(self) -> bool:
        return bool(self.failed)

    def summary(self) -> str:
        lines = [f"{len(self.downloaded)} downloaded, {len(self.failed)} failed"]
        for item in self.failed:
            lines.append(f"  {item['file'] or item['mod']}: {item['error']}")
        if self.cancelled:
            lines.append("Cancelled before completion")
        return "\n".join(lines)


def download_mods(
    mods: list[ResolvedMod],
    destination_dir: Path,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
    session: requests.Session | None = None,
) -> DownloadReport:
    """
    Download resolved mods one after another into ``destination_dir``.

    Progress is cumulative across the batch, ``(completed + fraction) / total``,
    and never goes backwards. A failing item is logged and recorded; the rest
    still download. Cancellation stops the batch.

    Args:
        mods: Mods to fetch (entries without a download URL or file name are reported as failed)
        destination_dir: Usually ``ProfileSwitcher.mod_dir_for(profile)``
        progress: Batch progress callback (0.0-1.0)
        cancel_event: Cooperative cancellation flag
        session: Optional requests session

    Returns:
        DownloadReport
    """
    report = DownloadReport()
    total = len(mods)
    if total == 0:
        return report

    reported = 0.0

    def report_progress(value: float) -> None:
        nonlocal reported
        if progress and value > reported:
            reported = value
            progress(value)

    for done, mod in enumerate(mods):
        if cancel_event is not None and cancel_event.is_set():
            report.cancelled = True
            break

        if not mod.download_url or not mod.file_name:
            report.add_failed(mod, "No downloadable file")
            logger.error(f"  x {mod.slug}: no downloadable file")
            report_progress((done + 1) / total)
            continue

        try:
            path = download_file(
                mod.download_url,
                destination_dir / Path(mod.file_name).name,
                progress=lambda fraction, done=done: report_progress((done + fraction) / total),
                cancel_event=cancel_event,
                session=session,
            )
            report.add_downloaded(path)
            logger.info(f"  + {mod.file_name}")
        except DownloadCancelledError as e:
            report.add_failed(mod, e.message)
            report.cancelled = True
            logger.info(f"Batch download cancelled at {mod.file_name}")
            break
        except DownloadError as e:
            report.add_failed(mod, e.message)
            logger.error(f"  x {mod.file_name}: {e.message}")

        report_progress((done + 1) / total)

    logger.info(f"Batch download finished: {len(report.downloaded)}/{total} downloaded")
    return report
