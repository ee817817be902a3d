import logging
from pathlib import Path
from typing import Optional, Union

import requests
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
)

from semaphore_installer.errors import DownloadError
from semaphore_installer.logger import LOGGER_NAME
from semaphore_installer.ui import NordColors, console

logger = logging.getLogger(LOGGER_NAME)

CHUNK_SIZE = 8192


def _content_length(headers) -> Optional[int]:
    """Declared body size, or None when the header is absent or malformed."""
    value = headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value) or None
    except ValueError:
        logger.debug(f"Ignoring malformed content-length header: {value!r}")
        return None


def download_file(
    session: requests.Session,
    url: str,
    destination: Union[str, Path],
    timeout: int = 60,
) -> Path:
    """
    Stream url into destination with a progress bar.

    The destination is checked after the transfer; a missing file counts as
    a failed download even when the HTTP exchange succeeded.
    """
    destination = Path(destination)
    if not url:
        raise DownloadError("No download URL was provided")

    logger.info(f"Downloading {url}")
    try:
        with session.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            total_length = _content_length(response.headers)
            with open(destination, "wb") as out_file, Progress(
                TextColumn("[progress.description]{task.description}"),
                BarColumn(style=NordColors.POLAR_NIGHT_4, complete_style=NordColors.FROST_2),
                TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
                " • ",
                DownloadColumn(),
                TimeRemainingColumn(),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task(f"Downloading {destination.name}", total=total_length)
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        out_file.write(chunk)
                        progress.update(task, advance=len(chunk))
    except requests.RequestException as e:
        if destination.exists():
            destination.unlink()
        raise DownloadError(f"Download failed: {e}") from e
    except OSError as e:
        raise DownloadError(f"Could not write {destination}: {e}") from e

    if not destination.is_file():
        raise DownloadError(f"{destination} is missing after download")
    logger.debug(f"Download complete: {destination} ({destination.stat().st_size} bytes)")
    return destination
