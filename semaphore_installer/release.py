"""
Lookup of the latest Semaphore release asset on GitHub.
"""

import logging
from typing import Any, Dict, Optional

import requests

from semaphore_installer.errors import DownloadError
from semaphore_installer.logger import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def select_asset_url(release: Dict[str, Any], suffix: str) -> Optional[str]:
    """
    Return the download URL of the first asset whose name ends with suffix.

    An asset only matches when its download URL also ends with the suffix,
    so the returned URL always points at a package of the requested kind.
    """
    assets = release.get("assets")
    if not isinstance(assets, list):
        raise DownloadError("Release metadata has no asset list")
    for asset in assets:
        if not isinstance(asset, dict):
            continue
        name = asset.get("name") or ""
        url = asset.get("browser_download_url") or ""
        if name.endswith(suffix) and url.endswith(suffix):
            return url
    return None


def fetch_release(
    session: requests.Session,
    api_url: str,
    timeout: int = 60,
    token: Optional[str] = None,
) -> Dict[str, Any]:
    headers = {"Accept": "application/vnd.github+json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    logger.debug(f"Fetching release metadata from {api_url}")
    try:
        response = session.get(api_url, headers=headers, timeout=timeout)
        response.raise_for_status()
        release = response.json()
    except requests.RequestException as e:
        raise DownloadError(f"Release metadata request failed: {e}") from e
    except ValueError as e:
        raise DownloadError(f"Release metadata is not valid JSON: {e}") from e
    if not isinstance(release, dict):
        raise DownloadError("Release metadata is not a JSON object")
    logger.debug(f"Latest release: {release.get('tag_name', 'unknown')}")
    return release


def resolve_latest_asset_url(
    session: requests.Session,
    api_url: str,
    suffix: str,
    timeout: int = 60,
    token: Optional[str] = None,
) -> str:
    release = fetch_release(session, api_url, timeout=timeout, token=token)
    url = select_asset_url(release, suffix)
    if not url:
        raise DownloadError(
            f"No asset ending with {suffix} in release {release.get('tag_name', 'unknown')}"
        )
    return url
