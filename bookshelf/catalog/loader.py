"""
Asynchronous, single-attempt loading of the catalog's record source.

The source is either a local path (optionally as a ``file://`` URL) or
an ``http(s)://`` URL serving a JSON array of book objects. There is no
retry: any failure is raised as ``CatalogLoadError`` for the caller to
report.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.parse
from pathlib import Path
from typing import Any, List, Optional, Union

import httpx

from .store import Catalog, CatalogLoadError

logger = logging.getLogger(__name__)


def _read_json_file(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


async def _fetch_url(
    url: str, timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Any:
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        try:
            response = await client.get(url, headers={"Accept": "application/json"})
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise CatalogLoadError(f"Could not fetch {url}: {exc}") from exc
    if response.status_code != 200:
        raise CatalogLoadError(f"HTTP error! Status: {response.status_code} for {url}")
    try:
        return response.json()
    except ValueError as exc:
        raise CatalogLoadError(f"{url} did not return valid JSON: {exc}") from exc


async def fetch_records(
    source: Union[str, Path],
    timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[Any]:
    """Fetch the raw record list from ``source``.

    Parameters
    ----------
    source : Union[str, Path]
        Filesystem path, ``file://`` URL or ``http(s)://`` URL.
    timeout : float
        Request timeout in seconds for URL sources.
    transport : Optional[httpx.AsyncBaseTransport]
        Transport handed to the ``httpx.AsyncClient``; tests pass an
        ``httpx.MockTransport``.

    Returns
    -------
    List[Any]
        The decoded JSON array. Its items are validated later by
        ``Catalog.load``.

    Raises
    ------
    CatalogLoadError
        When the source is unreachable, not JSON, or not a JSON array.
    """
    text = str(source)
    try:
        parsed = urllib.parse.urlparse(text)
    except ValueError as exc:
        raise CatalogLoadError(f"Invalid data source {text}: {exc}") from exc
    scheme = parsed.scheme.lower()
    if scheme in ("http", "https"):
        data = await _fetch_url(text, timeout, transport)
    else:
        if scheme == "file":
            path = Path(urllib.parse.unquote(parsed.path))
        else:
            path = Path(source)
        try:
            data = await asyncio.to_thread(_read_json_file, path)
        except OSError as exc:
            raise CatalogLoadError(f"Could not read {path}: {exc}") from exc
        except ValueError as exc:
            raise CatalogLoadError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise CatalogLoadError(
            f"Expected a JSON array of books from {text}, got {type(data).__name__}"
        )
    return data


async def load_catalog(catalog: Catalog, source: Union[str, Path], timeout: float = 10.0) -> int:
    """Fetch ``source`` and load it into ``catalog``; returns the book count."""
    try:
        records = await fetch_records(source, timeout=timeout)
        count = catalog.load(records)
    except CatalogLoadError as exc:
        catalog.clear()
        logger.error("Error loading book data from %s: %s", source, exc)
        raise
    logger.info("Books loaded successfully from %s: %d books found", source, count)
    return count
