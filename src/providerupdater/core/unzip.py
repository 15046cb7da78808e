"""Download and in-memory extraction of the provider's profile archive.

The `Unzipper` owns an aiohttp client session that is created lazily and
reused across downloads. The archive is never written to disk: its entries
are returned as a mapping from entry name to content.
"""
from __future__ import annotations

import asyncio
import io
import logging
import posixpath
import zipfile
import zlib
from typing import Dict
from urllib.parse import urlparse

import aiohttp

from ..config import NetworkSettings
from ..exceptions import ArchiveError, NetworkError


def extract_zip(data: bytes) -> Dict[str, bytes]:
    """
    Extract all file entries of a zip archive held in memory.

    Directory entries are skipped and entries are keyed by their base name,
    so nested folders inside the archive are flattened. When two entries
    share a base name, the later one keeps its full path as key.

    Raises:
        ArchiveError: If the data is not a readable zip archive or one of
            its entries cannot be decompressed.
    """
    contents: Dict[str, bytes] = {}
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                name = posixpath.basename(info.filename)
                if not name:
                    continue
                if name in contents:
                    logging.warning(
                        "Duplicate entry name %s in archive, keeping %s as is",
                        name,
                        info.filename,
                    )
                    name = info.filename
                contents[name] = zf.read(info)
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        NotImplementedError,
        RuntimeError,
    ) as exc:
        raise ArchiveError(f"cannot read zip archive: {exc}") from exc
    return contents


class Unzipper:
    """Fetch a zip archive over HTTP and return its extracted entries."""

    def __init__(self, settings: NetworkSettings):
        self.settings = settings
        self.session: aiohttp.ClientSession | None = None

    async def get_session(self) -> aiohttp.ClientSession:
        """Get the aiohttp ClientSession, creating it if it doesn't exist."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers=self.settings.headers)
        return self.session

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def fetch(self, url: str) -> bytes:
        """
        Download the raw bytes at ``url``.

        Raises:
            NetworkError: On an invalid URL, a transport error, a timeout or
                a response status other than 200.
        """
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise NetworkError(f"invalid archive URL: {url}")

        session = await self.get_session()
        try:
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout),
                proxy=self.settings.http_proxy,
            ) as resp:
                if resp.status != 200:
                    raise NetworkError(
                        f"HTTP status code not OK: {resp.status} {resp.reason}"
                    )
                return await resp.read()
        except aiohttp.ClientError as exc:
            raise NetworkError(f"cannot download {url}: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise NetworkError(f"timed out downloading {url}") from exc

    async def fetch_and_extract(self, url: str) -> Dict[str, bytes]:
        """Download the zip archive at ``url`` and return its entries."""
        logging.info("Downloading profile archive from %s", url)
        data = await self.fetch(url)
        contents = extract_zip(data)
        logging.info("Extracted %d entries from %d bytes.", len(contents), len(data))
        return contents
